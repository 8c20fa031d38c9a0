"""Turns validated requests into concrete Amadeus HTTP calls.

Nothing here touches the network. Every builder either returns an ``HttpCall``
or raises ``ValidationError``, so callers can reject bad input before spending
a token or a vendor request on it.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

from flight_gateway.amadeus.models import FlightOffer, FlightOrderRequest, to_wire
from flight_gateway.errors import ValidationError
from flight_gateway.types import FlightSearchRequest, FlightSegment, TripType

FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
PRICING_PATH = "/v1/shopping/flight-offers/pricing"
UPSELLING_PATH = "/v1/shopping/flight-offers/upselling"
FLIGHT_ORDERS_PATH = "/v2/booking/flight-orders"
ISSUANCE_PATH = "/v1/booking/flight-orders/{order_id}/issuance"

TRAVEL_CLASSES = frozenset({"ECONOMY", "PREMIUM_ECONOMY", "BUSINESS", "FIRST"})
MAX_SEATED_TRAVELERS = 9
MAX_RESULTS_LIMIT = 250


@dataclass(frozen=True)
class HttpCall:
    service: str
    method: str
    path: str
    params: Optional[Mapping[str, str]] = None
    json: Optional[Dict[str, Any]] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    trip_type: Optional[TripType] = None


# --- search -----------------------------------------------------------------

def resolve_trip_type(request: FlightSearchRequest) -> TripType:
    """Resolve the trip type and reject requests that mix single-route and segment fields."""
    trip_type = request.get_trip_type()
    has_segments = bool(request.segments)
    has_route = any(
        v is not None for v in (
            request.origin_location_code,
            request.destination_location_code,
            request.departure_date,
            request.return_date,
        )
    )

    if trip_type == TripType.MULTI_CITY:
        if has_route:
            raise ValidationError(
                "MultiCity searches take segments only; drop origin/destination/departure/return fields"
            )
    elif has_segments:
        raise ValidationError(f"{trip_type.value} searches do not accept segments")

    if trip_type == TripType.ONE_WAY and request.return_date is not None:
        raise ValidationError("OneWay searches do not accept a returnDate")

    return trip_type


def _require_code(value: Optional[str], name: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip().upper()


def _validate_common(request: FlightSearchRequest) -> None:
    children = request.children or 0
    infants = request.infants or 0
    if request.adults < 1:
        raise ValidationError("At least one adult is required")
    if children < 0 or infants < 0:
        raise ValidationError("Passenger counts cannot be negative")
    if infants > request.adults:
        raise ValidationError("Each infant must travel with an adult (infants <= adults)")
    if request.adults + children > MAX_SEATED_TRAVELERS:
        raise ValidationError(f"At most {MAX_SEATED_TRAVELERS} seated travelers (adults + children)")
    if not 1 <= request.max_results <= MAX_RESULTS_LIMIT:
        raise ValidationError(f"maxResults must be between 1 and {MAX_RESULTS_LIMIT}")
    if request.travel_class is not None and request.travel_class.upper() not in TRAVEL_CLASSES:
        raise ValidationError(f"Unknown travelClass '{request.travel_class}'")
    currency = request.currency_code or ""
    if len(currency) != 3 or not currency.isalpha():
        raise ValidationError("currencyCode must be a 3-letter ISO code")


def _validate_segments(segments: Sequence[FlightSegment]) -> List[FlightSegment]:
    if not segments:
        raise ValidationError("MultiCity searches require at least one segment")
    previous: Optional[date] = None
    for i, seg in enumerate(segments, start=1):
        origin = _require_code(seg.origin_location_code, f"segments[{i}].originLocationCode")
        destination = _require_code(seg.destination_location_code, f"segments[{i}].destinationLocationCode")
        if origin == destination:
            raise ValidationError(f"segments[{i}] origin and destination must differ")
        if seg.departure_date is None:
            raise ValidationError(f"segments[{i}].departureDate is required")
        if previous is not None and seg.departure_date < previous:
            raise ValidationError(f"segments[{i}] departs before the previous segment")
        previous = seg.departure_date
    return list(segments)


def build_travelers(adults: int, children: int = 0, infants: int = 0) -> List[Dict[str, Any]]:
    """Travelers with sequential string ids: adults, then children, then held infants.

    Infant ``n`` is attached to adult ``n``.
    """
    travelers: List[Dict[str, Any]] = []
    for _ in range(adults):
        travelers.append({"id": str(len(travelers) + 1), "travelerType": "ADULT"})
    for _ in range(children):
        travelers.append({"id": str(len(travelers) + 1), "travelerType": "CHILD"})
    for i in range(infants):
        travelers.append({
            "id": str(len(travelers) + 1),
            "travelerType": "HELD_INFANT",
            "associatedAdultId": str(i + 1),
        })
    return travelers


def _multi_city_call(request: FlightSearchRequest) -> HttpCall:
    segments = _validate_segments(request.segments or [])
    legs = [
        {
            "id": str(i),
            "originLocationCode": seg.origin_location_code.strip().upper(),
            "destinationLocationCode": seg.destination_location_code.strip().upper(),
            "departureDateTimeRange": {"date": seg.departure_date.isoformat()},
        }
        for i, seg in enumerate(segments, start=1)
    ]
    leg_ids = [leg["id"] for leg in legs]

    criteria: Dict[str, Any] = {"maxFlightOffers": request.max_results}
    filters: Dict[str, Any] = {}
    if request.travel_class:
        filters["cabinRestrictions"] = [{
            "cabin": request.travel_class.upper(),
            "coverage": "MOST_SEGMENTS",
            "originDestinationIds": leg_ids,
        }]
    if request.non_stop:
        filters["connectionRestriction"] = {"maxNumberOfConnections": 0}
    if filters:
        criteria["flightFilters"] = filters
    if request.include_branded_fares:
        criteria["additionalInformation"] = {"brandedFares": True}

    body = {
        "currencyCode": request.currency_code.upper(),
        "originDestinations": legs,
        "travelers": build_travelers(request.adults, request.children or 0, request.infants or 0),
        "sources": ["GDS"],
        "searchCriteria": criteria,
    }
    return HttpCall(
        service="FlightSearch",
        method="POST",
        path=FLIGHT_OFFERS_PATH,
        json=body,
        headers={"Content-Type": "application/json"},
        trip_type=TripType.MULTI_CITY,
    )


def _single_route_call(request: FlightSearchRequest, trip_type: TripType) -> HttpCall:
    origin = _require_code(request.origin_location_code, "originLocationCode")
    destination = _require_code(request.destination_location_code, "destinationLocationCode")
    if origin == destination:
        raise ValidationError("originLocationCode and destinationLocationCode must differ")
    if request.departure_date is None:
        raise ValidationError("departureDate is required")

    params: Dict[str, str] = {
        "originLocationCode": origin,
        "destinationLocationCode": destination,
        "departureDate": request.departure_date.isoformat(),
    }
    if trip_type == TripType.ROUND_TRIP:
        if request.return_date is None:
            raise ValidationError("returnDate is required for RoundTrip searches")
        if request.return_date <= request.departure_date:
            raise ValidationError("returnDate must be after departureDate")
        params["returnDate"] = request.return_date.isoformat()

    params["adults"] = str(request.adults)
    if request.children:
        params["children"] = str(request.children)
    if request.infants:
        params["infants"] = str(request.infants)
    if request.travel_class:
        params["travelClass"] = request.travel_class.upper()
    params["nonStop"] = "true" if request.non_stop else "false"
    params["currencyCode"] = request.currency_code.upper()
    params["max"] = str(request.max_results)

    return HttpCall(
        service="FlightSearch",
        method="GET",
        path=FLIGHT_OFFERS_PATH,
        params=params,
        trip_type=trip_type,
    )


def build_search_call(request: FlightSearchRequest) -> HttpCall:
    trip_type = resolve_trip_type(request)
    _validate_common(request)
    if trip_type == TripType.MULTI_CITY:
        return _multi_city_call(request)
    return _single_route_call(request, trip_type)


# --- pricing / upselling ----------------------------------------------------

def _offers_payload(offers: Sequence[FlightOffer], kind: str) -> Dict[str, Any]:
    if not offers:
        raise ValidationError("At least one flight offer is required")
    return {"data": {"type": kind, "flightOffers": [to_wire(o) for o in offers]}}


def build_pricing_call(offers: Sequence[FlightOffer]) -> HttpCall:
    return HttpCall(
        service="FlightPricing",
        method="POST",
        path=PRICING_PATH,
        params={"include": "detailed-fare-rules"},
        json=_offers_payload(offers, "flight-offers-pricing"),
        headers={"Content-Type": "application/json"},
    )


def build_upsell_call(offers: Sequence[FlightOffer]) -> HttpCall:
    return HttpCall(
        service="FlightUpselling",
        method="POST",
        path=UPSELLING_PATH,
        json=_offers_payload(offers, "flight-offers-upselling"),
        headers={"Content-Type": "application/json"},
    )


# --- orders -----------------------------------------------------------------

def client_reference(prefix: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{prefix}-{now.strftime('%Y%m%dT%H%M%SZ')}"


def build_order_call(order: FlightOrderRequest, client_ref: str) -> HttpCall:
    if order is None or order.data is None:
        raise ValidationError("Request data is required")
    if not order.data.flight_offers:
        raise ValidationError("At least one flight offer is required")
    if not order.data.travelers:
        raise ValidationError("At least one traveler is required")

    body = to_wire(order)
    body["data"]["type"] = order.data.type or "flight-order"
    return HttpCall(
        service="FlightOrder",
        method="POST",
        path=FLIGHT_ORDERS_PATH,
        json=body,
        headers={"Content-Type": "application/json", "Ama-Client-Ref": client_ref},
    )


def build_issue_call(order_id: str) -> HttpCall:
    if order_id is None or not order_id.strip():
        raise ValidationError("Order id is required")
    return HttpCall(
        service="FlightOrderIssuance",
        method="POST",
        path=ISSUANCE_PATH.format(order_id=quote(order_id.strip(), safe="")),
        json={},
        headers={"Content-Type": "application/json"},
    )
