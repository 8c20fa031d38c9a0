from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from flight_gateway.amadeus.models import (
    Contact,
    FlightOffer,
    FlightOrderResponse,
    FormOfPayment,
    PricedFlightOffer,
    Remarks,
    TicketingAgreement,
    TravelerInfo,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TripType(str, Enum):
    ONE_WAY = "OneWay"
    ROUND_TRIP = "RoundTrip"
    MULTI_CITY = "MultiCity"


class FlightSegment(ApiModel):
    model_config = ConfigDict(frozen=True)

    origin_location_code: Optional[str] = Field(None, description="IATA code")
    destination_location_code: Optional[str] = Field(None, description="IATA code")
    departure_date: Optional[date] = None


class FlightSearchRequest(ApiModel):
    """Search parameters for one-way, round-trip and multi-city trips.

    ``trip_type`` may be left out; ``get_trip_type`` infers it from which
    fields are present.
    """
    model_config = ConfigDict(frozen=True)

    trip_type: Optional[TripType] = None

    # OneWay / RoundTrip
    origin_location_code: Optional[str] = None
    destination_location_code: Optional[str] = None
    departure_date: Optional[date] = None
    return_date: Optional[date] = None

    # MultiCity
    segments: Optional[List[FlightSegment]] = None

    adults: int = 1
    children: Optional[int] = None
    infants: Optional[int] = None
    travel_class: Optional[str] = Field(None, description="ECONOMY, PREMIUM_ECONOMY, BUSINESS, FIRST")
    non_stop: bool = False
    currency_code: str = "USD"
    max_results: int = 10
    include_branded_fares: bool = False

    def get_trip_type(self) -> TripType:
        if self.trip_type is not None:
            return self.trip_type
        if self.segments:
            return TripType.MULTI_CITY
        if self.return_date is not None:
            return TripType.ROUND_TRIP
        return TripType.ONE_WAY


class FlightOffersBody(ApiModel):
    flight_offers: List[FlightOffer] = Field(default_factory=list)


class AutoBookRequest(ApiModel):
    search: FlightSearchRequest
    travelers: List[TravelerInfo] = Field(default_factory=list)
    contacts: Optional[List[Contact]] = None
    remarks: Optional[Remarks] = None
    ticketing_agreement: Optional[TicketingAgreement] = None
    form_of_payment: Optional[FormOfPayment] = None
    queuing_office_id: Optional[str] = None
    offer_id: Optional[str] = Field(None, description="Book this offer instead of the cheapest")
    issue: bool = False


class AutoBookResult(ApiModel):
    priced_offer: PricedFlightOffer
    order: FlightOrderResponse
    issued: bool = False
