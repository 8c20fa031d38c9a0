from decimal import Decimal, InvalidOperation
from typing import List, Optional
import re

from flight_gateway.amadeus.models import FlightOffer

_ISO_DURATION = re.compile(r"^P(?:(?P<d>\d+)D)?(?:T(?:(?P<h>\d+)H)?(?:(?P<m>\d+)M)?)?$")


def iso_to_minutes(dur: Optional[str]) -> int:
    # 'PT11H30M', 'P1DT2H'; unparsable counts as 0
    if not dur:
        return 0
    match = _ISO_DURATION.match(dur.strip().upper())
    if not match:
        return 0
    days, hours, minutes = (int(match.group(g) or 0) for g in ("d", "h", "m"))
    return days * 24 * 60 + hours * 60 + minutes


def offer_total(offer: FlightOffer) -> Optional[Decimal]:
    if offer.price is None:
        return None
    raw = offer.price.grand_total or offer.price.total
    if raw is None:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


def offer_duration_minutes(offer: FlightOffer) -> int:
    return sum(iso_to_minutes(itin.duration) for itin in offer.itineraries)


def select_offer(offers: List[FlightOffer], offer_id: Optional[str] = None) -> Optional[FlightOffer]:
    """Pick the offer to book: the requested id, else cheapest grand total, then shortest."""
    if not offers:
        return None
    if offer_id is not None:
        return next((o for o in offers if o.id == offer_id), None)
    priced = [o for o in offers if offer_total(o) is not None]
    if not priced:
        return offers[0]
    return min(priced, key=lambda o: (offer_total(o), offer_duration_minutes(o)))
