import pytest

from flight_gateway.amadeus.models import FlightOffer
from flight_gateway.amadeus.transform import iso_to_minutes, offer_total, select_offer

from factories import sample_offer


@pytest.mark.parametrize("dur, minutes", [
    ("PT11H30M", 690),
    ("PT45M", 45),
    ("PT2H", 120),
    ("P1DT2H5M", 1565),
    ("", 0),
    (None, 0),
    ("garbage", 0),
])
def test_iso_to_minutes(dur, minutes):
    assert iso_to_minutes(dur) == minutes


def offer(**kwargs):
    return FlightOffer.model_validate(sample_offer(**kwargs))


def test_select_cheapest():
    offers = [offer(offer_id="1", grand_total="300.00"),
              offer(offer_id="2", grand_total="99.99"),
              offer(offer_id="3", grand_total="150.00")]
    assert select_offer(offers).id == "2"


def test_ties_broken_by_duration():
    offers = [offer(offer_id="1", grand_total="100.00", duration="PT9H"),
              offer(offer_id="2", grand_total="100.00", duration="PT6H")]
    assert select_offer(offers).id == "2"


def test_select_by_id():
    offers = [offer(offer_id="1"), offer(offer_id="2")]
    assert select_offer(offers, offer_id="2").id == "2"
    assert select_offer(offers, offer_id="9") is None


def test_select_from_nothing():
    assert select_offer([]) is None


def test_offer_total_handles_missing_price():
    assert offer_total(FlightOffer(id="x")) is None
    bad = offer()
    bad.price.grand_total = "n/a"
    bad.price.total = None
    assert offer_total(bad) is None
