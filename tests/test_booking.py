from unittest.mock import AsyncMock, Mock

import pytest

from flight_gateway.amadeus.client import AmadeusClient
from flight_gateway.amadeus.models import (
    FlightOffersPricingResponse,
    FlightOrderResponse,
    FlightSearchResponse,
)
from flight_gateway.booking import AutoBooker
from flight_gateway.errors import NoOffersFound, UpstreamError, ValidationError
from flight_gateway.types import AutoBookRequest

from factories import sample_offer, sample_traveler


def auto_book_request(**overrides):
    payload = {
        "search": {
            "originLocationCode": "NYC",
            "destinationLocationCode": "LAX",
            "departureDate": "2026-11-17",
        },
        "travelers": [sample_traveler()],
        "ticketingAgreement": {"option": "DELAY_TO_CANCEL", "delay": "6D"},
    }
    payload.update(overrides)
    return AutoBookRequest.model_validate(payload)


@pytest.fixture
def amadeus():
    client = Mock(spec=AmadeusClient)
    client.search_flights = AsyncMock(return_value=FlightSearchResponse.model_validate({
        "data": [sample_offer("1", "300.00"), sample_offer("2", "120.00")],
    }))
    client.price_flight_offers = AsyncMock(side_effect=lambda offers: FlightOffersPricingResponse.model_validate({
        "data": {"type": "flight-offers-pricing",
                 "flightOffers": [sample_offer(offers[0].id, "125.00")]},
    }))
    client.create_flight_order = AsyncMock(return_value=FlightOrderResponse.model_validate({
        "data": {"type": "flight-order", "id": "ORDER1",
                 "associatedRecords": [{"reference": "QVH2BX", "originSystemCode": "GDS"}]},
    }))
    client.issue_flight_order = AsyncMock(return_value=FlightOrderResponse.model_validate({
        "data": {"type": "flight-order", "id": "ORDER1"},
    }))
    return client


async def test_books_cheapest_priced_offer(amadeus):
    result = await AutoBooker(amadeus).run(auto_book_request())

    priced_arg = amadeus.price_flight_offers.await_args.args[0]
    assert [o.id for o in priced_arg] == ["2"]

    order_request = amadeus.create_flight_order.await_args.args[0]
    assert order_request.data.flight_offers[0].price.grand_total == "125.00"
    assert order_request.data.travelers[0].name.last_name == "DOE"
    assert order_request.data.ticketing_agreement.delay == "6D"

    assert result.priced_offer.id == "2"
    assert result.order.data.id == "ORDER1"
    assert result.issued is False
    amadeus.issue_flight_order.assert_not_awaited()


async def test_issues_when_requested(amadeus):
    result = await AutoBooker(amadeus).run(auto_book_request(issue=True))

    amadeus.issue_flight_order.assert_awaited_once_with("ORDER1")
    assert result.issued is True


async def test_explicit_offer_id(amadeus):
    await AutoBooker(amadeus).run(auto_book_request(offerId="1"))
    assert amadeus.price_flight_offers.await_args.args[0][0].id == "1"


async def test_unknown_offer_id(amadeus):
    with pytest.raises(NoOffersFound, match="'9'"):
        await AutoBooker(amadeus).run(auto_book_request(offerId="9"))
    amadeus.price_flight_offers.assert_not_awaited()


async def test_no_offers(amadeus):
    amadeus.search_flights.return_value = FlightSearchResponse(data=[])
    with pytest.raises(NoOffersFound):
        await AutoBooker(amadeus).run(auto_book_request())
    amadeus.create_flight_order.assert_not_awaited()


async def test_travelers_required_before_search(amadeus):
    with pytest.raises(ValidationError):
        await AutoBooker(amadeus).run(auto_book_request(travelers=[]))
    amadeus.search_flights.assert_not_awaited()


async def test_upstream_failure_stops_workflow(amadeus):
    amadeus.price_flight_offers.side_effect = UpstreamError("FlightPricing failed", status=400, body="{}")
    with pytest.raises(UpstreamError):
        await AutoBooker(amadeus).run(auto_book_request())
    amadeus.create_flight_order.assert_not_awaited()
