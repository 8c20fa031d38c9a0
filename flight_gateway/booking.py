"""Search-to-order workflow behind ``POST /api/flights/auto-book``."""

from flight_gateway.amadeus.client import AmadeusClient
from flight_gateway.amadeus.models import FlightOrderData, FlightOrderRequest
from flight_gateway.amadeus.transform import select_offer
from flight_gateway.errors import DeserializationError, NoOffersFound, ValidationError
from flight_gateway.obs.logger import log_event
from flight_gateway.types import AutoBookRequest, AutoBookResult


class AutoBooker:
    def __init__(self, amadeus: AmadeusClient):
        self.amadeus = amadeus

    async def run(self, request: AutoBookRequest) -> AutoBookResult:
        # fail on missing travelers before any vendor call
        if not request.travelers:
            raise ValidationError("At least one traveler is required")

        results = await self.amadeus.search_flights(request.search)
        log_event("auto_book_step", step="search", offers=len(results.data))

        offer = select_offer(results.data, request.offer_id)
        if offer is None:
            if request.offer_id is not None:
                raise NoOffersFound(f"Offer '{request.offer_id}' not found in search results")
            raise NoOffersFound("No flight offers matched the search")

        pricing = await self.amadeus.price_flight_offers([offer])
        if pricing.data is None or not pricing.data.flight_offers:
            raise NoOffersFound(f"Offer '{offer.id}' could not be priced")
        priced = pricing.data.flight_offers[0]
        log_event("auto_book_step", step="price", offer_id=priced.id,
                  grand_total=priced.price.grand_total if priced.price else None)

        order_request = FlightOrderRequest(data=FlightOrderData(
            flight_offers=[priced],
            travelers=request.travelers,
            contacts=request.contacts,
            remarks=request.remarks,
            ticketing_agreement=request.ticketing_agreement,
            form_of_payment=request.form_of_payment,
            queuing_office_id=request.queuing_office_id,
        ))
        order = await self.amadeus.create_flight_order(order_request)
        order_id = order.data.id if order.data else None
        log_event("auto_book_step", step="order", order_id=order_id)

        issued = False
        if request.issue:
            if not order_id:
                raise DeserializationError("Order response carried no id; cannot issue")
            order = await self.amadeus.issue_flight_order(order_id)
            issued = True
            log_event("auto_book_step", step="issue", order_id=order_id)

        return AutoBookResult(priced_offer=priced, order=order, issued=issued)
