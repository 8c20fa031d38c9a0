from typing import Optional, Sequence, Type, TypeVar
import asyncio
import time

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from flight_gateway.amadeus import dispatch
from flight_gateway.amadeus.auth import TokenCache
from flight_gateway.amadeus.dispatch import HttpCall
from flight_gateway.amadeus.models import (
    FlightOffer,
    FlightOffersPricingResponse,
    FlightOffersUpsellingResponse,
    FlightOrderRequest,
    FlightOrderResponse,
    FlightSearchResponse,
)
from flight_gateway.config import Settings, settings as default_settings
from flight_gateway.errors import DeserializationError, UpstreamError
from flight_gateway.obs.audit import AuditLogger
from flight_gateway.obs.logger import log_event
from flight_gateway.obs.metrics import inc_counter, record_timing
from flight_gateway.types import FlightSearchRequest

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class AmadeusClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        audit: Optional[AuditLogger] = None,
        token_cache: Optional[TokenCache] = None,
    ):
        self.settings = settings or default_settings
        # Persistent HTTP client with HTTP/2 and sensible timeouts
        self._http = httpx.AsyncClient(
            base_url=self.settings.amadeus_base_url,
            http2=transport is None,
            transport=transport,
            timeout=httpx.Timeout(
                connect=self.settings.HTTP_CONNECT_TIMEOUT,
                read=self.settings.HTTP_READ_TIMEOUT,
                write=self.settings.HTTP_READ_TIMEOUT,
                pool=self.settings.HTTP_CONNECT_TIMEOUT,
            ),
        )
        self.audit = audit or AuditLogger(
            self.settings.AUDIT_LOG_DIR, enabled=self.settings.AUDIT_LOG_ENABLED
        )
        self.tokens = token_cache or TokenCache(
            self._http,
            client_id=self.settings.AMADEUS_CLIENT_ID,
            client_secret=self.settings.AMADEUS_CLIENT_SECRET,
            audit=self.audit,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def send(self, call: HttpCall, token: str, response_model: Type[ResponseT]) -> ResponseT:
        """Single attempt: non-2xx or no answer raises UpstreamError, bad payload raises DeserializationError."""
        headers = {
            "Accept": "application/json",
            **dict(call.headers),
            "Authorization": f"Bearer {token}",
        }
        start = time.monotonic()
        try:
            r = await self._http.request(
                call.method,
                call.path,
                params=call.params,
                json=call.json,
                headers=headers,
            )
        except httpx.TransportError as e:
            elapsed_ms = (time.monotonic() - start) * 1000.0
            record_timing("vendor_latency_ms", elapsed_ms, {"service": call.service})
            inc_counter("vendor_calls_total", {"service": call.service, "status": "error"})
            log_event("vendor_unreachable", level="ERROR", service=call.service,
                      error_type=type(e).__name__, error=str(e))
            raise UpstreamError(
                f"{call.service} unreachable: {type(e).__name__}", body=str(e) or None
            ) from e
        body = r.text
        elapsed_ms = (time.monotonic() - start) * 1000.0

        record_timing("vendor_latency_ms", elapsed_ms, {"service": call.service})
        inc_counter("vendor_calls_total", {"service": call.service, "status": str(r.status_code)})
        # file I/O stays off the event loop
        await asyncio.to_thread(
            self.audit.record,
            call.service, call.path, call.method,
            call.json if call.json is not None else dict(call.params or {}),
            headers, body, r.status_code,
        )
        log_event(
            "vendor_call",
            service=call.service,
            method=call.method,
            path=call.path,
            status=r.status_code,
            ms_total=round(elapsed_ms, 2),
        )

        if not r.is_success:
            log_event("vendor_error", level="ERROR", service=call.service,
                      status=r.status_code, body=body[:500])
            raise UpstreamError(
                f"{call.service} failed", status=r.status_code, body=body
            )

        try:
            return response_model.model_validate_json(body)
        except PydanticValidationError as e:
            raise DeserializationError(
                f"Failed to deserialize {call.service} response: {e.error_count()} error(s)",
                status=r.status_code,
                body=body,
            ) from e

    async def _call(self, call: HttpCall, response_model: Type[ResponseT]) -> ResponseT:
        token = await self.tokens.acquire()
        return await self.send(call, token, response_model)

    async def search_flights(self, request: FlightSearchRequest) -> FlightSearchResponse:
        call = dispatch.build_search_call(request)
        log_event("flight_search", trip_type=call.trip_type.value, method=call.method)
        return await self._call(call, FlightSearchResponse)

    async def price_flight_offers(self, offers: Sequence[FlightOffer]) -> FlightOffersPricingResponse:
        """Confirm pricing; detailed fare rules are always requested."""
        return await self._call(dispatch.build_pricing_call(offers), FlightOffersPricingResponse)

    async def upsell_flight_offers(self, offers: Sequence[FlightOffer]) -> FlightOffersUpsellingResponse:
        return await self._call(dispatch.build_upsell_call(offers), FlightOffersUpsellingResponse)

    async def create_flight_order(self, order: FlightOrderRequest) -> FlightOrderResponse:
        call = dispatch.build_order_call(
            order, dispatch.client_reference(self.settings.AMADEUS_CLIENT_REF)
        )
        return await self._call(call, FlightOrderResponse)

    async def issue_flight_order(self, order_id: str) -> FlightOrderResponse:
        return await self._call(dispatch.build_issue_call(order_id), FlightOrderResponse)
