import json
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from flight_gateway.config import settings
from flight_gateway.amadeus.client import AmadeusClient
from flight_gateway.amadeus.models import (
    FlightOffersPricingResponse,
    FlightOffersUpsellingResponse,
    FlightOrderRequest,
    FlightOrderResponse,
    FlightSearchResponse,
)
from flight_gateway.booking import AutoBooker
from flight_gateway.errors import ErrorKind, GatewayError
from flight_gateway.obs.logger import log_event
from flight_gateway.obs.metrics import get_metrics_snapshot
from flight_gateway.obs.middleware import (
    ERROR_KIND_HEADER,
    UPSTREAM_STATUS_HEADER,
    ObservabilityMiddleware,
)
from flight_gateway.types import (
    AutoBookRequest,
    AutoBookResult,
    FlightOffersBody,
    FlightSearchRequest,
    TripType,
)
from flight_gateway.utils.dates import days_from_today

load_dotenv()

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 502,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.DESERIALIZATION: 500,
    ErrorKind.NOT_FOUND: 404,
}

ERROR_TITLES = {
    ErrorKind.VALIDATION: "Invalid request",
    ErrorKind.AUTHENTICATION: "Failed to authenticate with Amadeus API",
    ErrorKind.UPSTREAM: "Failed to communicate with Amadeus API",
    ErrorKind.DESERIALIZATION: "Amadeus API returned an unreadable response",
    ErrorKind.NOT_FOUND: "Nothing to book",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_event("startup", amadeus_base_url=settings.amadeus_base_url)
    app.state.amadeus = AmadeusClient(settings)
    app.state.auto_booker = AutoBooker(app.state.amadeus)

    yield

    await app.state.amadeus.aclose()
    log_event("shutdown")


fastapi_app = FastAPI(
    title="Flight GDS Gateway",
    version="1.0.0",
    lifespan=lifespan,
)


def get_amadeus(request: Request) -> AmadeusClient:
    return request.app.state.amadeus


def get_auto_booker(request: Request) -> AutoBooker:
    return request.app.state.auto_booker


def _vendor_detail(body: str | None) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return body


@fastapi_app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    log_event(
        "request_failed",
        level="WARNING" if status_code < 500 else "ERROR",
        kind=exc.kind.value,
        status=status_code,
        upstream_status=exc.status,
        error=exc.message,
    )
    payload: Dict[str, Any] = {
        "error": ERROR_TITLES.get(exc.kind, "Request failed"),
        "kind": exc.kind.value,
        "details": exc.message,
    }
    headers = {ERROR_KIND_HEADER: exc.kind.value}
    if exc.status is not None:
        payload["upstreamStatus"] = exc.status
        payload["upstreamBody"] = _vendor_detail(exc.body)
        headers[UPSTREAM_STATUS_HEADER] = str(exc.status)
    return JSONResponse(payload, status_code=status_code, headers=headers)


@fastapi_app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {
            "error": ERROR_TITLES[ErrorKind.VALIDATION],
            "kind": ErrorKind.VALIDATION.value,
            "details": json.loads(json.dumps(exc.errors(), default=str)),
        },
        status_code=400,
        headers={ERROR_KIND_HEADER: ErrorKind.VALIDATION.value},
    )


async def _guarded(operation: str, pending: Awaitable[Any]) -> Any:
    """Await an operation, turning non-gateway failures into a 500 body."""
    try:
        return await pending
    except GatewayError:
        raise
    except Exception as e:
        log_event("unhandled_error", level="ERROR", operation=operation,
                  error_type=type(e).__name__, error=str(e))
        return JSONResponse(
            {"error": "An unexpected error occurred", "kind": "unexpected", "details": str(e)},
            status_code=500,
            headers={ERROR_KIND_HEADER: "unexpected"},
        )


@fastapi_app.get("/")
async def root():
    return {
        "service": "Flight GDS Gateway",
        "version": "1.0.0",
        "status": "running",
        "amadeus": "production" if settings.is_production else "test",
    }


@fastapi_app.get("/health")
async def health():
    return {"status": "healthy", "service": "flight-gds-gateway"}


@fastapi_app.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


@fastapi_app.post(
    "/api/flights/search",
    response_model=FlightSearchResponse,
    response_model_exclude_none=True,
)
async def search_flights(
    body: FlightSearchRequest,
    amadeus: AmadeusClient = Depends(get_amadeus),
):
    log_event(
        "flight_search_requested",
        trip_type=body.get_trip_type().value,
        origin=body.origin_location_code,
        destination=body.destination_location_code,
        segments=len(body.segments or []),
    )
    result = await _guarded("search", amadeus.search_flights(body))
    if isinstance(result, FlightSearchResponse):
        log_event("flight_search_completed", offers=len(result.data))
    return result


@fastapi_app.get(
    "/api/flights/sample-request",
    response_model=FlightSearchRequest,
    response_model_exclude_none=True,
)
async def sample_request():
    """A ready-to-send round-trip search, handy for trying the API."""
    return FlightSearchRequest(
        trip_type=TripType.ROUND_TRIP,
        origin_location_code="NYC",
        destination_location_code="LAX",
        departure_date=days_from_today(30, settings.TZ),
        return_date=days_from_today(37, settings.TZ),
        adults=1,
        children=0,
        infants=0,
        travel_class="ECONOMY",
        non_stop=False,
        currency_code="USD",
        max_results=10,
    )


@fastapi_app.post(
    "/api/flights/price",
    response_model=FlightOffersPricingResponse,
    response_model_exclude_none=True,
)
async def price_flight_offers(
    body: FlightOffersBody,
    amadeus: AmadeusClient = Depends(get_amadeus),
):
    return await _guarded("price", amadeus.price_flight_offers(body.flight_offers))


@fastapi_app.post(
    "/api/flights/upsell",
    response_model=FlightOffersUpsellingResponse,
    response_model_exclude_none=True,
)
async def upsell_flight_offers(
    body: FlightOffersBody,
    amadeus: AmadeusClient = Depends(get_amadeus),
):
    return await _guarded("upsell", amadeus.upsell_flight_offers(body.flight_offers))


@fastapi_app.post(
    "/api/flights/order",
    response_model=FlightOrderResponse,
    response_model_exclude_none=True,
)
async def create_flight_order(
    body: FlightOrderRequest,
    amadeus: AmadeusClient = Depends(get_amadeus),
):
    return await _guarded("order", amadeus.create_flight_order(body))


@fastapi_app.patch(
    "/api/flights/order/{order_id}/issue",
    response_model=FlightOrderResponse,
    response_model_exclude_none=True,
)
async def issue_flight_order(
    order_id: str,
    amadeus: AmadeusClient = Depends(get_amadeus),
):
    return await _guarded("issue", amadeus.issue_flight_order(order_id))


@fastapi_app.post(
    "/api/flights/auto-book",
    response_model=AutoBookResult,
    response_model_exclude_none=True,
)
async def auto_book(
    body: AutoBookRequest,
    booker: AutoBooker = Depends(get_auto_booker),
):
    return await _guarded("auto-book", booker.run(body))


# Apply middleware
app = ObservabilityMiddleware(fastapi_app)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
        log_level="info",
    )
