"""ASGI middleware for lightweight observability.

Every request gets an ``x-request-id``. Failed gateway calls also carry
``x-error-kind`` (and ``x-upstream-status`` when Amadeus answered), set by the
error handlers in ``main``; the middleware folds those into the request log and
the ``request_errors_total`` counter.
"""

from typing import Callable, Any, Optional
import time
import uuid

from fastapi import FastAPI

from flight_gateway.obs.context import request_id_var, route_var
from flight_gateway.obs.logger import log_event
from flight_gateway.obs.metrics import record_timing, inc_counter

ERROR_KIND_HEADER = "x-error-kind"
UPSTREAM_STATUS_HEADER = "x-upstream-status"


class ObservabilityMiddleware:
    def __init__(self, app: FastAPI):
        self.app = app

    async def __call__(self, scope: dict, receive: Callable, send: Callable[[dict], Any]):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        req_id = str(uuid.uuid4())
        request_id_var.set(req_id)
        method = scope.get("method", "")
        route = scope.get("path", "")
        route_var.set(route)
        start = time.monotonic()
        status_code = 500
        error_kind: Optional[str] = None
        upstream_status: Optional[int] = None

        async def send_wrapper(message: dict):
            nonlocal status_code, error_kind, upstream_status
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 200))
                headers = list(message.get("headers", []))
                for name, value in headers:
                    key = name.decode("latin-1").lower()
                    if key == ERROR_KIND_HEADER:
                        error_kind = value.decode("latin-1")
                    elif key == UPSTREAM_STATUS_HEADER and value.isdigit():
                        upstream_status = int(value)
                headers.append((b"x-request-id", req_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.monotonic() - start) * 1000.0
            record_timing("request_latency_ms", elapsed_ms, {"route": route})
            inc_counter("requests_total", {"route": route, "status": str(status_code)})
            extra = {}
            if error_kind is not None:
                inc_counter("request_errors_total", {"route": route, "kind": error_kind})
                extra["error_kind"] = error_kind
                if upstream_status is not None:
                    extra["upstream_status"] = upstream_status
            log_event(
                "request",
                level="ERROR" if status_code >= 500 else "INFO",
                method=method,
                status=status_code,
                ms_total=round(elapsed_ms, 2),
                **extra,
            )
