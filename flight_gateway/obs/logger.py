"""Structured JSON logging to stdout.

Low overhead, minimal dependencies, safe for production stdout collectors.
"""

from typing import Any, Dict
from datetime import datetime, timezone
import json

from flight_gateway.obs.context import request_id_var, route_var


SENSITIVE_FIELDS = frozenset({
    "token",
    "access_token",
    "client_secret",
    "authorization",
})


def _mask(value: Any) -> Any:
    s = str(value) if value is not None else ""
    if len(s) <= 8:
        return "***"
    return f"{s[:4]}***"


def log_event(event: str, **fields: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    payload: Dict[str, Any] = {
        "ts": now,
        "level": fields.pop("level", "INFO"),
        "event": event,
        "request_id": request_id_var.get(),
    }
    if route_var.get() is not None:
        payload.setdefault("route", route_var.get())

    for k, v in fields.items():
        if k.lower() in SENSITIVE_FIELDS:
            payload[k] = _mask(v)
        else:
            payload[k] = v

    try:
        print(json.dumps(payload, separators=(",", ":"), default=str))
    except Exception:
        # never let logging take down a request
        pass
