"""Audit side-channel: one timestamped JSON file per outbound vendor call.

Credentials and traveler/payment PII are redacted before anything touches
disk. Writing is best effort; a failure is logged and never raised.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import re

from flight_gateway.obs.logger import log_event

REDACTED = "***REDACTED***"

# compared lower-cased
SENSITIVE_KEYS = frozenset({
    "authorization",
    "client_secret",
    "access_token",
    "cardnumber",
    "cvvcode",
    "paymenttoken",
    "vouchercode",
    "dateofbirth",
    "birthplace",
})

# keys that are only sensitive under a given parent (document numbers, not flight numbers)
SENSITIVE_CHILD_KEYS = {
    "documents": frozenset({"number", "expirydate", "issuancedate", "issuancelocation"}),
    "creditcard": frozenset({"expirydate", "cardholdername"}),
    "phones": frozenset({"number"}),
    "contact": frozenset({"emailaddress"}),
    "contacts": frozenset({"emailaddress"}),
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def redact(value: Any, parent: Optional[str] = None) -> Any:
    """Return a copy of ``value`` with sensitive fields replaced."""
    if isinstance(value, dict):
        scoped = SENSITIVE_CHILD_KEYS.get((parent or "").lower(), frozenset())
        out: Dict[str, Any] = {}
        for k, v in value.items():
            key = str(k).lower()
            if key in SENSITIVE_KEYS or key in scoped:
                out[k] = REDACTED
            else:
                out[k] = redact(v, parent=str(k))
        return out
    if isinstance(value, list):
        # list items inherit the list's key as their parent
        return [redact(v, parent=parent) for v in value]
    return value


def sanitize_filename(name: str, max_len: int = 50) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("_")
    return cleaned[:max_len]


def _try_parse_json(body: Optional[Union[str, bytes]]) -> Any:
    if body is None:
        return None
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError:
        return body


class AuditLogger:
    def __init__(self, directory: Union[str, Path], enabled: bool = True):
        self.directory = Path(directory)
        self.enabled = enabled

    def record(
        self,
        service: str,
        endpoint: str,
        method: str,
        request_body: Any,
        request_headers: Optional[Dict[str, str]],
        response_body: Optional[Union[str, bytes]],
        status_code: int,
    ) -> Optional[Path]:
        """Write one request/response pair. Returns the file path, or None if skipped or failed."""
        if not self.enabled:
            return None
        try:
            now = datetime.now(timezone.utc)
            stamp = now.strftime("%Y%m%d_%H%M%S_") + f"{now.microsecond // 1000:03d}"
            file_name = f"{stamp}_{service}_{sanitize_filename(endpoint)}.json"

            if isinstance(request_body, (str, bytes)):
                request_body = _try_parse_json(request_body)

            entry = {
                "timestamp": now.isoformat(),
                "service": service,
                "endpoint": endpoint,
                "method": method,
                "request": {
                    "headers": redact(dict(request_headers or {})),
                    "body": redact(request_body),
                },
                "response": {
                    "statusCode": status_code,
                    "body": redact(_try_parse_json(response_body)),
                },
            }

            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.directory / file_name
            path.write_text(json.dumps(entry, indent=2, ensure_ascii=False), encoding="utf-8")
            return path
        except Exception as e:
            log_event("audit_log_failed", level="WARNING", service=service, error=str(e))
            return None
