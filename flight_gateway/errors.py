"""Error taxonomy shared by the vendor adapter and the HTTP controller.

Every failure carries an ``ErrorKind`` so the controller can map it to a status
code in a single table instead of catching each class separately.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    UPSTREAM = "upstream"
    DESERIALIZATION = "deserialization"
    NOT_FOUND = "not_found"


class GatewayError(Exception):
    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        self.message = message
        self.status = status
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status={self.status}): {self.body or ''}"


class ValidationError(GatewayError):
    """Caller input is malformed or incomplete. Raised before any network call."""
    kind = ErrorKind.VALIDATION


class AuthenticationFailure(GatewayError):
    """The OAuth client-credentials exchange failed or the token endpoint was unreachable."""
    kind = ErrorKind.AUTHENTICATION


class UpstreamError(GatewayError):
    """A vendor call returned a non-success status or never got an answer."""
    kind = ErrorKind.UPSTREAM


class DeserializationError(GatewayError):
    """The vendor answered 2xx but the payload did not match the expected shape."""
    kind = ErrorKind.DESERIALIZATION


class NoOffersFound(GatewayError):
    kind = ErrorKind.NOT_FOUND
