"""OAuth2 client-credentials token cache for the Amadeus API.

One ``TokenCache`` per credential set. Callers share it and call ``acquire()``
before each vendor request; at most one refresh is in flight at any time.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import asyncio
import time

import httpx
from pydantic import ValidationError as PydanticValidationError

from flight_gateway.amadeus.models import AccessTokenResponse
from flight_gateway.errors import AuthenticationFailure, DeserializationError
from flight_gateway.obs.audit import AuditLogger
from flight_gateway.obs.logger import log_event

TOKEN_PATH = "/v1/security/oauth2/token"
EXPIRY_BUFFER_SECONDS = 5 * 60


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at: float  # epoch seconds

    def is_fresh(self, now: float, buffer: float = EXPIRY_BUFFER_SECONDS) -> bool:
        return now < self.expires_at - buffer


class TokenCache:
    def __init__(
        self,
        http: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        clock: Callable[[], float] = time.time,
        expiry_buffer: float = EXPIRY_BUFFER_SECONDS,
        audit: Optional[AuditLogger] = None,
    ):
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._clock = clock
        self._expiry_buffer = expiry_buffer
        self._audit = audit
        self._cached: Optional[CachedToken] = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> Optional[CachedToken]:
        return self._cached

    def _fresh_token(self) -> Optional[str]:
        token = self._cached
        if token is not None and token.is_fresh(self._clock(), self._expiry_buffer):
            return token.access_token
        return None

    async def acquire(self) -> str:
        token = self._fresh_token()
        if token is not None:
            return token

        async with self._lock:
            # another caller may have refreshed while we waited
            token = self._fresh_token()
            if token is not None:
                return token
            self._cached = await self._refresh()
            return self._cached.access_token

    async def _refresh(self) -> CachedToken:
        form = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        try:
            r = await self._http.post(
                TOKEN_PATH,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.TransportError as e:
            log_event("token_refresh_failed", level="ERROR",
                      error_type=type(e).__name__, error=str(e))
            raise AuthenticationFailure(
                f"Token endpoint unreachable: {type(e).__name__}", body=str(e) or None
            ) from e
        body = r.text
        if self._audit is not None:
            await asyncio.to_thread(
                self._audit.record, "Auth", TOKEN_PATH, "POST", form, None, body, r.status_code
            )

        if not r.is_success:
            log_event("token_refresh_failed", level="ERROR", status=r.status_code)
            raise AuthenticationFailure(
                "Failed to obtain access token", status=r.status_code, body=body
            )

        try:
            parsed = AccessTokenResponse.model_validate_json(body)
        except PydanticValidationError as e:
            raise DeserializationError(
                f"Failed to deserialize token response: {e.error_count()} error(s)",
                status=r.status_code,
                body=body,
            ) from e

        issued_at = self._clock()
        log_event("token_refreshed", expires_in=parsed.expires_in)
        return CachedToken(
            access_token=parsed.access_token,
            expires_at=issued_at + parsed.expires_in,
        )
