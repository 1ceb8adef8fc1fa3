"""OAuth 2.0 client-credentials token cache."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

from fatsecret_client.exceptions import UpstreamAuthError
from fatsecret_client.models.auth import BearerToken

if TYPE_CHECKING:
    from collections.abc import Callable

    from fatsecret_client.auth.tenant import Tenant
    from fatsecret_client.config import FatSecretConfig

logger = logging.getLogger(__name__)


class OAuth2TokenCache:
    """Bearer token for public (non-user) API calls, shared by concurrent callers.

    At most one grant is in flight per tenant: refreshes run under the
    tenant's lock and re-check the cache once the lock is held, so callers
    that queued behind a refresh reuse its token.
    """

    def __init__(
        self,
        config: FatSecretConfig,
        tenant: Tenant,
        http_client: httpx.AsyncClient | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.tenant = tenant
        self._http_client = http_client
        self._clock = clock

    def set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Set the shared HTTP client for connection pooling."""
        self._http_client = http_client

    @property
    def margin_ms(self) -> int:
        return int(self.config.token_safety_margin * 1000)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _cached(self) -> str | None:
        bearer = self.tenant.bearer
        if bearer is not None and bearer.is_valid(self._now_ms(), self.margin_ms):
            return bearer.access_token
        return None

    async def get_token(self, *, timeout: float | None = None) -> str:
        """Return a usable bearer token, running the grant if needed."""
        if token := self._cached():
            return token

        async with self.tenant.bearer_lock:
            # Another caller may have refreshed while we waited
            if token := self._cached():
                return token
            bearer = await self._grant(timeout=timeout)
            self.tenant.bearer = bearer
            return bearer.access_token

    def invalidate(self) -> None:
        """Drop the cached token."""
        self.tenant.bearer = None

    async def _grant(self, *, timeout: float | None) -> BearerToken:
        consumer = self.tenant.require_consumer()
        request_timeout = timeout if timeout is not None else self.config.timeout
        data = {
            "grant_type": "client_credentials",
            "client_id": consumer.consumer_key,
            "client_secret": consumer.consumer_secret,
            "scope": self.config.scope,
        }

        logger.debug("Requesting client-credentials token from %s", self.config.token_url)
        requested_at = self._now_ms()
        if self._http_client is not None:
            response = await self._http_client.post(
                self.config.token_url, data=data, timeout=request_timeout
            )
        else:
            async with httpx.AsyncClient(timeout=request_timeout) as client:
                response = await client.post(self.config.token_url, data=data)

        if response.status_code != 200:
            raise UpstreamAuthError(
                f"OAuth2 token request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            payload = response.json()
            access_token = payload["access_token"]
            expires_in = int(payload["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamAuthError(
                f"Invalid OAuth2 token response: {response.text}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        logger.info("Obtained OAuth2 token, expires in %s seconds", expires_in)
        return BearerToken(
            access_token=access_token,
            expires_at_ms=requested_at + expires_in * 1000,
        )
