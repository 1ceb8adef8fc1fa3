"""Per-tenant credential state."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fatsecret_client.auth.signing import OAuth1Credentials
from fatsecret_client.exceptions import NotConfiguredError, UnauthorizedError
from fatsecret_client.models.auth import (
    AccessToken,
    AuthState,
    BearerToken,
    ConsumerCredentials,
    RequestToken,
)

if TYPE_CHECKING:
    from fatsecret_client.auth.tokens import CredentialStore
    from fatsecret_client.config import FatSecretConfig


@dataclass(eq=False)
class Tenant:
    """One isolated set of credential and authorization state.

    Owned either by the process (persisted through `store`) or by a network
    session (`store` is None and nothing ever reaches disk). Each slot holds
    an immutable model, so replacing one is a single assignment.
    """

    consumer: ConsumerCredentials | None = None
    access_token: AccessToken | None = None
    pending: RequestToken | None = None
    bearer: BearerToken | None = None
    store: CredentialStore | None = None
    _bearer_lock: asyncio.Lock | None = field(default=None, init=False, repr=False)
    _bearer_lock_loop: asyncio.AbstractEventLoop | None = field(
        default=None, init=False, repr=False
    )

    @classmethod
    def ephemeral(cls, config: FatSecretConfig) -> Tenant:
        """Fresh tenant seeded only from runtime configuration."""
        consumer = None
        if config.consumer_key and config.consumer_secret:
            consumer = ConsumerCredentials(
                consumer_key=config.consumer_key, consumer_secret=config.consumer_secret
            )
        return cls(consumer=consumer)

    @classmethod
    def from_store(cls, store: CredentialStore, config: FatSecretConfig) -> Tenant:
        """Load the persisted record, with runtime credentials taking priority."""
        state = store.resolve(
            {"consumer_key": config.consumer_key, "consumer_secret": config.consumer_secret}
        )
        return cls(consumer=state.consumer, access_token=state.user_token, store=store)

    @property
    def bearer_lock(self) -> asyncio.Lock:
        """Refresh lock for the running event loop, created on first use."""
        loop = asyncio.get_running_loop()
        if self._bearer_lock is None or self._bearer_lock_loop is not loop:
            self._bearer_lock = asyncio.Lock()
            self._bearer_lock_loop = loop
        return self._bearer_lock

    @property
    def persistent(self) -> bool:
        return self.store is not None

    @property
    def state(self) -> AuthState:
        if self.consumer is None:
            return AuthState.UNCONFIGURED
        if self.pending is not None:
            return AuthState.PENDING_AUTHORIZATION
        if self.access_token is not None:
            return AuthState.AUTHORIZED
        return AuthState.CONFIGURED

    def require_consumer(self) -> ConsumerCredentials:
        if self.consumer is None:
            raise NotConfiguredError()
        return self.consumer

    def consumer_credentials(self, token: RequestToken | None = None) -> OAuth1Credentials:
        """Signer credentials for the OAuth handshake (no user token)."""
        consumer = self.require_consumer()
        return OAuth1Credentials(
            consumer_key=consumer.consumer_key,
            consumer_secret=consumer.consumer_secret,
            token=token.token if token else None,
            token_secret=token.token_secret if token else None,
        )

    def user_credentials(self) -> OAuth1Credentials:
        """Signer credentials for a protected call."""
        access_token = self.access_token
        if access_token is None:
            raise UnauthorizedError()
        consumer = self.require_consumer()
        return OAuth1Credentials(
            consumer_key=consumer.consumer_key,
            consumer_secret=consumer.consumer_secret,
            token=access_token.token,
            token_secret=access_token.token_secret,
        )
