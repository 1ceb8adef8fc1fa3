"""OAuth credential and token models."""

from enum import StrEnum

from pydantic import BaseModel, Field


class AuthState(StrEnum):
    """Authorization state of a tenant."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    PENDING_AUTHORIZATION = "pending_authorization"
    AUTHORIZED = "authorized"


class ConsumerCredentials(BaseModel):
    """Application consumer key/secret."""

    consumer_key: str = Field(description="Consumer key (OAuth2 client id)")
    consumer_secret: str = Field(description="Consumer secret (OAuth2 client secret)")

    model_config = {"frozen": True}


class RequestToken(BaseModel):
    """OAuth request token (first leg of the OAuth 1.0a flow)."""

    token: str = Field(description="Request token value")
    token_secret: str = Field(description="Request token secret")
    authorization_url: str = Field(description="URL the user visits to obtain a verifier")

    model_config = {"frozen": True}


class AccessToken(BaseModel):
    """OAuth 1.0a user access token (final leg of the OAuth flow)."""

    token: str = Field(description="Access token value")
    token_secret: str = Field(description="Access token secret")

    model_config = {"frozen": True}


class BearerToken(BaseModel):
    """OAuth 2.0 client-credentials bearer token."""

    access_token: str
    expires_at_ms: int = Field(description="Upstream expiry, epoch milliseconds")

    model_config = {"frozen": True}

    def is_valid(self, now_ms: int, margin_ms: int) -> bool:
        """A token is usable until `margin_ms` before its upstream expiry."""
        return now_ms < self.expires_at_ms - margin_ms


class PersistedState(BaseModel):
    """Durable credential record."""

    consumer_key: str | None = None
    consumer_secret: str | None = None
    access_token: str | None = None
    access_token_secret: str | None = None

    @property
    def consumer(self) -> ConsumerCredentials | None:
        if self.consumer_key and self.consumer_secret:
            return ConsumerCredentials(
                consumer_key=self.consumer_key, consumer_secret=self.consumer_secret
            )
        return None

    @property
    def user_token(self) -> AccessToken | None:
        if self.access_token and self.access_token_secret:
            return AccessToken(token=self.access_token, token_secret=self.access_token_secret)
        return None


class AuthStatus(BaseModel):
    """Read-only snapshot of a tenant's authorization state."""

    state: AuthState
    credentials_configured: bool
    profile_authenticated: bool
    pending_authorization: bool
    message: str
    config_path: str | None = None
    config_exists: bool | None = None
