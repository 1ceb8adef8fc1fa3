"""Typed exceptions for the FatSecret client."""

from typing import Any


class FatSecretError(Exception):
    """Base exception for all FatSecret client errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class FatSecretAuthError(FatSecretError):
    """Authentication or authorization error."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        self.stage = stage  # e.g., "request_token", "access_token", "client_credentials"
        super().__init__(message)


class NotConfiguredError(FatSecretAuthError):
    """Consumer key/secret are missing."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Consumer credentials are not configured. "
            "Set FATSECRET_CLIENT_ID and FATSECRET_CLIENT_SECRET or run setup_credentials.",
            stage="configuration",
        )


class UnauthorizedError(FatSecretAuthError):
    """Protected call attempted without a user access token."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Not authenticated for profile access. Use start_auth and complete_auth first.",
            stage="profile",
        )


class NoPendingAuthorizationError(FatSecretAuthError):
    """complete_authorization called without a preceding start_authorization."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "No pending authorization. Call start_auth first.",
            stage="access_token",
        )


class UpstreamError(FatSecretAuthError):
    """The OAuth endpoint answered with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, stage=stage)


class UpstreamAuthError(UpstreamError):
    """The client-credentials grant was rejected."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(
            message,
            stage="client_credentials",
            status_code=status_code,
            response_body=response_body,
        )


class FatSecretAPIError(FatSecretError):
    """API request error with status code and response details."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_code: str | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.response_body = response_body
        super().__init__(message)


class FatSecretRateLimitError(FatSecretAPIError):
    """Rate limit exceeded - includes retry information."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 429,
        retry_after: int | None = None,
    ) -> None:
        self.retry_after = retry_after  # seconds until retry is allowed
        super().__init__(message, status_code=status_code)


class FatSecretValidationError(FatSecretError):
    """Request validation error before anything is sent upstream."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)
