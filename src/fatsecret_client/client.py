"""Main FatSecret client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from fatsecret_client.api import (
    ENDPOINTS,
    ENDPOINTS_BY_NAME,
    AuthMode,
    Param,
    RemoteAPI,
    input_schema_for,
)
from fatsecret_client.auth import CredentialStore, FatSecretAuth, OAuth2TokenCache, Tenant
from fatsecret_client.config import FatSecretConfig
from fatsecret_client.exceptions import FatSecretValidationError

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

AUTH_TOOLS = {
    "check_auth_status": "Check whether consumer credentials and profile authentication are configured.",
    "start_auth": (
        "Start the OAuth 1.0 authorization flow for profile access. "
        "Returns an authorization URL the user must visit."
    ),
    "complete_auth": "Complete the OAuth 1.0 flow with the verifier code from the authorization page.",
}
AUTH_TOOL_PARAMS: dict[str, tuple[Param, ...]] = {
    "complete_auth": (
        Param("verifier", "string", "OAuth verifier code from the authorization page"),
    ),
}
# The pending request token lives in memory, so both legs must run in one process
HANDSHAKE_TOOLS = frozenset({"start_auth", "complete_auth"})
SETUP_TOOL = "setup_credentials"
SETUP_TOOL_DESCRIPTION = "Store the FatSecret consumer key and secret for this machine."
SETUP_TOOL_PARAMS = (
    Param("client_id", "string", "FatSecret Client ID (consumer key)"),
    Param("client_secret", "string", "FatSecret Client Secret (consumer secret)"),
)


class FatSecretClient:
    """FatSecret API client bound to one tenant.

    Usage (single-process, persisted credentials):
        async with FatSecretClient.from_store(config) as client:
            request = await client.auth.start_authorization()
            ...
            foods = await client.call_tool("search_foods", {"search_expression": "apple"})

    Usage (ephemeral tenant, nothing is written to disk):
        client = FatSecretClient.ephemeral(config)
    """

    def __init__(
        self,
        config: FatSecretConfig,
        tenant: Tenant,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: FatSecret configuration
            tenant: Credential state this client acts for
            http_client: Optional httpx.AsyncClient for connection pooling.
                        If provided, the client will use this pool and NOT close it.
        """
        self.config = config
        self.tenant = tenant

        # HTTP client management
        self._http_client = http_client
        self._owns_http_client = http_client is None  # We manage lifecycle if not provided

        self.auth = FatSecretAuth(config, tenant, http_client)
        self.token_cache = OAuth2TokenCache(config, tenant, http_client)
        self.api = RemoteAPI(config, self.auth, self.token_cache, http_client)

    @classmethod
    def from_store(
        cls,
        config: FatSecretConfig | None = None,
        store: CredentialStore | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> FatSecretClient:
        """Single-process mode: load persisted credentials, env values win."""
        config = config or FatSecretConfig.from_env()
        tenant = Tenant.from_store(store or CredentialStore(), config)
        return cls(config, tenant, http_client=http_client)

    @classmethod
    def ephemeral(
        cls,
        config: FatSecretConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> FatSecretClient:
        """Session mode: fresh tenant, never persisted."""
        return cls(config, Tenant.ephemeral(config), http_client=http_client)

    def _set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        self._http_client = http_client
        self.auth.set_http_client(http_client)
        self.token_cache.set_http_client(http_client)
        self.api.set_http_client(http_client)

    async def open(self) -> None:
        """Open connection pool for HTTP requests."""
        if self._http_client is None and self._owns_http_client:
            self._set_http_client(httpx.AsyncClient(timeout=self.config.timeout))

    async def close(self) -> None:
        """Close connection pool.

        Only closes the pool if this client owns it (not external).
        """
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._set_http_client(None)

    async def __aenter__(self) -> FatSecretClient:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated

    def tool_names(self) -> list[str]:
        """Names of every tool this client can run."""
        return [tool["name"] for tool in self.list_tools()]

    def list_tools(self) -> list[dict[str, Any]]:
        """Tool descriptors in MCP `tools/list` shape."""
        tools = [
            _tool(
                name,
                description,
                input_schema_for(AUTH_TOOL_PARAMS.get(name, ())),
                read_only=name == "check_auth_status",
            )
            for name, description in AUTH_TOOLS.items()
        ]
        if self.tenant.persistent:
            tools.append(
                _tool(
                    SETUP_TOOL,
                    SETUP_TOOL_DESCRIPTION,
                    input_schema_for(SETUP_TOOL_PARAMS),
                    read_only=False,
                )
            )
        tools.extend(
            _tool(
                endpoint.name,
                endpoint.description,
                endpoint.input_schema,
                read_only=endpoint.read_only,
            )
            for endpoint in ENDPOINTS
        )
        return tools

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Run a tool by name.

        Raises:
            FatSecretValidationError: Unknown tool or bad arguments
            FatSecretError: Any auth or upstream failure
        """
        arguments = dict(arguments or {})

        if name == "check_auth_status":
            return self.auth.status().model_dump(exclude_none=True, mode="json")

        if name == "start_auth":
            request_token = await self.auth.start_authorization(timeout=timeout)
            return {
                "message": (
                    "Visit the URL below to authorize the app, then use complete_auth "
                    "with the verifier code."
                ),
                "authorization_url": request_token.authorization_url,
            }

        if name == "complete_auth":
            await self.auth.complete_authorization(
                str(arguments.get("verifier") or ""), timeout=timeout
            )
            result: dict[str, Any] = {
                "message": "Authentication successful! Profile tools are now available."
            }
            if self.tenant.store is not None:
                result["config_path"] = str(self.tenant.store.path)
            return result

        store = self.tenant.store
        if name == SETUP_TOOL and store is not None:
            self.auth.configure(
                str(arguments.get("client_id") or arguments.get("consumer_key") or ""),
                str(arguments.get("client_secret") or arguments.get("consumer_secret") or ""),
            )
            return {"message": "Credentials saved.", "config_path": str(store.path)}

        endpoint = ENDPOINTS_BY_NAME.get(name)
        if endpoint is None:
            raise FatSecretValidationError(f"Unknown tool: {name}", field="name")

        return await self.api.invoke(
            endpoint.method,
            endpoint.path,
            endpoint.build_params(arguments),
            endpoint.auth,
            timeout=timeout,
        )

    async def invoke(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        profile: bool = False,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Call an arbitrary API path."""
        auth = AuthMode.PROFILE if profile else AuthMode.PUBLIC
        return await self.api.invoke(method, path, params, auth, timeout=timeout)


def _tool(
    name: str, description: str, schema: dict[str, Any], *, read_only: bool
) -> dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "inputSchema": schema,
        "annotations": {"readOnlyHint": read_only},
    }
