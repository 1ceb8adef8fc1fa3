"""Tests for the remote API caller and the endpoint catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from fatsecret_client.api import ENDPOINTS, ENDPOINTS_BY_NAME, AuthMode, RemoteAPI
from fatsecret_client.api.endpoints import date_to_days
from fatsecret_client.client import FatSecretClient
from fatsecret_client.exceptions import (
    FatSecretAPIError,
    FatSecretRateLimitError,
    FatSecretValidationError,
    UnauthorizedError,
)
from tests.conftest import signature_is_valid

if TYPE_CHECKING:
    from fatsecret_client.auth import Tenant
    from fatsecret_client.config import FatSecretConfig
    from tests.conftest import FakeFatSecret


def make_client(
    config: FatSecretConfig, tenant: Tenant, http_client: httpx.AsyncClient
) -> FatSecretClient:
    return FatSecretClient(config, tenant, http_client=http_client)


class TestPublicCalls:
    """Tests for bearer-token calls."""

    async def test_bearer_header(
        self,
        config: FatSecretConfig,
        tenant: Tenant,
        fake: FakeFatSecret,
        http_client: httpx.AsyncClient,
    ) -> None:
        """Public calls should carry the cached OAuth2 token."""
        client = make_client(config, tenant, http_client)

        result = await client.invoke("GET", "/foods/search/v5", {"search_expression": "apple"})

        assert result == {"ok": True, "path": "/rest/foods/search/v5"}
        (request,) = fake.calls_to("/foods/search/v5")
        assert request.headers["Authorization"] == "Bearer bearer-1"
        assert request.url.params["search_expression"] == "apple"
        assert request.url.params["format"] == "json"
        assert "oauth_signature" not in request.url.params

    async def test_token_reused_across_calls(
        self,
        config: FatSecretConfig,
        tenant: Tenant,
        fake: FakeFatSecret,
        http_client: httpx.AsyncClient,
    ) -> None:
        client = make_client(config, tenant, http_client)

        await client.invoke("GET", "/food/v5", {"food_id": 1})
        await client.invoke("GET", "/food/v5", {"food_id": 2})

        assert len(fake.calls_to("/connect/token")) == 1

    async def test_unsupported_method(
        self,
        config: FatSecretConfig,
        tenant: Tenant,
        fake: FakeFatSecret,
        http_client: httpx.AsyncClient,
    ) -> None:
        client = make_client(config, tenant, http_client)

        with pytest.raises(FatSecretValidationError):
            await client.invoke("PATCH", "/food/v5")
        assert fake.requests == []


class TestProfileCalls:
    """Tests for OAuth 1.0a signed calls."""

    async def test_unauthorized_makes_no_request(
        self,
        config: FatSecretConfig,
        tenant: Tenant,
        fake: FakeFatSecret,
        http_client: httpx.AsyncClient,
    ) -> None:
        """Without a user token nothing should reach the network."""
        client = make_client(config, tenant, http_client)

        with pytest.raises(UnauthorizedError):
            await client.call_tool("get_food_entries", {"date": "2024-01-31"})
        assert fake.requests == []

    async def test_signed_in_query(
        self,
        config: FatSecretConfig,
        authorized_tenant: Tenant,
        fake: FakeFatSecret,
        http_client: httpx.AsyncClient,
    ) -> None:
        """Profile calls should be query-signed with the user's token."""
        client = make_client(config, authorized_tenant, http_client)

        await client.invoke("GET", "/food-entries/v2", {"date": 19753}, profile=True)

        (request,) = fake.calls_to("/food-entries/v2")
        assert "Authorization" not in request.headers
        assert request.url.params["oauth_token"] == "user_token"
        assert request.url.params["format"] == "json"
        assert request.url.params["date"] == "19753"
        assert signature_is_valid(request, "test_secret", "user_secret")
        assert fake.calls_to("/connect/token") == []

    async def test_post_is_signed_with_method(
        self,
        config: FatSecretConfig,
        authorized_tenant: Tenant,
        fake: FakeFatSecret,
        http_client: httpx.AsyncClient,
    ) -> None:
        client = make_client(config, authorized_tenant, http_client)

        await client.call_tool(
            "create_food_entry",
            {"food_id": 33691, "serving_id": 34321, "meal": "lunch", "date": "2024-01-31"},
        )

        (request,) = fake.calls_to("/food-entries/v1")
        assert request.method == "POST"
        assert request.url.params["date"] == str(date_to_days("2024-01-31"))
        assert signature_is_valid(request, "test_secret", "user_secret")


class TestResponseHandling:
    """Tests for upstream error mapping."""

    async def test_http_error(
        self, config: FatSecretConfig, authorized_tenant: Tenant, fake: FakeFatSecret
    ) -> None:
        """HTTP errors should raise FatSecretAPIError with the parsed body."""
        fake.api_handler = lambda request: httpx.Response(
            400, json={"error": {"code": 106, "message": "Invalid ID"}}
        )
        async with fake.client() as http_client:
            client = make_client(config, authorized_tenant, http_client)
            with pytest.raises(FatSecretAPIError) as exc_info:
                await client.invoke("GET", "/food/v5", {"food_id": "x"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "106"
        assert exc_info.value.message == "Invalid ID"

    async def test_error_in_success_body(
        self, config: FatSecretConfig, authorized_tenant: Tenant, fake: FakeFatSecret
    ) -> None:
        """FatSecret sometimes reports errors with status 200."""
        fake.api_handler = lambda request: httpx.Response(
            200, json={"error": {"code": 8, "message": "Invalid signature"}}
        )
        async with fake.client() as http_client:
            client = make_client(config, authorized_tenant, http_client)
            with pytest.raises(FatSecretAPIError) as exc_info:
                await client.invoke("GET", "/profile/v1", profile=True)

        assert exc_info.value.status_code == 200
        assert exc_info.value.error_code == "8"

    async def test_non_json_error_body(
        self, config: FatSecretConfig, authorized_tenant: Tenant, fake: FakeFatSecret
    ) -> None:
        fake.api_handler = lambda request: httpx.Response(502, text="Bad Gateway")
        async with fake.client() as http_client:
            client = make_client(config, authorized_tenant, http_client)
            with pytest.raises(FatSecretAPIError) as exc_info:
                await client.invoke("GET", "/food/v5")

        assert exc_info.value.status_code == 502
        assert exc_info.value.response_body is None

    async def test_empty_body(
        self, config: FatSecretConfig, authorized_tenant: Tenant, fake: FakeFatSecret
    ) -> None:
        fake.api_handler = lambda request: httpx.Response(204)
        async with fake.client() as http_client:
            client = make_client(config, authorized_tenant, http_client)
            assert await client.invoke("DELETE", "/saved-meals/v1", profile=True) == {}


class TestRateLimitRetry:
    """Tests for automatic retry on 429."""

    async def test_retries_then_succeeds(
        self, config: FatSecretConfig, authorized_tenant: Tenant, fake: FakeFatSecret
    ) -> None:
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                return httpx.Response(429, headers={"Retry-After": "1"})
            return httpx.Response(200, json={"profile": {}})

        fake.api_handler = handler
        async with fake.client() as http_client:
            client = make_client(config, authorized_tenant, http_client)
            with patch.object(RemoteAPI.invoke.retry, "sleep", new_callable=AsyncMock) as sleep:
                result = await client.invoke("GET", "/profile/v1", profile=True)

        assert attempts == 3
        assert result == {"profile": {}}
        assert sleep.await_count == 2

    async def test_gives_up_after_max_attempts(
        self, config: FatSecretConfig, authorized_tenant: Tenant, fake: FakeFatSecret
    ) -> None:
        fake.api_handler = lambda request: httpx.Response(429)
        async with fake.client() as http_client:
            client = make_client(config, authorized_tenant, http_client)
            with (
                patch.object(RemoteAPI.invoke.retry, "sleep", new_callable=AsyncMock),
                pytest.raises(FatSecretRateLimitError),
            ):
                await client.invoke("GET", "/profile/v1", profile=True)

        assert len(fake.calls_to("/profile/v1")) == 5

    async def test_each_attempt_freshly_signed(
        self, config: FatSecretConfig, authorized_tenant: Tenant, fake: FakeFatSecret
    ) -> None:
        """A retried profile call should use a new nonce."""
        responses = iter([httpx.Response(429), httpx.Response(200, json={})])
        fake.api_handler = lambda request: next(responses)
        async with fake.client() as http_client:
            client = make_client(config, authorized_tenant, http_client)
            with patch.object(RemoteAPI.invoke.retry, "sleep", new_callable=AsyncMock):
                await client.invoke("GET", "/profile/v1", profile=True)

        first, second = fake.calls_to("/profile/v1")
        assert first.url.params["oauth_nonce"] != second.url.params["oauth_nonce"]


class TestEndpointCatalog:
    """Tests for the tool catalog."""

    def test_names_unique(self) -> None:
        assert len(ENDPOINTS_BY_NAME) == len(ENDPOINTS)

    def test_auth_split(self) -> None:
        assert ENDPOINTS_BY_NAME["search_foods"].auth is AuthMode.PUBLIC
        assert ENDPOINTS_BY_NAME["get_recipe"].auth is AuthMode.PUBLIC
        assert ENDPOINTS_BY_NAME["get_food_entries"].auth is AuthMode.PROFILE
        assert ENDPOINTS_BY_NAME["update_weight"].auth is AuthMode.PROFILE

    def test_write_tools_not_read_only(self) -> None:
        assert not ENDPOINTS_BY_NAME["delete_food_entry"].read_only
        assert ENDPOINTS_BY_NAME["get_food_entries"].read_only

    @pytest.mark.parametrize(
        ("iso", "days"),
        [("1970-01-01", 0), ("1970-01-02", 1), ("2024-01-31", 19753)],
    )
    def test_date_to_days(self, iso: str, days: int) -> None:
        assert date_to_days(iso) == days

    @pytest.mark.parametrize("value", ["31/01/2024", "2024-13-01", "yesterday"])
    def test_invalid_dates(self, value: str) -> None:
        with pytest.raises(FatSecretValidationError):
            date_to_days(value)

    def test_build_params(self) -> None:
        """Dates are converted, None dropped, range filters renamed."""
        endpoint = ENDPOINTS_BY_NAME["search_recipes"]

        params = endpoint.build_params(
            {"search_expression": "soup", "calories_from": 100, "prep_time_to": 30, "page": None}
        )

        assert params == {"search_expression": "soup", "calories.from": 100, "prep_time.to": 30}

    def test_build_params_passes_unknown_keys(self) -> None:
        endpoint = ENDPOINTS_BY_NAME["get_food_entries_month"]

        assert endpoint.build_params({"date": "1970-01-11", "extra": "x"}) == {
            "date": 10,
            "extra": "x",
        }

    def test_input_schema_lists_arguments(self) -> None:
        """Tools advertise their main arguments; dates stay optional."""
        schema = ENDPOINTS_BY_NAME["create_food_entry"].input_schema

        assert schema["properties"]["meal"]["enum"] == ["breakfast", "lunch", "dinner", "other"]
        assert schema["properties"]["food_id"]["type"] == "integer"
        assert {"food_id", "serving_id", "meal"} <= set(schema["required"])
        assert "date" not in schema["required"]
        assert schema["additionalProperties"] is True

    def test_schema_without_arguments(self) -> None:
        assert ENDPOINTS_BY_NAME["get_profile"].input_schema == {
            "type": "object",
            "properties": {},
            "additionalProperties": True,
        }

    def test_recipe_filters_use_argument_names(self) -> None:
        """Schemas use underscore names; dotted names only go upstream."""
        properties = ENDPOINTS_BY_NAME["search_recipes"].input_schema["properties"]

        assert "calories_from" in properties
        assert "calories.from" not in properties
