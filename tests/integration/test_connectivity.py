"""Basic connectivity tests for the live FatSecret API."""

import pytest

pytestmark = pytest.mark.integration


class TestPublicEndpoints:
    """Calls made with the client-credentials token."""

    async def test_search_foods(self, public_client) -> None:
        result = await public_client.call_tool(
            "search_foods", {"search_expression": "apple", "max_results": 5}
        )

        assert "foods_search" in result or "foods" in result

    async def test_token_is_cached(self, public_client) -> None:
        await public_client.call_tool("get_recipe_types")
        first = public_client.tenant.bearer
        await public_client.call_tool("get_recipe_types")

        assert public_client.tenant.bearer is first

    async def test_request_token(self, public_client) -> None:
        """The request-token leg should succeed with valid consumer credentials."""
        request_token = await public_client.auth.start_authorization()

        assert "oauth_token=" in request_token.authorization_url


class TestProfileEndpoints:
    """Calls signed with a user access token."""

    async def test_get_profile(self, profile_client) -> None:
        result = await profile_client.call_tool("get_profile")

        assert "profile" in result
