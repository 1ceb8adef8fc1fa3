"""Tests for the command-line interface."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import typer
from typer.testing import CliRunner

from fatsecret_client.cli import app
from fatsecret_client.cli.async_runner import _hint_for, async_command
from fatsecret_client.cli.commands.tools import _parse_arguments
from fatsecret_client.exceptions import (
    FatSecretAPIError,
    NoPendingAuthorizationError,
    NotConfiguredError,
    UnauthorizedError,
)

runner = CliRunner()


@pytest.fixture
def credentials(tmp_path: Path) -> Path:
    return tmp_path / "config.json"


def invoke(credentials: Path, *args: str):
    return runner.invoke(app, ["--credentials", str(credentials), *args])


class TestHints:
    """Tests for error hints."""

    def test_not_configured_hint(self) -> None:
        assert "auth setup" in (_hint_for(NotConfiguredError()) or "")

    def test_unauthorized_hint(self) -> None:
        assert "auth login" in (_hint_for(UnauthorizedError()) or "")

    def test_no_pending_hint(self) -> None:
        assert "auth login" in (_hint_for(NoPendingAuthorizationError()) or "")

    def test_no_hint_for_api_errors(self) -> None:
        assert _hint_for(FatSecretAPIError("boom", status_code=500)) is None

    def test_async_command_exits_on_error(self) -> None:
        """FatSecret errors should become exit code 1."""

        @async_command
        async def failing() -> None:
            raise UnauthorizedError()

        with pytest.raises(typer.Exit) as exc_info:
            failing()
        assert exc_info.value.exit_code == 1

    def test_async_command_returns_value(self) -> None:
        @async_command
        async def succeeding() -> int:
            return 42

        assert succeeding() == 42


class TestParseArguments:
    """Tests for key=value tool arguments."""

    def test_strings_and_json(self) -> None:
        assert _parse_arguments(["search_expression=apple pie", "page=2", "flag=true"]) == {
            "search_expression": "apple pie",
            "page": 2,
            "flag": True,
        }

    def test_value_may_contain_equals(self) -> None:
        assert _parse_arguments(["q=a=b"]) == {"q": "a=b"}

    def test_missing_separator(self) -> None:
        with pytest.raises(typer.BadParameter):
            _parse_arguments(["oops"])


class TestAuthCommands:
    """Tests for the auth command group."""

    def test_status_unconfigured(self, credentials: Path) -> None:
        result = invoke(credentials, "auth", "status")

        assert result.exit_code == 0
        assert "unconfigured" in result.output

    def test_setup_writes_credentials(self, credentials: Path) -> None:
        result = invoke(
            credentials, "auth", "setup", "--consumer-key", "k", "--consumer-secret", "s"
        )

        assert result.exit_code == 0
        assert json.loads(credentials.read_text()) == {
            "consumer_key": "k",
            "consumer_secret": "s",
        }

    def test_status_after_setup(self, credentials: Path) -> None:
        credentials.write_text(json.dumps({"consumer_key": "k", "consumer_secret": "s"}))

        result = invoke(credentials, "auth", "status")

        assert result.exit_code == 0
        assert "configured" in result.output
        assert "unconfigured" not in result.output

    def test_logout_clears_token(self, credentials: Path) -> None:
        credentials.write_text(
            json.dumps(
                {
                    "consumer_key": "k",
                    "consumer_secret": "s",
                    "access_token": "t",
                    "access_token_secret": "ts",
                }
            )
        )

        result = invoke(credentials, "auth", "logout")

        assert result.exit_code == 0
        assert json.loads(credentials.read_text()) == {"consumer_key": "k", "consumer_secret": "s"}

    def test_login_requires_credentials(self, credentials: Path) -> None:
        result = invoke(credentials, "auth", "login", "--no-browser")

        assert result.exit_code == 1
        assert not credentials.exists()


class TestToolCommands:
    """Tests for the tools command group."""

    def test_list(self, credentials: Path) -> None:
        result = invoke(credentials, "tools", "list")

        assert result.exit_code == 0
        assert "Tools" in result.output

    def test_call_unknown_tool(self, credentials: Path) -> None:
        result = invoke(credentials, "tools", "call", "no_such_tool")

        assert result.exit_code == 1

    def test_call_profile_tool_unauthorized(self, credentials: Path) -> None:
        """Profile tools fail locally before any request without a token."""
        credentials.write_text(json.dumps({"consumer_key": "k", "consumer_secret": "s"}))

        result = invoke(credentials, "tools", "call", "get_profile")

        assert result.exit_code == 1

    def test_call_check_auth_status(self, credentials: Path) -> None:
        result = invoke(credentials, "tools", "call", "check_auth_status")

        assert result.exit_code == 0
        assert "credentials_configured" in result.output

    def test_list_hides_handshake_tools(self, credentials: Path) -> None:
        """The two OAuth legs need one process, so the one-shot list omits them."""
        result = invoke(credentials, "tools", "list")

        assert result.exit_code == 0
        assert "start_auth" not in result.output
        assert "complete_auth" not in result.output

    @pytest.mark.parametrize("name", ["start_auth", "complete_auth"])
    def test_call_handshake_tool_refused(self, credentials: Path, name: str) -> None:
        credentials.write_text(json.dumps({"consumer_key": "k", "consumer_secret": "s"}))

        result = invoke(credentials, "tools", "call", name, "--arg", "verifier=1234")

        assert result.exit_code == 1
        assert "auth login" in result.output


class TestServeCommand:
    """Tests for the serve command."""

    def test_stdio_uses_stored_tenant(self, credentials: Path) -> None:
        credentials.write_text(json.dumps({"consumer_key": "k", "consumer_secret": "s"}))

        with patch("fatsecret_client.server.serve_stdio", new_callable=AsyncMock) as serve_stdio:
            result = invoke(credentials, "serve", "--stdio")

        assert result.exit_code == 0
        (client,), _ = serve_stdio.await_args
        assert client.tenant.persistent
        assert client.tenant.store.path == credentials
        assert client.tenant.consumer.consumer_key == "k"

    def test_http_by_default(self, credentials: Path) -> None:
        with patch("fatsecret_client.server.run") as run:
            result = invoke(credentials, "serve", "--port", "4100")

        assert result.exit_code == 0
        run.assert_called_once_with(host="0.0.0.0", port=4100)
