"""Async command support for Typer."""

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

import typer

from fatsecret_client.cli.formatters import print_error, print_info
from fatsecret_client.exceptions import (
    FatSecretError,
    NoPendingAuthorizationError,
    NotConfiguredError,
    UnauthorizedError,
)

_HINTS: dict[type[FatSecretError], str] = {
    NotConfiguredError: "Run 'fatsecret-cli auth setup' or set FATSECRET_CLIENT_ID and "
    "FATSECRET_CLIENT_SECRET.",
    UnauthorizedError: "Run 'fatsecret-cli auth login' to authorize profile access.",
    NoPendingAuthorizationError: "Run 'fatsecret-cli auth login' to start again.",
}


T = TypeVar("T")


def _hint_for(error: FatSecretError) -> str | None:
    for error_type, hint in _HINTS.items():
        if isinstance(error, error_type):
            return hint
    return None


def async_command(f: Callable[..., Coroutine[Any, Any, T]]) -> Callable[..., T]:
    """Decorator to run async Typer commands.

    FatSecret errors are reported on stderr with a hint and exit code 1
    instead of a traceback.

    Usage:
        @app.command()
        @async_command
        async def my_command(ctx: typer.Context):
            async with get_client(ctx.obj) as client:
                ...
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return asyncio.run(f(*args, **kwargs))
        except FatSecretError as e:
            print_error(e.message)
            if hint := _hint_for(e):
                print_info(hint)
            raise typer.Exit(1) from None

    return wrapper
