"""MCP server surfaces for the FatSecret tools.

Two ways to serve:

* Streamable HTTP, one isolated ephemeral tenant per session:
      fatsecret-cli serve --port 3000
* stdio, a single long-lived process over the persisted tenant:
      fatsecret-cli serve --stdio

The MCP protocol itself is handled by the `mcp` SDK. This module only maps
HTTP requests onto per-session SDK transports and exposes the client's
tools through a low-level `Server`.
"""

from __future__ import annotations

import contextlib
import json
import logging
from typing import TYPE_CHECKING, Any

import anyio
import httpx
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from fatsecret_client import __version__
from fatsecret_client.client import FatSecretClient
from fatsecret_client.config import FatSecretConfig
from fatsecret_client.exceptions import FatSecretError
from fatsecret_client.sessions import SessionNotFound, SessionRegistry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from anyio.abc import TaskGroup, TaskStatus
    from starlette.exceptions import HTTPException
    from starlette.types import Message, Receive, Scope, Send

    from fatsecret_client.sessions import Session

logger = logging.getLogger(__name__)

SESSION_HEADER = MCP_SESSION_ID_HEADER
SERVER_ERROR = -32000
NO_SESSION_MESSAGE = "Bad Request: No valid session ID provided"


def build_server(client: FatSecretClient) -> Server:
    """Low-level MCP server exposing one client's tools."""
    server: Server = Server("fatsecret-client", version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [types.Tool.model_validate(tool) for tool in client.list_tools()]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        # Raised errors come back to the caller as isError results
        try:
            data = await client.call_tool(name, arguments)
        except FatSecretError as e:
            logger.info("Tool %s failed: %s", name, e.message)
            raise
        return [types.TextContent(type="text", text=json.dumps(data, indent=2))]

    return server


def _error(code: int, message: str, status_code: int) -> Response:
    return JSONResponse(
        {"jsonrpc": "2.0", "id": None, "error": {"code": code, "message": message}},
        status_code=status_code,
    )


def _initialize_error(body: bytes) -> Response | None:
    """Check that a session-less request is a well-formed initialize.

    Returns the error response to send, or None when a session may be
    created for it.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        return _error(types.PARSE_ERROR, "Parse error", 400)

    if not isinstance(payload, dict) or payload.get("method") != "initialize":
        return _error(SERVER_ERROR, NO_SESSION_MESSAGE, 400)
    try:
        types.JSONRPCRequest.model_validate(payload)
        types.InitializeRequest.model_validate(payload)
    except ValidationError:
        return _error(types.INVALID_PARAMS, "Invalid initialize request", 400)
    return None


def _replay(body: bytes, receive: Receive) -> Receive:
    """Receive callable that yields an already-read body before the real stream."""
    delivered = False

    async def replay() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class MCPSessionTransport:
    """ASGI endpoint that hands each request to its session's SDK transport.

    A well-formed `initialize` without a session header creates a session
    with its own server and transport; the SDK returns the id in the
    `mcp-session-id` response header and every later request must carry
    it. Unknown ids get a 404 telling the client to reinitialize. DELETE
    terminates the session.

    Session servers run in a task group that only exists inside `run()`.
    """

    def __init__(
        self,
        config: FatSecretConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        registry: SessionRegistry | None = None,
        json_response: bool = True,
    ) -> None:
        self.config = config
        self.json_response = json_response
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._task_group: TaskGroup | None = None
        self.registry = registry or SessionRegistry(
            lambda: FatSecretClient.ephemeral(config, http_client=self._http_client)
        )

    @contextlib.asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Keep session servers alive; on exit every session is dropped."""
        if self._owns_http_client:
            self._http_client = httpx.AsyncClient(timeout=self.config.timeout)
        try:
            async with anyio.create_task_group() as tg:
                self._task_group = tg
                try:
                    yield
                finally:
                    tg.cancel_scope.cancel()
                    self._task_group = None
        finally:
            for session in self.registry:
                self.registry.close_session(session.session_id)
            if self._owns_http_client and self._http_client is not None:
                await self._http_client.aclose()
                self._http_client = None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(SESSION_HEADER)

        if request.method == "POST" and not session_id:
            body = await request.body()
            error = _initialize_error(body)
            if error is not None:
                await error(scope, receive, send)
                return
            transport = await self._start_session()
            await transport.handle_request(scope, _replay(body, receive), send)
            return

        if not session_id:
            await _error(SERVER_ERROR, NO_SESSION_MESSAGE, 400)(scope, receive, send)
            return

        routed = self.registry.route(session_id)
        if isinstance(routed, SessionNotFound) or routed.transport is None:
            message = SessionNotFound(session_id).message
            await _error(SERVER_ERROR, message, 404)(scope, receive, send)
            return

        await routed.transport.handle_request(scope, receive, send)
        if routed.transport.is_terminated:
            await self._end_session(routed)

    async def _start_session(self) -> StreamableHTTPServerTransport:
        if self._task_group is None:
            msg = "Session transport is not running; use `async with transport.run()`"
            raise RuntimeError(msg)

        session = self.registry.create_session()
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session.session_id,
            is_json_response_enabled=self.json_response,
        )
        session.transport = transport
        server = build_server(session.client)

        async def run_server(*, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                try:
                    await server.run(
                        read_stream,
                        write_stream,
                        server.create_initialization_options(),
                        stateless=False,
                    )
                except Exception:
                    logger.exception("Session %s server crashed", session.session_id)
                finally:
                    self.registry.close_session(session.session_id)

        await self._task_group.start(run_server)
        return transport

    async def _end_session(self, session: Session) -> None:
        self.registry.close_session(session.session_id)
        await session.client.close()


def create_app(
    config: FatSecretConfig | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    registry: SessionRegistry | None = None,
) -> Starlette:
    """Create the HTTP application."""
    transport = MCPSessionTransport(
        config or FatSecretConfig.from_env(), http_client=http_client, registry=registry
    )

    async def health_handler(request: Request) -> Response:
        return JSONResponse({"status": "ok", "sessions": len(transport.registry)})

    async def not_found(request: Request, exc: HTTPException) -> Response:
        return JSONResponse({"error": "Not found"}, status_code=404)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with transport.run():
            yield

    app = Starlette(
        routes=[
            Route("/mcp", endpoint=transport, methods=["GET", "POST", "DELETE"]),
            Route("/health", endpoint=health_handler, methods=["GET"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
                allow_headers=["Content-Type", SESSION_HEADER, "mcp-protocol-version"],
                expose_headers=[SESSION_HEADER],
            )
        ],
        exception_handlers={404: not_found},
        lifespan=lifespan,
    )
    app.state.transport = transport
    return app


def run(host: str = "0.0.0.0", port: int = 3000, config: FatSecretConfig | None = None) -> None:
    """Run the HTTP server."""
    import uvicorn

    logger.info("FatSecret MCP HTTP server listening on http://%s:%d/mcp", host, port)
    uvicorn.run(create_app(config), host=host, port=port)


async def serve_stdio(client: FatSecretClient) -> None:
    """Serve one client over stdin/stdout until the peer disconnects.

    The process keeps the tenant in memory between calls, so a pending
    authorization from `start_auth` is still there for `complete_auth`.
    """
    server = build_server(client)
    async with client, stdio_server() as (read_stream, write_stream):
        logger.info("FatSecret MCP server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())
