"""Session registry for the networked transport.

Each network session owns its own ephemeral tenant. Tenants created here are
never backed by a credential store, so one remote caller can never inherit
or persist another caller's authorization.

Sessions end when the HTTP layer calls `close_session()`, on DELETE or when
the session's server stops. There is no expiry sweep: a client that never
sends DELETE leaks its session until the process shuts down.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from mcp.server.streamable_http import StreamableHTTPServerTransport

    from fatsecret_client.auth.tenant import Tenant
    from fatsecret_client.client import FatSecretClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Session:
    """An active network session.

    `transport` is attached by the HTTP layer once the session exists and
    carries every later request for this id.
    """

    session_id: str
    client: FatSecretClient
    transport: StreamableHTTPServerTransport | None = None
    created_at: float = field(default_factory=time.time)

    @property
    def tenant(self) -> Tenant:
        return self.client.tenant


@dataclass(frozen=True, slots=True)
class SessionNotFound:
    """Lookup result for an unknown or closed session id."""

    session_id: str
    message: str = "Session not found. Client must reinitialize."


class SessionRegistry:
    """Maps opaque session ids to isolated clients."""

    def __init__(self, factory: Callable[[], FatSecretClient]) -> None:
        self._factory = factory
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def create_session(self) -> Session:
        """Allocate a fresh tenant under a new unique id."""
        client = self._factory()
        if client.tenant.persistent:
            msg = "Session tenants must not be backed by a credential store"
            raise ValueError(msg)

        session_id = uuid.uuid4().hex
        while session_id in self._sessions:
            session_id = uuid.uuid4().hex

        session = Session(session_id=session_id, client=client)
        self._sessions[session_id] = session
        logger.info("Session created: %s (active: %d)", session_id, len(self._sessions))
        return session

    def route(self, session_id: str) -> Session | SessionNotFound:
        """Look up a session; unknown ids are reported, not raised."""
        session = self._sessions.get(session_id)
        if session is None:
            return SessionNotFound(session_id=session_id)
        return session

    def close_session(self, session_id: str) -> Session | None:
        """Forget a session. Returns the removed session, if any."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("Session closed: %s (active: %d)", session_id, len(self._sessions))
        return session
