#!/usr/bin/env python3
# src/frappe_mcp_server/protocol/session_manager.py
"""
Session lifecycle: the Session object and the process-wide SessionTable.

A Session owns the outbound queue feeding one SSE stream. The SessionTable
maps session ids to live sessions; insert, lookup and remove are serialised
by a single lock so a lookup never observes a half-inserted or half-removed
entry. The table is injected into both the SSE connection handler and the
message router rather than living in module state.
"""

import asyncio
import logging
import threading
import time
import uuid
from typing import TYPE_CHECKING, Any

from ..errors import DuplicateSessionError, SessionLimitError

if TYPE_CHECKING:
    from .handler import ProtocolEngine

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    """Mint an opaque session id."""
    return str(uuid.uuid4())


class Session:
    """A live client stream identified by an opaque id."""

    def __init__(self, session_id: str | None = None):
        self.id = session_id or new_session_id()
        self.created_at = time.time()
        self.engine: ProtocolEngine | None = None
        # None is the end-of-stream sentinel
        self._outbound: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def age(self) -> float:
        """Seconds since the session was created."""
        return time.time() - self.created_at

    def send(self, envelope: dict[str, Any]) -> bool:
        """Queue a response envelope for the stream.

        Returns False (and drops the envelope) once the session is closed.
        """
        if self._closed:
            logger.debug(f"Dropped message for closed session {self.id[:8]}...")
            return False
        self._outbound.put_nowait(envelope)
        return True

    async def next_outbound(self) -> dict[str, Any] | None:
        """Wait for the next envelope; None means the stream should end."""
        return await self._outbound.get()

    def close(self) -> None:
        """Mark the session closed and wake the stream. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self.engine is not None:
            self.engine.close()
        self._outbound.put_nowait(None)
        logger.debug(f"Closed session {self.id[:8]}... after {self.age():.1f}s")


class SessionTable:
    """Thread-safe mapping of session id to live Session."""

    def __init__(self, max_sessions: int | None = None):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self.max_sessions = max_sessions

    def insert(self, session: Session) -> None:
        """Add a session.

        Raises:
            DuplicateSessionError: if the id is taken.
            SessionLimitError: if the table is at capacity.
        """
        with self._lock:
            if session.id in self._sessions:
                raise DuplicateSessionError(session.id)
            if self.max_sessions is not None and len(self._sessions) >= self.max_sessions:
                raise SessionLimitError(self.max_sessions)
            self._sessions[session.id] = session
            count = len(self._sessions)
        logger.debug(f"Registered session {session.id[:8]}... ({count} active)")

    def get(self, session_id: str) -> Session | None:
        """Look up a live session by id."""
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Session | None:
        """Remove a session, returning it only to the first caller."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            count = len(self._sessions)
        if session is not None:
            logger.debug(f"Unregistered session {session_id[:8]}... ({count} active)")
        return session

    def is_full(self) -> bool:
        """True when a capacity is set and reached."""
        if self.max_sessions is None:
            return False
        with self._lock:
            return len(self._sessions) >= self.max_sessions

    def ids(self) -> list[str]:
        """Snapshot of the live session ids."""
        with self._lock:
            return list(self._sessions)

    def close_all(self) -> int:
        """Remove and close every session (server shutdown). Returns the count closed."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
        if sessions:
            logger.info(f"Closed {len(sessions)} open session(s)")
        return len(sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
