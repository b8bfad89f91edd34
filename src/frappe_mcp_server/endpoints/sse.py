#!/usr/bin/env python3
"""
endpoints/sse.py - Stream-open endpoint

``GET /sse`` opens a Server-Sent-Events stream, mints a session for it and
announces the session's message endpoint as the first event. The stream then
relays the session's response envelopes until the client goes away or the
server shuts down, at which point the session is unregistered exactly once.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

from ..constants import DEFAULT_KEEPALIVE_INTERVAL, MESSAGE_PATH, SSE_KEEPALIVE_COMMENT
from ..errors import DuplicateSessionError, SessionLimitError
from ..protocol.events import endpoint_event, message_event
from ..protocol.handler import ProtocolEngine
from ..protocol.session_manager import Session, SessionTable, new_session_id
from .constants import ACK_TOO_MANY_SESSIONS, CONTENT_TYPE_SSE, HEADERS_SSE, HttpStatus
from .utils import text_response

logger = logging.getLogger(__name__)

EngineFactory = Callable[[Session], ProtocolEngine]


class SSEConnectionHandler:
    """Accepts streaming connections and owns the sessions it creates."""

    def __init__(
        self,
        table: SessionTable,
        engine_factory: EngineFactory,
        keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL,
        message_path: str = MESSAGE_PATH,
    ):
        self.table = table
        self.engine_factory = engine_factory
        self.keepalive_interval = keepalive_interval
        self.message_path = message_path

    async def endpoint(self, request: Request) -> Response:
        """Starlette route for ``GET /sse``."""
        return self.open_session(request)

    def create_session(self) -> Session:
        """Build a session with its protocol engine bound to it."""
        session = Session()
        session.engine = self.engine_factory(session)
        return session

    def open_session(self, request: Request) -> Response:
        """Return the streaming response for a new session.

        The session only enters the table once the stream body starts, so a
        client that aborts before the handshake leaves nothing behind. A full
        table answers 503 here; the table enforces the limit again on insert,
        and a stream that loses that race ends without an endpoint event.
        """
        if self.table.is_full():
            logger.warning(f"Refusing SSE connection: {len(self.table)} sessions open")
            return text_response(ACK_TOO_MANY_SESSIONS, HttpStatus.SERVICE_UNAVAILABLE)

        session = self.create_session()
        client = request.client.host if request.client else "unknown"
        logger.info(f"New SSE connection from {client}")
        return StreamingResponse(self._stream(request, session), media_type=CONTENT_TYPE_SSE, headers=HEADERS_SSE)

    def close_session(self, session_id: str) -> None:
        """Unregister and close a session; later calls are no-ops."""
        session = self.table.remove(session_id)
        if session is not None:
            session.close()

    def _register(self, session: Session) -> None:
        while True:
            try:
                self.table.insert(session)
                return
            except DuplicateSessionError:
                logger.warning(f"Session id collision on {session.id[:8]}..., minting a new one")
                session.id = new_session_id()
                if session.engine is not None:
                    session.engine.session_id = session.id

    async def _stream(self, request: Request, session: Session) -> AsyncIterator[str]:
        registered = False
        try:
            try:
                self._register(session)
            except SessionLimitError as e:
                # A concurrent open took the last slot
                logger.warning(f"Ending SSE stream without a session: {e}")
                return
            registered = True
            if session.engine is not None:
                session.engine.start()

            yield endpoint_event(session.id, self.message_path)
            logger.info(f"SSE connection established with session {session.id[:8]}...")

            while True:
                try:
                    envelope = await asyncio.wait_for(session.next_outbound(), timeout=self.keepalive_interval)
                except asyncio.TimeoutError:
                    if await request.is_disconnected():
                        logger.info(f"Client disconnected from session {session.id[:8]}...")
                        break
                    yield SSE_KEEPALIVE_COMMENT
                    continue

                if envelope is None:
                    break
                yield message_event(envelope)
        finally:
            if registered:
                self.close_session(session.id)
            else:
                session.close()
            logger.info(f"SSE connection closed for session {session.id[:8]}...")


__all__ = ["EngineFactory", "SSEConnectionHandler"]
