#!/usr/bin/env python3
"""
endpoints/message.py - Message endpoint

``POST /message?sessionId=<id>`` carries one JSON-RPC request for an open
session. The router only acknowledges the request; the response itself is
delivered later on the session's SSE stream.
"""

import logging

from starlette.requests import Request
from starlette.responses import Response

from ..constants import MAX_REQUEST_BODY_BYTES, QUERY_SESSION_ID
from ..protocol.session_manager import SessionTable
from .constants import (
    ACK_ACCEPTED,
    ACK_MISSING_SESSION_ID,
    ACK_PARSE_FAILED,
    ACK_SESSION_NOT_FOUND,
    ACK_TOO_LARGE,
    HttpStatus,
)
from .utils import text_response

logger = logging.getLogger(__name__)


class MessageRouter:
    """Maps an inbound request's session id to that session's protocol engine."""

    def __init__(self, table: SessionTable, max_body_bytes: int = MAX_REQUEST_BODY_BYTES):
        self.table = table
        self.max_body_bytes = max_body_bytes

    async def endpoint(self, request: Request) -> Response:
        """Starlette route for ``POST /message``."""
        session_id = request.query_params.get(QUERY_SESSION_ID)
        if not session_id:
            logger.warning("Missing sessionId in POST request")
            return text_response(ACK_MISSING_SESSION_ID, HttpStatus.BAD_REQUEST)

        body = await request.body()
        if len(body) > self.max_body_bytes:
            logger.warning(f"Rejected {len(body)}-byte request for session {session_id[:8]}...")
            return text_response(ACK_TOO_LARGE, HttpStatus.PAYLOAD_TOO_LARGE)

        return self.route(session_id, body)

    def route(self, session_id: str, body: bytes) -> Response:
        """Hand a request body to its session's engine and acknowledge it."""
        session = self.table.get(session_id)
        if session is None or session.engine is None:
            logger.warning(f"Session not found: {session_id[:8]}...")
            return text_response(ACK_SESSION_NOT_FOUND, HttpStatus.NOT_FOUND)

        if not session.engine.submit(body):
            return text_response(ACK_PARSE_FAILED, HttpStatus.BAD_REQUEST)

        logger.debug(f"Accepted message for session {session_id[:8]}...")
        return text_response(ACK_ACCEPTED, HttpStatus.ACCEPTED)


__all__ = ["MessageRouter"]
