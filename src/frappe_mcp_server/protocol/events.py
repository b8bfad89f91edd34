#!/usr/bin/env python3
# src/frappe_mcp_server/protocol/events.py
"""
SSE event framing for the session stream.

The first event on every stream is ``endpoint``, carrying the URL the client
must POST its requests to; every JSON-RPC response after that is a
``message`` event.
"""

from typing import Any
from urllib.parse import urlencode

import orjson

from ..constants import MESSAGE_PATH, QUERY_SESSION_ID, SSE_EVENT_ENDPOINT, SSE_EVENT_MESSAGE


def format_sse_event(event: str, data: str) -> str:
    """Frame one SSE event; multi-line data becomes several ``data:`` lines."""
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in data.splitlines() or [""])
    return "\n".join(lines) + "\n\n"


def endpoint_url(session_id: str, message_path: str = MESSAGE_PATH) -> str:
    """Relative URL of the message endpoint bound to a session."""
    return f"{message_path}?{urlencode({QUERY_SESSION_ID: session_id})}"


def endpoint_event(session_id: str, message_path: str = MESSAGE_PATH) -> str:
    """The first event of a stream, announcing the session's message endpoint."""
    return format_sse_event(SSE_EVENT_ENDPOINT, endpoint_url(session_id, message_path))


def message_event(envelope: dict[str, Any]) -> str:
    """Frame a JSON-RPC envelope as a ``message`` event."""
    return format_sse_event(SSE_EVENT_MESSAGE, orjson.dumps(envelope).decode())


__all__ = ["endpoint_event", "endpoint_url", "format_sse_event", "message_event"]
