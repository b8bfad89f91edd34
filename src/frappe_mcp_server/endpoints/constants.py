#!/usr/bin/env python3
"""
Endpoint constants - HTTP status codes, acknowledgement texts and
pre-computed headers for the SSE and message endpoints.
"""

from enum import IntEnum

from ..constants import CONTENT_TYPE_SSE, HEADERS_SSE  # noqa: F401


# ---------------------------------------------------------------------------
# HTTP status codes
# ---------------------------------------------------------------------------
class HttpStatus(IntEnum):
    ACCEPTED = 202
    BAD_REQUEST = 400
    NOT_FOUND = 404
    PAYLOAD_TOO_LARGE = 413
    SERVICE_UNAVAILABLE = 503


# ---------------------------------------------------------------------------
# Acknowledgement texts for the message endpoint
# ---------------------------------------------------------------------------
ACK_ACCEPTED = "Accepted"
ACK_MISSING_SESSION_ID = "Missing sessionId"
ACK_SESSION_NOT_FOUND = "Session not found"
ACK_PARSE_FAILED = "Could not parse message"
ACK_TOO_LARGE = "Request body too large"
ACK_TOO_MANY_SESSIONS = "Too many open sessions"


# ---------------------------------------------------------------------------
# Header values
# ---------------------------------------------------------------------------
CACHE_NO_CACHE = "no-cache, no-store, must-revalidate"
