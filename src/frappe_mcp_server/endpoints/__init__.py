#!/usr/bin/env python3
"""
HTTP endpoints for the gateway: the SSE stream, the message router and health.
"""

from .health import HealthEndpoint
from .message import MessageRouter
from .sse import SSEConnectionHandler

__all__ = ["HealthEndpoint", "MessageRouter", "SSEConnectionHandler"]
