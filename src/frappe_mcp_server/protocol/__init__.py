#!/usr/bin/env python3
# src/frappe_mcp_server/protocol/__init__.py
"""
Protocol package.

Re-exports the per-session ProtocolEngine and the Session/SessionTable pair.
"""

from .handler import EngineState, ProtocolEngine
from .session_manager import Session, SessionTable

__all__ = [
    "EngineState",
    "ProtocolEngine",
    "Session",
    "SessionTable",
]
