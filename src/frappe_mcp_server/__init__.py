#!/usr/bin/env python3
"""
frappe_mcp_server - A session-routed MCP gateway for Frappe development

Clients open an SSE stream, receive the URL of their session's message
endpoint, and POST JSON-RPC requests there; responses come back on the
stream:

    from frappe_mcp_server import GatewayConfig, create_app

    app = create_app(GatewayConfig.from_env())

or from the shell:

    frappe-mcp-server --frappe-path ~/frappe-bench --site site1.localhost
"""

from .app import create_app
from .config import GatewayConfig
from .constants import SERVER_VERSION
from .registry import ToolDescriptor, ToolRegistry, tool

__version__ = SERVER_VERSION
__all__ = [
    "GatewayConfig",
    "ToolDescriptor",
    "ToolRegistry",
    "create_app",
    "tool",
]
