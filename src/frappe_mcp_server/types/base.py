#!/usr/bin/env python3
# src/frappe_mcp_server/types/base.py
"""
Base - Direct imports of the chuk_mcp protocol types used by the gateway

The gateway speaks MCP through chuk_mcp's pydantic models rather than keeping
its own copies of the server-info, capability and content shapes.
"""

from chuk_mcp.protocol.types import (
    ServerCapabilities,
    ServerInfo,
    TextContent,
    ToolsCapability,
    content_to_dict,
    create_text_content,
)

__all__ = [
    "ServerInfo",
    "ServerCapabilities",
    "ToolsCapability",
    "TextContent",
    "create_text_content",
    "content_to_dict",
]
