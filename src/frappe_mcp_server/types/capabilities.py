#!/usr/bin/env python3
# src/frappe_mcp_server/types/capabilities.py
"""
Capabilities - Server capability creation

The tool registry is immutable once the server starts, so the tools
capability never advertises list-change notifications.
"""

from typing import Any

from .base import ServerCapabilities, ToolsCapability


def create_server_capabilities(tools: bool = True, experimental: dict[str, Any] | None = None) -> ServerCapabilities:
    """Create server capabilities using chuk_mcp types directly."""
    capabilities: dict[str, Any] = {}

    if tools:
        capabilities["tools"] = ToolsCapability(listChanged=False)
    if experimental:
        capabilities["experimental"] = experimental

    return ServerCapabilities(**capabilities)


__all__ = ["create_server_capabilities"]
