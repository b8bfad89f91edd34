#!/usr/bin/env python3
# src/frappe_mcp_server/types/__init__.py
"""
Types package - chuk_mcp protocol types plus the gateway's content and schema helpers.
"""

from .base import (
    ServerCapabilities,
    ServerInfo,
    TextContent,
    ToolsCapability,
    content_to_dict,
    create_text_content,
)
from .capabilities import create_server_capabilities
from .content import format_content, format_tool_result
from .schema import json_type_name, validate_arguments, validate_value

__all__ = [
    # chuk_mcp types
    "ServerInfo",
    "ServerCapabilities",
    "ToolsCapability",
    "TextContent",
    "create_text_content",
    "content_to_dict",
    # Helpers
    "create_server_capabilities",
    "format_content",
    "format_tool_result",
    "json_type_name",
    "validate_arguments",
    "validate_value",
]
