#!/usr/bin/env python3
# src/frappe_mcp_server/types/content.py
"""
Content - Tool result formatting with orjson

Turns whatever a tool handler returns into the unstructured content blocks
carried by a ``tools/call`` result.
"""

from typing import Any

import orjson
from pydantic import BaseModel

from .base import TextContent, content_to_dict, create_text_content


def format_content(content: Any) -> list[dict[str, Any]]:
    """Format a handler return value as a list of MCP content dicts."""
    if isinstance(content, str):
        return [content_to_dict(create_text_content(content))]
    elif isinstance(content, TextContent):
        return [content_to_dict(content)]
    elif isinstance(content, dict):
        json_str = orjson.dumps(content, option=orjson.OPT_INDENT_2).decode()
        return [content_to_dict(create_text_content(json_str))]
    elif isinstance(content, BaseModel):
        json_str = orjson.dumps(content.model_dump(), option=orjson.OPT_INDENT_2).decode()
        return [content_to_dict(create_text_content(json_str))]
    elif isinstance(content, list):
        items = []
        for item in content:
            items.extend(format_content(item))
        return items
    elif content is None:
        return []
    else:
        return [content_to_dict(create_text_content(str(content)))]


def format_tool_result(result: Any) -> dict[str, Any]:
    """Wrap a handler return value as a ``tools/call`` result.

    Results that are already shaped like ``{"content": [...]}`` keep their
    other keys; their content items are normalised to plain dicts.
    """
    if isinstance(result, dict) and isinstance(result.get("content"), list):
        items: list[dict[str, Any]] = []
        for item in result["content"]:
            if isinstance(item, dict):
                items.append(item)
            elif isinstance(item, TextContent):
                items.append(content_to_dict(item))
            elif isinstance(item, BaseModel):
                items.append(item.model_dump(exclude_none=True))
            else:
                items.extend(format_content(item))
        return {**result, "content": items}
    return {"content": format_content(result)}


__all__ = ["format_content", "format_tool_result"]
