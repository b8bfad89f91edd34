#!/usr/bin/env python3
# src/frappe_mcp_server/registry.py
"""
Tool registry: the immutable name -> descriptor table consulted by every session.

Each descriptor binds a tool name to a declarative JSON input schema and a
handler. Adding a tool is a registration, not a dispatch edit; ``tools/list``
and ``tools/call`` are both derived from the same table.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import orjson

from .constants import TOOL_NAME_PATTERN
from .types.schema import validate_arguments

logger = logging.getLogger(__name__)

ToolCallable = Callable[[dict[str, Any]], Any]


@dataclass(frozen=True)
class ToolDescriptor:
    """Immutable registry entry binding a tool name to its schema and handler."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolCallable = field(repr=False, compare=False)
    _cached_mcp_bytes: bytes = field(default=b"", init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not TOOL_NAME_PATTERN.match(self.name):
            raise ValueError(f"Invalid tool name '{self.name}': must match {TOOL_NAME_PATTERN.pattern}")
        if self.input_schema.get("type", "object") != "object":
            raise ValueError(f"Tool '{self.name}': input schema must describe an object")
        if not callable(self.handler):
            raise TypeError(f"Tool '{self.name}': handler is not callable")
        try:
            # Schemas must survive a JSON round trip to be sent to clients
            cached = orjson.dumps(
                {"name": self.name, "description": self.description, "inputSchema": self.input_schema}
            )
        except TypeError as e:
            raise ValueError(f"Tool '{self.name}': input schema is not JSON-serialisable ({e})") from e
        object.__setattr__(self, "_cached_mcp_bytes", cached)

    def to_mcp_format(self) -> dict[str, Any]:
        """Return a fresh ``{name, description, inputSchema}`` dict."""
        result: dict[str, Any] = orjson.loads(self._cached_mcp_bytes)
        return result

    def validate(self, arguments: Any) -> dict[str, Any]:
        """Validate and coerce call arguments against this tool's schema."""
        return validate_arguments(self.input_schema, arguments)


class ToolRegistry:
    """Read-only lookup table of tool descriptors, in registration order."""

    def __init__(self, descriptors: Iterable[ToolDescriptor] = ()):
        tools: dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in tools:
                raise ValueError(f"Duplicate tool name: '{descriptor.name}'")
            tools[descriptor.name] = descriptor
            logger.debug(f"Registered tool: {descriptor.name}")
        self._tools = MappingProxyType(tools)

    def describe(self) -> list[dict[str, Any]]:
        """List every tool as ``{name, description, inputSchema}``."""
        return [descriptor.to_mcp_format() for descriptor in self._tools.values()]

    def resolve(self, name: str) -> ToolDescriptor | None:
        """Find a tool descriptor by name."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        """Registered tool names in registration order."""
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())


def tool(name: str, description: str, input_schema: dict[str, Any]) -> Callable[[ToolCallable], ToolDescriptor]:
    """Decorator turning a handler function into a ToolDescriptor."""

    def decorator(handler: ToolCallable) -> ToolDescriptor:
        return ToolDescriptor(name=name, description=description, input_schema=input_schema, handler=handler)

    return decorator


__all__ = ["ToolCallable", "ToolDescriptor", "ToolRegistry", "tool"]
