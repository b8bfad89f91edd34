"""
Structured error types for the Frappe MCP gateway.

Protocol-level failures carry a JSON-RPC error code so the protocol engine can
turn them into error envelopes without inspecting message strings.
"""

from difflib import get_close_matches
from typing import Any

from .constants import JsonRpcError


class GatewayError(Exception):
    """Structured gateway error carrying a JSON-RPC code and optional data."""

    def __init__(
        self,
        message: str,
        code: int = JsonRpcError.INTERNAL_ERROR,
        data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        self.code = code
        self.data = data
        self.suggestion = suggestion
        super().__init__(message)

    def to_message(self) -> str:
        """Format the error with suggestion."""
        parts = [str(self)]
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)

    def to_error_object(self) -> dict[str, Any]:
        """Return the ``error`` member of a JSON-RPC response."""
        error: dict[str, Any] = {"code": int(self.code), "message": self.to_message()}
        if self.data is not None:
            error["data"] = self.data
        return error


class ParseError(GatewayError):
    """Request body is not valid JSON."""

    def __init__(self, message: str):
        super().__init__(f"Parse error: {message}", code=JsonRpcError.PARSE_ERROR)


class InvalidRequestError(GatewayError):
    """Request is valid JSON but not a JSON-RPC 2.0 request envelope."""

    def __init__(self, message: str, request_id: Any = None):
        self.request_id = request_id
        super().__init__(f"Invalid request: {message}", code=JsonRpcError.INVALID_REQUEST)


class MethodNotFoundError(GatewayError):
    """Unknown JSON-RPC method or unknown tool name."""

    def __init__(self, message: str, name: str, suggestion: str | None = None):
        super().__init__(message, code=JsonRpcError.METHOD_NOT_FOUND, data={"name": name}, suggestion=suggestion)


class InvalidParamsError(GatewayError):
    """Parameters failed validation; ``field`` names the offending member."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(
            message,
            code=JsonRpcError.INVALID_PARAMS,
            data={"field": field} if field is not None else None,
        )


class SchemaValidationError(InvalidParamsError):
    """Tool arguments do not satisfy the tool's declared input schema."""

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid argument '{field}': {message}", field=field)


class ToolExecutionError(GatewayError):
    """A tool handler raised while executing."""

    def __init__(self, tool_name: str, error: BaseException):
        self.tool_name = tool_name
        self.original = error
        super().__init__(
            f"Tool execution failed: {error}",
            code=JsonRpcError.INTERNAL_ERROR,
            data={"tool": tool_name, "error_type": type(error).__name__},
        )


class DuplicateSessionError(KeyError):
    """A session id is already present in the session table."""


class SessionLimitError(RuntimeError):
    """The session table is at capacity."""

    def __init__(self, max_sessions: int):
        self.max_sessions = max_sessions
        super().__init__(f"Session limit of {max_sessions} reached")


def suggest_tool_name(tool_name: str, available_tools: list[str]) -> str | None:
    """Find the closest matching tool name using fuzzy matching.

    Args:
        tool_name: The unknown tool name.
        available_tools: List of registered tool names.

    Returns:
        The closest match, or None if no good match found.
    """
    matches = get_close_matches(tool_name, available_tools, n=1, cutoff=0.6)
    return matches[0] if matches else None


def format_unknown_tool_error(tool_name: str, available_tools: list[str]) -> str:
    """Create an error message for an unknown tool with suggestions.

    Args:
        tool_name: The requested tool name.
        available_tools: List of registered tool names.

    Returns:
        Error message string, potentially with a suggestion.
    """
    suggestion = suggest_tool_name(tool_name, available_tools)
    if suggestion:
        return f"Unknown tool: '{tool_name}'. Did you mean '{suggestion}'?"
    if available_tools:
        names = ", ".join(sorted(available_tools)[:10])
        suffix = "..." if len(available_tools) > 10 else ""
        return f"Unknown tool: '{tool_name}'. Available tools: {names}{suffix}"
    return f"Unknown tool: '{tool_name}'. No tools are registered."


def format_missing_argument_error(param_name: str, schema: dict[str, Any] | None = None) -> str:
    """Create an error message for a missing required argument.

    Args:
        param_name: The missing parameter name.
        schema: Optional JSON schema of the object that declares the parameter.

    Returns:
        Error message string.
    """
    msg = "missing required argument"
    if schema and param_name in schema.get("properties", {}):
        prop = schema["properties"][param_name]
        prop_type = prop.get("type", "any")
        desc = prop.get("description", "")
        if desc:
            msg += f" ({prop_type}: {desc})"
        else:
            msg += f" (type: {prop_type})"
    return msg
