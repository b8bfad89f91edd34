#!/usr/bin/env python3
"""
Top-level constants shared across the frappe_mcp_server package.
"""

import re
from enum import IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"


class JsonRpcError(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION_2024_11 = "2024-11-05"
MCP_PROTOCOL_VERSION_2025_03 = "2025-03-26"
MCP_PROTOCOL_VERSION_2025_06 = "2025-06-18"
MCP_DEFAULT_PROTOCOL_VERSION = MCP_PROTOCOL_VERSION_2025_06
MCP_SUPPORTED_PROTOCOL_VERSIONS = (
    MCP_PROTOCOL_VERSION_2024_11,
    MCP_PROTOCOL_VERSION_2025_03,
    MCP_PROTOCOL_VERSION_2025_06,
)


# MCP method names
class McpMethod:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


# MCP initialize parameter keys
KEY_CLIENT_INFO = "clientInfo"
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"

# tools/call parameter keys
KEY_TOOL_NAME = "name"
KEY_ARGUMENTS = "arguments"


# ---------------------------------------------------------------------------
# Transport endpoints and SSE framing
# ---------------------------------------------------------------------------
SSE_PATH = "/sse"
MESSAGE_PATH = "/message"
HEALTH_PATH = "/health"
QUERY_SESSION_ID = "sessionId"

SSE_EVENT_ENDPOINT = "endpoint"
SSE_EVENT_MESSAGE = "message"
SSE_KEEPALIVE_COMMENT = ": keepalive\n\n"


# ---------------------------------------------------------------------------
# Content types and headers
# ---------------------------------------------------------------------------
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_PLAIN = "text/plain"
CONTENT_TYPE_SSE = "text/event-stream"

HEADERS_SSE = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
ENV_HOST = "HOST"
ENV_PORT = "PORT"
ENV_FRAPPE_PATH = "FRAPPE_PATH"
ENV_FRAPPE_SITE = "FRAPPE_SITE"
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"
ENV_MCP_SERVER_NAME = "MCP_SERVER_NAME"
ENV_MCP_SERVER_VERSION = "MCP_SERVER_VERSION"
ENV_BENCH_TIMEOUT = "BENCH_TIMEOUT"
ENV_MAX_SESSIONS = "MCP_MAX_SESSIONS"
ENV_KEEPALIVE_INTERVAL = "MCP_KEEPALIVE_INTERVAL"


# ---------------------------------------------------------------------------
# Logging level strings
# ---------------------------------------------------------------------------
LOG_DEBUG = "debug"
LOG_INFO = "info"
LOG_WARNING = "warning"
LOG_ERROR = "error"
LOG_CRITICAL = "critical"
LOG_LEVELS = (LOG_DEBUG, LOG_INFO, LOG_WARNING, LOG_ERROR, LOG_CRITICAL)


# ---------------------------------------------------------------------------
# Network and runtime defaults
# ---------------------------------------------------------------------------
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_ENCODING = "utf-8"
DEFAULT_FRAPPE_PATH = "~/frappe-bench"
DEFAULT_SITE = "site1.localhost"
DEFAULT_BENCH_TIMEOUT = 300.0
DEFAULT_MAX_SESSIONS = 1000
DEFAULT_KEEPALIVE_INTERVAL = 15.0


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "frappe-mcp-server"
SERVER_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Tool name validation
# ---------------------------------------------------------------------------
TOOL_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_\-\.]{1,128}$")


# ---------------------------------------------------------------------------
# Request validation limits
# ---------------------------------------------------------------------------
MAX_REQUEST_BODY_BYTES = 10 * 1024 * 1024  # 10 MB
MAX_ARGUMENT_KEYS = 100
MAX_COMMAND_OUTPUT_BYTES = 10 * 1024 * 1024
