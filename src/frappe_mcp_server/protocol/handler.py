#!/usr/bin/env python3
# src/frappe_mcp_server/protocol/handler.py
"""
Protocol engine - per-session JSON-RPC dispatch for the MCP gateway

Each SSE session owns one ProtocolEngine. The message router hands it raw
request bodies through ``submit``; the engine parses them into an inbox that a
pump task drains, running every request as its own task so a slow tool never
holds up the next request. Responses go back through the session's ``send``
callable, which silently drops them once the stream has closed.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

import orjson
from starlette.concurrency import run_in_threadpool

from ..constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ARGUMENTS,
    KEY_CAPABILITIES,
    KEY_CLIENT_INFO,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    KEY_TOOL_NAME,
    MAX_ARGUMENT_KEYS,
    MCP_DEFAULT_PROTOCOL_VERSION,
    MCP_SUPPORTED_PROTOCOL_VERSIONS,
    JsonRpcError,
    McpMethod,
)
from ..errors import (
    GatewayError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ToolExecutionError,
    format_unknown_tool_error,
)
from ..registry import ToolDescriptor, ToolRegistry
from ..types import ServerCapabilities, ServerInfo, format_tool_result
from ..types.schema import json_type_name

logger = logging.getLogger(__name__)

SendFn = Callable[[dict[str, Any]], bool]


class EngineState(str, Enum):
    """Lifecycle states of a protocol engine."""

    IDLE = "idle"
    DISPATCHING = "dispatching"
    CLOSED = "closed"


# ============================================================================
# Envelope parsing
# ============================================================================


def decode_message(body: bytes) -> Any:
    """Decode a request body, raising ParseError on anything but valid JSON."""
    if not body:
        raise ParseError("Empty body")
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise ParseError(str(e)) from e


def parse_envelope(message: Any) -> tuple[Any, str, Any]:
    """Validate a JSON-RPC 2.0 request envelope.

    Returns:
        ``(request_id, method, params)``; ``params`` is returned unchecked.

    Raises:
        InvalidRequestError: if the message is not a usable request.
    """
    if not isinstance(message, dict):
        raise InvalidRequestError(f"expected a JSON object, got {json_type_name(message)}")

    request_id = message.get(KEY_ID)
    if request_id is not None and (isinstance(request_id, bool) or not isinstance(request_id, str | int)):
        raise InvalidRequestError("id must be a string or an integer")

    if message.get(JSONRPC_KEY) != JSONRPC_VERSION:
        raise InvalidRequestError(f"{JSONRPC_KEY} must be \"{JSONRPC_VERSION}\"", request_id=request_id)

    method = message.get(KEY_METHOD)
    if not isinstance(method, str) or not method:
        raise InvalidRequestError("method must be a non-empty string", request_id=request_id)

    return request_id, method, message.get(KEY_PARAMS)


def error_envelope(request_id: Any, error: GatewayError) -> dict[str, Any]:
    """Build a JSON-RPC error response."""
    return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: request_id, KEY_ERROR: error.to_error_object()}


def ensure_serializable(request_id: Any, response: dict[str, Any]) -> dict[str, Any]:
    """Return the response, or an internal error if it cannot be encoded as JSON."""
    try:
        orjson.dumps(response)
    except TypeError as e:
        logger.error(f"Response for request {request_id!r} is not JSON serializable: {e}")
        return error_envelope(request_id, GatewayError("Internal server error: response is not JSON serializable"))
    return response


# ============================================================================
# Protocol Engine
# ============================================================================


class ProtocolEngine:
    """Validates, dispatches and answers the requests of one session."""

    def __init__(
        self,
        registry: ToolRegistry,
        send: SendFn,
        server_info: ServerInfo,
        capabilities: ServerCapabilities,
        session_id: str = "",
    ):
        self.registry = registry
        self.server_info = server_info
        self.capabilities = capabilities
        self.session_id = session_id
        self.client_info: dict[str, Any] = {}
        self._send = send

        # Items are decoded messages or ParseErrors waiting to be reported
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()
        self._pump_task: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def state(self) -> EngineState:
        if self._closed:
            return EngineState.CLOSED
        if self._in_flight:
            return EngineState.DISPATCHING
        return EngineState.IDLE

    @property
    def in_flight(self) -> int:
        """Number of requests currently being dispatched."""
        return len(self._in_flight)

    # ================================================================
    # Lifecycle
    # ================================================================

    def start(self) -> None:
        """Start draining the inbox. Must be called from the event loop."""
        if self._pump_task is None and not self._closed:
            self._pump_task = asyncio.create_task(self._pump(), name=f"engine-{self.session_id[:8]}")

    def close(self) -> None:
        """Stop accepting work. In-flight requests finish; their responses are dropped."""
        if self._closed:
            return
        self._closed = True
        if self._pump_task is not None:
            self._pump_task.cancel()
        logger.debug(f"Engine for session {self.session_id[:8]}... closed with {len(self._in_flight)} in flight")

    # ================================================================
    # Inbound
    # ================================================================

    def submit(self, body: bytes) -> bool:
        """Parse a request body and queue it for dispatch.

        Never blocks on handler execution. Returns False when the body was not
        valid JSON; a parse-error response is still queued for the stream.
        """
        if self._closed:
            logger.debug(f"Ignoring message for closed session {self.session_id[:8]}...")
            return True

        self.start()
        try:
            message = decode_message(body)
        except ParseError as e:
            logger.warning(f"Session {self.session_id[:8]}...: {e}")
            self._inbox.put_nowait(e)
            return False

        self._inbox.put_nowait(message)
        return True

    async def _pump(self) -> None:
        while True:
            item = await self._inbox.get()
            if isinstance(item, ParseError):
                self._write(error_envelope(None, item))
                continue
            task = asyncio.create_task(self._dispatch(item))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

    async def _dispatch(self, message: Any) -> None:
        response = await self.handle_message(message)
        if response is not None:
            self._write(response)

    def _write(self, envelope: dict[str, Any]) -> None:
        if self._closed or not self._send(envelope):
            logger.debug(f"Discarded response {envelope.get(KEY_ID)!r} for closed session {self.session_id[:8]}...")

    # ================================================================
    # Request handling
    # ================================================================

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded message and return its response envelope.

        Returns None for notifications, which never get a response.
        """
        try:
            request_id, method, params = parse_envelope(message)
        except InvalidRequestError as e:
            logger.warning(f"Session {self.session_id[:8]}...: {e}")
            return error_envelope(e.request_id, e)

        is_notification = KEY_ID not in message
        logger.debug(f"Handling {method} (ID: {request_id})")

        try:
            result = await self._route(method, params)
        except asyncio.CancelledError:
            raise
        except GatewayError as e:
            if e.code == JsonRpcError.INTERNAL_ERROR:
                logger.error(f"{method} failed: {e}")
            else:
                logger.warning(f"{method} rejected: {e}")
            response = error_envelope(request_id, e)
        except Exception as e:
            logger.error(f"Error handling {method}: {e}", exc_info=True)
            response = error_envelope(request_id, GatewayError("Internal server error"))
        else:
            response = {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: request_id, KEY_RESULT: result}

        if is_notification:
            return None
        return ensure_serializable(request_id, response)

    async def _route(self, method: str, params: Any) -> Any:
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise InvalidParamsError(f"params must be an object, got {json_type_name(params)}", field=KEY_PARAMS)

        if method == McpMethod.INITIALIZE:
            return self._handle_initialize(params)
        elif method == McpMethod.INITIALIZED:
            logger.debug(f"Session {self.session_id[:8]}... initialized")
            return None
        elif method == McpMethod.PING:
            return {}
        elif method == McpMethod.TOOLS_LIST:
            tools = self.registry.describe()
            logger.debug(f"Returning {len(tools)} tools")
            return {"tools": tools}
        elif method == McpMethod.TOOLS_CALL:
            return await self._handle_tools_call(params)
        raise MethodNotFoundError(f"Method not found: {method}", name=method)

    def _handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get(KEY_PROTOCOL_VERSION)
        protocol_version = requested if requested in MCP_SUPPORTED_PROTOCOL_VERSIONS else MCP_DEFAULT_PROTOCOL_VERSION
        client_info = params.get(KEY_CLIENT_INFO)
        self.client_info = client_info if isinstance(client_info, dict) else {}

        logger.info(
            f"Initialized session {self.session_id[:8]}... for {self.client_info.get('name', 'unknown')} "
            f"(v{protocol_version})"
        )
        return {
            KEY_PROTOCOL_VERSION: protocol_version,
            KEY_SERVER_INFO: self.server_info.model_dump(exclude_none=True),
            KEY_CAPABILITIES: self.capabilities.model_dump(exclude_none=True),
        }

    async def _handle_tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        tool_name = params.get(KEY_TOOL_NAME)
        if not isinstance(tool_name, str) or not tool_name:
            raise InvalidParamsError("Tool name must be a non-empty string", field=KEY_TOOL_NAME)

        arguments = params.get(KEY_ARGUMENTS)
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError(
                f"arguments must be an object, got {json_type_name(arguments)}", field=KEY_ARGUMENTS
            )
        if len(arguments) > MAX_ARGUMENT_KEYS:
            raise InvalidParamsError(
                f"Too many argument keys ({len(arguments)}, max {MAX_ARGUMENT_KEYS})", field=KEY_ARGUMENTS
            )

        descriptor = self.registry.resolve(tool_name)
        if descriptor is None:
            raise MethodNotFoundError(format_unknown_tool_error(tool_name, self.registry.names()), name=tool_name)

        validated = descriptor.validate(arguments)

        try:
            result = await self._invoke(descriptor, validated)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise ToolExecutionError(tool_name, e) from e

        logger.debug(f"Executed tool {tool_name}")
        return format_tool_result(result)

    async def _invoke(self, descriptor: ToolDescriptor, arguments: dict[str, Any]) -> Any:
        handler = descriptor.handler
        if inspect.iscoroutinefunction(handler):
            return await handler(arguments)

        # Blocking collaborators run in the threadpool so other sessions keep moving
        result = await run_in_threadpool(handler, arguments)
        if inspect.isawaitable(result):
            result = await result
        return result


__all__ = [
    "EngineState",
    "ProtocolEngine",
    "decode_message",
    "ensure_serializable",
    "error_envelope",
    "parse_envelope",
]
