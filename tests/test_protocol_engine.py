#!/usr/bin/env python3
"""Tests for the per-session protocol engine."""

import asyncio

import orjson
import pytest
import pytest_asyncio

from frappe_mcp_server.constants import MCP_DEFAULT_PROTOCOL_VERSION, JsonRpcError
from frappe_mcp_server.errors import InvalidRequestError, ParseError
from frappe_mcp_server.protocol import EngineState, ProtocolEngine, Session
from frappe_mcp_server.protocol.handler import decode_message, parse_envelope
from frappe_mcp_server.registry import ToolRegistry, tool
from frappe_mcp_server.types import create_text_content


def _request(method, params=None, request_id=1):
    message = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return orjson.dumps(message)


def _call(name, arguments=None, request_id=1):
    params = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return _request("tools/call", params, request_id)


async def _next(session, timeout=2.0):
    return await asyncio.wait_for(session.next_outbound(), timeout=timeout)


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


# ============================================================================
# Envelope parsing
# ============================================================================


class TestEnvelopeParsing:
    def test_decode_rejects_empty_body(self):
        with pytest.raises(ParseError, match="Empty body"):
            decode_message(b"")

    def test_decode_rejects_invalid_json(self):
        with pytest.raises(ParseError):
            decode_message(b"{not json")

    def test_parse_valid_envelope(self):
        assert parse_envelope({"jsonrpc": "2.0", "id": "a", "method": "ping"}) == ("a", "ping", None)

    @pytest.mark.parametrize(
        "message",
        [
            [],
            "ping",
            {"jsonrpc": "1.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "id": 1},
            {"jsonrpc": "2.0", "id": 1, "method": ""},
            {"jsonrpc": "2.0", "id": 1, "method": 5},
            {"jsonrpc": "2.0", "id": True, "method": "ping"},
            {"jsonrpc": "2.0", "id": [1], "method": "ping"},
        ],
    )
    def test_parse_rejects_invalid_envelopes(self, message):
        with pytest.raises(InvalidRequestError):
            parse_envelope(message)

    def test_invalid_request_keeps_usable_id(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_envelope({"jsonrpc": "2.0", "id": 7})
        assert exc_info.value.request_id == 7


# ============================================================================
# Methods
# ============================================================================


class TestMethods:
    @pytest.mark.asyncio
    async def test_tools_list(self, make_session):
        session = make_session()
        assert session.engine.submit(_request("tools/list"))
        response = await _next(session)
        assert response["id"] == 1
        names = [t["name"] for t in response["result"]["tools"]]
        assert names == ["echo", "add", "boom", "slow"]
        assert response["result"]["tools"][0]["inputSchema"]["required"] == ["message"]

    @pytest.mark.asyncio
    async def test_initialize_echoes_supported_version(self, make_session):
        session = make_session()
        session.engine.submit(
            _request("initialize", {"protocolVersion": "2024-11-05", "clientInfo": {"name": "inspector"}})
        )
        result = (await _next(session))["result"]
        assert result["protocolVersion"] == "2024-11-05"
        assert result["serverInfo"]["name"] == "test-gateway"
        assert result["capabilities"]["tools"] == {"listChanged": False}
        assert session.engine.client_info == {"name": "inspector"}

    @pytest.mark.asyncio
    async def test_initialize_falls_back_to_default_version(self, make_session):
        session = make_session()
        session.engine.submit(_request("initialize", {"protocolVersion": "1999-01-01"}))
        assert (await _next(session))["result"]["protocolVersion"] == MCP_DEFAULT_PROTOCOL_VERSION

    @pytest.mark.asyncio
    async def test_ping(self, make_session):
        session = make_session()
        session.engine.submit(_request("ping", request_id="p1"))
        assert await _next(session) == {"jsonrpc": "2.0", "id": "p1", "result": {}}

    @pytest.mark.asyncio
    async def test_unknown_method(self, make_session):
        session = make_session()
        session.engine.submit(_request("resources/list"))
        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.METHOD_NOT_FOUND
        assert error["message"] == "Method not found: resources/list"

    @pytest.mark.asyncio
    async def test_params_must_be_object(self, make_session):
        session = make_session()
        session.engine.submit(_request("tools/list", params=[1, 2]))
        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.INVALID_PARAMS
        assert error["data"] == {"field": "params"}


# ============================================================================
# tools/call
# ============================================================================


class TestToolsCall:
    @pytest.mark.asyncio
    async def test_sync_tool_result(self, make_session):
        session = make_session()
        session.engine.submit(_call("echo", {"message": "hello"}))
        response = await _next(session)
        assert response["jsonrpc"] == "2.0"
        assert response["id"] == 1
        [block] = response["result"]["content"]
        assert block["type"] == "text"
        assert block["text"] == "hello"

    @pytest.mark.asyncio
    async def test_async_tool_with_coercion_and_default(self, make_session):
        session = make_session()
        session.engine.submit(_call("add", {"a": "41"}))
        assert (await _next(session))["result"]["content"][0]["text"] == "42"

    @pytest.mark.asyncio
    async def test_unknown_tool_suggests_name(self, make_session):
        session = make_session()
        session.engine.submit(_call("ecko", {"message": "x"}))
        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.METHOD_NOT_FOUND
        assert error["data"] == {"name": "ecko"}
        assert "Did you mean 'echo'?" in error["message"]

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, make_session):
        session = make_session()
        session.engine.submit(_call("echo", {}))
        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.INVALID_PARAMS
        assert error["data"] == {"field": "message"}

    @pytest.mark.asyncio
    async def test_missing_arguments_default_to_empty(self, make_session):
        session = make_session()
        session.engine.submit(_call("boom"))
        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.INTERNAL_ERROR

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params,field",
        [({"arguments": {}}, "name"), ({"name": ""}, "name"), ({"name": "echo", "arguments": [1]}, "arguments")],
    )
    async def test_invalid_call_params(self, make_session, params, field):
        session = make_session()
        session.engine.submit(_request("tools/call", params))
        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.INVALID_PARAMS
        assert error["data"] == {"field": field}

    @pytest.mark.asyncio
    async def test_too_many_argument_keys(self, make_session):
        session = make_session()
        session.engine.submit(_call("echo", {f"k{i}": i for i in range(101)}))
        error = (await _next(session))["error"]
        assert error["data"] == {"field": "arguments"}

    @pytest.mark.asyncio
    async def test_handler_failure_keeps_session_usable(self, make_session):
        session = make_session()
        session.engine.submit(_call("boom", {}, request_id=1))
        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.INTERNAL_ERROR
        assert error["message"] == "Tool execution failed: kaboom"
        assert error["data"] == {"tool": "boom", "error_type": "RuntimeError"}

        session.engine.submit(_call("echo", {"message": "still here"}, request_id=2))
        response = await _next(session)
        assert response["id"] == 2
        assert response["result"]["content"][0]["text"] == "still here"


# ============================================================================
# Handler side effects and result encoding
# ============================================================================


class TestHandlerResults:
    @pytest_asyncio.fixture
    async def recorder(self, server_info, capabilities):
        calls = []

        @tool(
            name="record",
            description="Record a count",
            input_schema={
                "type": "object",
                "properties": {"count": {"type": "integer"}},
                "required": ["count"],
            },
        )
        def record(arguments):
            calls.append(arguments["count"])
            return f"recorded {arguments['count']}"

        @tool(name="text_blocks", description="Return content models", input_schema={"type": "object"})
        def text_blocks(arguments):
            return {"content": [create_text_content("hi")], "isError": False}

        @tool(name="unencodable", description="Return an unencodable value", input_schema={"type": "object"})
        def unencodable(arguments):
            return {"content": [{"type": "text", "text": object()}]}

        registry = ToolRegistry([record, text_blocks, unencodable])
        session = Session()
        session.engine = ProtocolEngine(registry, session.send, server_info, capabilities, session_id=session.id)
        yield session, calls
        session.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [{}, {"count": "many"}, {"count": 1.5}, {"count": None}])
    async def test_invalid_arguments_never_reach_handler(self, recorder, arguments):
        session, calls = recorder
        session.engine.submit(_call("record", arguments))

        error = (await _next(session))["error"]
        assert error["code"] == JsonRpcError.INVALID_PARAMS
        assert error["data"] == {"field": "count"}
        await _settle()
        assert calls == []

    @pytest.mark.asyncio
    async def test_valid_arguments_reach_handler_once(self, recorder):
        session, calls = recorder
        session.engine.submit(_call("record", {"count": "3"}))
        assert (await _next(session))["result"]["content"][0]["text"] == "recorded 3"
        assert calls == [3]

    @pytest.mark.asyncio
    async def test_content_models_are_encoded(self, recorder):
        session, _ = recorder
        session.engine.submit(_call("text_blocks"))
        result = (await _next(session))["result"]

        assert result["isError"] is False
        [block] = result["content"]
        assert block["type"] == "text"
        assert block["text"] == "hi"
        orjson.dumps(result)

    @pytest.mark.asyncio
    async def test_unencodable_result_becomes_internal_error(self, recorder):
        session, _ = recorder
        session.engine.submit(_call("unencodable", request_id=7))
        response = await _next(session)

        assert response["id"] == 7
        assert response["error"]["code"] == JsonRpcError.INTERNAL_ERROR
        assert "not JSON serializable" in response["error"]["message"]

        session.engine.submit(_request("ping", request_id=8))
        assert (await _next(session))["id"] == 8


# ============================================================================
# Parsing failures and notifications
# ============================================================================


class TestMalformedInput:
    @pytest.mark.asyncio
    async def test_parse_error_has_null_id(self, make_session):
        session = make_session()
        assert session.engine.submit(b"{broken") is False
        response = await _next(session)
        assert response["id"] is None
        assert response["error"]["code"] == JsonRpcError.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_invalid_request_echoes_id(self, make_session):
        session = make_session()
        assert session.engine.submit(orjson.dumps({"jsonrpc": "2.0", "id": 9}))
        response = await _next(session)
        assert response["id"] == 9
        assert response["error"]["code"] == JsonRpcError.INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_notifications_get_no_response(self, make_session):
        session = make_session()
        session.engine.submit(orjson.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}))
        # Even a failing notification stays silent
        session.engine.submit(orjson.dumps({"jsonrpc": "2.0", "method": "no/such/method"}))
        session.engine.submit(_request("ping", request_id=3))
        assert (await _next(session))["id"] == 3
        await _settle()
        assert session._outbound.empty()


# ============================================================================
# Concurrency and close
# ============================================================================


class TestConcurrencyAndClose:
    @pytest.mark.asyncio
    async def test_slow_request_does_not_block_next(self, make_session, gate):
        session = make_session()
        session.engine.submit(_call("slow", {}, request_id="slow"))
        session.engine.submit(_call("echo", {"message": "fast"}, request_id="fast"))

        assert (await _next(session))["id"] == "fast"
        assert session.engine.state == EngineState.DISPATCHING

        gate.set()
        assert (await _next(session))["id"] == "slow"
        await _settle()
        assert session.engine.state == EngineState.IDLE

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, make_session):
        first, second = make_session(), make_session()
        first.engine.submit(_call("echo", {"message": "one"}, request_id=1))
        second.engine.submit(_call("echo", {"message": "two"}, request_id=1))
        assert (await _next(first))["result"]["content"][0]["text"] == "one"
        assert (await _next(second))["result"]["content"][0]["text"] == "two"

    @pytest.mark.asyncio
    async def test_in_flight_response_dropped_after_close(self, make_session, gate):
        session = make_session()
        session.engine.submit(_call("slow", {}, request_id=1))
        await _settle()
        assert session.engine.in_flight == 1

        session.close()
        assert session.engine.state == EngineState.CLOSED
        gate.set()
        await _settle()

        assert await _next(session) is None
        assert session._outbound.empty()

    @pytest.mark.asyncio
    async def test_submit_after_close_is_ignored(self, make_session):
        session = make_session()
        session.close()
        assert session.engine.submit(_request("ping")) is True
        await _settle()
        assert await _next(session) is None
        assert session._outbound.empty()
