#!/usr/bin/env python3
"""Tests for the SSE stream endpoint and its session lifecycle."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest
from starlette.responses import StreamingResponse

from frappe_mcp_server.endpoints import SSEConnectionHandler
from frappe_mcp_server.protocol import Session, SessionTable
from frappe_mcp_server.protocol.events import endpoint_event, format_sse_event, message_event


def _mock_request(disconnected: bool = False):
    request = MagicMock()
    request.client.host = "127.0.0.1"
    request.is_disconnected = AsyncMock(return_value=disconnected)
    return request


def _session_id_from(event: str) -> str:
    assert event.startswith("event: endpoint\ndata: /message?sessionId=")
    return event.split("sessionId=", 1)[1].strip()


async def _drain(iterator) -> list[str]:
    return [chunk async for chunk in iterator]


# ============================================================================
# Event framing
# ============================================================================


class TestEventFraming:
    def test_endpoint_event(self):
        assert endpoint_event("abc-123") == "event: endpoint\ndata: /message?sessionId=abc-123\n\n"

    def test_message_event_is_single_line_json(self):
        event = message_event({"jsonrpc": "2.0", "id": 1, "result": {"text": "a\nb"}})
        assert event.startswith("event: message\ndata: ")
        assert event.endswith("\n\n")
        payload = event[len("event: message\ndata: ") : -2]
        assert orjson.loads(payload)["result"]["text"] == "a\nb"

    def test_multiline_data_uses_several_data_lines(self):
        assert format_sse_event("x", "one\ntwo") == "event: x\ndata: one\ndata: two\n\n"


# ============================================================================
# Stream lifecycle
# ============================================================================


class TestStreamLifecycle:
    @pytest.mark.asyncio
    async def test_first_event_announces_session(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory)
        response = handler.open_session(_mock_request())
        assert isinstance(response, StreamingResponse)
        assert response.media_type == "text/event-stream"
        assert response.headers["cache-control"] == "no-cache"

        stream = response.body_iterator
        try:
            session_id = _session_id_from(await stream.__anext__())
            assert session_id in table
        finally:
            await stream.aclose()

    @pytest.mark.asyncio
    async def test_session_registered_only_when_stream_starts(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory)
        response = handler.open_session(_mock_request())
        assert len(table) == 0
        await response.body_iterator.aclose()
        assert len(table) == 0

    @pytest.mark.asyncio
    async def test_responses_arrive_as_message_events(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory)
        stream = handler.open_session(_mock_request()).body_iterator
        try:
            session = table.get(_session_id_from(await stream.__anext__()))
            session.engine.submit(orjson.dumps({"jsonrpc": "2.0", "id": 5, "method": "ping"}))

            event = await asyncio.wait_for(stream.__anext__(), timeout=2.0)
            assert event == 'event: message\ndata: {"jsonrpc":"2.0","id":5,"result":{}}\n\n'
        finally:
            await stream.aclose()

    @pytest.mark.asyncio
    async def test_closing_stream_unregisters_session(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory)
        stream = handler.open_session(_mock_request()).body_iterator
        session = table.get(_session_id_from(await stream.__anext__()))

        await stream.aclose()

        assert len(table) == 0
        assert session.closed
        assert session.send({"id": 1}) is False

    @pytest.mark.asyncio
    async def test_keepalive_while_idle(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory, keepalive_interval=0.01)
        stream = handler.open_session(_mock_request()).body_iterator
        try:
            await stream.__anext__()
            assert await asyncio.wait_for(stream.__anext__(), timeout=2.0) == ": keepalive\n\n"
        finally:
            await stream.aclose()

    @pytest.mark.asyncio
    async def test_disconnected_client_ends_stream(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory, keepalive_interval=0.01)
        stream = handler.open_session(_mock_request(disconnected=True)).body_iterator
        await stream.__anext__()

        assert await asyncio.wait_for(_drain(stream), timeout=2.0) == []
        assert len(table) == 0

    @pytest.mark.asyncio
    async def test_server_shutdown_ends_open_streams(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory)
        streams = [handler.open_session(_mock_request()).body_iterator for _ in range(3)]
        for stream in streams:
            await stream.__anext__()
        assert len(table) == 3

        rest = [asyncio.ensure_future(_drain(stream)) for stream in streams]
        await asyncio.sleep(0)
        assert table.close_all() == 3

        assert await asyncio.wait_for(asyncio.gather(*rest), timeout=2.0) == [[], [], []]
        assert len(table) == 0

    @pytest.mark.asyncio
    async def test_close_session_is_idempotent(self, table, engine_factory):
        handler = SSEConnectionHandler(table, engine_factory)
        stream = handler.open_session(_mock_request()).body_iterator
        session_id = _session_id_from(await stream.__anext__())

        handler.close_session(session_id)
        handler.close_session(session_id)
        assert await asyncio.wait_for(_drain(stream), timeout=2.0) == []
        assert session_id not in table


# ============================================================================
# Admission
# ============================================================================


class TestAdmission:
    @pytest.mark.asyncio
    async def test_full_table_refuses_connection(self, engine_factory):
        table = SessionTable(max_sessions=1)
        table.insert(Session())
        handler = SSEConnectionHandler(table, engine_factory)

        response = handler.open_session(_mock_request())

        assert response.status_code == 503
        assert response.body == b"Too many open sessions"
        assert len(table) == 1
        table.close_all()

    @pytest.mark.asyncio
    async def test_concurrent_opens_cannot_exceed_capacity(self, engine_factory):
        table = SessionTable(max_sessions=1)
        handler = SSEConnectionHandler(table, engine_factory)
        first = handler.open_session(_mock_request())
        second = handler.open_session(_mock_request())
        assert isinstance(second, StreamingResponse)

        _session_id_from(await first.body_iterator.__anext__())
        assert await _drain(second.body_iterator) == []
        assert len(table) == 1

        await first.body_iterator.aclose()
        assert len(table) == 0

    @pytest.mark.asyncio
    async def test_id_collision_mints_new_id(self, table, engine_factory):
        table.insert(Session("taken"))
        handler = SSEConnectionHandler(table, engine_factory)
        session = handler.create_session()
        session.id = "taken"

        handler._register(session)

        assert session.id != "taken"
        assert session.engine.session_id == session.id
        assert table.get(session.id) is session
