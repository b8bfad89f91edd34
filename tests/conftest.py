#!/usr/bin/env python3
"""Shared fixtures: a small tool registry and session/engine helpers."""

import asyncio

import pytest
import pytest_asyncio

from frappe_mcp_server.protocol import ProtocolEngine, Session, SessionTable
from frappe_mcp_server.registry import ToolRegistry, tool
from frappe_mcp_server.types import ServerInfo, create_server_capabilities


def _build_test_registry(gate: asyncio.Event | None = None) -> ToolRegistry:
    @tool(
        name="echo",
        description="Echo a message",
        input_schema={
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        },
    )
    def echo(arguments):
        return arguments["message"]

    @tool(
        name="add",
        description="Add two integers",
        input_schema={
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "integer", "default": 1}},
            "required": ["a"],
        },
    )
    async def add(arguments):
        return str(arguments["a"] + arguments["b"])

    @tool(name="boom", description="Always fails", input_schema={"type": "object", "properties": {}})
    def boom(arguments):
        raise RuntimeError("kaboom")

    @tool(name="slow", description="Waits for the test to release it", input_schema={"type": "object"})
    async def slow(arguments):
        if gate is not None:
            await gate.wait()
        return "slow done"

    return ToolRegistry([echo, add, boom, slow])


@pytest.fixture
def gate():
    return asyncio.Event()


@pytest.fixture
def registry(gate):
    return _build_test_registry(gate)


@pytest.fixture
def server_info():
    return ServerInfo(name="test-gateway", version="0.1.0")


@pytest.fixture
def capabilities():
    return create_server_capabilities()


@pytest.fixture
def engine_factory(registry, server_info, capabilities):
    def factory(session: Session) -> ProtocolEngine:
        return ProtocolEngine(registry, session.send, server_info, capabilities, session_id=session.id)

    return factory


@pytest_asyncio.fixture
async def table():
    table = SessionTable()
    yield table
    table.close_all()


@pytest_asyncio.fixture
async def make_session(engine_factory, gate):
    """Create sessions with bound engines; all are closed at teardown."""
    sessions: list[Session] = []

    def make() -> Session:
        session = Session()
        session.engine = engine_factory(session)
        sessions.append(session)
        return session

    yield make
    for session in sessions:
        session.close()
    # Let parked handlers finish so no task outlives the loop
    gate.set()
    await asyncio.sleep(0.01)
