#!/usr/bin/env python3
"""
app.py - Main Server Application

Creates and configures the Starlette application: the SSE stream endpoint,
the session-routed message endpoint and the health probe, all sharing one
session table and one immutable tool registry.
"""

import contextlib
import logging
from collections.abc import AsyncIterator

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from .config import GatewayConfig
from .constants import HEALTH_PATH, MESSAGE_PATH, SSE_PATH
from .endpoints import HealthEndpoint, MessageRouter, SSEConnectionHandler
from .protocol import ProtocolEngine, Session, SessionTable
from .registry import ToolRegistry
from .types import ServerInfo, create_server_capabilities

logger = logging.getLogger(__name__)


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    config: GatewayConfig | None = None,
    registry: ToolRegistry | None = None,
    table: SessionTable | None = None,
    debug: bool = False,
) -> Starlette:
    """
    Create and configure the Starlette application

    Args:
        config: Runtime configuration; read from the environment when omitted
        registry: Tool registry; the full Frappe tool set when omitted
        table: Session table shared by the endpoints
        debug: Enable Starlette debug mode

    Returns:
        Configured Starlette application
    """
    config = config or GatewayConfig.from_env()
    if registry is None:
        from .tools import build_registry

        registry = build_registry(config)
    if table is None:
        table = SessionTable(max_sessions=config.max_sessions)

    server_info = ServerInfo(name=config.server_name, version=config.server_version)
    capabilities = create_server_capabilities()

    def engine_factory(session: Session) -> ProtocolEngine:
        return ProtocolEngine(registry, session.send, server_info, capabilities, session_id=session.id)

    sse_handler = SSEConnectionHandler(
        table, engine_factory, keepalive_interval=config.keepalive_interval, message_path=MESSAGE_PATH
    )
    message_router = MessageRouter(table)
    health = HealthEndpoint(table, registry, config.server_name, config.server_version)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info(f"{config.server_name} ready with {len(registry)} tools")
        yield
        closed = table.close_all()
        logger.info(f"Shutdown complete ({closed} session(s) closed)")

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type"],
        ),
    ]

    routes = [
        Route(SSE_PATH, sse_handler.endpoint, methods=["GET"]),
        Route(MESSAGE_PATH, message_router.endpoint, methods=["POST"]),
        Route(HEALTH_PATH, health.endpoint, methods=["GET"]),
    ]

    app = Starlette(debug=debug, routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    app.state.sessions = table
    return app


__all__ = ["create_app"]
