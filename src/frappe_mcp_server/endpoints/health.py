#!/usr/bin/env python3
"""
endpoints/health.py - Health Endpoint

Cheap liveness probe for load balancers: reports the server identity, the
number of open sessions and registered tools, and process uptime.
"""

import time
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from ..protocol.session_manager import SessionTable
from ..registry import ToolRegistry
from .utils import json_response


class HealthEndpoint:
    """``GET /health`` handler bound to the live session table and registry."""

    def __init__(self, table: SessionTable, registry: ToolRegistry, server_name: str, server_version: str):
        self.table = table
        self.registry = registry
        self.server_name = server_name
        self.server_version = server_version
        self.start_time = time.time()

    def snapshot(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "server": self.server_name,
            "version": self.server_version,
            "sessions": len(self.table),
            "tools": len(self.registry),
            "uptime": round(time.time() - self.start_time, 2),
        }

    async def endpoint(self, request: Request) -> Response:
        return json_response(self.snapshot())


__all__ = ["HealthEndpoint"]
