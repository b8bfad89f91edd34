#!/usr/bin/env python3
"""
Tests for the Starlette application wiring.
"""

import pytest
from starlette.testclient import TestClient

from frappe_mcp_server import GatewayConfig, create_app
from frappe_mcp_server.protocol import Session


@pytest.fixture
def config(tmp_path):
    return GatewayConfig(frappe_path=str(tmp_path), server_name="test-gateway", server_version="0.1.0")


@pytest.fixture
def app(config, registry):
    return create_app(config, registry=registry)


class TestHealth:
    """Test the health probe."""

    def test_health_snapshot(self, app):
        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        data = response.json()
        assert data["status"] == "healthy"
        assert data["server"] == "test-gateway"
        assert data["version"] == "0.1.0"
        assert data["sessions"] == 0
        assert data["tools"] == 4
        assert data["uptime"] >= 0

    def test_health_counts_open_sessions(self, app):
        app.state.sessions.insert(Session())
        with TestClient(app) as client:
            assert client.get("/health").json()["sessions"] == 1


class TestMessageEndpoint:
    """Test the message endpoint through the full middleware stack."""

    def test_missing_session_id(self, app):
        with TestClient(app) as client:
            response = client.post("/message", content=b"{}")
        assert response.status_code == 400
        assert response.text == "Missing sessionId"

    def test_unknown_session(self, app):
        with TestClient(app) as client:
            response = client.post("/message?sessionId=does-not-exist", content=b"{}")
        assert response.status_code == 404
        assert response.text == "Session not found"

    def test_get_not_allowed(self, app):
        with TestClient(app) as client:
            assert client.get("/message").status_code == 405


class TestCors:
    def test_preflight_allows_any_origin(self, app):
        with TestClient(app) as client:
            response = client.options(
                "/message",
                headers={
                    "Origin": "http://localhost:6274",
                    "Access-Control-Request-Method": "POST",
                    "Access-Control-Request-Headers": "Content-Type",
                },
            )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_simple_request_carries_cors_header(self, app):
        with TestClient(app) as client:
            response = client.get("/health", headers={"Origin": "http://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestLifecycle:
    def test_shutdown_closes_sessions(self, app):
        session = Session()
        with TestClient(app):
            app.state.sessions.insert(session)
        assert session.closed
        assert len(app.state.sessions) == 0

    def test_state_exposes_components(self, app, config, registry):
        assert app.state.config is config
        assert app.state.registry is registry
        assert app.state.sessions.max_sessions == config.max_sessions

    def test_default_registry_has_frappe_tools(self, config):
        app = create_app(config)
        names = app.state.registry.names()
        assert "frappe_create_doctype" in names
        assert "frappe_run_bench_command" in names
        assert "frappe_get_ui_templates" in names
