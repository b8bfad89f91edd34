#!/usr/bin/env python3
"""
Tests for CLI module.
"""

import sys
from unittest.mock import patch

import pytest

from frappe_mcp_server.cli import build_parser, main, print_startup_info, setup_logging
from frappe_mcp_server.config import GatewayConfig

UVICORN_RUN = "frappe_mcp_server.cli.uvicorn.run"
BASIC_CONFIG = "frappe_mcp_server.cli.logging.basicConfig"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Pin the environment so detection does not depend on the host."""
    for key in ("HOST", "PORT", "FRAPPE_SITE", "MCP_LOG_LEVEL", "MCP_MAX_SESSIONS", "BENCH_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("FRAPPE_PATH", str(tmp_path))


class TestSetupLogging:
    """Test logging setup functionality."""

    @patch(BASIC_CONFIG)
    def test_setup_logging_debug(self, mock_basicConfig):
        setup_logging("warning", debug=True)

        kwargs = mock_basicConfig.call_args[1]
        assert kwargs["level"] == 10  # logging.DEBUG
        assert kwargs["stream"] == sys.stderr

    @patch(BASIC_CONFIG)
    def test_setup_logging_level(self, mock_basicConfig):
        setup_logging("warning")
        assert mock_basicConfig.call_args[1]["level"] == 30  # logging.WARNING


class TestParser:
    def test_site_flag_sets_default_site(self):
        args = build_parser().parse_args(["--site", "erp.localhost", "--port", "9000"])
        assert args.default_site == "erp.localhost"
        assert args.port == 9000

    def test_unknown_log_level_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--log-level", "loud"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "frappe-mcp-server 1.0.0" in capsys.readouterr().out


class TestMain:
    """Test the main entry point."""

    def test_list_tools(self, capsys):
        with patch(UVICORN_RUN) as mock_run:
            main(["--list-tools"])

        mock_run.assert_not_called()
        output = capsys.readouterr().out
        assert "frappe_run_bench_command" in output
        assert "frappe_get_financial_statements" in output

    @patch(BASIC_CONFIG)
    def test_flags_override_environment(self, mock_basicConfig, monkeypatch, tmp_path):
        monkeypatch.setenv("PORT", "4000")
        with patch(UVICORN_RUN) as mock_run:
            main(["--host", "127.0.0.1", "--port", "8123", "--log-level", "warning"])

        app = mock_run.call_args[0][0]
        kwargs = mock_run.call_args[1]
        assert kwargs == {"host": "127.0.0.1", "port": 8123, "log_level": "warning"}
        assert app.state.config.frappe_path == str(tmp_path)

    @patch(BASIC_CONFIG)
    def test_environment_used_without_flags(self, mock_basicConfig, monkeypatch):
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.setenv("FRAPPE_SITE", "erp.localhost")
        with patch(UVICORN_RUN) as mock_run:
            main([])

        assert mock_run.call_args[1]["port"] == 4000
        assert mock_run.call_args[0][0].state.config.default_site == "erp.localhost"

    @patch(BASIC_CONFIG)
    def test_debug_forces_debug_level(self, mock_basicConfig):
        with patch(UVICORN_RUN) as mock_run:
            main(["--debug"])
        assert mock_run.call_args[1]["log_level"] == "debug"
        assert mock_basicConfig.call_args[1]["level"] == 10

    def test_invalid_environment_value_exits(self, monkeypatch, capsys):
        monkeypatch.setenv("PORT", "abc")
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
        assert "Invalid PORT" in capsys.readouterr().err

    def test_invalid_port_flag_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--port", "70000"])
        assert exc_info.value.code == 2

    @patch(BASIC_CONFIG)
    def test_keyboard_interrupt_is_clean(self, mock_basicConfig):
        with patch(UVICORN_RUN, side_effect=KeyboardInterrupt):
            main([])


class TestStartupInfo:
    def test_banner_goes_to_stderr(self, capsys):
        print_startup_info(GatewayConfig(default_site="erp.localhost"), 29)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "erp.localhost" in captured.err
        assert "🔧 Tools: 29" in captured.err
