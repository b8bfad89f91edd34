#!/usr/bin/env python3
# src/frappe_mcp_server/cli/__init__.py
"""
CLI entry point for the Frappe MCP server.

Flags override the environment-derived configuration; the server itself is
served by uvicorn.
"""

import argparse
import logging
import sys

import uvicorn

from ..config import EnvironmentDetector, GatewayConfig
from ..constants import LOG_LEVELS, SERVER_VERSION, SSE_PATH
from ..registry import ToolRegistry

logger = logging.getLogger(__name__)


def setup_logging(level: str = "info", debug: bool = False) -> None:
    """Set up logging configuration on stderr."""
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frappe-mcp-server",
        description="MCP server exposing Frappe developer tools over SSE",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve on the default port
  frappe-mcp-server

  # Point at a bench and a default site
  frappe-mcp-server --frappe-path ~/frappe-bench --site erp.localhost

  # Show the registered tools and exit
  frappe-mcp-server --list-tools

Environment Variables:
  HOST, PORT              Bind address (default: 0.0.0.0:3000)
  FRAPPE_PATH             Bench directory (default: ~/frappe-bench)
  FRAPPE_SITE             Default site for tools with an optional site
  BENCH_TIMEOUT           Seconds before a bench command is killed (default: 300)
  MCP_LOG_LEVEL           Logging level (debug|info|warning|error|critical)
  MCP_SERVER_NAME         Server name reported to clients
  MCP_SERVER_VERSION      Server version reported to clients
  MCP_MAX_SESSIONS        Maximum open SSE sessions, 0 for unlimited (default: 1000)
  MCP_KEEPALIVE_INTERVAL  Seconds between SSE keepalive comments (default: 15)
        """,
    )
    parser.add_argument("--host", default=None, help="Host to bind to (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: $PORT or 3000)")
    parser.add_argument("--frappe-path", default=None, help="Path of the bench directory")
    parser.add_argument("--site", dest="default_site", default=None, help="Default Frappe site")
    parser.add_argument(
        "--log-level", default=None, choices=list(LOG_LEVELS), help="Logging level (default: detected)"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--list-tools", action="store_true", help="Print the registered tools and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {SERVER_VERSION}")
    return parser


def print_tools(registry: ToolRegistry) -> None:
    for descriptor in registry:
        print(f"{descriptor.name:<40} {descriptor.description}")


def print_startup_info(config: GatewayConfig, tool_count: int) -> None:
    """Print the startup banner to stderr."""
    output = sys.stderr
    print(f"🚀 {config.server_name} {config.server_version}", file=output)
    print("=" * 60, file=output)
    print(f"📊 Environment: {config.environment}", file=output)
    print(f"🌐 SSE endpoint: http://{config.host}:{config.port}{SSE_PATH}", file=output)
    print(f"📁 Bench: {config.frappe_path}", file=output)
    print(f"🏠 Default site: {config.default_site}", file=output)
    print(f"🔧 Tools: {tool_count}", file=output)
    print(f"📝 Log Level: {config.log_level}", file=output)
    print("=" * 60, file=output)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = GatewayConfig.from_env().with_overrides(
            host=args.host,
            port=args.port,
            frappe_path=args.frappe_path,
            default_site=args.default_site,
            log_level="debug" if args.debug else args.log_level,
        )
    except ValueError as e:
        parser.error(str(e))

    from ..tools import build_registry

    registry = build_registry(config)
    if args.list_tools:
        print_tools(registry)
        return

    setup_logging(config.log_level, debug=args.debug)
    if args.debug:
        logger.debug(f"Environment detection: {EnvironmentDetector().get_detection_info()}")

    from ..app import create_app

    app = create_app(config, registry=registry, debug=args.debug)
    print_startup_info(config, len(registry))

    try:
        uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
