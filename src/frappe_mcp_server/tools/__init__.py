#!/usr/bin/env python3
# src/frappe_mcp_server/tools/__init__.py
"""
Frappe developer tools exposed through the gateway's registry.
"""

import logging

from ..config import GatewayConfig
from ..registry import ToolRegistry
from .bench import BenchRunner, bench_tools
from .documents import document_tools, metadata_tools
from .reports import report_tools
from .scaffold import scaffold_tools
from .ui import ui_tools

logger = logging.getLogger(__name__)


def build_registry(config: GatewayConfig, runner: BenchRunner | None = None) -> ToolRegistry:
    """Build the full tool registry for a configuration."""
    if runner is None:
        runner = BenchRunner(config.frappe_path, timeout=config.bench_timeout)

    registry = ToolRegistry(
        [
            *scaffold_tools(config.frappe_path),
            *bench_tools(runner),
            *document_tools(runner, config.default_site),
            *metadata_tools(runner),
            *report_tools(runner),
            *ui_tools(),
        ]
    )
    logger.debug(f"Built registry with {len(registry)} tools")
    return registry


__all__ = ["BenchRunner", "build_registry"]
