#!/usr/bin/env python3
# src/frappe_mcp_server/config/__init__.py
"""
Gateway configuration.

Values come from the environment with detected defaults; the CLI layers its
flags on top through ``with_overrides``.
"""

import dataclasses
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..constants import (
    DEFAULT_BENCH_TIMEOUT,
    DEFAULT_FRAPPE_PATH,
    DEFAULT_HOST,
    DEFAULT_KEEPALIVE_INTERVAL,
    DEFAULT_MAX_SESSIONS,
    DEFAULT_PORT,
    DEFAULT_SITE,
    ENV_BENCH_TIMEOUT,
    ENV_FRAPPE_PATH,
    ENV_FRAPPE_SITE,
    ENV_HOST,
    ENV_KEEPALIVE_INTERVAL,
    ENV_MAX_SESSIONS,
    ENV_MCP_LOG_LEVEL,
    ENV_MCP_SERVER_NAME,
    ENV_MCP_SERVER_VERSION,
    ENV_PORT,
    LOG_LEVELS,
    SERVER_NAME,
    SERVER_VERSION,
)
from .environment_detector import EnvironmentDetector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayConfig:
    """Resolved runtime configuration for one server process."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    frappe_path: str = os.path.expanduser(DEFAULT_FRAPPE_PATH)
    default_site: str = DEFAULT_SITE
    log_level: str = "info"
    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION
    bench_timeout: float = DEFAULT_BENCH_TIMEOUT
    # None means unlimited
    max_sessions: int | None = DEFAULT_MAX_SESSIONS
    keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL
    environment: str = "development"

    def __post_init__(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level '{self.log_level}': expected one of {', '.join(LOG_LEVELS)}")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port {self.port}")
        if self.bench_timeout <= 0:
            raise ValueError(f"Bench timeout must be positive, got {self.bench_timeout}")
        if self.keepalive_interval <= 0:
            raise ValueError(f"Keepalive interval must be positive, got {self.keepalive_interval}")
        if self.max_sessions is not None and self.max_sessions < 1:
            raise ValueError(f"Max sessions must be at least 1, got {self.max_sessions}")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "GatewayConfig":
        """Build a config from environment variables."""
        env = os.environ if env is None else env
        detector = EnvironmentDetector(env)
        environment = detector.detect()

        max_sessions = _get_int(env, ENV_MAX_SESSIONS, DEFAULT_MAX_SESSIONS)
        config = cls(
            host=env.get(ENV_HOST) or DEFAULT_HOST,
            port=_get_int(env, ENV_PORT, DEFAULT_PORT),
            frappe_path=os.path.expanduser(env.get(ENV_FRAPPE_PATH) or DEFAULT_FRAPPE_PATH),
            default_site=env.get(ENV_FRAPPE_SITE) or DEFAULT_SITE,
            log_level=(env.get(ENV_MCP_LOG_LEVEL) or detector.detect_log_level(environment)).lower(),
            server_name=env.get(ENV_MCP_SERVER_NAME) or SERVER_NAME,
            server_version=env.get(ENV_MCP_SERVER_VERSION) or SERVER_VERSION,
            bench_timeout=_get_float(env, ENV_BENCH_TIMEOUT, DEFAULT_BENCH_TIMEOUT),
            max_sessions=max_sessions if max_sessions > 0 else None,
            keepalive_interval=_get_float(env, ENV_KEEPALIVE_INTERVAL, DEFAULT_KEEPALIVE_INTERVAL),
            environment=environment,
        )
        logger.debug(f"Loaded configuration for {environment} environment")
        return config

    def with_overrides(self, **overrides: Any) -> "GatewayConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "frappe_path" in changes:
            changes["frappe_path"] = os.path.expanduser(changes["frappe_path"])
        return dataclasses.replace(self, **changes)


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid {key}: {raw!r} is not an integer") from None


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid {key}: {raw!r} is not a number") from None


__all__ = ["EnvironmentDetector", "GatewayConfig"]
