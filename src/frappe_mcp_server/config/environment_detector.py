#!/usr/bin/env python3
# src/frappe_mcp_server/config/environment_detector.py
"""
Deployment environment detection used to pick sensible defaults.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from .constants import (
    CI_INDICATORS,
    DOCKERENV_PATH,
    ENV_CONTAINER,
    ENV_KUBERNETES_HOST,
    ENVIRONMENT_ALIASES,
    ENVIRONMENT_DEVELOPMENT,
    ENVIRONMENT_LOG_LEVELS,
    ENVIRONMENT_PRODUCTION,
    ENVIRONMENT_TESTING,
    ENVIRONMENT_VARIABLES,
)

logger = logging.getLogger(__name__)


class EnvironmentDetector:
    """Detects development / testing / staging / production."""

    def __init__(self, env: Mapping[str, str] | None = None):
        self.env = os.environ if env is None else env

    def get_env_var(self, key: str, default: str = "") -> str:
        return self.env.get(key, default)

    def detect(self) -> str:
        """Detect the environment, explicit variables first."""
        explicit = self._get_explicit_environment()
        if explicit:
            logger.debug(f"Explicit environment detected: {explicit}")
            return explicit

        if self._is_ci_environment():
            logger.debug("CI/CD environment detected")
            return ENVIRONMENT_TESTING

        if self._is_containerized():
            logger.debug("Containerized environment detected")
            return ENVIRONMENT_PRODUCTION

        return ENVIRONMENT_DEVELOPMENT

    def detect_log_level(self, environment: str | None = None) -> str:
        """Default log level for an environment."""
        environment = environment or self.detect()
        return ENVIRONMENT_LOG_LEVELS.get(environment, "info")

    def _get_explicit_environment(self) -> str:
        for key in ENVIRONMENT_VARIABLES:
            value = self.get_env_var(key).strip().lower()
            if value:
                return ENVIRONMENT_ALIASES.get(value, "")
        return ""

    def _is_ci_environment(self) -> bool:
        return any(self.get_env_var(var) for var in CI_INDICATORS)

    def _is_containerized(self) -> bool:
        if self.get_env_var(ENV_KUBERNETES_HOST) or self.get_env_var(ENV_CONTAINER):
            return True
        try:
            return Path(DOCKERENV_PATH).exists()
        except OSError as e:
            logger.debug(f"Error checking Docker env: {e}")
            return False

    def get_detection_info(self) -> dict:
        """Detailed detection information, for ``--debug`` startup output."""
        return {
            "environment": self.detect(),
            "explicit_env_vars": {key: self.get_env_var(key) for key in ENVIRONMENT_VARIABLES},
            "ci_detected": self._is_ci_environment(),
            "containerized": self._is_containerized(),
        }
