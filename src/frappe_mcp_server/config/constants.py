#!/usr/bin/env python3
"""
Configuration detection constants: CI indicators, container detection and
environment-to-log-level defaults.
"""

# ---------------------------------------------------------------------------
# CI/CD environment indicator variables
# ---------------------------------------------------------------------------
CI_INDICATORS = (
    "CI",
    "CONTINUOUS_INTEGRATION",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "JENKINS_HOME",
    "TRAVIS",
    "CIRCLECI",
    "BUILDKITE",
    "DRONE",
    "BAMBOO_BUILD_KEY",
)


# ---------------------------------------------------------------------------
# Environment type detection variables, in lookup order
# ---------------------------------------------------------------------------
ENV_NODE_ENV = "NODE_ENV"
ENV_ENV = "ENV"
ENV_ENVIRONMENT = "ENVIRONMENT"
ENVIRONMENT_VARIABLES = (ENV_NODE_ENV, ENV_ENV, ENV_ENVIRONMENT)


# ---------------------------------------------------------------------------
# Container detection
# ---------------------------------------------------------------------------
DOCKERENV_PATH = "/.dockerenv"
ENV_KUBERNETES_HOST = "KUBERNETES_SERVICE_HOST"
ENV_CONTAINER = "CONTAINER"


# ---------------------------------------------------------------------------
# Environment names
# ---------------------------------------------------------------------------
ENVIRONMENT_DEVELOPMENT = "development"
ENVIRONMENT_TESTING = "testing"
ENVIRONMENT_STAGING = "staging"
ENVIRONMENT_PRODUCTION = "production"

ENVIRONMENT_ALIASES = {
    "production": ENVIRONMENT_PRODUCTION,
    "prod": ENVIRONMENT_PRODUCTION,
    "staging": ENVIRONMENT_STAGING,
    "stage": ENVIRONMENT_STAGING,
    "test": ENVIRONMENT_TESTING,
    "testing": ENVIRONMENT_TESTING,
    "development": ENVIRONMENT_DEVELOPMENT,
    "dev": ENVIRONMENT_DEVELOPMENT,
}

# Default log level when MCP_LOG_LEVEL is not set
ENVIRONMENT_LOG_LEVELS = {
    ENVIRONMENT_DEVELOPMENT: "info",
    ENVIRONMENT_TESTING: "warning",
    ENVIRONMENT_STAGING: "info",
    ENVIRONMENT_PRODUCTION: "warning",
}
