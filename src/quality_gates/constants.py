"""Fixed build-log strings and SonarQube API constants."""
from __future__ import annotations

# Build-log lines. Downstream log scrapers match these exactly.
GLOBAL_CONFIG_NO_LONGER_EXISTS_ERROR: str = (
    "The SonarQube instance configured for this job no longer exists "
    "in the global configuration: %s"
)
DEFAULT_CONFIGURATION_WARNING: str = (
    "WARNING: Quality Gates plugin: no SonarQube instance is selected for "
    "this job, using the default instance from the global configuration."
)
BUILD_PASSED_PREFIX: str = "Build-Step: Quality Gates plugin build passed: "

# SonarQube Web API
PROJECT_STATUS_PATH: str = "/api/qualitygates/project_status"
CE_COMPONENT_PATH: str = "/api/ce/component"
PENDING_TASK_STATUSES: frozenset[str] = frozenset({"PENDING", "IN_PROGRESS"})

# Instance defaults
DEFAULT_SONAR_URL: str = "http://localhost:9000"
DEFAULT_TIME_TO_WAIT_MS: int = 10000
DEFAULT_MAX_WAIT_TIME_MS: int = 300000
DEFAULT_HTTP_TIMEOUT_SECONDS: float = 30.0

SERVICE_NAME: str = "quality-gates"
