"""Custom exceptions for the Quality Gates build step."""

from __future__ import annotations


class QualityGatesError(Exception):
    """Base exception for all quality gates errors."""

    pass


class ConfigurationError(QualityGatesError):
    """Raised for configuration issues (bad files, duplicate names, unset variables)."""

    pass


class InstanceNotFoundError(QualityGatesError):
    """Raised when a SonarQube instance name is not in the global registry."""

    def __init__(self, instance_name: str) -> None:
        self.instance_name = instance_name
        super().__init__(f"No SonarQube instance named '{instance_name}' is registered")


class GateQueryError(QualityGatesError):
    """Raised when the quality gate status cannot be read from the server.

    Covers network errors, malformed responses, authentication failures
    and unknown projects. The original exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, project_key: str = "") -> None:
        self.project_key = project_key
        super().__init__(message)


class ControllerStateError(QualityGatesError):
    """Raised when a gate controller phase is run out of order."""

    def __init__(self, phase: str, state: str) -> None:
        self.phase = phase
        self.state = state
        super().__init__(f"Cannot run '{phase}' while the gate controller is in state '{state}'")
