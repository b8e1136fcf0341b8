"""Data models for the Quality Gates build step."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from src.quality_gates.constants import (
    DEFAULT_MAX_WAIT_TIME_MS,
    DEFAULT_SONAR_URL,
    DEFAULT_TIME_TO_WAIT_MS,
)
from src.quality_gates.exceptions import (
    ConfigurationError,
    GateQueryError,
    InstanceNotFoundError,
)


class GateStatus(str, Enum):
    """Quality gate classification reported by the analysis server."""
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class BuildResult(str, Enum):
    """Build-facing result derived from a gate status."""
    SUCCESS = "success"
    UNSTABLE = "unstable"
    FAILURE = "failure"


@dataclass(frozen=True)
class SonarInstanceConfig:
    """Connection identity of one registered SonarQube instance.

    ``token`` takes precedence over ``username``/``password`` when both are
    set. Wait times are in milliseconds; ``max_wait_time == 0`` disables
    waiting for pending analyses.
    """
    name: str
    url: str = DEFAULT_SONAR_URL
    username: str = ""
    password: str = field(default="", repr=False)
    token: str = field(default="", repr=False)
    time_to_wait: int = DEFAULT_TIME_TO_WAIT_MS
    max_wait_time: int = DEFAULT_MAX_WAIT_TIME_MS

    def __post_init__(self) -> None:
        if self.max_wait_time < 0:
            raise ConfigurationError(
                f"Instance '{self.name}': max_wait_time must not be negative"
            )
        if self.max_wait_time > 0 and self.time_to_wait <= 0:
            raise ConfigurationError(
                f"Instance '{self.name}': time_to_wait must be positive "
                "when max_wait_time is set"
            )

    @property
    def auth(self) -> tuple[str, str] | None:
        """Basic-auth pair for the instance, or ``None`` for anonymous access."""
        if self.token:
            return (self.token, "")
        if self.username:
            return (self.username, self.password)
        return None


@dataclass(frozen=True)
class GlobalConfig:
    """Read-only registry of SonarQube instances, in registration order."""
    instances: tuple[SonarInstanceConfig, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for instance in self.instances:
            if instance.name in seen:
                raise ConfigurationError(
                    f"Duplicate SonarQube instance name '{instance.name}'"
                )
            seen.add(instance.name)

    @property
    def default_instance(self) -> SonarInstanceConfig | None:
        """The first registered instance, used when a job names none."""
        return self.instances[0] if self.instances else None

    def get_instance(self, name: str) -> SonarInstanceConfig | None:
        for instance in self.instances:
            if instance.name == name:
                return instance
        return None

    def require_instance(self, name: str) -> SonarInstanceConfig:
        instance = self.get_instance(name)
        if instance is None:
            raise InstanceNotFoundError(name)
        return instance

    def names(self) -> list[str]:
        return [instance.name for instance in self.instances]


@dataclass(frozen=True)
class JobConfigData:
    """Per-job gate settings, snapshotted once per build."""
    project_key: str
    sonar_instance_name: str = ""
    ignore_warnings: bool = False

    @property
    def uses_default_instance(self) -> bool:
        return self.sonar_instance_name == ""


@dataclass
class BuildContext:
    """Host-supplied information about the running build."""
    build_id: str = ""
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of a single status query: a status or the error that prevented it."""
    status: GateStatus | None = None
    error: GateQueryError | None = None

    def __post_init__(self) -> None:
        if (self.status is None) == (self.error is None):
            raise ValueError("EvaluationResult needs exactly one of status or error")

    @classmethod
    def success(cls, status: GateStatus) -> EvaluationResult:
        return cls(status=status)

    @classmethod
    def failure(cls, error: GateQueryError) -> EvaluationResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Outcome:
    """Build decision produced by the gate controller's perform phase."""
    passed: bool
    status: GateStatus | None = None
    build_result: BuildResult = BuildResult.FAILURE

    @property
    def summary_flag(self) -> str:
        return "TRUE" if self.passed else "FALSE"
