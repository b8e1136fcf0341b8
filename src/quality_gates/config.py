"""Loaders for the instance registry and per-job gate settings."""

from __future__ import annotations

import re
from dataclasses import fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from src.quality_gates.exceptions import ConfigurationError
from src.quality_gates.models import GlobalConfig, JobConfigData, SonarInstanceConfig

_VARIABLE_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")

# Job files written by the build server UI use camelCase keys.
_JOB_KEY_ALIASES: dict[str, str] = {
    "projectKey": "project_key",
    "sonarInstanceName": "sonar_instance_name",
    "ignoreWarnings": "ignore_warnings",
}


def _pick(data: Mapping[str, Any], cls: type) -> dict[str, Any]:
    """Filter *data* to only keys accepted by the dataclass *cls*."""
    valid = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid}


def _parse_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ConfigurationError(f"'{key}' must be true or false, got {value!r}")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {path}")
    return raw


def load_global_config(path: Path | str | None = None) -> GlobalConfig:
    """Load the SonarQube instance registry from a YAML file.

    Instances keep their file order; the first one is the default. A
    missing file yields an empty registry. Unknown keys are ignored.

    Args:
        path: Path to the registry YAML.

    Returns:
        Populated, read-only registry.

    Raises:
        ConfigurationError: On invalid YAML, entries without a name, or
            duplicate instance names.
    """
    if path is None:
        return GlobalConfig()

    path = Path(path)
    if not path.exists():
        return GlobalConfig()

    raw = _read_yaml(path)
    instances: list[SonarInstanceConfig] = []
    for entry in raw.get("instances") or []:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigurationError(f"Every instance in {path} needs a name")
        instances.append(SonarInstanceConfig(**_pick(entry, SonarInstanceConfig)))
    return GlobalConfig(instances=tuple(instances))


def expand_project_key(project_key: str, env: Mapping[str, str]) -> str:
    """Substitute ``$VAR`` and ``${VAR}`` references from the build environment.

    Raises:
        ConfigurationError: If a referenced variable is not set.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if name not in env:
            raise ConfigurationError(
                f"Environment variable '{name}' used in project key '{project_key}' is not set"
            )
        return env[name]

    return _VARIABLE_RE.sub(_replace, project_key)


def build_job_config(
    data: Mapping[str, Any], env: Mapping[str, str] | None = None
) -> JobConfigData:
    """Create a :class:`JobConfigData` snapshot from raw job settings.

    Accepts both snake_case and the build server's camelCase keys. The
    project key has build environment variables expanded.
    """
    normalized = {_JOB_KEY_ALIASES.get(k, k): v for k, v in data.items()}
    picked = _pick(normalized, JobConfigData)
    project_key = str(picked.get("project_key") or "").strip()
    if not project_key:
        raise ConfigurationError("The job configuration has no project key")

    return JobConfigData(
        project_key=expand_project_key(project_key, env or {}),
        sonar_instance_name=str(picked.get("sonar_instance_name") or ""),
        ignore_warnings=_parse_bool(picked.get("ignore_warnings"), "ignore_warnings"),
    )


def load_job_config(path: Path | str, env: Mapping[str, str] | None = None) -> JobConfigData:
    """Load a job's gate settings from a YAML file.

    Raises:
        ConfigurationError: If the file is missing or has no project key.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Job configuration file not found: {path}")
    return build_job_config(_read_yaml(path), env)
