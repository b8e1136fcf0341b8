"""Shared test fixtures for the quality gates test suite."""
from __future__ import annotations

import io
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import yaml

from src.quality_gates.evaluator import StatusEvaluator
from src.quality_gates.listener import StreamListener
from src.quality_gates.models import (
    BuildContext,
    EvaluationResult,
    GateStatus,
    GlobalConfig,
    JobConfigData,
    SonarInstanceConfig,
)
from src.quality_gates.protocols import BuildListener


@pytest.fixture
def sonar_instance() -> SonarInstanceConfig:
    return SonarInstanceConfig(
        name="main",
        url="https://sonar.test",
        token="secret-token",
        time_to_wait=10,
        max_wait_time=0,
    )


@pytest.fixture
def other_instance() -> SonarInstanceConfig:
    return SonarInstanceConfig(
        name="legacy",
        url="http://sonar-legacy.test:9000",
        username="admin",
        password="admin",
        max_wait_time=0,
    )


@pytest.fixture
def global_config(sonar_instance, other_instance) -> GlobalConfig:
    return GlobalConfig(instances=(sonar_instance, other_instance))


@pytest.fixture
def build() -> BuildContext:
    return BuildContext(build_id="build-42", env={"PROJECT_KEY": "org:app"})


@pytest.fixture
def mock_listener() -> MagicMock:
    """Listener mock whose raw output is a real text buffer."""
    listener = MagicMock(spec=BuildListener)
    listener.raw_output.return_value = io.StringIO()
    return listener


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def stream_listener(stream) -> StreamListener:
    return StreamListener(stream)


@pytest.fixture
def mock_evaluator() -> MagicMock:
    evaluator = MagicMock(spec=StatusEvaluator)
    evaluator.evaluate.return_value = EvaluationResult.success(GateStatus.PASS)
    return evaluator


@pytest.fixture
def make_job():
    """Factory for job settings; defaults to the 'main' instance."""

    def _make(name: str = "main", ignore_warnings: bool = False, project_key: str = "org:app") -> JobConfigData:
        return JobConfigData(
            project_key=project_key,
            sonar_instance_name=name,
            ignore_warnings=ignore_warnings,
        )

    return _make


@pytest.fixture
def write_yaml():
    """Dump data to a YAML file and return its path."""

    def _write(path: Path, data: Any) -> Path:
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write
