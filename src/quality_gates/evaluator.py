"""Status evaluation: query the server and classify the quality gate."""

from __future__ import annotations

import logging
from typing import Callable

from src.quality_gates.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from src.quality_gates.exceptions import GateQueryError
from src.quality_gates.models import (
    EvaluationResult,
    GateStatus,
    JobConfigData,
    SonarInstanceConfig,
)
from src.quality_gates.protocols import StatusClient
from src.quality_gates.sonar_client import SonarClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[SonarInstanceConfig], StatusClient]

# SonarQube alert status -> gate status. NONE means no gate is bound to the
# project and is reported as a query error, like any unknown value.
_STATUS_MAP: dict[str, GateStatus] = {
    "OK": GateStatus.PASS,
    "WARN": GateStatus.WARN,
    "ERROR": GateStatus.FAIL,
}


class StatusEvaluator:
    """Reads a project's gate status from a resolved SonarQube instance.

    Exactly one status query is made per :meth:`evaluate` call. Failures
    are returned as :class:`EvaluationResult` values rather than raised.
    """

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self._client_factory = client_factory or (
            lambda instance: SonarClient(instance, timeout=timeout)
        )

    def evaluate(
        self, instance: SonarInstanceConfig, job_config: JobConfigData
    ) -> EvaluationResult:
        """Query *instance* for the gate status of the job's project.

        Args:
            instance: The resolved SonarQube instance.
            job_config: The job's settings; ``project_key`` selects the project.

        Returns:
            ``EvaluationResult.success(status)`` or
            ``EvaluationResult.failure(error)``.
        """
        project_key = job_config.project_key
        client = self._client_factory(instance)
        try:
            raw_status = client.get_project_status(project_key)
        except GateQueryError as exc:
            logger.error("Quality gate query for '%s' failed: %s", project_key, exc)
            return EvaluationResult.failure(exc)
        finally:
            client.close()

        status = _STATUS_MAP.get(raw_status.upper())
        if status is None:
            if raw_status.upper() == "NONE":
                message = f"No quality gate is associated with project '{project_key}'"
            else:
                message = f"Unrecognised quality gate status '{raw_status}' for project '{project_key}'"
            logger.error(message)
            return EvaluationResult.failure(GateQueryError(message, project_key=project_key))

        logger.info("Project '%s' quality gate status: %s", project_key, status.value)
        return EvaluationResult.success(status)
