"""SonarQube Web API client for quality gate status lookups."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from src.quality_gates.constants import (
    CE_COMPONENT_PATH,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    PENDING_TASK_STATUSES,
    PROJECT_STATUS_PATH,
)
from src.quality_gates.exceptions import GateQueryError
from src.quality_gates.models import SonarInstanceConfig

logger = logging.getLogger(__name__)


class SonarClient:
    """Reads quality gate data for a project from one SonarQube instance.

    When the instance has a non-zero ``max_wait_time`` the client first
    waits for any pending background analysis of the project to finish,
    polling every ``time_to_wait`` milliseconds. Every failure surfaces as
    a :class:`GateQueryError`.

    Usage
    -----
    ::

        with SonarClient(instance) as client:
            status = client.get_project_status("my-project")
    """

    def __init__(
        self,
        instance: SonarInstanceConfig,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.instance = instance
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=instance.url.rstrip("/"),
            auth=instance.auth,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> SonarClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_project_status(self, project_key: str) -> str:
        """Return the raw quality gate status of *project_key*.

        Returns:
            One of ``OK``, ``WARN``, ``ERROR`` or ``NONE`` as reported by
            the server.

        Raises:
            GateQueryError: On any communication or response failure.
        """
        if self.instance.max_wait_time > 0:
            self.wait_for_analysis(project_key)

        data = self._get_json(PROJECT_STATUS_PATH, {"projectKey": project_key}, project_key)
        try:
            status = data["projectStatus"]["status"]
        except (KeyError, TypeError) as exc:
            raise GateQueryError(
                f"Malformed quality gate response for project '{project_key}'",
                project_key=project_key,
            ) from exc
        logger.info(
            "SonarQube '%s' reports gate status %s for project '%s'",
            self.instance.name, status, project_key,
        )
        return str(status)

    def wait_for_analysis(self, project_key: str) -> None:
        """Block until the project has no pending background analysis.

        Raises:
            GateQueryError: If the analysis is still pending after
                ``max_wait_time`` milliseconds.
        """
        deadline = time.monotonic() + self.instance.max_wait_time / 1000.0
        while self._analysis_pending(project_key):
            if time.monotonic() >= deadline:
                raise GateQueryError(
                    f"Analysis of project '{project_key}' did not finish within "
                    f"{self.instance.max_wait_time} ms",
                    project_key=project_key,
                )
            logger.info(
                "Analysis of project '%s' still pending, retrying in %d ms",
                project_key, self.instance.time_to_wait,
            )
            self._sleep(self.instance.time_to_wait / 1000.0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _analysis_pending(self, project_key: str) -> bool:
        data = self._get_json(CE_COMPONENT_PATH, {"component": project_key}, project_key)
        if not isinstance(data, dict):
            raise GateQueryError(
                f"Malformed analysis task response for project '{project_key}'",
                project_key=project_key,
            )
        if data.get("queue"):
            return True
        current = data.get("current") or {}
        return current.get("status") in PENDING_TASK_STATUSES

    def _get_json(self, path: str, params: dict[str, str], project_key: str) -> Any:
        try:
            resp = self._client.get(path, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            if code in (401, 403):
                message = (
                    f"Authentication to SonarQube '{self.instance.name}' failed "
                    f"(HTTP {code}); check the configured credentials"
                )
            elif code == 404:
                message = (
                    f"Project '{project_key}' was not found on SonarQube "
                    f"'{self.instance.name}'; check the project key"
                )
            else:
                message = f"SonarQube '{self.instance.name}' returned HTTP {code} for {path}"
            raise GateQueryError(message, project_key=project_key) from exc
        except httpx.HTTPError as exc:
            raise GateQueryError(
                f"Could not reach SonarQube '{self.instance.name}' at "
                f"{self.instance.url}: {exc}",
                project_key=project_key,
            ) from exc
        except ValueError as exc:
            raise GateQueryError(
                f"SonarQube '{self.instance.name}' returned a non-JSON response for {path}",
                project_key=project_key,
            ) from exc
