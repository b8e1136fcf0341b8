"""Gate Controller -- drives one build through instance resolution and gate evaluation.

Lifecycle per build::

    not_started --prebuild--> resolved --perform--> evaluated --> done
                                          \\--query error------------> done

``prebuild`` resolves the SonarQube instance and aborts the build step
when the job names an instance that is no longer registered. ``perform``
evaluates the gate, applies the outcome policy and writes the summary line.
A controller serves exactly one build; running a phase out of order raises
:class:`ControllerStateError`.
"""

from __future__ import annotations

import logging
import traceback
from typing import Callable, Optional

from src.quality_gates.constants import (
    BUILD_PASSED_PREFIX,
    DEFAULT_CONFIGURATION_WARNING,
    GLOBAL_CONFIG_NO_LONGER_EXISTS_ERROR,
)
from src.quality_gates.evaluator import StatusEvaluator
from src.quality_gates.exceptions import ControllerStateError, GateQueryError
from src.quality_gates.models import (
    BuildContext,
    BuildResult,
    EvaluationResult,
    GateStatus,
    GlobalConfig,
    JobConfigData,
    Outcome,
    SonarInstanceConfig,
)
from src.quality_gates.protocols import BuildListener
from src.quality_gates.resolver import choose_instance
from src.quality_gates.state_machine import create_gate_machine
from src.shared.logging import bind_build_id

logger = logging.getLogger(__name__)

Resolver = Callable[[GlobalConfig, JobConfigData], Optional[SonarInstanceConfig]]


def decide_outcome(status: GateStatus, ignore_warnings: bool) -> Outcome:
    """Translate a gate status into a build outcome.

    PASS and WARN continue the build, FAIL stops it. ``ignore_warnings``
    only decides whether WARN is recorded as UNSTABLE or SUCCESS; it has
    no effect on FAIL.
    """
    if status == GateStatus.PASS:
        return Outcome(passed=True, status=status, build_result=BuildResult.SUCCESS)
    if status == GateStatus.WARN:
        result = BuildResult.SUCCESS if ignore_warnings else BuildResult.UNSTABLE
        return Outcome(passed=True, status=status, build_result=result)
    return Outcome(passed=False, status=status, build_result=BuildResult.FAILURE)


class GateController:
    """Orchestrates the resolver and evaluator for a single build.

    The global registry and job settings are read-only snapshots supplied
    by the host. After :meth:`perform` the decision is kept in
    :attr:`outcome` so hosts can mark the build unstable.
    """

    def __init__(
        self,
        job_config: JobConfigData,
        global_config: GlobalConfig,
        evaluator: StatusEvaluator | None = None,
        resolver: Resolver = choose_instance,
    ) -> None:
        self.job_config = job_config
        self.global_config = global_config
        self._evaluator = evaluator or StatusEvaluator()
        self._resolve = resolver
        self.instance: SonarInstanceConfig | None = None
        self.outcome: Outcome | None = None
        self.machine = create_gate_machine(self)

    # ------------------------------------------------------------------
    # Host lifecycle hooks
    # ------------------------------------------------------------------

    def prebuild(self, build: BuildContext, listener: BuildListener) -> bool:
        """Resolve the job's SonarQube instance.

        Returns:
            ``True`` when an instance was found; ``False`` (after writing an
            error line naming the requested instance) otherwise.
        """
        if self.state != "not_started":
            raise ControllerStateError("prebuild", self.state)

        with bind_build_id(build.build_id):
            instance = self._resolve(self.global_config, self.job_config)
            if instance is None:
                requested = self.job_config.sonar_instance_name
                logger.error("Aborting build step: SonarQube instance '%s' not registered", requested)
                listener.error(GLOBAL_CONFIG_NO_LONGER_EXISTS_ERROR, requested)
                return False

            self.instance = instance
            self.instance_resolved()
            logger.info("Resolved SonarQube instance '%s' (%s)", instance.name, instance.url)
            return True

    def perform(self, build: BuildContext, listener: BuildListener) -> bool:
        """Evaluate the quality gate and report the build decision.

        Returns:
            Whether the build may continue. Query errors yield ``False``
            and are never propagated.
        """
        if self.state != "resolved" or self.instance is None:
            raise ControllerStateError("perform", self.state)

        with bind_build_id(build.build_id):
            if self.job_config.uses_default_instance:
                listener.log(DEFAULT_CONFIGURATION_WARNING)

            result = self._evaluate()
            if result.error is not None:
                err = result.error
                traceback.print_exception(
                    type(err), err, err.__traceback__, file=listener.raw_output()
                )
                self.outcome = Outcome(passed=False, build_result=BuildResult.FAILURE)
                self.finish()
                return False

            self.status_evaluated()
            outcome = decide_outcome(result.status, self.job_config.ignore_warnings)
            self.outcome = outcome
            listener.log(BUILD_PASSED_PREFIX + outcome.summary_flag)
            logger.info(
                "Quality gate for '%s': status=%s, result=%s, passed=%s",
                self.job_config.project_key,
                outcome.status.value,
                outcome.build_result.value,
                outcome.passed,
            )
            self.finish()
            return outcome.passed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _evaluate(self) -> EvaluationResult:
        project_key = self.job_config.project_key
        try:
            return self._evaluator.evaluate(self.instance, self.job_config)
        except GateQueryError as exc:
            return EvaluationResult.failure(exc)
        except Exception as exc:
            logger.exception("Unexpected error while evaluating '%s'", project_key)
            err = GateQueryError(
                f"Quality gate evaluation failed for project '{project_key}': {exc}",
                project_key=project_key,
            )
            err.__cause__ = exc
            return EvaluationResult.failure(err)
