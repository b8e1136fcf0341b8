"""Instance resolution: pick the SonarQube instance a job should query."""

from __future__ import annotations

import logging

from src.quality_gates.models import GlobalConfig, JobConfigData, SonarInstanceConfig

logger = logging.getLogger(__name__)


def choose_instance(
    global_config: GlobalConfig, job_config: JobConfigData
) -> SonarInstanceConfig | None:
    """Select the instance configured for *job_config*.

    A job with an empty instance name uses the registry's first entry.
    Any other name must match a registered instance exactly.

    Args:
        global_config: Registry of all known instances.
        job_config: The job's gate settings.

    Returns:
        The matching instance, or ``None`` when nothing matches (including
        an empty registry).
    """
    if job_config.uses_default_instance:
        instance = global_config.default_instance
        if instance is not None:
            logger.debug("Using default SonarQube instance '%s'", instance.name)
        return instance

    instance = global_config.get_instance(job_config.sonar_instance_name)
    if instance is None:
        logger.warning(
            "SonarQube instance '%s' not found among %d registered instance(s)",
            job_config.sonar_instance_name,
            len(global_config.instances),
        )
    return instance
