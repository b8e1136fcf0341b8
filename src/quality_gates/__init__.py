"""Quality Gates build step.

Resolves the SonarQube instance configured for a job, reads the project's
quality gate status and turns it into a pass/fail build decision.
"""

__version__ = "1.0.0"
