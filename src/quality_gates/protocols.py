"""Runtime-checkable protocols for the build listener and the status client."""

from __future__ import annotations

from typing import Protocol, TextIO, runtime_checkable


@runtime_checkable
class BuildListener(Protocol):
    """Protocol for the host's build-log listener."""

    def log(self, line: str) -> None:
        """Write one line to the build log.

        Args:
            line: The text to write, without a trailing newline.
        """
        ...

    def error(self, fmt: str, arg: str) -> TextIO:
        """Report an error line built from ``fmt % arg``.

        Args:
            fmt: ``%``-style format string with a single placeholder.
            arg: Value substituted into *fmt*.

        Returns:
            A writer for any further error detail.
        """
        ...

    def raw_output(self) -> TextIO:
        """Return the underlying stream used for exception diagnostics."""
        ...


@runtime_checkable
class StatusClient(Protocol):
    """Protocol for a client that reads a project's quality gate status."""

    def get_project_status(self, project_key: str) -> str:
        """Return the server's raw gate status (``OK``, ``WARN``, ``ERROR`` or ``NONE``).

        Raises:
            GateQueryError: If the status cannot be read.
        """
        ...

    def close(self) -> None:
        ...
