"""Stream-backed build listener used by the command line host."""

from __future__ import annotations

import sys
from typing import TextIO


class StreamListener:
    """Writes build-log lines to a text stream.

    Error lines are prefixed with ``ERROR: `` the way build servers mark
    them in console output.
    """

    ERROR_PREFIX = "ERROR: "

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def log(self, line: str) -> None:
        self._stream.write(line + "\n")
        self._stream.flush()

    def error(self, fmt: str, arg: str) -> TextIO:
        self._stream.write(self.ERROR_PREFIX + (fmt % arg) + "\n")
        self._stream.flush()
        return self._stream

    def raw_output(self) -> TextIO:
        return self._stream
