# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Output sinks that receive rendered log lines."""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, TextIO

from .exceptions import SinkWriteError
from .levels import Level
from .record import internal_depth


class Sink(ABC):
    """Abstract destination for rendered log lines.

    A sink accepts opaque lines with no acknowledgement semantics. The worker
    calls it while holding its lock, so implementations need not be
    thread-safe themselves.
    """

    @abstractmethod
    def write_line(self, line: str, level: Level, calldepth: int = 0) -> None:
        """Write one rendered line.

        Args:
            line: Rendered log line without trailing newline
            level: Level of the record the line was rendered from
            calldepth: Extra frames between the levelog package and the
                original call site (set when a logger is wrapped)

        Raises:
            SinkWriteError: If the underlying target rejects the write
        """
        pass

    def flush(self) -> None:
        """Flush buffered output, if the sink buffers any."""


class StreamSink(Sink):
    """Sink writing newline-terminated lines to a text stream."""

    def __init__(self, stream: TextIO | None = None):
        """Initialize stream sink.

        Args:
            stream: Any writable text stream. Defaults to ``sys.stderr``.
        """
        self.stream = stream if stream is not None else sys.stderr

    def write_line(self, line: str, level: Level, calldepth: int = 0) -> None:
        try:
            self.stream.write(line + "\n")
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"Failed to write log line: {e}") from e

    def flush(self) -> None:
        try:
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"Failed to flush log stream: {e}") from e


class MemorySink(Sink):
    """Sink that keeps lines in memory.

    Useful for testing to verify logging behavior without cluttering test output.
    """

    def __init__(self) -> None:
        self.logs: list[dict[str, Any]] = []

    @property
    def lines(self) -> list[str]:
        return [entry["line"] for entry in self.logs]

    def write_line(self, line: str, level: Level, calldepth: int = 0) -> None:
        self.logs.append({"level": level, "line": line})

    def clear(self) -> None:
        """Clear all stored lines (useful for testing)."""
        self.logs.clear()

    def get_lines(self, level: Level | None = None) -> list[str]:
        """Get stored lines, optionally filtered by level.

        Args:
            level: Optional level to filter by

        Returns:
            List of rendered lines
        """
        if level is None:
            return self.lines
        return [entry["line"] for entry in self.logs if entry["level"] == level]

    def has_line(self, text: str, level: Level | None = None) -> bool:
        """Check if a line containing ``text`` was written.

        Args:
            text: Text to search for (substring match)
            level: Optional level to filter by

        Returns:
            True if a matching line is found, False otherwise
        """
        return any(text in line for line in self.get_lines(level))


class StdlibSink(Sink):
    """Sink forwarding lines to a standard library logger.

    The stack level passed to ``logging`` points at the original call site,
    so handler formatters using ``%(filename)s`` or ``%(lineno)d`` and pytest's
    ``caplog`` see user code rather than levelog internals.
    """

    def __init__(self, name: str = "levelog.output"):
        """Initialize stdlib sink.

        Args:
            name: Name of the stdlib logger to forward to
        """
        self.name = name
        self._stdlib_logger = logging.getLogger(name)

    def write_line(self, line: str, level: Level, calldepth: int = 0) -> None:
        stacklevel = internal_depth() + 1 + calldepth
        try:
            self._stdlib_logger.log(level.stdlib_level, line, stacklevel=stacklevel)
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"Failed to forward log line: {e}") from e


def as_sink(output: "Sink | TextIO | None") -> Sink:
    """Wrap a stream in a StreamSink; None selects ``sys.stderr``."""
    if isinstance(output, Sink):
        return output
    return StreamSink(output)
