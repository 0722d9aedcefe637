# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Exception types raised by levelog.

Malformed templates are deliberately absent: a broken placeholder degrades
to literal text instead of raising.
"""


class LevelogError(Exception):
    """Base class for all levelog errors."""


class InvalidLevelError(LevelogError, ValueError):
    """Raised when a level name cannot be resolved to a Level."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid log level: {name!r}")


class SinkWriteError(LevelogError, OSError):
    """Raised when the output sink fails to accept a log line."""


class LoggerPanic(LevelogError, RuntimeError):
    """Raised by Logger.panic() after the message has been logged."""
