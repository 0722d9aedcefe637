# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Severity levels and color modes.

Levels are ranked so that a lower rank is more urgent. A record is emitted
when its rank is no greater than the rank of the configured threshold.
"""

import logging
from enum import Enum, IntEnum

from .exceptions import InvalidLevelError

# ANSI foreground color codes
BLACK = 30
RED = 31
GREEN = 32
YELLOW = 33
BLUE = 34
MAGENTA = 35
CYAN = 36
WHITE = 37

ANSI_RESET = "\033[0m"


def color_string(color: int) -> str:
    """Return the ANSI escape sequence that switches to ``color``."""
    return f"\033[{color}m"


class Level(IntEnum):
    """Ordered severity scale."""

    RAW = 1
    ERROR = 2
    WARNING = 3
    SUCCESS = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7
    TRACE = 8

    def __str__(self) -> str:
        return self.name

    @property
    def abbreviation(self) -> str:
        """Three character display form (``ERR``, ``INF``, ...)."""
        return self.name[:3]

    @property
    def color_code(self) -> int:
        return _COLORS[self]

    @property
    def ansi_prefix(self) -> str:
        return color_string(_COLORS[self])

    @property
    def stdlib_level(self) -> int:
        """Closest numeric level of the standard library ``logging`` module."""
        return _STDLIB_LEVELS[self]


_COLORS = {
    Level.RAW: WHITE,
    Level.ERROR: RED,
    Level.WARNING: YELLOW,
    Level.SUCCESS: GREEN,
    Level.NOTICE: CYAN,
    Level.INFO: WHITE,
    Level.DEBUG: BLUE,
    Level.TRACE: MAGENTA,
}

_STDLIB_LEVELS = {
    Level.RAW: logging.CRITICAL,
    Level.ERROR: logging.ERROR,
    Level.WARNING: logging.WARNING,
    Level.SUCCESS: logging.INFO,
    Level.NOTICE: logging.INFO,
    Level.INFO: logging.INFO,
    Level.DEBUG: logging.DEBUG,
    Level.TRACE: logging.DEBUG,
}


class Severity(Enum):
    """Result of comparing the urgency of two levels."""

    MORE = 1
    EQUAL = 0
    LESS = -1


class ColorMode(Enum):
    """Color output setting.

    ENABLED and DISABLED are explicit overrides; NOT_SET and AUTO defer to
    the color default of the active environment.
    """

    NOT_SET = 0
    DISABLED = 1
    ENABLED = 2
    AUTO = 3

    @property
    def is_explicit(self) -> bool:
        return self in (ColorMode.ENABLED, ColorMode.DISABLED)


def rank(level: Level) -> int:
    """Return the numeric rank of ``level`` (lower is more urgent)."""
    return int(level)


def compare_severity(a: Level, b: Level) -> Severity:
    """Compare the urgency of ``a`` relative to ``b``.

    Returns Severity.MORE when ``a`` is more urgent than ``b``.
    """
    if rank(a) < rank(b):
        return Severity.MORE
    if rank(a) > rank(b):
        return Severity.LESS
    return Severity.EQUAL


def parse_level(name: "str | Level") -> Level:
    """Resolve a level name (case-insensitive) to a Level.

    Raises:
        InvalidLevelError: If ``name`` is not a known level
    """
    if isinstance(name, Level):
        return name
    try:
        return Level[str(name).strip().upper()]
    except KeyError:
        raise InvalidLevelError(str(name)) from None
