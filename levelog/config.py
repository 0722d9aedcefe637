# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Logger options and environment-variable configuration."""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, TextIO

from .environment import Environment
from .levels import ColorMode, Level, parse_level
from .sinks import Sink
from .worker import DEFAULT_RING_CAPACITY

logger = logging.getLogger(__name__)

DEFAULT_MODULE = "unknown"


class EnvConfigProvider:
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._environ.get(key)
        if value is None:
            return default

        value_lower = value.lower()
        if value_lower in ("true", "1", "yes", "y", "t", "on"):
            return True
        if value_lower in ("false", "0", "no", "n", "f", "off"):
            return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._environ.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default


@dataclass
class LoggerOptions:
    """Options for building a logger.

    Attributes:
        module: Name of the running module; names of three characters or
            fewer are replaced by "unknown"
        environment: Environment override; AUTO detects it from ``build_env``
        build_env: BUILD_ENV value injected at construction ("dev", "qa", ...)
        color: Color mode
        output: Sink or text stream; None selects sys.stderr
        level: Threshold override applied after the environment defaults
        fmt_production: Placeholder format used in PRODUCTION (None keeps the built-in)
        fmt_development: Placeholder format used in DEVELOPMENT (None keeps the built-in)
        use_json: Render JSON in PRODUCTION/TESTING
        ring_capacity: Lines retained by the dump policy; values below 1 are
            replaced by the default capacity
        dump_enabled: Enable dump-on-trigger
        dump_trigger: Level that flushes buffered lines
        dump_prefix: Prefix of buffered lines
        context_separator: Separator appended by Logger.with_context()
        exit_on_fatal: Whether fatal() exits; None exits except under TESTING
        extra_calldepth: Frames to skip above levelog when resolving call sites
        sequence_ceiling: Record id after which ids wrap back to 1; None
            shares the process-wide counter, which never wraps
    """

    module: str = DEFAULT_MODULE
    environment: Environment = Environment.AUTO
    build_env: str | None = None
    color: ColorMode = ColorMode.NOT_SET
    output: Sink | TextIO | None = None
    level: Level | None = None
    fmt_production: str | None = None
    fmt_development: str | None = None
    use_json: bool = False
    ring_capacity: int = DEFAULT_RING_CAPACITY
    dump_enabled: bool = False
    dump_trigger: Level = Level.ERROR
    dump_prefix: str = ""
    context_separator: str = ": "
    exit_on_fatal: bool | None = None
    extra_calldepth: int = 0
    sequence_ceiling: int | None = None

    def __post_init__(self) -> None:
        if not self.module or len(self.module) <= 3:
            self.module = DEFAULT_MODULE
        self.environment = Environment.parse(self.environment)
        if isinstance(self.color, str):
            self.color = ColorMode[self.color.upper()]
        if self.level is not None:
            self.level = parse_level(self.level)
        self.dump_trigger = parse_level(self.dump_trigger)
        if self.ring_capacity < 1:
            logger.warning("Invalid ring capacity %d, using %d", self.ring_capacity, DEFAULT_RING_CAPACITY)
            self.ring_capacity = DEFAULT_RING_CAPACITY
        if self.sequence_ceiling is not None and self.sequence_ceiling < 1:
            logger.warning("Invalid sequence ceiling %d, ids will not wrap", self.sequence_ceiling)
            self.sequence_ceiling = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "LoggerOptions":
        """Create options from environment variables.

        Reads LOG_NAME, LOG_LEVEL, LOG_ENV, BUILD_ENV, LOG_COLOR, LOG_JSON,
        LOG_RING_CAPACITY and LOG_SEQUENCE_CEILING. Explicit ``overrides`` take
        precedence.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Option values that win over the environment

        Returns:
            Configured LoggerOptions instance

        Raises:
            InvalidLevelError: If LOG_LEVEL names an unknown level
        """
        provider = EnvConfigProvider(environ)
        values: dict[str, Any] = {
            "module": provider.get("LOG_NAME", DEFAULT_MODULE),
            "environment": Environment.parse(provider.get("LOG_ENV")),
            "build_env": provider.get("BUILD_ENV"),
            "use_json": provider.get_bool("LOG_JSON", False),
            "ring_capacity": provider.get_int("LOG_RING_CAPACITY", DEFAULT_RING_CAPACITY),
            "sequence_ceiling": provider.get_int("LOG_SEQUENCE_CEILING", 0) or None,
        }
        level = provider.get("LOG_LEVEL")
        if level:
            values["level"] = parse_level(level)
        color = provider.get("LOG_COLOR")
        if color is not None:
            values["color"] = ColorMode.ENABLED if provider.get_bool("LOG_COLOR") else ColorMode.DISABLED
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def with_updates(self, **updates: Any) -> "LoggerOptions":
        """Return a copy with the given fields replaced."""
        return replace(self, **updates)
