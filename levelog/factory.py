# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Factory functions for creating logger instances."""

import threading
from typing import Any

from .config import LoggerOptions
from .logger import TextLogger
from .record import SEQUENCE
from .template import reset_default_format

_default_logger: TextLogger | None = None
_logger_registry: dict[str, TextLogger] = {}
_lock = threading.Lock()


def create_logger(options: LoggerOptions | None = None, **overrides: Any) -> TextLogger:
    """Factory function to create a logger instance.

    Args:
        options: Logger options. Defaults to options read from the LOG_*
            and BUILD_ENV environment variables.
        **overrides: Option values that replace those in ``options``

    Returns:
        TextLogger instance

    Raises:
        InvalidLevelError: If a configured level name is unknown

    Example:
        >>> logger = create_logger(module="billing", level="DEBUG")
        >>> logger.info("invoice %s sent", 1042)
        >>>
        >>> # Keep lines in memory for tests
        >>> from levelog.sinks import MemorySink
        >>> sink = MemorySink()
        >>> logger = create_logger(module="billing", output=sink)
    """
    if options is None:
        options = LoggerOptions.from_env(**overrides)
    elif overrides:
        options = options.with_updates(**overrides)
    return TextLogger(options)


def set_default_logger(logger: TextLogger) -> None:
    """Set the process-wide default logger.

    Named loggers handed out by get_logger() before this call keep the old
    default; later calls derive from ``logger``.
    """
    global _default_logger, _logger_registry
    with _lock:
        _default_logger = logger
        _logger_registry = {}


def get_logger(name: str | None = None) -> TextLogger:
    """Return the default logger, or a view of it named ``name``.

    A default logger is created from the environment on first use. Named
    views share the default logger's sink and configuration and report
    ``name`` as their module. They are cached per name.

    Args:
        name: Module name reported by the returned logger

    Returns:
        TextLogger instance
    """
    global _default_logger
    with _lock:
        if _default_logger is None:
            _default_logger = create_logger()
        if name is None:
            return _default_logger
        if name not in _logger_registry:
            _logger_registry[name] = _default_logger.named(name)
        return _logger_registry[name]


def reset() -> None:
    """Forget the default logger and restart record ids and the default format."""
    global _default_logger, _logger_registry
    with _lock:
        _default_logger = None
        _logger_registry = {}
    SEQUENCE.reset()
    reset_default_format()
