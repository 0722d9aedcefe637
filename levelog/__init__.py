# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Levelog: leveled, template-driven logging.

Records carry a sequence id, timestamp, module, call site and message, and
are rendered through a placeholder format such as
``"#%{id} %{time} %{filename}:%{line} ▶ %{lvl} %{message}"``. Environments
(development, quality, testing, production) select the threshold, colors
and format, and an optional dump policy replays buffered low-severity lines
when an error is logged.

Example:
    >>> from levelog import create_logger
    >>>
    >>> logger = create_logger(module="ingestion", environment="dev")
    >>> logger.info("Service started on port %d", 8080, version="1.0.0")
    >>>
    >>> # Capture lines in memory for tests
    >>> from levelog import MemorySink
    >>> sink = MemorySink()
    >>> test_logger = create_logger(module="ingestion", output=sink)
    >>> test_logger.error("Test message")
    >>> sink.has_line("Test message")
    True
"""

__version__ = "0.1.0"

from .config import LoggerOptions
from .environment import Environment
from .exceptions import InvalidLevelError, LevelogError, LoggerPanic, SinkWriteError
from .factory import create_logger, get_logger, set_default_logger
from .fields import Fields, Redactor, Secret, redact
from .levels import ColorMode, Level, parse_level
from .logger import Logger, TextLogger
from .sinks import MemorySink, Sink, StdlibSink, StreamSink
from .template import Template, compile_format, set_default_format

__all__ = [
    "__version__",
    "ColorMode",
    "Environment",
    "Fields",
    "InvalidLevelError",
    "Level",
    "LevelogError",
    "Logger",
    "LoggerOptions",
    "LoggerPanic",
    "MemorySink",
    "Redactor",
    "Secret",
    "Sink",
    "SinkWriteError",
    "StdlibSink",
    "StreamSink",
    "Template",
    "TextLogger",
    "compile_format",
    "create_logger",
    "get_logger",
    "parse_level",
    "redact",
    "set_default_format",
    "set_default_logger",
]
