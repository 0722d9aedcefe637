# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Logger interface and the template-rendering logger."""

import copy
import logging
import sys
import time
import traceback
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, TextIO

from .config import LoggerOptions
from .environment import Environment, resolve_environment
from .exceptions import LoggerPanic, SinkWriteError
from .fields import Fields, redact_value
from .levels import ColorMode, Level, parse_level
from .record import (
    SEQUENCE,
    CallSiteResolver,
    FrameCallSiteResolver,
    Record,
    SequenceCounter,
    format_duration,
    format_message,
)
from .sinks import Sink
from .worker import Worker

logger = logging.getLogger(__name__)


class Logger(ABC):
    """Abstract base class for loggers.

    Level methods take a printf-style message, its arguments, and structured
    fields as keyword arguments::

        logger.info("user %s signed in", user_id, request_id="req-123")

    They never raise on output failure; use log() to get SinkWriteError.
    """

    @abstractmethod
    def log(self, level: Level | str, message: str, /, *args: Any, **fields: Any) -> None:
        """Log a message at ``level``.

        Args:
            level: Level or level name
            message: The log message, printf-style when ``args`` are given
            *args: Message arguments
            **fields: Additional structured data to log

        Raises:
            InvalidLevelError: If ``level`` is an unknown level name
            SinkWriteError: If the output sink fails
        """
        pass

    def _emit(self, level: Level, message: str, args: tuple, fields: dict[str, Any]) -> None:
        try:
            self.log(level, message, *args, **fields)
        except SinkWriteError as e:
            logger.warning("Dropped %s log line: %s", level.name, e)

    def raw(self, message: str, /, *args: Any, **fields: Any) -> None:
        """Write the message verbatim, regardless of threshold and color."""
        self._emit(Level.RAW, message, args, fields)

    def error(self, message: str, /, *args: Any, **fields: Any) -> None:
        self._emit(Level.ERROR, message, args, fields)

    def warning(self, message: str, /, *args: Any, **fields: Any) -> None:
        self._emit(Level.WARNING, message, args, fields)

    def success(self, message: str, /, *args: Any, **fields: Any) -> None:
        self._emit(Level.SUCCESS, message, args, fields)

    def notice(self, message: str, /, *args: Any, **fields: Any) -> None:
        self._emit(Level.NOTICE, message, args, fields)

    def info(self, message: str, /, *args: Any, **fields: Any) -> None:
        self._emit(Level.INFO, message, args, fields)

    def debug(self, message: str, /, *args: Any, **fields: Any) -> None:
        self._emit(Level.DEBUG, message, args, fields)

    def trace(self, message: str, /, *args: Any, **fields: Any) -> None:
        self._emit(Level.TRACE, message, args, fields)

    def exception(self, message: str, /, *args: Any, **fields: Any) -> None:
        """Log an error-level message with the exception being handled.

        Intended for logging an error message in an exception handler.
        """
        if sys.exc_info()[0] is not None:
            message = redact_value(message) + "\n" + traceback.format_exc().rstrip("\n")
        self._emit(Level.ERROR, message, args, fields)


class TextLogger(Logger):
    """Logger rendering records through a compiled template onto a sink."""

    def __init__(
        self,
        options: LoggerOptions | None = None,
        resolver: CallSiteResolver | None = None,
        sequence: SequenceCounter | None = None,
    ):
        """Initialize text logger.

        Args:
            options: Logger options (defaults apply when omitted)
            resolver: Call-site resolver (default: frame inspection)
            sequence: Record id counter (default: a counter wrapping at
                ``options.sequence_ceiling`` when set, else the process-wide one)
        """
        self.options = options or LoggerOptions()
        self.module = self.options.module
        self.context = ""
        self._resolver = resolver or FrameCallSiteResolver()
        if sequence is None and self.options.sequence_ceiling:
            sequence = SequenceCounter(self.options.sequence_ceiling)
        self._sequence = sequence or SEQUENCE
        self._timer_start = time.monotonic()

        environment = resolve_environment(self.options.environment, self.options.build_env)
        self._worker = Worker(
            self.options.output,
            self.options.color,
            environment,
            self.options.ring_capacity,
        )
        self._apply_custom_format()
        if self.options.level is not None:
            self._worker.set_log_level(self.options.level)
        if self.options.use_json:
            self._worker.use_json(True)
        if self.options.dump_enabled:
            self._worker.set_dump_behavior(True, self.options.dump_trigger, self.options.dump_prefix)
        logger.debug("Logger %s created in %s environment", self.module, self._worker.environment.name)

    @property
    def worker(self) -> Worker:
        return self._worker

    @property
    def environment(self) -> Environment:
        return self._worker.environment

    @property
    def level(self) -> Level:
        return self._worker.level

    def _apply_custom_format(self) -> None:
        environment = self._worker.environment
        if environment is Environment.PRODUCTION and self.options.fmt_production:
            self._worker.set_format(self.options.fmt_production)
        elif environment is Environment.DEVELOPMENT and self.options.fmt_development:
            self._worker.set_format(self.options.fmt_development)

    def _make_record(self, level: Level, message: str, args: tuple, fields: dict[str, Any], **request: Any) -> Record:
        site = self._resolver.resolve(self.options.extra_calldepth)
        duration = request.pop("duration", None)
        return Record(
            id=self._sequence.next(),
            time=datetime.now().astimezone(),
            module=self.module,
            level=level,
            fmt=message,
            args=args,
            filename=site.filename,
            line=site.line,
            function=self._worker.function or site.function,
            duration=self.elapsed() if duration is None else duration,
            fields=Fields(fields),
            context=self.context,
            **request,
        )

    def log(self, level: Level | str, message: str, /, *args: Any, **fields: Any) -> None:
        level = parse_level(level)
        record = self._make_record(level, message, args, fields)
        self._worker.log(level, record, self.options.extra_calldepth)

    def trace_request(
        self,
        method: str,
        status_code: int,
        route: str,
        duration: timedelta,
        message: str = "",
        **fields: Any,
    ) -> None:
        """Log a TRACE record for a handled HTTP request.

        The request is resolved by the caller; method, status code, route and
        duration become the ``%{method}``, ``%{statuscode}``, ``%{route}`` and
        ``%{duration}`` placeholders.
        """
        record = self._make_record(
            Level.TRACE,
            message or f"{method} {route} {status_code}",
            (),
            fields,
            method=method,
            status_code=status_code,
            route=route,
            duration=duration,
        )
        try:
            self._worker.log(Level.TRACE, record, self.options.extra_calldepth)
        except SinkWriteError as e:
            logger.warning("Dropped TRACE log line: %s", e)

    def fatal(self, message: str, /, *args: Any, **fields: Any) -> None:
        """Log at ERROR level, then exit the process with status 1.

        The exit is skipped when ``exit_on_fatal`` is False, or when it is
        unset and the logger runs in the TESTING environment.
        """
        self._emit(Level.ERROR, message, args, fields)
        if self._should_exit():
            sys.exit(1)

    def panic(self, message: str, /, *args: Any, **fields: Any) -> None:
        """Log at ERROR level, then raise LoggerPanic with the message."""
        self._emit(Level.ERROR, message, args, fields)
        raise LoggerPanic(format_message(message, args))

    def stack(self, message: str = "") -> None:
        """Log the current call stack at ERROR level."""
        frames = traceback.format_stack(sys._getframe(1))
        self._emit(Level.ERROR, (message or "Stack info") + "\n" + "".join(frames).rstrip("\n"), (), {})

    def _should_exit(self) -> bool:
        if self.options.exit_on_fatal is not None:
            return self.options.exit_on_fatal
        return self._worker.environment is not Environment.TESTING

    def reset_timer(self) -> None:
        """Restart the clock reported by ``%{duration}``."""
        self._timer_start = time.monotonic()

    def elapsed(self) -> timedelta:
        return timedelta(seconds=time.monotonic() - self._timer_start)

    def time_track(self, start: float, name: str = "") -> None:
        """Log at DEBUG level how long something took since ``start``.

        Args:
            start: Value of time.monotonic() taken when the work started
            name: Optional label for the measured work
        """
        took = format_duration(timedelta(seconds=time.monotonic() - start))
        if name:
            self.debug("%s took %s", name, took)
        else:
            self.debug("took %s", took)

    def with_context(self, context: str) -> "TextLogger":
        """Return a logger whose messages are prefixed by ``context``.

        The new logger has its own lock and ring buffer; the sink is shared.
        """
        derived = self._derive()
        derived.context = self.context + context + self.options.context_separator
        return derived

    def with_level(self, level: Level | str) -> "TextLogger":
        """Return a logger with the same settings but another threshold."""
        derived = self._derive()
        derived.set_log_level(level)
        return derived

    def named(self, module: str) -> "TextLogger":
        """Return a view of this logger reporting ``module``.

        The view shares this logger's worker, so configuration changes apply
        to both.
        """
        view = copy.copy(self)
        view.module = module
        return view

    def _derive(self) -> "TextLogger":
        derived = copy.copy(self)
        derived._worker = self._worker.copy()
        return derived

    def set_module_name(self, module: str) -> None:
        self.module = module

    def set_format(self, source: str) -> None:
        """Compile a placeholder format and make it the active line format."""
        self._worker.set_format(source)

    def set_log_level(self, level: Level | str) -> None:
        self._worker.set_log_level(level)

    def set_function(self, name: str) -> None:
        self._worker.set_function(name)

    def set_environment(self, environment: Environment | str) -> None:
        """Switch environment; AUTO is resolved from the injected BUILD_ENV."""
        environment = resolve_environment(Environment.parse(environment), self.options.build_env)
        self._worker.set_environment(environment)
        self._apply_custom_format()

    def clear_testing(self) -> None:
        self._worker.clear_testing()
        self._apply_custom_format()

    def set_color(self, mode: ColorMode) -> None:
        self._worker.set_color(mode)

    def set_output(self, output: Sink | TextIO | None) -> None:
        self._worker.set_output(output)

    def use_json(self, enabled: bool = True) -> None:
        self._worker.use_json(enabled)

    def set_dump_behavior(self, enabled: bool, trigger: Level | str = Level.ERROR, prefix: str = "") -> None:
        self._worker.set_dump_behavior(enabled, trigger, prefix)

    def is_enabled_for(self, level: Level | str) -> bool:
        return self._worker.is_enabled_for(parse_level(level))
