# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Render/dispatch engine.

The worker owns the mutable logging configuration (threshold, environment,
color mode, template, sink, dump policy) and turns accepted records into
lines on its sink. One lock guards all of it, and lines are written while
the lock is held so concurrent callers never interleave partial lines.
"""

import json
import logging
import threading
from typing import TextIO

from .environment import Environment, defaults_for, resolve_color
from .levels import ANSI_RESET, ColorMode, Level, Severity, compare_severity, parse_level, rank
from .record import Record
from .ring import RingBuffer
from .sinks import Sink, as_sink
from .template import Template, compile_format

logger = logging.getLogger(__name__)

DEFAULT_RING_CAPACITY = 32

_JSON_ENVIRONMENTS = (Environment.PRODUCTION, Environment.TESTING)


class Worker:
    """Decides whether and how a record is rendered, and writes it.

    Environment TESTING is sticky: once set, later environment changes are
    recorded in ``requested_environment`` but the effective settings stay
    those of TESTING until clear_testing() is called.
    """

    def __init__(
        self,
        output: Sink | TextIO | None = None,
        color: ColorMode = ColorMode.NOT_SET,
        environment: Environment = Environment.PRODUCTION,
        ring_capacity: int = DEFAULT_RING_CAPACITY,
    ):
        """Initialize worker.

        Args:
            output: Sink or text stream receiving lines (default: sys.stderr)
            color: Color mode
            environment: Initial environment; AUTO fails closed to PRODUCTION
            ring_capacity: Number of lines retained by the dump policy
        """
        self._lock = threading.Lock()
        self._sink = as_sink(output)
        self._color = color
        self._function = ""
        self._json = False
        self._dump_enabled = False
        self._dump_trigger = Level.ERROR
        self._dump_prefix = ""
        self._ring = RingBuffer(ring_capacity)
        self._pinned = False
        self._requested_environment = Environment.PRODUCTION
        self._environment = Environment.PRODUCTION
        self._level = Level.ERROR
        self._template: Template = defaults_for(Environment.PRODUCTION).template
        self._apply_environment(environment)

    @property
    def environment(self) -> Environment:
        """Environment whose settings are in effect."""
        return self._environment

    @property
    def requested_environment(self) -> Environment:
        """Environment most recently asked for, even while TESTING is pinned."""
        return self._requested_environment

    @property
    def level(self) -> Level:
        return self._level

    @property
    def template(self) -> Template:
        return self._template

    @property
    def color(self) -> ColorMode:
        return self._color

    @property
    def function(self) -> str:
        return self._function

    @property
    def output(self) -> Sink:
        return self._sink

    @property
    def ring(self) -> RingBuffer:
        return self._ring

    @property
    def json_enabled(self) -> bool:
        return self._json

    @property
    def dump_enabled(self) -> bool:
        return self._dump_enabled

    def set_format(self, source: str) -> None:
        """Compile a placeholder format and make it the active template."""
        template = compile_format(source)
        with self._lock:
            self._template = template

    def set_template(self, template: Template) -> None:
        with self._lock:
            self._template = template

    def set_log_level(self, level: Level | str) -> None:
        """Set the severity threshold.

        Raises:
            InvalidLevelError: If ``level`` is an unknown level name
        """
        level = parse_level(level)
        with self._lock:
            self._level = level

    def set_function(self, name: str) -> None:
        """Set the function tag reported by ``%{function}``."""
        with self._lock:
            self._function = name

    def set_color(self, mode: ColorMode) -> None:
        with self._lock:
            self._color = mode

    def set_output(self, output: Sink | TextIO | None) -> None:
        """Replace the sink; None selects sys.stderr."""
        sink = as_sink(output)
        with self._lock:
            self._sink = sink

    def use_json(self, enabled: bool = True) -> None:
        """Render JSON objects instead of template lines.

        Only takes effect in the PRODUCTION and TESTING environments.
        """
        with self._lock:
            self._json = enabled

    def set_dump_behavior(self, enabled: bool, trigger: Level | str = Level.ERROR, prefix: str = "") -> None:
        """Configure the dump-on-trigger policy.

        When enabled, records filtered out by the threshold but less urgent
        than ``trigger`` are rendered into the ring buffer and keep their own
        level. A record at or above ``trigger`` flushes the buffer before it
        is written. A buffered line leaves the ring only once it is written.

        Args:
            enabled: Turn buffering on or off
            trigger: Level that flushes the buffer
            prefix: Text prepended to every buffered line
        """
        trigger = parse_level(trigger)
        with self._lock:
            self._dump_enabled = enabled
            self._dump_trigger = trigger
            self._dump_prefix = prefix

    def set_ring_capacity(self, capacity: int) -> None:
        with self._lock:
            self._ring.set_capacity(capacity)

    def set_environment(self, environment: Environment) -> None:
        """Switch environment and apply its threshold and template."""
        with self._lock:
            self._apply_environment(environment)

    def clear_testing(self) -> None:
        """Release a pinned TESTING environment.

        The most recently requested environment takes effect.
        """
        with self._lock:
            self._pinned = False
            self._apply_environment(self._requested_environment)

    def _apply_environment(self, environment: Environment) -> None:
        self._requested_environment = environment
        if environment is Environment.TESTING:
            self._pinned = True
        if self._pinned:
            if environment is not Environment.TESTING:
                logger.debug("Environment %s recorded; output stays pinned to TESTING", environment.name)
            environment = Environment.TESTING
        elif environment is Environment.AUTO:
            environment = Environment.PRODUCTION
        self._environment = environment
        defaults = defaults_for(environment)
        self._level = defaults.threshold
        self._template = defaults.template

    def is_enabled_for(self, level: Level) -> bool:
        """Return True if a record at ``level`` passes the threshold."""
        with self._lock:
            return level is Level.RAW or rank(level) <= rank(self._level)

    def copy(self) -> "Worker":
        """Return a worker with the same settings, sink and an empty ring buffer."""
        with self._lock:
            clone = Worker(self._sink, self._color, Environment.PRODUCTION, self._ring.capacity)
            clone._pinned = self._pinned
            clone._requested_environment = self._requested_environment
            clone._environment = self._environment
            clone._level = self._level
            clone._template = self._template
            clone._function = self._function
            clone._json = self._json
            clone._dump_enabled = self._dump_enabled
            clone._dump_trigger = self._dump_trigger
            clone._dump_prefix = self._dump_prefix
        return clone

    def log(self, level: Level, record: Record, calldepth: int = 0) -> None:
        """Filter, render and write a record.

        RAW records bypass the threshold and are written verbatim without
        color. Records below the threshold are dropped, or buffered when the
        dump policy applies to them.

        Args:
            level: Level the record was logged at
            record: Record to render
            calldepth: Extra wrapper frames, passed through to the sink

        Raises:
            SinkWriteError: If the sink fails to accept a line
        """
        with self._lock:
            if level is Level.RAW:
                self._sink.write_line(record.message, level, calldepth)
                return

            triggers = compare_severity(level, self._dump_trigger) is not Severity.LESS
            if rank(level) > rank(self._level):
                if self._dump_enabled and not triggers:
                    self._ring.push((level, self._dump_prefix + self._format(level, record)))
                return

            if self._dump_enabled and triggers:
                self._flush_ring(calldepth)
            self._sink.write_line(self._format(level, record), level, calldepth)

    def _flush_ring(self, calldepth: int) -> None:
        # An entry leaves the ring only once the sink has accepted it.
        while len(self._ring):
            buffered_level, line = self._ring.peek()
            self._sink.write_line(line, buffered_level, calldepth)
            self._ring.pop()

    def _format(self, level: Level, record: Record) -> str:
        if self._json and self._environment in _JSON_ENVIRONMENTS:
            return json.dumps(record.to_dict(self._template.time_format), default=str, ensure_ascii=False)
        line = record.render(self._template) + record.fields.render()
        if resolve_color(self._color, self._environment):
            line = f"{level.ansi_prefix}{line}{ANSI_RESET}"
        return line
