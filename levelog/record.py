# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Log records, message formatting and call-site resolution."""

import os
import re
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, NamedTuple, Protocol

from .fields import Fields, redact_value
from .levels import Level
from .template import Template

# Marker appended by format_message() for arguments the format did not consume.
# Record.render() cuts the rendered line at this marker.
EXTRA_SENTINEL = "%!(EXTRA"

_CONVERSION = re.compile(
    r"%(?:\((?P<key>[^)]*)\))?[#0\- +]*(?P<width>\*|\d+)?(?:\.(?P<precision>\*|\d*))?[hlL]?(?P<type>[diouxXeEfFgGcrsa%])"
)

_PACKAGE_DIR = os.path.normcase(os.path.dirname(os.path.abspath(__file__)))


def count_conversions(fmt: str) -> int:
    """Return how many positional arguments a printf-style format consumes."""
    count = 0
    for match in _CONVERSION.finditer(fmt):
        if match.group("type") == "%":
            continue
        count += 1
        if match.group("width") == "*":
            count += 1
        if match.group("precision") == "*":
            count += 1
    return count


def _fallback(fmt: str, values: tuple) -> str:
    return " ".join([fmt, *(str(value) for value in values)])


def format_message(fmt: str, args: tuple) -> str:
    """Format a log message printf-style without ever raising.

    The format and its arguments are redacted first. Surplus arguments are
    reported after EXTRA_SENTINEL, any other mismatch falls back to the
    format followed by the arguments.

    Args:
        fmt: printf-style format, or a plain message when ``args`` is empty
        args: Positional arguments, or a single mapping for ``%(name)s`` keys

    Returns:
        The formatted message
    """
    fmt = redact_value(fmt)
    if not args:
        return fmt
    values = tuple(redact_value(arg) for arg in args)
    if len(values) == 1 and isinstance(values[0], Mapping) and values[0]:
        try:
            return fmt % values[0]
        except (TypeError, ValueError, KeyError):
            return _fallback(fmt, values)
    try:
        return fmt % values
    except TypeError:
        consumed = count_conversions(fmt)
        if consumed >= len(values):
            return _fallback(fmt, values)
        try:
            head = fmt % values[:consumed]
        except (TypeError, ValueError, KeyError):
            return _fallback(fmt, values)
        extra = ", ".join(f"{type(value).__name__}={value}" for value in values[consumed:])
        return f"{head}{EXTRA_SENTINEL} {extra})"
    except (ValueError, KeyError):
        return _fallback(fmt, values)


def strip_extra(text: str) -> str:
    """Cut ``text`` at the last EXTRA_SENTINEL, if any."""
    idx = text.rfind(EXTRA_SENTINEL)
    if idx != -1:
        return text[:idx]
    return text


def format_duration(duration: timedelta) -> str:
    """Render a duration compactly (``1.5s``, ``250ms``, ``40µs``)."""
    seconds = duration.total_seconds()
    if seconds == 0:
        return "0s"
    if abs(seconds) < 1e-3:
        return f"{seconds * 1e6:g}µs"
    if abs(seconds) < 1:
        return f"{seconds * 1e3:g}ms"
    return f"{seconds:g}s"


class SequenceCounter:
    """Thread-safe monotonically increasing record id.

    When a ceiling is set, the id after ``ceiling`` wraps back to 1.
    """

    def __init__(self, ceiling: int | None = None):
        self._value = 0
        self._ceiling = ceiling
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def next(self) -> int:
        with self._lock:
            if self._ceiling is not None and self._value >= self._ceiling:
                self._value = 0
            self._value += 1
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


SEQUENCE = SequenceCounter()


class CallSite(NamedTuple):
    """Source location of a log call."""

    filename: str = ""
    line: int = 0
    function: str = ""


class CallSiteResolver(Protocol):
    """Resolves the call site of the log call currently being made."""

    def resolve(self, extra_depth: int = 0) -> CallSite: ...


class FrameCallSiteResolver:
    """Resolve the call site by walking Python frames.

    Frames that belong to the levelog package are skipped, then
    ``extra_depth`` further frames for callers that wrap a logger.
    """

    def resolve(self, extra_depth: int = 0) -> CallSite:
        frame = sys._getframe(1)
        while frame is not None and _is_internal(frame.f_code.co_filename):
            frame = frame.f_back
        for _ in range(extra_depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return CallSite()
        code = frame.f_code
        function = getattr(code, "co_qualname", code.co_name)
        return CallSite(os.path.basename(code.co_filename), frame.f_lineno, function)


class NullCallSiteResolver:
    """Resolver for hot paths where stack inspection is not wanted."""

    def resolve(self, extra_depth: int = 0) -> CallSite:
        return CallSite()


def _is_internal(filename: str) -> bool:
    return os.path.dirname(os.path.normcase(os.path.abspath(filename))) == _PACKAGE_DIR


def internal_depth() -> int:
    """Count levelog frames from the caller of this function up to user code."""
    frame = sys._getframe(1)
    depth = 0
    while frame is not None and _is_internal(frame.f_code.co_filename):
        frame = frame.f_back
        depth += 1
    return depth


@dataclass
class Record:
    """A single log event.

    Records are immutable once built, except that the message is formatted
    lazily on first access. Formatting redacts arguments and fields and then
    drops the raw arguments, so sensitive values do not outlive the first
    render.
    """

    id: int
    time: datetime
    module: str
    level: Level
    fmt: str = ""
    args: tuple = ()
    filename: str = ""
    line: int = 0
    function: str = ""
    duration: timedelta = timedelta(0)
    method: str = ""
    status_code: int = 0
    route: str = ""
    fields: Fields = field(default_factory=Fields)
    context: str = ""
    _message: str | None = field(default=None, repr=False, compare=False)

    @property
    def message(self) -> str:
        if self._message is None:
            self._message = self.context + format_message(self.fmt, self.args)
            self.args = ()
            self.fields = self.fields.redacted()
        return self._message

    def values(self, time_format: str) -> dict[str, Any]:
        """Return the mapping a compiled template layout is rendered against."""
        return {
            "id": self.id,
            "time": self.time.strftime(time_format),
            "module": self.module,
            "function": self.function,
            "filename": self.filename,
            "line": self.line,
            "level": self.level.name,
            "message": self.message,
            "duration": format_duration(self.duration),
            "method": self.method,
            "statuscode": self.status_code,
            "route": self.route,
        }

    def render(self, template: Template) -> str:
        """Render the record through a compiled template."""
        return strip_extra(template.layout % self.values(template.time_format))

    def to_dict(self, time_format: str) -> dict[str, Any]:
        """Return the record as a JSON-ready mapping of string values."""
        entry: dict[str, Any] = {
            name: str(value) for name, value in self.values(time_format).items()
        }
        entry["message"] = strip_extra(entry["message"])
        if not (self.method or self.route):
            for name in ("duration", "method", "statuscode", "route"):
                entry.pop(name)
        if self.fields:
            entry["fields"] = {name: str(self.fields[name]) for name in self.fields.names()}
        return entry
