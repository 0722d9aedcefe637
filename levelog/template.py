# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Placeholder compiler.

A line format is written with ``%{name}`` / ``%{name:arg}`` placeholders and
compiled once into a printf-style mapping layout (``%(level)s``), the same
dialect the standard library ``logging.Formatter`` uses. Rendering a record
is then a single ``layout % fields`` operation.

Supported placeholders::

    %{id} %{time} %{time:<strftime layout>} %{module} %{function}
    %{filename} %{file} %{line} %{level} %{lvl} %{message}
    %{duration} %{method} %{statuscode} %{route}
"""

from dataclasses import dataclass

# Shortest source worth scanning: len("%{message}")
MIN_SOURCE_LENGTH = 10

DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

PLACEHOLDERS = {
    "id": "%(id)d",
    "time": "%(time)s",
    "module": "%(module)s",
    "function": "%(function)s",
    "filename": "%(filename)s",
    "file": "%(filename)s",
    "line": "%(line)d",
    "level": "%(level)s",
    "lvl": "%(level).3s",
    "message": "%(message)s",
    "duration": "%(duration)s",
    "method": "%(method)s",
    "statuscode": "%(statuscode)d",
    "route": "%(route)s",
}

TIME_VERB = PLACEHOLDERS["time"]


@dataclass(frozen=True)
class Template:
    """Compiled line format.

    Attributes:
        layout: printf-style mapping layout rendered against record fields
        time_format: strftime layout used to render the record timestamp
    """

    layout: str
    time_format: str = DEFAULT_TIME_FORMAT


DEFAULT_TEMPLATE = Template("#%(id)d %(time).19s %(filename)s:%(line)d ▶ %(level).3s %(message)s")
PRODUCTION_TEMPLATE = Template("%(module).16s %(time).19s %(level).3s ▶ %(message)s")
DEVELOPMENT_TEMPLATE = Template("%(module).16s %(time).19s %(level).8s ▶ %(function)s ▶ %(message)s")

_default_template = DEFAULT_TEMPLATE


def default_template() -> Template:
    """Return the process-wide default template."""
    return _default_template


def set_default_format(source: str) -> Template:
    """Compile ``source`` and install it as the process-wide default template.

    The default template is used by the testing and quality environments and
    is what compile_format() falls back to for degenerate input.
    """
    global _default_template
    _default_template = compile_format(source)
    return _default_template


def reset_default_format() -> None:
    """Restore the built-in default template."""
    global _default_template
    _default_template = DEFAULT_TEMPLATE


def _escape(text: str) -> str:
    return text.replace("%", "%%")


def placeholder_to_verb(placeholder: str) -> tuple[str, str]:
    """Translate a single ``%{name[:arg]}`` placeholder.

    Returns:
        Tuple of (verb, arg). The verb is empty for unknown names, the arg is
        empty when the placeholder carries none.
    """
    if len(placeholder) < 4:
        return "", ""
    if not (placeholder.startswith("%{") and placeholder.endswith("}")):
        return "", ""
    name, _, arg = placeholder[2:-1].partition(":")
    return PLACEHOLDERS.get(name, ""), arg


def compile_format(source: str, default: Template | None = None) -> Template:
    """Compile a placeholder format into a Template.

    Malformed input never raises:

    - a ``%`` not followed by ``{`` becomes a literal percent;
    - an unterminated ``%{`` becomes a literal percent and its ``{`` is dropped;
    - a ``%{`` interrupted by another ``%{`` before its ``}`` becomes a
      literal percent, and scanning restarts right after that percent so the
      later placeholder is still interpreted;
    - an unknown placeholder name renders as nothing.

    Args:
        source: Format string with placeholders
        default: Template returned for degenerate (too short) input and whose
            time format is kept unless ``%{time:<layout>}`` overrides it.
            Defaults to the process-wide default template.

    Returns:
        Compiled Template
    """
    if default is None:
        default = _default_template
    if len(source) < MIN_SOURCE_LENGTH:
        return default

    time_format = default.time_format
    parts: list[str] = []
    rest = source
    idx = rest.find("%")
    while idx != -1:
        parts.append(_escape(rest[:idx]))
        rest = rest[idx:]
        if rest.startswith("%{"):
            close = rest.find("}")
            if close == -1:
                # Unterminated: keep the percent, lose the brace.
                parts.append("%%")
                rest = rest[2:]
            else:
                nxt = rest.find("%{", 1)
                if nxt != -1 and nxt < close:
                    parts.append("%%")
                    rest = rest[1:]
                    idx = nxt - 1
                    continue
                verb, arg = placeholder_to_verb(rest[: close + 1])
                parts.append(verb)
                if verb == TIME_VERB and arg:
                    time_format = arg
                rest = rest[close + 1 :]
        else:
            parts.append("%%")
            rest = rest[1:]
        idx = rest.find("%")
    parts.append(rest)
    return Template(layout="".join(parts), time_format=time_format)
