# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Structured fields and redaction of sensitive values."""

from collections.abc import Iterator, Mapping
from datetime import timedelta
from typing import Any, Protocol, Union, runtime_checkable

FieldValue = Union[str, int, float, bool, timedelta, Mapping[str, "FieldValue"], None]


@runtime_checkable
class Redactor(Protocol):
    """Values that must never reach a log line in clear text."""

    def redacted(self) -> Any: ...


def redact(value: str) -> str:
    """Return a run of ``*`` with the same length as ``value``."""
    return "*" * len(value)


class Secret(str):
    """String that logs as a same-length run of ``*``.

    Example:
        >>> logger.info("login for %s with %s", user, Secret(password))
    """

    def redacted(self) -> str:
        return redact(str(self))


def redact_value(value: Any) -> Any:
    """Replace a Redactor by its redacted form, descending into mappings."""
    if isinstance(value, Redactor):
        return value.redacted()
    if isinstance(value, Mapping):
        return {key: redact_value(item) for key, item in value.items()}
    return value


class Fields(Mapping[str, FieldValue]):
    """Immutable mapping of structured key/value pairs attached to a record.

    Names are enumerated in sorted order so rendered output is deterministic.
    """

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any):
        self._values: dict[str, Any] = dict(values or {})
        self._values.update(kwargs)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Fields({self._values!r})"

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def names(self) -> list[str]:
        """Return field names sorted lexicographically."""
        return sorted(self._values)

    def redacted(self) -> "Fields":
        """Return a copy with every Redactor value replaced."""
        return Fields({name: redact_value(value) for name, value in self._values.items()})

    def render(self) -> str:
        """Render as `` key=value`` pairs in sorted key order."""
        return "".join(f" {name}={self._values[name]}" for name in self.names())
