# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Shared fixtures for levelog tests."""

from datetime import datetime

import pytest

import levelog.factory as factory
from levelog.config import LoggerOptions
from levelog.levels import Level
from levelog.logger import TextLogger
from levelog.record import CallSite, Record, SequenceCounter
from levelog.sinks import MemorySink


class FixedCallSiteResolver:
    """Resolver reporting the same call site for every record."""

    def __init__(self, filename: str = "app.py", line: int = 42, function: str = "handler"):
        self.site = CallSite(filename, line, function)

    def resolve(self, extra_depth: int = 0) -> CallSite:
        return self.site


@pytest.fixture(autouse=True)
def reset_logger_state():
    """Reset global logger state before and after each test."""
    factory.reset()
    yield
    factory.reset()


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def make_logger(sink):
    """Build a TextLogger writing to the ``sink`` fixture.

    ``site`` is a (filename, line, function) tuple reported for every
    record. Other keyword arguments are passed to LoggerOptions.
    """

    def _make(site=(), resolver=None, sequence=None, **options):
        options.setdefault("module", "pkgname")
        options.setdefault("output", sink)
        return TextLogger(
            LoggerOptions(**options),
            resolver=resolver or FixedCallSiteResolver(*site),
            sequence=sequence or SequenceCounter(),
        )

    return _make


@pytest.fixture
def make_record():
    """Build records with fixed id, time and call site."""

    def _make(message: str = "hello", **kwargs) -> Record:
        values = {
            "id": 7,
            "time": datetime(2024, 3, 5, 14, 30, 15),
            "module": "pkgname",
            "level": Level.INFO,
            "filename": "app.py",
            "line": 42,
            "function": "handler",
            "fmt": message,
        }
        values.update(kwargs)
        return Record(**values)

    return _make
