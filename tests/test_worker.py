# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Tests for the render/dispatch worker."""

import json
import threading
from datetime import datetime
from io import StringIO

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from levelog.environment import Environment
from levelog.exceptions import InvalidLevelError, SinkWriteError
from levelog.fields import Fields, Secret
from levelog.levels import ANSI_RESET, ColorMode, Level
from levelog.record import Record
from levelog.sinks import MemorySink, Sink
from levelog.template import DEVELOPMENT_TEMPLATE, PRODUCTION_TEMPLATE, Template
from levelog.worker import Worker


class FailingSink(Sink):
    """Sink whose target is gone."""

    def write_line(self, line, level, calldepth=0):
        raise SinkWriteError("stream closed")


class FlakySink(MemorySink):
    """Memory sink whose first ``failures`` writes fail."""

    def __init__(self, failures: int = 1):
        super().__init__()
        self.failures = failures

    def write_line(self, line, level, calldepth=0):
        if self.failures:
            self.failures -= 1
            raise SinkWriteError("stream busy")
        super().write_line(line, level, calldepth)


def _record(message: str, level: Level, args: tuple = ()) -> Record:
    return Record(
        id=1,
        time=datetime(2024, 3, 5, 14, 30, 15),
        module="pkgname",
        level=level,
        fmt=message,
        args=args,
        filename="app.py",
        line=42,
    )


def _log(worker: Worker, level: Level, message: str, *args) -> None:
    worker.log(level, _record(message, level, args))


@pytest.fixture
def production(sink):
    """Production worker writing ``%{lvl} %{message}`` lines to ``sink``."""
    worker = Worker(sink, environment=Environment.PRODUCTION)
    worker.set_format("%{lvl} %{message}")
    return worker


class TestEnvironmentDefaults:
    """Tests for the settings each environment applies."""

    def test_development(self, sink):
        worker = Worker(sink, environment=Environment.DEVELOPMENT)

        assert worker.level is Level.DEBUG
        assert worker.template is DEVELOPMENT_TEMPLATE

    def test_production(self, sink):
        worker = Worker(sink, environment=Environment.PRODUCTION)

        assert worker.level is Level.ERROR
        assert worker.template is PRODUCTION_TEMPLATE

    @pytest.mark.parametrize("environment", [Environment.QUALITY, Environment.TESTING])
    def test_quality_and_testing(self, sink, environment):
        assert Worker(sink, environment=environment).level is Level.INFO

    def test_auto_fails_closed_to_production(self, sink):
        worker = Worker(sink, environment=Environment.AUTO)

        assert worker.environment is Environment.PRODUCTION
        assert worker.level is Level.ERROR

    def test_environment_change_resets_format(self, sink):
        worker = Worker(sink, environment=Environment.DEVELOPMENT)
        worker.set_format("%{lvl} %{message}")
        worker.set_environment(Environment.PRODUCTION)

        assert worker.template is PRODUCTION_TEMPLATE


class TestStickyTesting:
    """Tests for the pinned TESTING environment."""

    def test_testing_survives_environment_changes(self, sink):
        worker = Worker(sink, environment=Environment.TESTING)
        worker.set_environment(Environment.PRODUCTION)

        assert worker.environment is Environment.TESTING
        assert worker.requested_environment is Environment.PRODUCTION
        assert worker.level is Level.INFO

    def test_clear_testing_applies_requested_environment(self, sink):
        worker = Worker(sink, environment=Environment.TESTING)
        worker.set_environment(Environment.PRODUCTION)
        worker.clear_testing()

        assert worker.environment is Environment.PRODUCTION
        assert worker.level is Level.ERROR

    def test_clear_testing_while_testing_requested(self, sink):
        worker = Worker(sink, environment=Environment.TESTING)
        worker.clear_testing()

        assert worker.environment is Environment.TESTING

    def test_copy_keeps_pin(self, sink):
        worker = Worker(sink, environment=Environment.TESTING)
        clone = worker.copy()
        clone.set_environment(Environment.DEVELOPMENT)

        assert clone.environment is Environment.TESTING


class TestThreshold:
    """Tests for level gating."""

    def test_below_threshold_is_dropped(self, production, sink):
        _log(production, Level.INFO, "quiet")
        _log(production, Level.ERROR, "loud")

        assert sink.lines == ["ERR loud"]

    def test_set_log_level(self, production, sink):
        production.set_log_level("debug")
        _log(production, Level.DEBUG, "visible")

        assert sink.lines == ["DEB visible"]

    def test_set_invalid_level(self, production):
        with pytest.raises(InvalidLevelError):
            production.set_log_level("loud")

    def test_is_enabled_for(self, production):
        assert production.is_enabled_for(Level.ERROR)
        assert production.is_enabled_for(Level.RAW)
        assert not production.is_enabled_for(Level.WARNING)

    @given(
        threshold=st.sampled_from(list(Level)),
        level=st.sampled_from(list(Level)),
    )
    @settings(max_examples=100, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_emitted_iff_at_least_as_urgent(self, threshold, level):
        """Test that a record is written exactly when it passes the threshold."""
        sink = MemorySink()
        worker = Worker(sink, environment=Environment.PRODUCTION)
        worker.set_log_level(threshold)
        _log(worker, level, "msg")

        written = bool(sink.lines)
        assert written == (level is Level.RAW or int(level) <= int(threshold))


class TestRaw:
    """Tests for RAW records."""

    def test_raw_is_written_verbatim(self, production, sink):
        """Test that RAW ignores threshold, template, color and JSON."""
        production.set_color(ColorMode.ENABLED)
        production.use_json(True)
        production.set_log_level(Level.ERROR)
        _log(production, Level.RAW, "raw %d%%", 5)

        assert sink.lines == ["raw 5%"]


class TestRendering:
    """Tests for line rendering."""

    def test_malformed_then_valid_placeholder(self, production, sink):
        production.set_format("%{incorr_verb %{level} %{message}")
        _log(production, Level.ERROR, "msg")

        assert sink.lines == ["%{incorr_verb ERROR msg"]

    def test_fields_are_appended_sorted(self, production, sink):
        record = _record("saved", Level.ERROR)
        record.fields = Fields(user="bob", id=3)
        production.log(Level.ERROR, record)

        assert sink.lines == ["ERR saved id=3 user=bob"]

    def test_secret_fields_are_masked(self, production, sink):
        record = _record("login", Level.ERROR)
        record.fields = Fields(password=Secret("hunter2"))
        production.log(Level.ERROR, record)

        assert sink.lines == ["ERR login password=*******"]

    def test_set_template(self, production, sink):
        production.set_template(Template("<%(message)s>"))
        _log(production, Level.ERROR, "x")

        assert sink.lines == ["<x>"]


class TestColor:
    """Tests for colorized output."""

    def test_development_is_colored(self, sink):
        worker = Worker(sink, environment=Environment.DEVELOPMENT)
        worker.set_format("%{lvl} %{message}")
        _log(worker, Level.ERROR, "boom")

        assert sink.lines == [f"\033[31mERR boom{ANSI_RESET}"]

    def test_testing_is_plain(self, sink):
        worker = Worker(sink, environment=Environment.TESTING)
        worker.set_format("%{lvl} %{message}")
        _log(worker, Level.WARNING, "careful")

        assert sink.lines == ["WAR careful"]

    def test_explicit_enabled_in_production(self, production, sink):
        production.set_color(ColorMode.ENABLED)
        _log(production, Level.ERROR, "boom")

        assert sink.lines == [f"\033[31mERR boom{ANSI_RESET}"]

    def test_explicit_disabled_in_development(self, sink):
        worker = Worker(sink, ColorMode.DISABLED, Environment.DEVELOPMENT)
        worker.set_format("%{lvl} %{message}")
        _log(worker, Level.DEBUG, "plain")

        assert sink.lines == ["DEB plain"]


class TestJson:
    """Tests for JSON output."""

    def test_production_json(self, production, sink):
        production.use_json(True)
        _log(production, Level.ERROR, "failed %s", "upload")

        entry = json.loads(sink.lines[0])
        assert entry["level"] == "ERROR"
        assert entry["message"] == "failed upload"
        assert entry["module"] == "pkgname"
        assert entry["line"] == "42"

    def test_json_ignored_in_development(self, sink):
        worker = Worker(sink, environment=Environment.DEVELOPMENT)
        worker.set_format("%{lvl} %{message}")
        worker.use_json(True)
        _log(worker, Level.ERROR, "boom")

        assert "boom" in sink.lines[0]
        assert not sink.lines[0].startswith("{")

    def test_json_includes_fields(self, production, sink):
        production.use_json(True)
        record = _record("saved", Level.ERROR)
        record.fields = Fields(size=10)
        production.log(Level.ERROR, record)

        assert json.loads(sink.lines[0])["fields"] == {"size": "10"}


class TestDumpPolicy:
    """Tests for dump-on-trigger buffering."""

    def test_buffered_lines_precede_trigger(self, production, sink):
        """Test that filtered records are replayed before the triggering error."""
        production.set_dump_behavior(True, Level.ERROR, "[dump] ")
        for i in range(1, 5):
            _log(production, Level.DEBUG, "d%d", i)

        assert sink.lines == []

        _log(production, Level.ERROR, "boom")

        assert sink.lines == [
            "[dump] DEB d1",
            "[dump] DEB d2",
            "[dump] DEB d3",
            "[dump] DEB d4",
            "ERR boom",
        ]
        assert len(production.ring) == 0

    def test_ring_keeps_most_recent(self, sink):
        worker = Worker(sink, environment=Environment.PRODUCTION, ring_capacity=2)
        worker.set_format("%{lvl} %{message}")
        worker.set_dump_behavior(True)
        for message in ("a", "b", "c"):
            _log(worker, Level.INFO, message)
        _log(worker, Level.ERROR, "boom")

        assert sink.lines == ["INF b", "INF c", "ERR boom"]

    def test_disabled_dump_buffers_nothing(self, production, sink):
        _log(production, Level.DEBUG, "lost")
        _log(production, Level.ERROR, "boom")

        assert sink.lines == ["ERR boom"]
        assert len(production.ring) == 0

    def test_filtered_trigger_level_is_not_buffered(self, production, sink):
        """Test that a record as urgent as the trigger is never buffered."""
        production.set_dump_behavior(True, Level.WARNING)
        _log(production, Level.WARNING, "warned")

        assert len(production.ring) == 0

    def test_emitted_non_trigger_does_not_drain(self, sink):
        worker = Worker(sink, environment=Environment.PRODUCTION)
        worker.set_format("%{lvl} %{message}")
        worker.set_log_level(Level.NOTICE)
        worker.set_dump_behavior(True, Level.ERROR)
        _log(worker, Level.DEBUG, "held")
        _log(worker, Level.WARNING, "shown")

        assert sink.lines == ["WAR shown"]
        assert worker.ring.items() == [(Level.DEBUG, "DEB held")]

    def test_buffered_lines_keep_their_level(self, production, sink):
        """Test that replayed lines reach the sink at the level they were logged at."""
        production.set_dump_behavior(True, Level.ERROR)
        _log(production, Level.DEBUG, "ctx")
        _log(production, Level.INFO, "step")
        _log(production, Level.ERROR, "boom")

        assert sink.get_lines(Level.DEBUG) == ["DEB ctx"]
        assert sink.get_lines(Level.INFO) == ["INF step"]
        assert sink.get_lines(Level.ERROR) == ["ERR boom"]

    def test_failed_flush_keeps_buffered_lines(self):
        """Test that a sink failure during a flush leaves unwritten lines buffered."""
        sink = FlakySink(failures=1)
        worker = Worker(sink, environment=Environment.PRODUCTION)
        worker.set_format("%{lvl} %{message}")
        worker.set_dump_behavior(True, Level.ERROR)
        for i in range(1, 4):
            _log(worker, Level.DEBUG, "ctx %d", i)

        with pytest.raises(SinkWriteError):
            _log(worker, Level.ERROR, "first")

        assert len(worker.ring) == 3

        _log(worker, Level.ERROR, "second")

        assert sink.lines == ["DEB ctx 1", "DEB ctx 2", "DEB ctx 3", "ERR second"]
        assert len(worker.ring) == 0

    def test_copy_has_empty_ring(self, production, sink):
        production.set_dump_behavior(True)
        _log(production, Level.DEBUG, "held")
        clone = production.copy()

        assert len(clone.ring) == 0
        assert clone.output is production.output


class TestSinkErrors:
    """Tests for sink failures."""

    def test_write_error_propagates(self):
        worker = Worker(FailingSink(), environment=Environment.PRODUCTION)

        with pytest.raises(SinkWriteError, match="stream closed"):
            _log(worker, Level.ERROR, "boom")

    def test_stream_output(self):
        stream = StringIO()
        worker = Worker(stream, environment=Environment.PRODUCTION)
        worker.set_format("%{lvl} %{message}")
        _log(worker, Level.ERROR, "boom")

        assert stream.getvalue() == "ERR boom\n"


class TestConcurrency:
    """Tests for concurrent logging."""

    def test_lines_never_interleave(self):
        stream = StringIO()
        worker = Worker(stream, environment=Environment.PRODUCTION)
        worker.set_template(Template("%(message)s"))

        def emit(n):
            for i in range(200):
                _log(worker, Level.ERROR, "thread-%d-line-%d", n, i)

        threads = [threading.Thread(target=emit, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        lines = stream.getvalue().splitlines()
        expected = {f"thread-{n}-line-{i}" for n in range(8) for i in range(200)}
        assert len(lines) == 1600
        assert set(lines) == expected