"""Shared test fixtures for Diagnostics Dumper tests."""

import logging
import os

import pytest

from diagnostics_dumper.aggregator import SnapshotAggregator
from diagnostics_dumper.config import ConfigStore
from diagnostics_dumper.exclusion import _warn_invalid
from diagnostics_dumper.models import Diagnostic, Position, Range, Severity
from diagnostics_dumper.source import InMemoryDiagnosticSource
from diagnostics_dumper.workspace import Workspace


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.fired = True
        self.function()


class TimerRecorder:
    """Timer factory that records every timer it hands out."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire_pending(self):
        """Fire every live timer, as if the debounce window elapsed."""
        for timer in self.live:
            timer.fire()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep real config files and DIAGDUMP_* variables out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(cwd)
    for key in list(os.environ):
        if key.startswith("DIAGDUMP_"):
            monkeypatch.delenv(key)
    _warn_invalid.cache_clear()
    yield
    _warn_invalid.cache_clear()
    # CLI commands set the package logger level
    logging.getLogger("diagnostics_dumper").setLevel(logging.NOTSET)


@pytest.fixture
def project(tmp_path):
    """An empty project directory used as the workspace root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def workspace(project):
    return Workspace(folders=[project])


@pytest.fixture
def source():
    return InMemoryDiagnosticSource()


@pytest.fixture
def config_store():
    return ConfigStore()


@pytest.fixture
def timers():
    return TimerRecorder()


@pytest.fixture
def aggregator(source, workspace, config_store, timers):
    return SnapshotAggregator(source, workspace, config_store, timer_factory=timers)


@pytest.fixture
def make_diagnostic():
    """Factory for diagnostics with sensible defaults."""

    def _make(
        message="Something is wrong",
        severity=Severity.Error,
        line=0,
        character=0,
        end_line=None,
        end_character=None,
        source=None,
        code=None,
    ):
        return Diagnostic(
            message=message,
            severity=severity,
            range=Range(
                start=Position(line, character),
                end=Position(
                    line if end_line is None else end_line,
                    character + 1 if end_character is None else end_character,
                ),
            ),
            source=source,
            code=code,
        )

    return _make
