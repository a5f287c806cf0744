"""Tests for session activation and shutdown."""

import json
import threading

import pytest

from diagnostics_dumper.commands import DUMP_NOW_COMMAND, CommandRegistry
from diagnostics_dumper.exceptions import SnapshotWriteError
from diagnostics_dumper.lifecycle import DumperSession
from diagnostics_dumper.source import InMemoryDiagnosticSource
from diagnostics_dumper.workspace import Workspace


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def session(source, workspace, config_store, timers):
    s = DumperSession(source, workspace, config_store, timer_factory=timers)
    yield s
    s.stop()


class TestStart:
    def test_stale_file_is_replaced(self, session, project):
        stale = project / "vscode-diagnostics.json"
        stale.write_text('[{"file": "/gone.ts", "diagnostics": []}]', encoding="utf-8")
        session.start()
        assert _read(stale) == []

    def test_initial_cycle_includes_existing_diagnostics(self, session, source, make_diagnostic):
        source.set("/p/a.ts", [make_diagnostic()])
        path = session.start()
        assert [e["file"] for e in _read(path)] == ["/p/a.ts"]

    def test_registers_dump_now(self, session):
        session.start()
        assert DUMP_NOW_COMMAND in session.commands

    def test_start_twice(self, session):
        session.start()
        with pytest.raises(RuntimeError):
            session.start()

    def test_reset_failure_propagates(self, tmp_path, source, config_store, timers):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        s = DumperSession(source, Workspace(folders=[blocker]), config_store, timer_factory=timers)
        with pytest.raises(SnapshotWriteError):
            s.start()
        s.stop()

    def test_defaults(self, source):
        s = DumperSession(source)
        assert isinstance(s.commands, CommandRegistry)
        assert s.workspace.folders == []


class TestRunning:
    def test_changes_are_debounced(self, session, source, timers, make_diagnostic):
        path = session.start()
        source.set("/p/a.ts", [make_diagnostic()])
        source.set("/p/b.ts", [make_diagnostic()])
        assert _read(path) == []
        assert len(timers.live) == 1

        timers.fire_pending()
        assert [e["file"] for e in _read(path)] == ["/p/a.ts", "/p/b.ts"]

    def test_dump_now_bypasses_debounce(self, session, source, timers, make_diagnostic):
        path = session.start()
        source.set("/p/a.ts", [make_diagnostic()])
        session.dump_now()
        assert [e["file"] for e in _read(path)] == ["/p/a.ts"]

    def test_dump_now_errors_reach_caller(self, session, project):
        session.start()
        # Replace the workspace folder with a plain file
        project.rename(project.with_name("moved"))
        project.write_text("", encoding="utf-8")
        with pytest.raises(SnapshotWriteError):
            session.dump_now()

    def test_clean_file_stays_listed(self, session, source, timers, make_diagnostic):
        path = session.start()
        source.set("/p/a.ts", [make_diagnostic()])
        timers.fire_pending()
        source.set("/p/a.ts", [])
        timers.fire_pending()
        assert _read(path) == [{"file": "/p/a.ts", "diagnostics": []}]


class TestStop:
    def test_stop_unsubscribes_and_unregisters(self, session, source, timers, make_diagnostic):
        session.start()
        session.stop()
        assert DUMP_NOW_COMMAND not in session.commands

        before = len(timers.timers)
        source.set("/p/a.ts", [make_diagnostic()])
        assert len(timers.timers) == before

    def test_stop_cancels_pending_cycle(self, session, source, timers, make_diagnostic):
        path = session.start()
        source.set("/p/a.ts", [make_diagnostic()])
        session.stop()
        assert timers.live == []
        assert _read(path) == []

    def test_stop_waits_for_debounced_write(self, workspace, config_store, timers, make_diagnostic):
        pulling = threading.Event()
        release = threading.Event()

        class SlowSource(InMemoryDiagnosticSource):
            def get_diagnostics(self):
                if release.is_set():
                    return super().get_diagnostics()
                pulling.set()
                release.wait(2.0)
                return super().get_diagnostics()

        source = SlowSource()
        s = DumperSession(source, workspace, config_store, timer_factory=timers)
        release.set()
        path = s.start()
        release.clear()

        source.set("/p/a.ts", [make_diagnostic()])
        cycle = threading.Thread(target=timers.fire_pending)
        cycle.start()
        assert pulling.wait(2.0)

        stopped = threading.Event()
        stopper = threading.Thread(target=lambda: (s.stop(), stopped.set()))
        stopper.start()
        assert not stopped.wait(0.1)

        release.set()
        assert stopped.wait(2.0)
        assert [e["file"] for e in _read(path)] == ["/p/a.ts"]
        cycle.join(2.0)
        stopper.join(2.0)

    def test_stop_is_idempotent(self, session):
        session.start()
        session.stop()
        session.stop()

    def test_stop_without_start(self, session):
        session.stop()

    def test_context_manager(self, source, workspace, config_store, timers, make_diagnostic):
        source.set("/p/a.ts", [make_diagnostic()])
        with DumperSession(source, workspace, config_store, timer_factory=timers) as s:
            assert DUMP_NOW_COMMAND in s.commands
        assert DUMP_NOW_COMMAND not in s.commands
        assert [e["file"] for e in _read(s.output_path)] == ["/p/a.ts"]
