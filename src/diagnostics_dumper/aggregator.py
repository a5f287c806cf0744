"""Snapshot aggregation: merge the source's diagnostics with history and write them out."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Mapping, Sequence

from .config import ConfigStore
from .debounce import Debouncer, TimerFactory, _thread_timer
from .exceptions import DiagnosticsDumperError, SourceQueryError
from .exclusion import ExclusionFilter
from .models import Diagnostic, FileEntry
from .snapshot import write_snapshot
from .source import DiagnosticSource
from .workspace import Workspace, resolve_output_path

logger = logging.getLogger(__name__)


class SnapshotAggregator:
    """Owns the seen-files set and the debounce timer for one session.

    Every file that ever showed diagnostics (and was not excluded at the
    time) stays in the seen set for the aggregator's lifetime, so a file
    that becomes clean is written with ``"diagnostics": []`` rather than
    disappearing from the snapshot.

    Cycles never overlap: the debounced path, the manual trigger and the
    startup pull all go through :meth:`run_aggregation_cycle`, which holds a
    lock for the whole pull-merge-write sequence.
    """

    def __init__(
        self,
        source: DiagnosticSource,
        workspace: Workspace,
        config_store: ConfigStore,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self.source = source
        self.workspace = workspace
        self.config_store = config_store
        self.exclusion = ExclusionFilter(workspace, config_store)

        # dict keys double as an insertion-ordered set
        self._seen_files: dict[str, None] = {}
        self._cycle_lock = threading.RLock()
        self._debouncer = Debouncer(
            config_store.current().debounce_seconds,
            self.run_aggregation_cycle,
            timer_factory=timer_factory,
            name="snapshot-aggregator",
        )

    @property
    def seen_files(self) -> tuple[str, ...]:
        with self._cycle_lock:
            return tuple(self._seen_files)

    @property
    def output_path(self) -> Path:
        """Where the snapshot goes right now (workspace and config may change)."""
        return resolve_output_path(self.workspace, self.config_store.current().output_filename)

    def is_excluded(self, file_path: str) -> bool:
        return self.exclusion.is_excluded(file_path)

    def reset_snapshot(self) -> Path:
        """Write an empty snapshot, whatever a previous run left on disk."""
        with self._cycle_lock:
            path = write_snapshot(self.output_path, [])
        logger.info("Reset diagnostics snapshot %s", path)
        return path

    def run_aggregation_cycle(self) -> Path:
        """Pull, merge, filter and write one full snapshot.

        Errors propagate. Writing is the last step, so a failure anywhere
        before it leaves the previous file as it was.

        Returns:
            The path the snapshot was written to.
        """
        with self._cycle_lock:
            current = self._pull()
            entries = self.build_snapshot(current)
            path = write_snapshot(self.output_path, entries)
        logger.info("Wrote %d file(s) to %s", len(entries), path)
        return path

    def build_snapshot(self, current: Mapping[str, Sequence[Diagnostic]]) -> list[FileEntry]:
        """Merge ``current`` into the seen set and build the ordered entries."""
        with self._cycle_lock:
            recorded: dict[str, list[Diagnostic]] = {}
            for file_path, diagnostics in current.items():
                if self.is_excluded(file_path):
                    continue
                recorded[file_path] = list(diagnostics)
                self._seen_files[file_path] = None

            entries: list[FileEntry] = []
            for file_path in self._seen_files:
                # Config may have changed since the file was first seen
                if self.is_excluded(file_path):
                    continue
                entries.append(FileEntry(file=file_path, diagnostics=recorded.get(file_path, [])))
            return entries

    def schedule_aggregation(self) -> None:
        """Request a debounced cycle; bursts collapse into one write."""
        self._debouncer.delay = self.config_store.current().debounce_seconds
        self._debouncer.schedule()

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    def dispose(self) -> None:
        """Cancel a pending debounced cycle, stop accepting new ones and wait
        for one already running to finish writing."""
        self._debouncer.close()

    def _pull(self) -> Mapping[str, Sequence[Diagnostic]]:
        try:
            return self.source.get_diagnostics()
        except DiagnosticsDumperError:
            raise
        except Exception as e:
            raise SourceQueryError(str(e)) from e

