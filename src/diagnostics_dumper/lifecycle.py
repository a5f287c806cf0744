"""Session lifecycle: activation wiring and exactly-once shutdown.

Activation order matters:

1. Write an empty snapshot so consumers never read a stale file from an
   earlier run.
2. Subscribe to source change notifications (debounced cycles).
3. Register the manual ``diagnosticsDumper.dumpNow`` command.
4. Run one cycle immediately with whatever the source already knows.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from .aggregator import SnapshotAggregator
from .commands import DUMP_NOW_COMMAND, CommandRegistry
from .config import ConfigStore
from .debounce import TimerFactory, _thread_timer
from .source import DiagnosticSource, Disposable
from .workspace import Workspace

logger = logging.getLogger(__name__)


class DumperSession:
    """One activation of the dumper, from :meth:`start` to :meth:`stop`."""

    def __init__(
        self,
        source: DiagnosticSource,
        workspace: Optional[Workspace] = None,
        config_store: Optional[ConfigStore] = None,
        commands: Optional[CommandRegistry] = None,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self.source = source
        self.workspace = workspace if workspace is not None else Workspace()
        self.config_store = config_store if config_store is not None else ConfigStore()
        self.commands = commands if commands is not None else CommandRegistry()
        self.aggregator = SnapshotAggregator(
            source, self.workspace, self.config_store, timer_factory=timer_factory
        )

        self._subscriptions: list[Disposable] = []
        self._shutdown_lock = threading.Lock()
        self._started = False
        self._stopped = False

    @property
    def output_path(self) -> Path:
        return self.aggregator.output_path

    def start(self) -> Path:
        """Activate: reset, subscribe, register the command, dump once.

        Errors from the reset or the initial dump propagate.
        """
        if self._started:
            raise RuntimeError("Session already started")
        self._started = True
        logger.info("Diagnostics dumper activated")

        self.aggregator.reset_snapshot()
        self._subscriptions.append(self.source.on_did_change(self.aggregator.schedule_aggregation))
        self._subscriptions.append(
            self.commands.register(DUMP_NOW_COMMAND, self.aggregator.run_aggregation_cycle)
        )
        return self.aggregator.run_aggregation_cycle()

    def dump_now(self) -> Path:
        """Run the manual command; errors reach the caller."""
        return self.commands.execute(DUMP_NOW_COMMAND)

    def stop(self) -> None:
        """Deactivate. Safe to call multiple times."""
        with self._shutdown_lock:
            if self._stopped:
                return
            self._stopped = True

        for subscription in reversed(self._subscriptions):
            subscription.dispose()
        self._subscriptions.clear()
        self.aggregator.dispose()
        logger.info("Diagnostics dumper deactivated")

    def __enter__(self) -> "DumperSession":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
