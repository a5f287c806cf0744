"""Diagnostic sources: the pull/notify interface and an in-memory implementation."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Mapping, Protocol, Sequence

from .models import Diagnostic

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class Disposable:
    """Handle that undoes a registration when disposed. Safe to dispose twice."""

    def __init__(self, on_dispose: Callable[[], None]) -> None:
        self._on_dispose: Callable[[], None] | None = on_dispose

    def dispose(self) -> None:
        if self._on_dispose is not None:
            callback, self._on_dispose = self._on_dispose, None
            callback()


class DiagnosticSource(Protocol):
    """What the aggregator needs from whoever computes diagnostics."""

    def get_diagnostics(self) -> Mapping[str, Sequence[Diagnostic]]:
        """Return the complete current mapping of absolute file path to diagnostics."""
        ...

    def on_did_change(self, listener: Listener) -> Disposable:
        """Call ``listener`` whenever the mapping may have changed."""
        ...


class InMemoryDiagnosticSource:
    """Diagnostic source backed by a dict, fed by :meth:`set` and :meth:`clear`.

    Thread-safe: producers (an LSP reader thread, tests) write while the
    aggregator pulls copies via :meth:`get_diagnostics`. Files whose
    diagnostics are set to an empty list are dropped from the mapping, which
    is how a language server reports that a file became clean.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._diagnostics: dict[str, list[Diagnostic]] = {}
        self._listeners: list[Listener] = []

    def get_diagnostics(self) -> dict[str, list[Diagnostic]]:
        with self._lock:
            return {path: list(diags) for path, diags in self._diagnostics.items()}

    def set(self, path: str, diagnostics: Iterable[Diagnostic]) -> None:
        """Replace the diagnostics for one file and notify listeners."""
        diagnostics = list(diagnostics)
        with self._lock:
            if diagnostics:
                self._diagnostics[path] = diagnostics
            else:
                self._diagnostics.pop(path, None)
        self._fire()

    def clear(self, path: str | None = None) -> None:
        """Forget one file's diagnostics, or all of them."""
        with self._lock:
            if path is None:
                self._diagnostics.clear()
            else:
                self._diagnostics.pop(path, None)
        self._fire()

    def on_did_change(self, listener: Listener) -> Disposable:
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                try:
                    self._listeners.remove(listener)
                except ValueError:
                    pass

        return Disposable(remove)

    def _fire(self) -> None:
        # Copy listeners list to avoid mutation during iteration
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()
