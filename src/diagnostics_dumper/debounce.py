"""Single-slot debouncer: bursts of requests collapse into one delayed call."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], Any]


class DebounceState(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"


def _thread_timer(interval: float, function: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


class Debouncer:
    """Runs ``callback`` once the request stream has been quiet for ``delay`` seconds.

    States move ``IDLE -> PENDING -> RUNNING -> IDLE``:

    - :meth:`schedule` while idle or pending (re)starts the window; only the
      latest timer is ever live.
    - :meth:`schedule` while the callback is running is remembered, and a
      fresh window starts as soon as the run finishes.

    Exceptions from ``callback`` are logged and swallowed so one failed run
    never blocks later ones. :meth:`close` waits for a run in progress, so
    nothing is left writing once the owner has shut down.

    ``timer_factory(delay, fn)`` must return an object with ``start()`` and
    ``cancel()``; the default is a daemon :class:`threading.Timer`.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        timer_factory: TimerFactory = _thread_timer,
        name: str = "debounce",
    ) -> None:
        self.delay = delay
        self.callback = callback
        self.name = name
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._runner: Optional[threading.Thread] = None
        self._timer: Optional[Any] = None
        self._generation = 0
        self._state = DebounceState.IDLE
        self._rerun_requested = False
        self._closed = False

    @property
    def state(self) -> DebounceState:
        with self._lock:
            return self._state

    def schedule(self) -> None:
        """Request a run after the debounce window."""
        with self._lock:
            if self._closed:
                return
            if self._state is DebounceState.RUNNING:
                self._rerun_requested = True
                logger.debug("%s: run in progress, deferring new window", self.name)
                return
            self._arm()

    def cancel(self) -> None:
        """Drop a pending run, if any. A run in progress is not interrupted."""
        with self._lock:
            self._disarm()
            self._rerun_requested = False
            if self._state is DebounceState.PENDING:
                self._state = DebounceState.IDLE

    def close(self, timeout: Optional[float] = None) -> bool:
        """Cancel, refuse further requests and wait for a run in progress.

        Returns False if ``timeout`` elapsed with the callback still running.
        Called from inside the callback itself, it does not wait.
        """
        with self._lock:
            self._closed = True
        self.cancel()
        with self._idle:
            if self._runner is threading.current_thread():
                return True
            return self._idle.wait_for(lambda: self._state is not DebounceState.RUNNING, timeout)

    def _arm(self) -> None:
        # Caller holds the lock
        self._disarm()
        self._generation += 1
        generation = self._generation
        self._timer = self._timer_factory(self.delay, lambda: self._fire(generation))
        self._state = DebounceState.PENDING
        self._timer.start()
        logger.debug("%s: window (re)started, %.3fs", self.name, self.delay)

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled too late to stop its thread must not run
            if generation != self._generation or self._state is not DebounceState.PENDING:
                return
            self._timer = None
            self._state = DebounceState.RUNNING
            self._runner = threading.current_thread()

        logger.debug("%s: window elapsed, running", self.name)
        try:
            self.callback()
        except Exception:
            logger.exception("%s: debounced run failed", self.name)
        finally:
            with self._idle:
                self._state = DebounceState.IDLE
                self._runner = None
                if self._rerun_requested and not self._closed:
                    self._rerun_requested = False
                    self._arm()
                self._idle.notify_all()
