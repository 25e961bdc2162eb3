"""
services/timer.py

One-second countdown coupled to SessionState.

Lifecycle:
  start() → emits the current remaining time, then ticks every interval.
  tick    → remaining 0: stop and expire (finish). Otherwise decrement and emit.
  stop()  → idempotent, cancels pending ticks.

Ticks run under the owner's lock so they never interleave with a controller
operation. A tick scheduled by an earlier run is recognised by its generation
number and ignored.
"""

import logging
import threading
from typing import Callable, Optional

from config import TICK_INTERVAL_SEC
from timed_quiz.models.session_state import SessionState

logger = logging.getLogger(__name__)


def format_remaining(seconds: int) -> str:
    """Remaining time as ``MM:SS``. Minutes are not wrapped into hours."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        t = threading.Timer(delay, callback)
        t.daemon = True
        t.start()
        return t


class CountdownTimer:
    STOPPED = "stopped"
    RUNNING = "running"

    def __init__(
        self,
        scheduler=None,
        interval: float = TICK_INTERVAL_SEC,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._scheduler = scheduler or ThreadingScheduler()
        self._interval = interval
        self._lock = lock or threading.RLock()
        self._status = self.STOPPED
        self._generation = 0
        self._handle = None
        self._state: Optional[SessionState] = None
        self._on_change: Optional[Callable[[int], None]] = None
        self._on_expire: Optional[Callable[[], None]] = None

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == self.RUNNING

    def start(
        self,
        state: SessionState,
        on_change: Callable[[int], None],
        on_expire: Callable[[], None],
    ) -> None:
        """
        Start counting ``state.remaining_seconds`` down.

        Args:
            state:     session whose ``remaining_seconds`` is decremented.
            on_change: called with the new remaining value, once immediately and after
                       every decrement (the owner persists and notifies the UI here).
            on_expire: called once when a tick finds nothing left.
        """
        with self._lock:
            self.stop()
            self._state = state
            self._on_change = on_change
            self._on_expire = on_expire
            self._status = self.RUNNING
            on_change(state.remaining_seconds)
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None
            if self._status == self.RUNNING:
                logger.debug("Countdown stopped")
            self._status = self.STOPPED
            self._generation += 1

    def _schedule(self) -> None:
        generation = self._generation
        self._handle = self._scheduler.call_later(self._interval, lambda: self._tick(generation))

    def _tick(self, generation: int) -> None:
        with self._lock:
            if self._status != self.RUNNING or generation != self._generation:
                return
            self._handle = None
            state = self._state
            if state.remaining_seconds <= 0:
                on_expire = self._on_expire
                self.stop()
                logger.info("Countdown reached zero, finishing session")
                on_expire()
                return
            state.remaining_seconds -= 1
            self._on_change(state.remaining_seconds)
            if self._status == self.RUNNING and generation == self._generation:
                self._schedule()
