"""
Clock abstraction for time-driven stream state.

Activity timeouts, stuck-motion recovery and throughput windows are evaluated
against an injected clock so tests can simulate elapsed time deterministically.
All values are seconds as floats.
"""

import threading
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of the current time in seconds."""

    @abstractmethod
    def now(self) -> float:
        """Return the current time in seconds."""


class MonotonicClock(Clock):
    """Production clock backed by ``time.monotonic``."""

    def now(self) -> float:
        return time.monotonic()

    def __repr__(self):
        return "<MonotonicClock>"


class ManualClock(Clock):
    """
    Controllable clock for tests and replays.

    Thread-safe, so a presentation thread may read it while the
    ingestion path advances it.
    """

    def __init__(self, start: float = 0.0):
        self._lock = threading.Lock()
        self._now = float(start)

    def now(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        """
        Move the clock forward.

        Args:
            seconds: Non-negative number of seconds to advance

        Returns:
            The new current time
        """
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, value: float) -> None:
        """Jump to an absolute time (not earlier than the current one)."""
        with self._lock:
            if value < self._now:
                raise ValueError("ManualClock cannot move backwards")
            self._now = float(value)

    def __repr__(self):
        return f"<ManualClock(now={self._now:.3f})>"
