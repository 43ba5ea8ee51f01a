"""
Line sources feed complete text lines to the ingestion scheduler.

A source never blocks: ``read_line`` returns the next complete line or None
when nothing is available right now. Connection management belongs to the
concrete source, not to the scheduler.
"""

import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, Optional


class LineSource(ABC):
    """Non-blocking supplier of complete lines."""

    @abstractmethod
    def read_line(self) -> Optional[str]:
        """Return the next complete line (without terminator) or None."""


class QueueLineSource(LineSource):
    """
    In-memory line source.

    Used for replays and tests, and as the hand-off point when lines are
    produced on another thread.
    """

    def __init__(self, lines: Iterable[str] = ()):
        self._lines = deque(lines)
        self._lock = threading.Lock()

    def feed(self, *lines: str) -> None:
        with self._lock:
            self._lines.extend(lines)

    def feed_many(self, lines: Iterable[str]) -> None:
        with self._lock:
            self._lines.extend(lines)

    def read_line(self) -> Optional[str]:
        with self._lock:
            if not self._lines:
                return None
            return self._lines.popleft()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._lines)

    def __len__(self) -> int:
        return self.pending
