"""
Event tracing system for the acceleration monitor.

This module provides observability into the event flow through the system,
keeping a bounded buffer of recent events for debugging and statistics.
"""

import time
import logging
from collections import Counter, deque
from typing import Dict, List, Any, Deque
from .events import BaseEvent


class EventTracer:
    """
    Traces event flow through the system for debugging and observability.

    Events are recorded as they are published; the oldest records fall off
    once ``max_events`` is reached.
    """

    def __init__(self, max_events: int = 1000, time_source=time.time):
        """
        Initialize the event tracer.

        Args:
            max_events: Maximum number of events to keep in the buffer
            time_source: Callable returning the current time in seconds
        """
        self.max_events = max_events
        self.events: Deque[Dict[str, Any]] = deque(maxlen=max_events)
        self._time = time_source
        self.logger = logging.getLogger(__name__)

    def record_event(self, event: BaseEvent) -> None:
        """
        Record an event in the trace buffer.

        Args:
            event: The event to record
        """
        self.events.append({
            'timestamp': self._time(),
            'trace_id': event.trace_id,
            'type': event.type,
            'producer': event.producer_name,
            'event_data': event.model_dump(exclude={'trace_id', 'type', 'producer_name'}),
        })
        self.logger.debug(f"Recorded event {event.type} from {event.producer_name}")

    def get_events_by_type(self, event_type: str) -> List[Dict[str, Any]]:
        """Get all recorded events of a specific type."""
        return [e for e in self.events if e['type'] == event_type]

    def get_event_count(self) -> int:
        return len(self.events)

    def get_event_rate(self, window_seconds: float = 60.0) -> float:
        """
        Calculate the event rate over a time window.

        Args:
            window_seconds: Time window in seconds

        Returns:
            Events per second over the window
        """
        if not self.events or window_seconds <= 0:
            return 0.0

        window_start = self._time() - window_seconds
        in_window = sum(1 for e in self.events if e['timestamp'] >= window_start)
        return in_window / window_seconds

    def get_event_stats(self) -> Dict[str, Any]:
        """
        Get statistics about recorded events.

        Returns:
            Dictionary with totals per type and per producer
        """
        return {
            'total_events': len(self.events),
            'event_types': dict(Counter(e['type'] for e in self.events)),
            'producers': dict(Counter(e['producer'] for e in self.events)),
            'rate_per_second': self.get_event_rate(),
        }
