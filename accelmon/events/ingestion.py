"""
Ingestion events for the acceleration monitor.

Backlog control and throughput reporting from the ingestion scheduler.
"""

from typing import Literal
from accelmon.core.events import BaseEvent, EventType


class BacklogPurgedEvent(BaseEvent):
    """
    Event published when pending input was discarded.

    ``cap_reached`` means the purge stopped at its safety cap and more
    input may still be waiting.
    """
    type: Literal[EventType.BACKLOG_PURGED] = EventType.BACKLOG_PURGED
    cleared: int
    cap_reached: bool = False
    automatic: bool = True


class ThroughputReportEvent(BaseEvent):
    """Periodic ingestion performance summary."""
    type: Literal[EventType.THROUGHPUT_REPORT] = EventType.THROUGHPUT_REPORT
    messages_per_second: int
    active_streams: int
    purge_count: int = 0
