"""
Core event system for the acceleration monitor.

This module defines the base event model and event type enum that form the foundation
of the typed event system. All events in the system should inherit from BaseEvent.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum
import time
import uuid


class EventType(str, Enum):
    """
    Enum defining all event types in the system.

    Using string-based enum to ensure JSON serialization works properly.
    """
    # Stream lifecycle events
    STREAM_REGISTERED = "stream_registered"
    CALIBRATION_STARTED = "calibration_started"
    CALIBRATION_COMPLETED = "calibration_completed"
    MOTION_LEVEL_CHANGED = "motion_level_changed"

    # Ingestion events
    BACKLOG_PURGED = "backlog_purged"
    THROUGHPUT_REPORT = "throughput_report"

    # Control requests (external command input)
    STREAM_REGISTRATION_REQUESTED = "stream_registration_requested"
    CALIBRATION_REQUESTED = "calibration_requested"
    BUFFER_CLEAR_REQUESTED = "buffer_clear_requested"
    SMOOTHING_ADJUST_REQUESTED = "smoothing_adjust_requested"

    # System events
    APPLICATION_STARTUP_COMPLETED = "application_startup_completed"
    SERVICE_STATE_CHANGED = "service_state_changed"
    HARDWARE_ERROR = "hardware_error"


def generate_trace_id() -> str:
    """Generate a unique trace ID for event tracing."""
    return str(uuid.uuid4())


class BaseEvent(BaseModel):
    """
    Base model for all events with common metadata.

    All events in the system should inherit from this class and specify the event type
    and any additional payload fields required for that event.
    """
    type: EventType
    producer_name: str = ""
    timestamp: float = Field(default_factory=time.time)
    trace_id: Optional[str] = Field(default_factory=generate_trace_id)

    # Use enum values rather than the enum objects themselves
    model_config = ConfigDict(extra="allow", use_enum_values=True)
