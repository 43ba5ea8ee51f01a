"""
Control events for the acceleration monitor.

These requests come from external command input (keyboard, remote control)
and are consumed by the ingestion service.
"""

from typing import Literal, Optional
from accelmon.core.events import BaseEvent, EventType


class StreamRegistrationRequestedEvent(BaseEvent):
    """Request to register a stream id ahead of its first data."""
    type: Literal[EventType.STREAM_REGISTRATION_REQUESTED] = EventType.STREAM_REGISTRATION_REQUESTED
    stream_id: int


class CalibrationRequestedEvent(BaseEvent):
    """Request to recalibrate one active stream, or every active stream when stream_id is None."""
    type: Literal[EventType.CALIBRATION_REQUESTED] = EventType.CALIBRATION_REQUESTED
    stream_id: Optional[int] = None


class BufferClearRequestedEvent(BaseEvent):
    """Request to discard pending input."""
    type: Literal[EventType.BUFFER_CLEAR_REQUESTED] = EventType.BUFFER_CLEAR_REQUESTED


class SmoothingAdjustRequestedEvent(BaseEvent):
    """
    Request to shift every stream's smoothing factor.

    Negative steps smooth more, positive steps follow the raw signal more closely.
    """
    type: Literal[EventType.SMOOTHING_ADJUST_REQUESTED] = EventType.SMOOTHING_ADJUST_REQUESTED
    steps: int = 1
