"""
Stream events for the acceleration monitor.

This module defines events raised by the stream registry as sensor streams
register, calibrate and change motion level.
"""

from typing import Literal, Optional, Tuple
from accelmon.core.events import BaseEvent, EventType


class StreamRegisteredEvent(BaseEvent):
    """
    Event published when a previously unseen stream id is registered.

    ``auto`` is True when the stream was created by its first data message
    rather than an explicit registration.
    """
    type: Literal[EventType.STREAM_REGISTERED] = EventType.STREAM_REGISTERED
    stream_id: int
    auto: bool = False


class CalibrationStartedEvent(BaseEvent):
    """Event published when a stream (re)enters calibration."""
    type: Literal[EventType.CALIBRATION_STARTED] = EventType.CALIBRATION_STARTED
    stream_id: int


class CalibrationCompletedEvent(BaseEvent):
    """
    Event published when a stream finishes calibration.

    Carries the measured baseline and noise and the derived deadzone,
    base threshold and smoothing factor.
    """
    type: Literal[EventType.CALIBRATION_COMPLETED] = EventType.CALIBRATION_COMPLETED
    stream_id: int
    baseline: Tuple[float, float, float]
    noise: float
    quality: str  # 'good', 'fair' or 'poor'
    deadzone: float
    base_threshold: float
    alpha: float


class MotionLevelChangedEvent(BaseEvent):
    """
    Event published when a stream's motion level changes.

    ``forced_reset`` marks a drop to STILL caused by stuck-state recovery.
    """
    type: Literal[EventType.MOTION_LEVEL_CHANGED] = EventType.MOTION_LEVEL_CHANGED
    stream_id: int
    previous_level: int
    level: int
    label: str
    distance: Optional[float] = None
    forced_reset: bool = False
