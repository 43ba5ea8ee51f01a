"""
Event definitions for the acceleration monitor.

This package contains all event types used in the system, organized by functional area.
"""

from accelmon.core.events import EventType, BaseEvent
from accelmon.core.registry import EventRegistry
from .streams import (
    StreamRegisteredEvent, CalibrationStartedEvent,
    CalibrationCompletedEvent, MotionLevelChangedEvent,
)
from .ingestion import BacklogPurgedEvent, ThroughputReportEvent
from .control import (
    StreamRegistrationRequestedEvent, CalibrationRequestedEvent,
    BufferClearRequestedEvent, SmoothingAdjustRequestedEvent,
)
from .system import (
    ApplicationStartupCompletedEvent, ServiceStateChangedEvent, HardwareErrorEvent,
)

EVENT_CATALOG = {
    EventType.STREAM_REGISTERED: (StreamRegisteredEvent, "A new stream id was registered"),
    EventType.CALIBRATION_STARTED: (CalibrationStartedEvent, "A stream entered calibration"),
    EventType.CALIBRATION_COMPLETED: (CalibrationCompletedEvent, "A stream finished calibration"),
    EventType.MOTION_LEVEL_CHANGED: (MotionLevelChangedEvent, "A stream changed motion level"),
    EventType.BACKLOG_PURGED: (BacklogPurgedEvent, "Pending input was discarded"),
    EventType.THROUGHPUT_REPORT: (ThroughputReportEvent, "Periodic ingestion statistics"),
    EventType.STREAM_REGISTRATION_REQUESTED: (StreamRegistrationRequestedEvent, "Register a stream"),
    EventType.CALIBRATION_REQUESTED: (CalibrationRequestedEvent, "Recalibrate one or all active streams"),
    EventType.BUFFER_CLEAR_REQUESTED: (BufferClearRequestedEvent, "Discard pending input"),
    EventType.SMOOTHING_ADJUST_REQUESTED: (SmoothingAdjustRequestedEvent, "Shift display smoothing"),
    EventType.APPLICATION_STARTUP_COMPLETED: (ApplicationStartupCompletedEvent, "Application is ready"),
    EventType.SERVICE_STATE_CHANGED: (ServiceStateChangedEvent, "A service changed lifecycle state"),
    EventType.HARDWARE_ERROR: (HardwareErrorEvent, "Line source hardware failed"),
}


def register_all_events(registry: EventRegistry) -> EventRegistry:
    """Register every known event schema with the given registry."""
    for event_type, (schema, description) in EVENT_CATALOG.items():
        registry.register_event(event_type, schema, description)
    return registry


__all__ = [
    'EventType',
    'BaseEvent',
    'EVENT_CATALOG',
    'register_all_events',
    'StreamRegisteredEvent',
    'CalibrationStartedEvent',
    'CalibrationCompletedEvent',
    'MotionLevelChangedEvent',
    'BacklogPurgedEvent',
    'ThroughputReportEvent',
    'StreamRegistrationRequestedEvent',
    'CalibrationRequestedEvent',
    'BufferClearRequestedEvent',
    'SmoothingAdjustRequestedEvent',
    'ApplicationStartupCompletedEvent',
    'ServiceStateChangedEvent',
    'HardwareErrorEvent',
]
