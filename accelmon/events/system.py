"""
System events for the acceleration monitor.

This module defines events related to application lifecycle, service state,
and hardware failures.
"""

from typing import Dict, Any, Optional, Literal
from accelmon.core.events import BaseEvent, EventType


class ApplicationStartupCompletedEvent(BaseEvent):
    """Event published when all services have started."""
    type: Literal[EventType.APPLICATION_STARTUP_COMPLETED] = EventType.APPLICATION_STARTUP_COMPLETED


class ServiceStateChangedEvent(BaseEvent):
    """
    Event published when a service changes state.

    Used to communicate service lifecycle changes (running, stopping, stopped, error).
    """
    type: Literal[EventType.SERVICE_STATE_CHANGED] = EventType.SERVICE_STATE_CHANGED
    service_name: str
    state: str
    error: Optional[str] = None  # Present only if state is 'error'


class HardwareErrorEvent(BaseEvent):
    """Event published when the line source hardware fails."""
    type: Literal[EventType.HARDWARE_ERROR] = EventType.HARDWARE_ERROR
    component: str
    error_type: str
    error_message: str
    details: Optional[Dict[str, Any]] = None
