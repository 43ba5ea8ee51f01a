"""
Core framework for the acceleration monitor.

This package provides the fundamental components of the architecture:
- Event system with typed event definitions
- Event registry and bus
- Configuration management
- Observability and tracing
- Injectable clocks
"""

from .events import EventType, BaseEvent
from .registry import EventRegistry
from .bus import EventBus
from .tracing import EventTracer
from .service import BaseService
from .clock import Clock, MonotonicClock, ManualClock
from .config import get_config, ApplicationConfig

__all__ = [
    'EventType',
    'BaseEvent',
    'EventRegistry',
    'EventBus',
    'EventTracer',
    'BaseService',
    'Clock',
    'MonotonicClock',
    'ManualClock',
    'get_config',
    'ApplicationConfig'
]
