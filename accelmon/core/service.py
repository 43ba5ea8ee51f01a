"""
Base service implementation for the acceleration monitor.

This module provides the BaseService class that all services should inherit from,
defining the core service lifecycle and event handling interfaces.
"""

import asyncio
import structlog
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, ClassVar
from .events import EventType, BaseEvent
from .bus import EventBus


class BaseService(ABC):
    """
    Base class for all services.

    This class provides:
    - Service lifecycle management (start/stop)
    - Typed event publishing and handling
    - Structured logging with context

    Services declare the events they produce and the events they consume;
    consumed events are routed to the named handler method on start.
    """

    # Event types this service publishes
    PRODUCES_EVENTS: ClassVar[tuple] = ()

    # Map of EventType to handler method name
    CONSUMES_EVENTS: ClassVar[Dict[EventType, str]] = {}

    def __init__(self,
                 event_bus: EventBus,
                 name: Optional[str] = None,
                 config: Optional[Any] = None):
        """
        Initialize the service.

        Args:
            event_bus: The event bus for publishing and subscribing to events
            name: Optional service name (defaults to class name)
            config: Optional service configuration
        """
        self.event_bus = event_bus
        self.name = name or self.__class__.__name__
        self.config = config

        self.logger = structlog.get_logger(service=self.name)

        self._running = False
        self._lock = asyncio.Lock()

        for event_type in self.PRODUCES_EVENTS:
            event_bus.registry.register_producer(self.name, event_type)

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Start the service.

        Subscribes the consumed events and publishes the state change.
        Implementations should call super().start() first.
        """
        async with self._lock:
            if self._running:
                self.logger.warning("Service already running")
                return

            for event_type, handler_name in self.CONSUMES_EVENTS.items():
                self.event_bus.subscribe(event_type, getattr(self, handler_name), self.name)

            self._running = True
            self.logger.info("Service started")

        await self.publish_service_state('running')

    async def stop(self) -> None:
        """
        Stop the service.

        Implementations should do their own cleanup first and call super().stop() at the end.
        """
        async with self._lock:
            if not self._running:
                self.logger.warning("Service already stopped")
                return

            await self.publish_service_state('stopping')

            for event_type, handler_name in self.CONSUMES_EVENTS.items():
                self.event_bus.unsubscribe(event_type, getattr(self, handler_name))

            self._running = False
            self.logger.info("Service stopped")

        await self.publish_service_state('stopped')

    async def publish(self, event: BaseEvent) -> None:
        """
        Publish an event through the bus.

        Args:
            event: The event to publish
        """
        if not self._running:
            self.logger.warning("Attempted publish while stopped", event_type=event.type)
            return

        if not event.producer_name:
            event.producer_name = self.name

        await self.event_bus.publish(event, self.name)

    async def publish_service_state(self, state: str, error: Optional[str] = None) -> None:
        """
        Publish a service state change event.

        Args:
            state: New state of the service
            error: Error description when state is 'error'
        """
        from accelmon.events.system import ServiceStateChangedEvent

        event = ServiceStateChangedEvent(
            producer_name=self.name,
            service_name=self.name,
            state=state,
            error=error,
        )
        await self.event_bus.publish(event, self.name)

    @abstractmethod
    async def handle_event(self, event: BaseEvent) -> None:
        """
        Handle an event from the event bus.

        Handlers registered in CONSUMES_EVENTS should funnel into this method.

        Args:
            event: The event to handle
        """
