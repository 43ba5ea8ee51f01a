"""
Event bus for the acceleration monitor.

This module provides the event bus that delivers events between services.
It handles event validation, tracing, and delivery to subscribers.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Callable, Awaitable
from .events import EventType, BaseEvent
from .registry import EventRegistry
from .tracing import EventTracer

# Type aliases
EventHandler = Callable[[BaseEvent], Awaitable[None]]


class EventBus:
    """
    Central event bus for delivering typed events between services.

    The event bus is responsible for:
    - Validating events against their registered schemas
    - Routing events to subscribers
    - Isolating publishers from handler failures
    - Providing observability through tracing
    """

    def __init__(self, registry: EventRegistry, tracer: Optional[EventTracer] = None):
        """
        Initialize the event bus.

        Args:
            registry: The event registry for validation and tracking
            tracer: Optional event tracer for observability
        """
        self.registry = registry
        self.tracer = tracer
        self.subscribers: Dict[EventType, List[EventHandler]] = {}
        self.wildcard_subscribers: List[EventHandler] = []
        self.logger = logging.getLogger(__name__)

    async def publish(self, event: BaseEvent, sender: str) -> bool:
        """
        Publish an event to all subscribers.

        Args:
            event: The event to publish
            sender: Name of the service publishing the event

        Returns:
            True if the event passed validation and was delivered
        """
        if not event.producer_name:
            event.producer_name = sender

        try:
            self.registry.validate_schema(event)
        except (ValueError, TypeError) as e:
            self.logger.error(f"Event validation failed: {e}")
            return False

        if self.tracer:
            self.tracer.record_event(event)

        event_type = EventType(event.type)
        handlers = self.subscribers.get(event_type, []) + self.wildcard_subscribers
        if not handlers:
            self.logger.debug(f"No subscribers for event type: {event_type.value}")
            return True

        results = await asyncio.gather(
            *(self._deliver_event(handler, event) for handler in handlers),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                self.logger.error(f"Error in event handler: {result}")
        return True

    async def _deliver_event(self, handler: EventHandler, event: BaseEvent) -> None:
        """
        Deliver an event to a single handler with error handling.

        Handler exceptions are logged here and never reach the publisher.
        """
        try:
            await handler(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(
                f"Error delivering event {event.type} to {getattr(handler, '__qualname__', handler)}: {e}",
                exc_info=True,
            )

    def subscribe(self, event_type: Optional[EventType], handler: EventHandler, service_name: str) -> None:
        """
        Subscribe a handler to events of a specific type, or all events if None.

        Args:
            event_type: The event type to subscribe to, or None for all events
            handler: The coroutine function to call when events arrive
            service_name: Name of the subscribing service
        """
        if event_type is None:
            self.wildcard_subscribers.append(handler)
            self.logger.debug(f"Service {service_name} subscribed to all events")
            return

        event_type = EventType(event_type)
        self.subscribers.setdefault(event_type, []).append(handler)
        self.registry.register_consumer(service_name, event_type)
        self.logger.debug(f"Service {service_name} subscribed to {event_type.value}")

    def unsubscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        """Unsubscribe a handler from a specific event type, or from all events if None."""
        if event_type is None:
            if handler in self.wildcard_subscribers:
                self.wildcard_subscribers.remove(handler)
            return

        event_type = EventType(event_type)
        handlers = self.subscribers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self.subscribers[event_type]

    def get_subscriber_count(self, event_type: EventType) -> int:
        """Number of handlers (specific and wildcard) that would receive an event type."""
        return len(self.subscribers.get(EventType(event_type), [])) + len(self.wildcard_subscribers)
