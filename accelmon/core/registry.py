"""
Event registry for the acceleration monitor.

This module provides registration and validation for events, their producers and consumers.
It enables discovery and documentation of event flows through the system.
"""

import logging
from collections import defaultdict
from typing import Dict, Set, Type, Any
from .events import EventType, BaseEvent


class EventRegistry:
    """
    Central registry of all event types, producers, and consumers.

    This registry maintains information about:
    - Which services produce which events
    - Which services consume which events
    - The schema (event class) for each event type
    - Documentation about each event type
    """

    def __init__(self):
        self._producers: Dict[EventType, Set[str]] = defaultdict(set)
        self._consumers: Dict[EventType, Set[str]] = defaultdict(set)
        self._event_schemas: Dict[EventType, Dict[str, Any]] = {}
        self._logger = logging.getLogger(__name__)

    def register_event(self, event_type: EventType, event_schema: Type[BaseEvent], description: str):
        """
        Register a new event type with its schema and description.

        Re-registering the same schema is a no-op; a conflicting schema is an error.

        Args:
            event_type: The type of event being registered
            event_schema: The Pydantic model class for this event type
            description: Human-readable description of this event type
        """
        event_type = EventType(event_type)
        existing = self._event_schemas.get(event_type)
        if existing is not None and existing['schema'] is not event_schema:
            raise ValueError(
                f"Event type {event_type.value} already registered with {existing['schema'].__name__}"
            )
        self._event_schemas[event_type] = {
            'schema': event_schema,
            'description': description
        }
        self._logger.debug(f"Registered event type: {event_type.value}")

    def register_producer(self, service_name: str, event_type: EventType):
        """Register a service as an event producer."""
        self._producers[EventType(event_type)].add(service_name)
        self._logger.debug(f"Registered producer {service_name} for {event_type}")

    def register_consumer(self, service_name: str, event_type: EventType):
        """Register a service as an event consumer."""
        self._consumers[EventType(event_type)].add(service_name)
        self._logger.debug(f"Registered consumer {service_name} for {event_type}")

    def validate_schema(self, event: BaseEvent) -> bool:
        """
        Validate that an event matches its registered schema.

        Args:
            event: The event to validate

        Returns:
            bool: True if validation passes

        Raises:
            ValueError: If event type is unknown
            TypeError: If event doesn't match registered schema
        """
        event_type = EventType(event.type)
        if event_type not in self._event_schemas:
            raise ValueError(f"Unknown event type: {event_type.value}")

        schema = self._event_schemas[event_type]['schema']
        if not isinstance(event, schema):
            raise TypeError(f"Event does not match schema for {event_type.value}")

        return True

    def get_event_flow(self, event_type: EventType) -> Dict[str, Set[str]]:
        """Get all producers and consumers for an event type."""
        event_type = EventType(event_type)
        return {
            'producers': set(self._producers.get(event_type, set())),
            'consumers': set(self._consumers.get(event_type, set()))
        }

    def get_all_event_types(self) -> Set[EventType]:
        """Get all registered event types."""
        return set(self._event_schemas.keys())

    def generate_documentation(self) -> Dict[str, Any]:
        """
        Generate documentation of the event system.

        Returns:
            Dictionary keyed by event type value
        """
        doc = {}
        for event_type, entry in self._event_schemas.items():
            doc[event_type.value] = {
                'description': entry['description'],
                'producers': sorted(self._producers.get(event_type, set())),
                'consumers': sorted(self._consumers.get(event_type, set())),
                'schema': entry['schema'].__name__,
            }
        return doc
