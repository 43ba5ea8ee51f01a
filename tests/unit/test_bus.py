"""
Unit tests for the event registry, event bus and tracer.
"""

import unittest
from unittest.mock import AsyncMock

from accelmon.core import EventBus, EventRegistry, EventTracer, EventType
from accelmon.events import EVENT_CATALOG, register_all_events
from accelmon.events.streams import CalibrationStartedEvent, StreamRegisteredEvent
from accelmon.events.system import ServiceStateChangedEvent


class TestEventRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = register_all_events(EventRegistry())

    def test_all_events_registered(self):
        self.assertEqual(self.registry.get_all_event_types(), set(EVENT_CATALOG))

    def test_conflicting_schema(self):
        self.registry.register_event(EventType.STREAM_REGISTERED, StreamRegisteredEvent, "again")
        with self.assertRaises(ValueError):
            self.registry.register_event(EventType.STREAM_REGISTERED, CalibrationStartedEvent, "wrong")

    def test_validate_schema(self):
        self.assertTrue(self.registry.validate_schema(StreamRegisteredEvent(stream_id=1)))

        with self.assertRaises(ValueError):
            EventRegistry().validate_schema(StreamRegisteredEvent(stream_id=1))

    def test_documentation(self):
        self.registry.register_producer("ingestion", EventType.STREAM_REGISTERED)
        doc = self.registry.generate_documentation()
        self.assertEqual(doc["stream_registered"]["producers"], ["ingestion"])
        self.assertEqual(doc["stream_registered"]["schema"], "StreamRegisteredEvent")


class TestEventBus(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.registry = register_all_events(EventRegistry())
        self.tracer = EventTracer(max_events=10)
        self.bus = EventBus(self.registry, self.tracer)

    async def test_publish_to_subscriber(self):
        handler = AsyncMock()
        self.bus.subscribe(EventType.STREAM_REGISTERED, handler, "test")

        event = StreamRegisteredEvent(stream_id=2)
        self.assertTrue(await self.bus.publish(event, "registry"))

        handler.assert_awaited_once_with(event)
        self.assertEqual(event.producer_name, "registry")
        self.assertEqual(self.registry.get_event_flow(EventType.STREAM_REGISTERED)["consumers"], {"test"})

    async def test_only_matching_subscribers(self):
        handler = AsyncMock()
        wildcard = AsyncMock()
        self.bus.subscribe(EventType.CALIBRATION_STARTED, handler, "test")
        self.bus.subscribe(None, wildcard, "monitor")

        await self.bus.publish(StreamRegisteredEvent(stream_id=2), "registry")

        handler.assert_not_awaited()
        wildcard.assert_awaited_once()

    async def test_handler_errors_are_isolated(self):
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        healthy = AsyncMock()
        self.bus.subscribe(EventType.STREAM_REGISTERED, failing, "a")
        self.bus.subscribe(EventType.STREAM_REGISTERED, healthy, "b")

        self.assertTrue(await self.bus.publish(StreamRegisteredEvent(stream_id=1), "registry"))
        healthy.assert_awaited_once()

    async def test_unregistered_event_dropped(self):
        bus = EventBus(EventRegistry(), self.tracer)
        handler = AsyncMock()
        bus.subscribe(None, handler, "monitor")

        self.assertFalse(await bus.publish(StreamRegisteredEvent(stream_id=1), "registry"))
        handler.assert_not_awaited()
        self.assertEqual(self.tracer.get_event_count(), 0)

    async def test_unsubscribe(self):
        handler = AsyncMock()
        self.bus.subscribe(EventType.STREAM_REGISTERED, handler, "test")
        self.assertEqual(self.bus.get_subscriber_count(EventType.STREAM_REGISTERED), 1)

        self.bus.unsubscribe(EventType.STREAM_REGISTERED, handler)
        await self.bus.publish(StreamRegisteredEvent(stream_id=1), "registry")

        handler.assert_not_awaited()
        self.assertEqual(self.bus.get_subscriber_count(EventType.STREAM_REGISTERED), 0)

    async def test_tracing(self):
        await self.bus.publish(StreamRegisteredEvent(stream_id=1), "registry")
        await self.bus.publish(ServiceStateChangedEvent(service_name="x", state="running"), "x")

        self.assertEqual(self.tracer.get_event_count(), 2)
        self.assertEqual(len(self.tracer.get_events_by_type("stream_registered")), 1)


class TestEventTracer(unittest.TestCase):

    def setUp(self):
        self.now = 100.0
        self.tracer = EventTracer(max_events=3, time_source=lambda: self.now)

    def test_buffer_is_bounded(self):
        for stream_id in range(1, 6):
            self.tracer.record_event(StreamRegisteredEvent(stream_id=stream_id, producer_name="registry"))
        self.assertEqual(self.tracer.get_event_count(), 3)

    def test_stats_and_windowed_rate(self):
        self.tracer.record_event(StreamRegisteredEvent(stream_id=1, producer_name="registry"))
        self.now = 150.0
        self.tracer.record_event(ServiceStateChangedEvent(service_name="x", state="running", producer_name="x"))

        stats = self.tracer.get_event_stats()
        self.assertEqual(stats["total_events"], 2)
        self.assertEqual(stats["event_types"], {"stream_registered": 1, "service_state_changed": 1})
        self.assertEqual(stats["producers"], {"registry": 1, "x": 1})
        self.assertAlmostEqual(stats["rate_per_second"], 2 / 60.0)

        self.now = 200.0
        self.assertAlmostEqual(self.tracer.get_event_rate(), 1 / 60.0)
        self.assertEqual(self.tracer.get_event_rate(window_seconds=0), 0.0)


if __name__ == '__main__':
    unittest.main()
