"""
Unit tests for the StreamRegistry.
"""

import unittest

from accelmon.core.clock import ManualClock
from accelmon.core.config import StreamConfig
from accelmon.events.streams import (
    CalibrationCompletedEvent, CalibrationStartedEvent,
    MotionLevelChangedEvent, StreamRegisteredEvent,
)
from accelmon.streams import (
    AggregateSnapshot, Calibrating, CalibrationQuality, IngestOutcome, Ready, StreamRegistry,
)

REST = (0.0, 0.0, 1000.0)


class TestStreamRegistry(unittest.TestCase):
    """Test cases for the StreamRegistry class."""

    def setUp(self):
        self.clock = ManualClock()
        self.registry = StreamRegistry(clock=self.clock)

    def _calibrate(self, stream_id, spread=0.0):
        for i in range(60):
            offset = spread if i % 2 == 0 else -spread
            self.registry.dispatch(stream_id, REST[0] + offset, REST[1], REST[2])

    def test_register_creates_stream(self):
        self.assertTrue(self.registry.register(3))
        self.assertIn(3, self.registry)
        self.assertEqual(len(self.registry), 1)
        self.assertIsInstance(self.registry.get(3).phase, Calibrating)

    def test_register_is_idempotent(self):
        self.registry.register(2)
        self._calibrate(2)
        state = self.registry.get(2).state
        baseline, noise, phase = state.baseline, state.noise, self.registry.get(2).phase

        self.assertFalse(self.registry.register(2))
        self.assertFalse(self.registry.register(2))

        processor = self.registry.get(2)
        self.assertEqual(processor.state.baseline, baseline)
        self.assertEqual(processor.state.noise, noise)
        self.assertEqual(processor.phase, phase)
        self.assertIsInstance(processor.phase, Ready)

    def test_invalid_ids_rejected(self):
        self.assertFalse(self.registry.register(0))
        self.assertFalse(self.registry.register(7))
        self.assertIsNone(self.registry.dispatch(9, *REST))
        self.assertEqual(len(self.registry), 0)

    def test_max_streams_configurable(self):
        registry = StreamRegistry(stream_config=StreamConfig(max_streams=9), clock=self.clock)
        self.assertTrue(registry.register(9))

    def test_dispatch_auto_registers(self):
        result = self.registry.dispatch(4, *REST)
        self.assertIsNotNone(result)
        self.assertIn(4, self.registry)

        events = self.registry.drain_events()
        registered = [e for e in events if isinstance(e, StreamRegisteredEvent)]
        self.assertEqual(len(registered), 1)
        self.assertTrue(registered[0].auto)

    def test_non_finite_sample_does_not_create_stream(self):
        result = self.registry.dispatch(3, float('nan'), 0.0, 0.0)

        self.assertEqual(result.outcome, IngestOutcome.REJECTED)
        self.assertNotIn(3, self.registry)
        self.assertEqual(self.registry.active_streams(), frozenset())
        self.assertEqual(self.registry.drain_events(), [])
        self.assertFalse(self.registry.start_calibration(3))

        self.registry.dispatch(3, *REST)
        self.assertIn(3, self.registry)

    def test_registration_events(self):
        self.registry.register(1)
        events = self.registry.drain_events()

        self.assertEqual(len(events), 2)
        self.assertIsInstance(events[0], StreamRegisteredEvent)
        self.assertFalse(events[0].auto)
        self.assertIsInstance(events[1], CalibrationStartedEvent)
        self.assertEqual(self.registry.drain_events(), [])

    def test_calibration_and_motion_events(self):
        self._calibrate(1)
        self.registry.dispatch(1, REST[0] + 600.0, REST[1], REST[2])
        events = self.registry.drain_events()

        completed = [e for e in events if isinstance(e, CalibrationCompletedEvent)]
        self.assertEqual(len(completed), 1)
        self.assertEqual(completed[0].quality, CalibrationQuality.GOOD.value)
        self.assertEqual(completed[0].deadzone, 250.0)

        changes = [e for e in events if isinstance(e, MotionLevelChangedEvent)]
        self.assertEqual(len(changes), 1)
        self.assertEqual(changes[0].previous_level, 0)
        self.assertEqual(changes[0].level, 2)
        self.assertEqual(changes[0].label, "SLIGHT")

    def test_activity_timeout(self):
        self.registry.dispatch(1, *REST)
        self.clock.advance(4.9)
        self.assertEqual(self.registry.active_streams(), frozenset({1}))

        self.clock.advance(0.1)
        self.assertEqual(self.registry.active_streams(), frozenset())

    def test_registered_stream_active_until_timeout(self):
        self.registry.register(5)
        self.assertIn(5, self.registry.active_streams())
        self.clock.advance(5.0)
        self.assertNotIn(5, self.registry.active_streams())

    def test_calibration_skips_inactive_streams(self):
        self._calibrate(1)
        self._calibrate(2)
        self.clock.advance(3.0)
        self.registry.dispatch(2, *REST)
        self.clock.advance(3.0)

        self.assertFalse(self.registry.start_calibration(1))
        self.assertFalse(self.registry.start_calibration(6))
        self.assertIsInstance(self.registry.get(1).phase, Ready)

        self.assertTrue(self.registry.start_calibration(2))
        self.assertIsInstance(self.registry.get(2).phase, Calibrating)

    def test_calibrate_all_active(self):
        self._calibrate(1)
        self._calibrate(2)
        self.registry.drain_events()

        self.assertEqual(self.registry.start_calibration_all(), 2)
        started = [e for e in self.registry.drain_events() if isinstance(e, CalibrationStartedEvent)]
        self.assertEqual(sorted(e.stream_id for e in started), [1, 2])

        self.clock.advance(10.0)
        self.assertEqual(self.registry.start_calibration_all(), 0)

    def test_well_calibrated_streams(self):
        self._calibrate(1)
        self._calibrate(2, spread=300.0)
        self.registry.register(3)

        self.assertEqual(self.registry.well_calibrated_streams(), frozenset({1}))

    def test_snapshot_is_ordered_copy(self):
        self.registry.register(5)
        self.registry.register(2)
        self._calibrate(2)

        snapshot = self.registry.snapshot()
        self.assertEqual([s.stream_id for s in snapshot], [2, 5])
        self.assertTrue(snapshot[0].is_ready)
        self.assertFalse(snapshot[1].is_ready)
        self.assertEqual(snapshot[1].phase.progress, 0)

        self.registry.dispatch(2, REST[0] + 2000.0, REST[1], REST[2])
        self.assertEqual(snapshot[0].distance, 0.0)

    def test_adjust_smoothing_applies_to_all(self):
        self.registry.register(1)
        self.registry.register(2)
        alphas = self.registry.adjust_smoothing(-1)
        self.assertEqual(set(alphas), {1, 2})
        for alpha in alphas.values():
            self.assertAlmostEqual(alpha, 0.1)

    def test_ratio_without_active_streams(self):
        aggregate = AggregateSnapshot(
            active_stream_count=0,
            well_calibrated_count=0,
            messages_per_second=0,
            backlog_active=False,
        )
        self.assertEqual(aggregate.well_calibrated_ratio, 0.0)


if __name__ == '__main__':
    unittest.main()
