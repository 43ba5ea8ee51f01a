"""
Unit tests for configuration loading and validation.
"""

import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from accelmon.core.config import (
    ApplicationConfig, CalibrationConfig, LogLevel, MotionConfig, SchedulerConfig,
    SmoothingConfig, SmoothingPolicyName, StreamConfig, get_config,
)
from accelmon.streams import AdaptiveSmoothing, FixedSmoothing, build_smoothing_policy


class TestConfigDefaults(unittest.TestCase):

    def test_defaults(self):
        config = ApplicationConfig()
        self.assertEqual(config.log_level, LogLevel.INFO)
        self.assertEqual(config.stream.max_streams, 6)
        self.assertEqual(config.stream.activity_timeout, 5.0)
        self.assertEqual(config.calibration.sample_count, 60)
        self.assertEqual(config.calibration.threshold_multipliers, (1.0, 1.8, 3.5, 6.0, 10.0, 16.0))
        self.assertEqual(config.motion.stuck_motion_timeout, 2.0)
        self.assertEqual(config.smoothing.policy, SmoothingPolicyName.FIXED)
        self.assertEqual(config.scheduler.max_messages_per_tick, 20)
        self.assertEqual(config.scheduler.backlog_tick_threshold, 60)
        self.assertEqual(config.scheduler.purge_cap, 1000)
        self.assertIsNone(config.serial.port)

    def test_tick_interval(self):
        self.assertAlmostEqual(SchedulerConfig(tick_rate=50.0).tick_interval, 0.02)


class TestConfigValidation(unittest.TestCase):

    def test_max_streams_range(self):
        with self.assertRaises(ValidationError):
            StreamConfig(max_streams=0)
        with self.assertRaises(ValidationError):
            StreamConfig(max_streams=10)

    def test_sample_count(self):
        with self.assertRaises(ValidationError):
            CalibrationConfig(sample_count=1)

    def test_threshold_multipliers(self):
        with self.assertRaises(ValidationError):
            CalibrationConfig(threshold_multipliers=(1.0, 2.0, 3.0))
        with self.assertRaises(ValidationError):
            CalibrationConfig(threshold_multipliers=(1.0, 1.8, 1.8, 6.0, 10.0, 16.0))
        with self.assertRaises(ValidationError):
            CalibrationConfig(threshold_multipliers=(0.0, 1.8, 3.5, 6.0, 10.0, 16.0))

    def test_quality_bands(self):
        with self.assertRaises(ValidationError):
            CalibrationConfig(good_noise_max=600.0, fair_noise_max=500.0)

    def test_motion_values(self):
        with self.assertRaises(ValidationError):
            MotionConfig(stuck_motion_timeout=-1.0)

    def test_smoothing_values(self):
        with self.assertRaises(ValidationError):
            SmoothingConfig(alpha=0.0)
        with self.assertRaises(ValidationError):
            SmoothingConfig(alpha_min=0.6, alpha_max=0.5)
        with self.assertRaises(ValidationError):
            SmoothingConfig(noise_low=50.0, noise_high=5.0)

    def test_scheduler_values(self):
        with self.assertRaises(ValidationError):
            SchedulerConfig(max_messages_per_tick=0)
        with self.assertRaises(ValidationError):
            SchedulerConfig(tick_rate=0.0)


class TestEnvironmentOverrides(unittest.TestCase):

    def test_group_override(self):
        with patch.dict(os.environ, {"ACCELMON_SCHEDULER_PURGE_CAP": "500"}):
            self.assertEqual(SchedulerConfig().purge_cap, 500)

    def test_application_override(self):
        env = {
            "ACCELMON_STREAM_MAX_STREAMS": "4",
            "ACCELMON_SMOOTHING_POLICY": "adaptive",
            "ACCELMON_LOG_LEVEL": "DEBUG",
        }
        with patch.dict(os.environ, env):
            config = get_config()
        self.assertEqual(config.stream.max_streams, 4)
        self.assertEqual(config.smoothing.policy, SmoothingPolicyName.ADAPTIVE)
        self.assertEqual(config.log_level, LogLevel.DEBUG)

    def test_policy_selection(self):
        self.assertIsInstance(build_smoothing_policy(SmoothingConfig()), FixedSmoothing)
        self.assertIsInstance(
            build_smoothing_policy(SmoothingConfig(policy=SmoothingPolicyName.ADAPTIVE)),
            AdaptiveSmoothing,
        )


if __name__ == '__main__':
    unittest.main()
