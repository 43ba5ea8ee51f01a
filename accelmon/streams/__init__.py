"""
Per-stream signal processing.

Architecture:
- StreamProcessor: calibration, adaptive thresholds, smoothing and motion
  level classification for one stream
- StreamRegistry: owns every processor, handles auto-registration,
  recalibration requests and activity tracking

Usage:
    registry = StreamRegistry(clock=MonotonicClock())
    registry.dispatch(2, x=-120.0, y=40.0, z=-1010.0)
    for snap in registry.snapshot():
        print(snap.stream_id, snap.motion_label)
"""

from .models import (
    Vector3, CalibrationQuality, MotionLevel, Calibrating, Ready, Phase,
    CalibrationResult, StreamState, StreamSnapshot, AggregateSnapshot, MonitorSnapshot,
)
from .processor import (
    StreamProcessor, IngestOutcome, IngestResult, compute_calibration,
    classify_quality, derive_deadzone, derive_base_threshold, derive_thresholds,
    is_valid_sample,
)
from .smoothing import SmoothingPolicy, FixedSmoothing, AdaptiveSmoothing, build_smoothing_policy
from .registry import StreamRegistry

__all__ = [
    'Vector3',
    'CalibrationQuality',
    'MotionLevel',
    'Calibrating',
    'Ready',
    'Phase',
    'CalibrationResult',
    'StreamState',
    'StreamSnapshot',
    'AggregateSnapshot',
    'MonitorSnapshot',
    'StreamProcessor',
    'IngestOutcome',
    'IngestResult',
    'compute_calibration',
    'classify_quality',
    'derive_deadzone',
    'derive_base_threshold',
    'derive_thresholds',
    'is_valid_sample',
    'SmoothingPolicy',
    'FixedSmoothing',
    'AdaptiveSmoothing',
    'build_smoothing_policy',
    'StreamRegistry',
]
