"""
Value types for sensor streams.

Samples, calibration results and the immutable snapshots handed to presentation.
Acceleration values are milli-g; times are seconds.
"""

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class Vector3:
    """A tri-axial reading."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __sub__(self, other: 'Vector3') -> 'Vector3':
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def magnitude(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


class CalibrationQuality(str, Enum):
    """How steady the device was while calibrating."""
    GOOD = "good"  # device was steady
    FAIR = "fair"  # some movement detected
    POOR = "poor"  # device was moving


class MotionLevel(IntEnum):
    """Discrete motion intensity, 0-5."""
    STILL = 0
    MICRO = 1
    SLIGHT = 2
    MODERATE = 3
    ACTIVE = 4
    ENERGETIC = 5

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class Calibrating:
    """Phase: collecting baseline samples."""
    collected: int
    target: int

    @property
    def progress(self) -> int:
        """Completion percentage, rounded down."""
        if self.target <= 0:
            return 100
        return min(100, (self.collected * 100) // self.target)


@dataclass(frozen=True)
class Ready:
    """Phase: calibrated and classifying motion."""
    quality: CalibrationQuality


Phase = Union[Calibrating, Ready]


@dataclass(frozen=True)
class CalibrationResult:
    """Everything derived from one completed calibration buffer."""
    baseline: Vector3
    axis_noise: Vector3  # per-axis standard deviation
    noise: float
    quality: CalibrationQuality
    deadzone: float
    base_threshold: float
    motion_thresholds: Tuple[float, ...]
    sample_count: int


@dataclass
class StreamState:
    """
    Mutable per-stream state, owned by a single StreamProcessor.

    Only the ingestion path mutates it; readers get StreamSnapshot copies.
    """
    stream_id: int
    calibrating: bool = True
    calibration_buffer: List[Tuple[float, float, float]] = field(default_factory=list)
    baseline: Vector3 = field(default_factory=Vector3)
    axis_noise: Vector3 = field(default_factory=Vector3)
    noise: float = 0.0
    quality: Optional[CalibrationQuality] = None
    deadzone: float = 250.0
    base_threshold: float = 300.0
    motion_thresholds: Tuple[float, ...] = (300.0, 540.0, 1050.0, 1800.0, 3000.0, 4800.0)
    alpha: float = 0.15
    smoothed: Vector3 = field(default_factory=Vector3)
    raw_last: Vector3 = field(default_factory=Vector3)
    distance: float = 0.0
    motion_level: MotionLevel = MotionLevel.STILL
    last_motion_change_at: float = 0.0
    last_update_at: float = 0.0
    calibration_count: int = 0


@dataclass(frozen=True)
class StreamSnapshot:
    """Read-only view of one stream for presentation."""
    stream_id: int
    phase: Phase
    quality: Optional[CalibrationQuality]
    motion_level: MotionLevel
    motion_label: str
    distance: float
    smoothed: Vector3
    raw: Vector3
    baseline: Vector3
    noise: float
    deadzone: float
    alpha: float
    is_active: bool
    last_update_at: float

    @property
    def is_ready(self) -> bool:
        return isinstance(self.phase, Ready)

    @property
    def is_well_calibrated(self) -> bool:
        return self.is_active and self.is_ready and self.quality == CalibrationQuality.GOOD


@dataclass(frozen=True)
class AggregateSnapshot:
    """Read-only totals across all streams."""
    active_stream_count: int
    well_calibrated_count: int
    messages_per_second: int
    backlog_active: bool
    backlog_ticks: int = 0
    purge_count: int = 0

    @property
    def well_calibrated_ratio(self) -> float:
        """Share of active streams with GOOD calibration; 0.0 when nothing is active."""
        if self.active_stream_count == 0:
            return 0.0
        return self.well_calibrated_count / self.active_stream_count


@dataclass(frozen=True)
class MonitorSnapshot:
    """Everything presentation needs for one tick, taken atomically."""
    taken_at: float
    streams: Tuple[StreamSnapshot, ...]
    aggregate: AggregateSnapshot

    def stream(self, stream_id: int) -> Optional[StreamSnapshot]:
        for snap in self.streams:
            if snap.stream_id == stream_id:
                return snap
        return None
