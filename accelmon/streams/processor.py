"""
Stream Processor

Owns one sensor stream's calibration, thresholds, smoothing and motion
classification.

Calibration:
- A stream starts (and restarts on request) in the calibrating phase and
  buffers raw samples until ``sample_count`` have arrived.
- The baseline is the per-axis mean of the buffer; noise is the Euclidean
  combination of the per-axis standard deviations.
- Deadzone and level thresholds scale with the measured noise, so no
  per-device tuning is needed.

Classification (ready phase, one step per sample):
- Distance is measured from the raw sample to the baseline; display
  smoothing never damps motion detection.
- Distances inside the deadzone count as zero.
- The candidate level is the highest level whose threshold is reached.
- Decreases are held until the distance falls a margin below the current
  level's threshold (hysteresis).
- A level held while the signal sits inside the deadzone is forced back to
  STILL after ``stuck_motion_timeout`` seconds.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence, Tuple

import structlog

from accelmon.core.config import CalibrationConfig, MotionConfig
from .models import (
    Calibrating, CalibrationQuality, CalibrationResult, MotionLevel, Phase,
    Ready, StreamSnapshot, StreamState, Vector3,
)
from .numeric import axis_means, axis_std_devs, composite_noise, clamp, ema
from .smoothing import SmoothingPolicy


class IngestOutcome(Enum):
    """What a single ingest call did."""
    REJECTED = auto()     # non-finite sample, state untouched
    CALIBRATING = auto()  # sample buffered
    CALIBRATED = auto()   # sample completed the calibration buffer
    UPDATED = auto()      # smoothing and classification updated


@dataclass(frozen=True)
class IngestResult:
    outcome: IngestOutcome
    previous_level: MotionLevel
    level: MotionLevel
    forced_reset: bool = False
    calibration: Optional[CalibrationResult] = None

    @property
    def level_changed(self) -> bool:
        return self.level != self.previous_level


def is_valid_sample(x, y, z) -> bool:
    """True for three finite real numbers."""
    if not all(isinstance(v, (int, float)) for v in (x, y, z)):
        return False
    return Vector3(float(x), float(y), float(z)).is_finite()


def classify_quality(noise: float, config: CalibrationConfig) -> CalibrationQuality:
    """Quality band for a composite noise value; both boundaries are exclusive."""
    if noise > config.fair_noise_max:
        return CalibrationQuality.POOR
    if noise > config.good_noise_max:
        return CalibrationQuality.FAIR
    return CalibrationQuality.GOOD


def derive_deadzone(noise: float, config: CalibrationConfig) -> float:
    return max(config.min_deadzone, noise * config.deadzone_noise_factor)


def derive_base_threshold(noise: float, config: CalibrationConfig) -> float:
    return max(config.min_base_threshold, noise * config.threshold_noise_factor)


def derive_thresholds(base_threshold: float, multipliers: Sequence[float]) -> Tuple[float, ...]:
    """Level boundaries; index 0 is the STILL -> MICRO boundary."""
    return tuple(base_threshold * m for m in multipliers)


def compute_calibration(samples: Sequence[Tuple[float, float, float]],
                        config: CalibrationConfig) -> CalibrationResult:
    """
    Derive baseline, noise and thresholds from a calibration buffer.

    Args:
        samples: Raw (x, y, z) samples collected while the device was still
        config: Calibration parameters

    Returns:
        CalibrationResult for the buffer
    """
    means = axis_means(samples)
    std_devs = axis_std_devs(samples, means)
    noise = composite_noise(std_devs)
    base_threshold = derive_base_threshold(noise, config)

    return CalibrationResult(
        baseline=Vector3(*(float(v) for v in means)),
        axis_noise=Vector3(*(float(v) for v in std_devs)),
        noise=noise,
        quality=classify_quality(noise, config),
        deadzone=derive_deadzone(noise, config),
        base_threshold=base_threshold,
        motion_thresholds=derive_thresholds(base_threshold, config.threshold_multipliers),
        sample_count=len(samples),
    )


class StreamProcessor:
    """
    Calibration and motion classification for a single stream.

    Not thread-safe on its own; the StreamRegistry serialises access.
    """

    def __init__(self,
                 stream_id: int,
                 calibration_config: CalibrationConfig,
                 motion_config: MotionConfig,
                 smoothing: SmoothingPolicy,
                 now: float = 0.0):
        self.calibration_config = calibration_config
        self.motion_config = motion_config
        self.smoothing = smoothing
        self.logger = structlog.get_logger(stream=stream_id)

        base_threshold = calibration_config.min_base_threshold
        self.state = StreamState(
            stream_id=stream_id,
            deadzone=calibration_config.min_deadzone,
            base_threshold=base_threshold,
            motion_thresholds=derive_thresholds(base_threshold, calibration_config.threshold_multipliers),
            alpha=smoothing.initial_alpha,
            last_motion_change_at=now,
            last_update_at=now,
        )

    @property
    def stream_id(self) -> int:
        return self.state.stream_id

    @property
    def phase(self) -> Phase:
        if self.state.calibrating:
            return Calibrating(len(self.state.calibration_buffer), self.calibration_config.sample_count)
        return Ready(self.state.quality)

    def is_active(self, now: float, timeout: float) -> bool:
        return now - self.state.last_update_at < timeout

    def start_calibration(self) -> None:
        """Re-enter calibration with an empty buffer; display values and motion level are kept."""
        self.state.calibrating = True
        self.state.calibration_buffer = []
        self.logger.info("Calibrating - keep device still",
                         samples=self.calibration_config.sample_count)

    def adjust_smoothing(self, steps: int) -> float:
        """Shift this stream's smoothing factor; returns the new alpha."""
        self.state.alpha = self.smoothing.adjust(self.state.alpha, steps)
        return self.state.alpha

    def ingest(self, x: float, y: float, z: float, now: float) -> IngestResult:
        """
        Process one raw sample.

        Args:
            x, y, z: Acceleration in milli-g
            now: Current time in seconds

        Returns:
            IngestResult describing what changed
        """
        state = self.state
        level = state.motion_level

        if not is_valid_sample(x, y, z):
            return IngestResult(IngestOutcome.REJECTED, level, level)

        sample = Vector3(float(x), float(y), float(z))
        state.raw_last = sample
        state.last_update_at = now

        if state.calibrating:
            state.calibration_buffer.append(sample.as_tuple())
            state.smoothed = sample
            if len(state.calibration_buffer) >= self.calibration_config.sample_count:
                result = self._finish_calibration()
                return IngestResult(IngestOutcome.CALIBRATED, level, level, calibration=result)
            return IngestResult(IngestOutcome.CALIBRATING, level, level)

        alpha = state.alpha
        state.smoothed = Vector3(
            ema(state.smoothed.x, sample.x, alpha),
            ema(state.smoothed.y, sample.y, alpha),
            ema(state.smoothed.z, sample.z, alpha),
        )

        state.distance = (sample - state.baseline).magnitude()
        new_level, forced = self._classify(state.distance, now)
        return IngestResult(IngestOutcome.UPDATED, level, new_level, forced_reset=forced)

    def _classify(self, distance: float, now: float) -> Tuple[MotionLevel, bool]:
        """Run one step of the motion level state machine."""
        state = self.state
        thresholds = state.motion_thresholds
        current = int(state.motion_level)

        effective = 0.0 if distance < state.deadzone else distance

        candidate = 0
        for level in range(int(MotionLevel.ENERGETIC), 0, -1):
            if effective >= thresholds[level - 1]:
                candidate = level
                break

        # Hysteresis: margin is always taken from the first threshold
        if candidate < current:
            margin = self.motion_config.hysteresis_fraction * thresholds[0]
            if not effective < thresholds[current - 1] - margin:
                candidate = current

        forced = False
        if (current > 0 and candidate == current and effective < state.deadzone
                and now - state.last_motion_change_at > self.motion_config.stuck_motion_timeout):
            candidate = 0
            forced = True

        new_level = MotionLevel(int(clamp(candidate, 0, int(MotionLevel.ENERGETIC))))
        if new_level != state.motion_level:
            state.last_motion_change_at = now
        state.motion_level = new_level
        return new_level, forced

    def _finish_calibration(self) -> CalibrationResult:
        state = self.state
        result = compute_calibration(state.calibration_buffer, self.calibration_config)

        state.baseline = result.baseline
        state.axis_noise = result.axis_noise
        state.noise = result.noise
        state.quality = result.quality
        state.deadzone = result.deadzone
        state.base_threshold = result.base_threshold
        state.motion_thresholds = result.motion_thresholds
        state.alpha = self.smoothing.alpha_for(result)
        state.smoothed = result.baseline
        state.calibrating = False
        state.calibration_count += 1

        self.logger.info(
            "Calibrated",
            noise=round(result.noise, 1),
            quality=result.quality.value,
            deadzone=round(result.deadzone),
            alpha=round(state.alpha, 3),
        )
        return result

    def snapshot(self, now: float, activity_timeout: float) -> StreamSnapshot:
        """Immutable copy of the display-relevant state."""
        state = self.state
        return StreamSnapshot(
            stream_id=state.stream_id,
            phase=self.phase,
            quality=state.quality,
            motion_level=state.motion_level,
            motion_label=state.motion_level.label,
            distance=state.distance,
            smoothed=state.smoothed,
            raw=state.raw_last,
            baseline=state.baseline,
            noise=state.noise,
            deadzone=state.deadzone,
            alpha=state.alpha,
            is_active=self.is_active(now, activity_timeout),
            last_update_at=state.last_update_at,
        )

    def __repr__(self):
        return f"<StreamProcessor(id={self.stream_id}, phase={self.phase})>"
