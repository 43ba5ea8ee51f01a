"""
Stream Registry

Maps stream ids to StreamProcessor instances and owns all per-stream state.

The registry is the single owner of mutable stream state: every mutation and
every snapshot happens under one lock, so a presentation thread can read
snapshots while the ingestion path keeps dispatching samples.

Events describing what happened (registrations, calibrations, motion level
changes) are queued and drained by the owning service after each tick; the
registry itself never awaits anything.
"""

import threading
from collections import deque
from typing import Deque, Dict, FrozenSet, List, Optional, Tuple

import structlog

from accelmon.core.clock import Clock, MonotonicClock
from accelmon.core.config import CalibrationConfig, MotionConfig, SmoothingConfig, StreamConfig
from accelmon.core.events import BaseEvent
from accelmon.events.streams import (
    CalibrationCompletedEvent, CalibrationStartedEvent,
    MotionLevelChangedEvent, StreamRegisteredEvent,
)
from .models import MotionLevel, StreamSnapshot
from .processor import IngestOutcome, IngestResult, StreamProcessor, is_valid_sample
from .smoothing import SmoothingPolicy, build_smoothing_policy

PRODUCER_NAME = "stream_registry"


class StreamRegistry:
    """
    Owns every StreamProcessor.

    Streams are created lazily on their first registration or data message and
    are never removed; inactive streams keep their last state and resume when
    data returns.
    """

    def __init__(self,
                 stream_config: Optional[StreamConfig] = None,
                 calibration_config: Optional[CalibrationConfig] = None,
                 motion_config: Optional[MotionConfig] = None,
                 smoothing: Optional[SmoothingPolicy] = None,
                 clock: Optional[Clock] = None):
        """
        Args:
            stream_config: Id range and activity timeout
            calibration_config: Calibration parameters shared by all streams
            motion_config: Classifier parameters shared by all streams
            smoothing: Smoothing policy (defaults to the configured one)
            clock: Time source used when callers do not pass ``now``
        """
        self.stream_config = stream_config or StreamConfig()
        self.calibration_config = calibration_config or CalibrationConfig()
        self.motion_config = motion_config or MotionConfig()
        self.smoothing = smoothing or build_smoothing_policy(SmoothingConfig())
        self.clock = clock or MonotonicClock()

        self._streams: Dict[int, StreamProcessor] = {}
        self._lock = threading.RLock()
        self._pending_events: Deque[BaseEvent] = deque()
        self.logger = structlog.get_logger(component=PRODUCER_NAME)

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def is_valid_id(self, stream_id: int) -> bool:
        return isinstance(stream_id, int) and 1 <= stream_id <= self.stream_config.max_streams

    def register(self, stream_id: int, now: Optional[float] = None) -> bool:
        """
        Register a stream id. Idempotent.

        Returns:
            True if a new stream was created
        """
        if not self.is_valid_id(stream_id):
            self.logger.warning("Ignoring registration for invalid stream id", stream_id=stream_id)
            return False
        with self._lock:
            if stream_id in self._streams:
                return False
            self._create(stream_id, self._now(now), auto=False)
            return True

    def dispatch(self, stream_id: int, x: float, y: float, z: float,
                 now: Optional[float] = None) -> Optional[IngestResult]:
        """
        Route one sample to its stream, creating the stream if needed.

        A rejected sample never creates a stream.

        Returns:
            The processor's IngestResult, or None for an invalid id
        """
        if not self.is_valid_id(stream_id):
            self.logger.warning("Ignoring data for invalid stream id", stream_id=stream_id)
            return None
        with self._lock:
            now = self._now(now)
            processor = self._streams.get(stream_id)
            if processor is None:
                if not is_valid_sample(x, y, z):
                    self.logger.debug("Discarding non-finite sample for unknown stream", stream_id=stream_id)
                    return IngestResult(IngestOutcome.REJECTED, MotionLevel.STILL, MotionLevel.STILL)
                processor = self._create(stream_id, now, auto=True)
            result = processor.ingest(x, y, z, now)
            self._record(processor, result)
            return result

    def start_calibration(self, stream_id: int, now: Optional[float] = None) -> bool:
        """
        Recalibrate one stream if it is active.

        Unknown and inactive streams are skipped.

        Returns:
            True if calibration was started
        """
        with self._lock:
            now = self._now(now)
            processor = self._streams.get(stream_id)
            if processor is None or not processor.is_active(now, self.stream_config.activity_timeout):
                self.logger.info("Stream not active, calibration skipped", stream_id=stream_id)
                return False
            self._begin_calibration(processor)
            return True

    def start_calibration_all(self, now: Optional[float] = None) -> int:
        """
        Recalibrate every active stream.

        Returns:
            Number of streams that started calibrating
        """
        with self._lock:
            now = self._now(now)
            active = [p for p in self._streams.values()
                      if p.is_active(now, self.stream_config.activity_timeout)]
            for processor in active:
                self._begin_calibration(processor)

        if active:
            self.logger.info("Recalibrating streams - keep devices still", count=len(active))
        else:
            self.logger.info("No active streams to calibrate")
        return len(active)

    def adjust_smoothing(self, steps: int) -> Dict[int, float]:
        """
        Shift every stream's smoothing factor by whole steps.

        Returns:
            New alpha per stream id
        """
        with self._lock:
            alphas = {sid: p.adjust_smoothing(steps) for sid, p in self._streams.items()}
        self.logger.info("Smoothing adjusted", steps=steps, alphas=alphas)
        return alphas

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __contains__(self, stream_id: int) -> bool:
        with self._lock:
            return stream_id in self._streams

    def __len__(self) -> int:
        with self._lock:
            return len(self._streams)

    def get(self, stream_id: int) -> Optional[StreamProcessor]:
        """Direct processor access for the ingestion path and tests."""
        with self._lock:
            return self._streams.get(stream_id)

    def stream_ids(self) -> Tuple[int, ...]:
        with self._lock:
            return tuple(sorted(self._streams))

    def active_streams(self, now: Optional[float] = None) -> FrozenSet[int]:
        """Ids that delivered data within the activity timeout."""
        with self._lock:
            now = self._now(now)
            timeout = self.stream_config.activity_timeout
            return frozenset(sid for sid, p in self._streams.items() if p.is_active(now, timeout))

    def well_calibrated_streams(self, now: Optional[float] = None) -> FrozenSet[int]:
        """Active, ready streams whose calibration quality is GOOD."""
        with self._lock:
            now = self._now(now)
            return frozenset(
                snap.stream_id for snap in self._snapshots(now) if snap.is_well_calibrated
            )

    def snapshot(self, now: Optional[float] = None) -> Tuple[StreamSnapshot, ...]:
        """Immutable copies of every stream, ordered by id, taken atomically."""
        with self._lock:
            return self._snapshots(self._now(now))

    def drain_events(self) -> List[BaseEvent]:
        """Remove and return the events queued since the last drain."""
        with self._lock:
            events = list(self._pending_events)
            self._pending_events.clear()
            return events

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------

    def _now(self, now: Optional[float]) -> float:
        return self.clock.now() if now is None else now

    def _snapshots(self, now: float) -> Tuple[StreamSnapshot, ...]:
        timeout = self.stream_config.activity_timeout
        return tuple(self._streams[sid].snapshot(now, timeout) for sid in sorted(self._streams))

    def _create(self, stream_id: int, now: float, auto: bool) -> StreamProcessor:
        processor = StreamProcessor(
            stream_id,
            self.calibration_config,
            self.motion_config,
            self.smoothing,
            now=now,
        )
        self._streams[stream_id] = processor
        if auto:
            self.logger.info("Stream auto-registered from data message", stream_id=stream_id)
        else:
            self.logger.info("Stream registered", stream_id=stream_id)
        self._pending_events.append(
            StreamRegisteredEvent(producer_name=PRODUCER_NAME, stream_id=stream_id, auto=auto)
        )
        self._pending_events.append(
            CalibrationStartedEvent(producer_name=PRODUCER_NAME, stream_id=stream_id)
        )
        return processor

    def _begin_calibration(self, processor: StreamProcessor) -> None:
        processor.start_calibration()
        self._pending_events.append(
            CalibrationStartedEvent(producer_name=PRODUCER_NAME, stream_id=processor.stream_id)
        )

    def _record(self, processor: StreamProcessor, result: IngestResult) -> None:
        """Queue events for whatever an ingest call changed."""
        if result.outcome == IngestOutcome.CALIBRATED and result.calibration is not None:
            cal = result.calibration
            self._pending_events.append(CalibrationCompletedEvent(
                producer_name=PRODUCER_NAME,
                stream_id=processor.stream_id,
                baseline=cal.baseline.as_tuple(),
                noise=cal.noise,
                quality=cal.quality.value,
                deadzone=cal.deadzone,
                base_threshold=cal.base_threshold,
                alpha=processor.state.alpha,
            ))
        elif result.level_changed:
            self._pending_events.append(MotionLevelChangedEvent(
                producer_name=PRODUCER_NAME,
                stream_id=processor.stream_id,
                previous_level=int(result.previous_level),
                level=int(result.level),
                label=result.level.label,
                distance=processor.state.distance,
                forced_reset=result.forced_reset,
            ))

    def __repr__(self):
        return f"<StreamRegistry(streams={len(self._streams)})>"
