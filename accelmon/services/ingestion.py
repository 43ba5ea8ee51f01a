"""
Ingestion service.

Drives the IngestionScheduler at the configured tick rate, publishes the events
the core queued during each tick, and serves operator control requests
(registration, recalibration, buffer clear, smoothing adjustment).

The scheduler and registry are synchronous; this service is their only async
owner. After every tick it stores an immutable MonitorSnapshot in
``latest_snapshot`` so presentation code on any thread can read a consistent
view without touching the registry.
"""

import asyncio
from typing import Any, Dict, Optional

from accelmon.core.bus import EventBus
from accelmon.core.clock import Clock
from accelmon.core.events import BaseEvent, EventType
from accelmon.core.service import BaseService
from accelmon.events.ingestion import ThroughputReportEvent
from accelmon.events.system import HardwareErrorEvent
from accelmon.ingestion.scheduler import IngestionScheduler, PurgeReport, TickReport
from accelmon.streams.models import MonitorSnapshot


class IngestionService(BaseService):
    """Async owner of the ingestion scheduler and stream registry."""

    PRODUCES_EVENTS = (
        EventType.STREAM_REGISTERED,
        EventType.CALIBRATION_STARTED,
        EventType.CALIBRATION_COMPLETED,
        EventType.MOTION_LEVEL_CHANGED,
        EventType.BACKLOG_PURGED,
        EventType.THROUGHPUT_REPORT,
        EventType.HARDWARE_ERROR,
    )

    CONSUMES_EVENTS = {
        EventType.STREAM_REGISTRATION_REQUESTED: "handle_event",
        EventType.CALIBRATION_REQUESTED: "handle_event",
        EventType.BUFFER_CLEAR_REQUESTED: "handle_event",
        EventType.SMOOTHING_ADJUST_REQUESTED: "handle_event",
    }

    def __init__(self,
                 event_bus: EventBus,
                 scheduler: IngestionScheduler,
                 clock: Optional[Clock] = None,
                 run_loop: bool = True,
                 name: str = "ingestion"):
        """
        Args:
            event_bus: Bus used for publishing and control requests
            scheduler: The scheduler to drive
            clock: Time source (defaults to the scheduler's clock)
            run_loop: Start the periodic tick task on start(); tests drive
                run_tick() by hand instead
            name: Service name
        """
        super().__init__(event_bus, name=name, config=scheduler.config)
        self.scheduler = scheduler
        self.registry = scheduler.registry
        self.clock = clock or scheduler.clock
        self.run_loop = run_loop

        self._tick_task: Optional[asyncio.Task] = None
        self._latest_snapshot: Optional[MonitorSnapshot] = None
        self._last_report_at: Optional[float] = None
        self._reported_error: Optional[str] = None

    @property
    def latest_snapshot(self) -> Optional[MonitorSnapshot]:
        """Snapshot taken at the end of the most recent tick."""
        return self._latest_snapshot

    async def start(self) -> None:
        await super().start()
        if self.run_loop and self._tick_task is None:
            self._tick_task = asyncio.create_task(self._tick_loop())
            self.logger.info("Ingestion loop started", tick_rate=self.config.tick_rate)

    async def stop(self) -> None:
        if self._tick_task:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None
        await super().stop()

    async def _tick_loop(self) -> None:
        interval = self.config.tick_interval
        while True:
            try:
                await self.run_tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.exception("Error in ingestion tick", error=str(e))
            await asyncio.sleep(interval)

    async def run_tick(self, now: Optional[float] = None) -> TickReport:
        """
        Run one scheduler tick and publish its results.

        Args:
            now: Current time (defaults to the clock)

        Returns:
            The scheduler's TickReport
        """
        now = self.clock.now() if now is None else now
        report = self.scheduler.tick(now=now)
        self._latest_snapshot = self.scheduler.snapshot(now)
        await self._flush_events()
        await self._check_source()
        await self._maybe_report(now)
        return report

    async def _flush_events(self) -> None:
        for event in self.scheduler.drain_events():
            await self.publish(event)

    async def _check_source(self) -> None:
        error = getattr(self.scheduler.source, "last_error", None)
        if not error or error == self._reported_error:
            return
        self._reported_error = error
        await self.publish(HardwareErrorEvent(
            component=getattr(self.scheduler.source, "name", type(self.scheduler.source).__name__),
            error_type="read_failed",
            error_message=error,
        ))

    async def _maybe_report(self, now: float) -> None:
        if self._last_report_at is None:
            self._last_report_at = now
            return
        if now - self._last_report_at < self.config.stats_log_interval:
            return
        self._last_report_at = now

        rate = self.scheduler.messages_per_second
        if rate <= 0:
            return

        aggregate = self._latest_snapshot.aggregate
        self.logger.info(
            "Performance",
            messages_per_second=rate,
            active_streams=aggregate.active_stream_count,
            well_calibrated=aggregate.well_calibrated_count,
            purge_count=aggregate.purge_count,
        )
        await self.publish(ThroughputReportEvent(
            messages_per_second=rate,
            active_streams=aggregate.active_stream_count,
            purge_count=aggregate.purge_count,
        ))

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    async def register_stream(self, stream_id: int) -> bool:
        created = self.registry.register(stream_id, self.clock.now())
        await self._flush_events()
        return created

    async def calibrate(self, stream_id: Optional[int] = None) -> int:
        """
        Recalibrate one stream, or every active stream when no id is given.

        Returns:
            Number of streams that started calibrating
        """
        now = self.clock.now()
        if stream_id is None:
            count = self.registry.start_calibration_all(now)
        else:
            count = 1 if self.registry.start_calibration(stream_id, now) else 0
        await self._flush_events()
        return count

    async def clear_buffer(self) -> PurgeReport:
        report = self.scheduler.purge()
        await self._flush_events()
        return report

    async def adjust_smoothing(self, steps: int) -> Dict[int, float]:
        return self.registry.adjust_smoothing(steps)

    async def handle_event(self, event: BaseEvent) -> None:
        """Route control requests to the control surface."""
        event_type = EventType(event.type)

        if event_type == EventType.STREAM_REGISTRATION_REQUESTED:
            await self.register_stream(event.stream_id)

        elif event_type == EventType.CALIBRATION_REQUESTED:
            await self.calibrate(event.stream_id)

        elif event_type == EventType.BUFFER_CLEAR_REQUESTED:
            await self.clear_buffer()

        elif event_type == EventType.SMOOTHING_ADJUST_REQUESTED:
            await self.adjust_smoothing(event.steps)

    def get_status(self) -> Dict[str, Any]:
        """Current counters for diagnostics."""
        return {
            "running": self.is_running,
            "streams": len(self.registry),
            "messages_per_second": self.scheduler.messages_per_second,
            "backlog_ticks": self.scheduler.backlog_ticks,
            "purge_count": self.scheduler.purge_count,
            "total_messages": self.scheduler.total_messages,
            "invalid_messages": self.scheduler.invalid_count,
        }
