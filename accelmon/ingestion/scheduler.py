"""
Ingestion Scheduler

Pulls lines from the line source once per tick and feeds them to the stream
registry, bounding the work done per tick.

Backlog control:
- At most ``max_messages_per_tick`` lines are handled per tick.
- A tick that hits the limit counts as a backlog tick; any shorter tick
  resets the count.
- After ``backlog_tick_threshold`` consecutive backlog ticks the pending
  input is purged (up to ``purge_cap`` lines). Under sustained overload the
  monitor prefers fresh data over complete data.

Throughput is counted in fixed windows (``throughput_window`` seconds) for
observability.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

import structlog

from accelmon.core.clock import Clock
from accelmon.core.config import SchedulerConfig
from accelmon.core.events import BaseEvent
from accelmon.events.ingestion import BacklogPurgedEvent
from accelmon.streams.models import AggregateSnapshot, MonitorSnapshot
from accelmon.streams.processor import IngestOutcome
from accelmon.streams.registry import StreamRegistry
from .parser import Data, MessageParser, Registration
from .source import LineSource

PRODUCER_NAME = "ingestion_scheduler"


@dataclass(frozen=True)
class PurgeReport:
    cleared: int
    cap_reached: bool
    automatic: bool


@dataclass(frozen=True)
class TickReport:
    """What one scheduling tick did."""
    drained: int
    registrations: int
    samples: int
    invalid: int
    rejected: int
    backlog_ticks: int
    backlog_active: bool
    purge: Optional[PurgeReport] = None


class IngestionScheduler:
    """Bounded-latency pump from a LineSource into a StreamRegistry."""

    def __init__(self,
                 source: LineSource,
                 registry: StreamRegistry,
                 config: Optional[SchedulerConfig] = None,
                 clock: Optional[Clock] = None,
                 parser: Optional[MessageParser] = None):
        """
        Args:
            source: Non-blocking line source
            registry: Registry receiving parsed messages
            config: Per-tick limits and backlog thresholds
            clock: Time source (defaults to the registry's clock)
            parser: Message parser (defaults to the registry's id range)
        """
        self.source = source
        self.registry = registry
        self.config = config or SchedulerConfig()
        self.clock = clock or registry.clock
        self.parser = parser or MessageParser(registry.stream_config.max_streams)
        self.logger = structlog.get_logger(component=PRODUCER_NAME)

        self._backlog_ticks = 0
        self._backlog_active = False
        self._window_start: Optional[float] = None
        self._window_count = 0
        self._messages_per_second = 0
        self._pending_events: Deque[BaseEvent] = deque()

        self.purge_count = 0
        self.total_messages = 0
        self.invalid_count = 0
        self.rejected_count = 0

    @property
    def backlog_ticks(self) -> int:
        return self._backlog_ticks

    @property
    def backlog_active(self) -> bool:
        return self._backlog_active

    @property
    def messages_per_second(self) -> int:
        """Messages handled during the last completed throughput window."""
        return self._messages_per_second

    def tick(self, max_messages: Optional[int] = None, now: Optional[float] = None) -> TickReport:
        """
        Run one scheduling tick.

        Args:
            max_messages: Override for the per-tick limit
            now: Current time (defaults to the clock)

        Returns:
            TickReport for this tick
        """
        limit = self.config.max_messages_per_tick if max_messages is None else max(0, max_messages)
        now = self.clock.now() if now is None else now

        drained = registrations = samples = invalid = rejected = 0
        while drained < limit:
            line = self.source.read_line()
            if line is None:
                break
            drained += 1

            message = self.parser.parse(line)
            if isinstance(message, Registration):
                self.registry.register(message.stream_id, now)
                registrations += 1
            elif isinstance(message, Data):
                result = self.registry.dispatch(message.stream_id, message.x, message.y, message.z, now)
                samples += 1
                if result is None or result.outcome == IngestOutcome.REJECTED:
                    rejected += 1
            else:
                invalid += 1
                self.logger.debug("Dropped line", reason=message.reason, line=message.line)

        self.total_messages += drained
        self.invalid_count += invalid
        self.rejected_count += rejected
        self._window_count += drained

        purge = None
        if limit > 0 and drained >= limit:
            self._backlog_ticks += 1
            self._backlog_active = True
            if self._backlog_ticks >= self.config.backlog_tick_threshold:
                self.logger.warning("Auto-clearing input due to sustained backlog",
                                    backlog_ticks=self._backlog_ticks)
                purge = self._purge(automatic=True)
        else:
            self._backlog_ticks = 0
            self._backlog_active = False

        self._update_throughput(now)

        return TickReport(
            drained=drained,
            registrations=registrations,
            samples=samples,
            invalid=invalid,
            rejected=rejected,
            backlog_ticks=self._backlog_ticks,
            backlog_active=self._backlog_active,
            purge=purge,
        )

    def purge(self) -> PurgeReport:
        """Discard pending input on request (bounded by the purge cap)."""
        return self._purge(automatic=False)

    def _purge(self, automatic: bool) -> PurgeReport:
        cap = self.config.purge_cap
        cleared = 0
        while cleared < cap:
            if self.source.read_line() is None:
                break
            cleared += 1

        cap_reached = cleared >= cap
        self._backlog_ticks = 0
        self._backlog_active = False
        self.purge_count += 1

        self.logger.info("Cleared buffered messages", cleared=cleared, automatic=automatic)
        if cap_reached:
            self.logger.warning("Input was extremely full - may need to clear again", cap=cap)

        self._pending_events.append(BacklogPurgedEvent(
            producer_name=PRODUCER_NAME,
            cleared=cleared,
            cap_reached=cap_reached,
            automatic=automatic,
        ))
        return PurgeReport(cleared=cleared, cap_reached=cap_reached, automatic=automatic)

    def _update_throughput(self, now: float) -> None:
        if self._window_start is None:
            self._window_start = now
            return
        if now - self._window_start >= self.config.throughput_window:
            self._messages_per_second = self._window_count
            self._window_count = 0
            self._window_start = now

    def drain_events(self) -> List[BaseEvent]:
        """Events from the registry and the scheduler since the last drain."""
        events = self.registry.drain_events()
        events.extend(self._pending_events)
        self._pending_events.clear()
        return events

    def snapshot(self, now: Optional[float] = None) -> MonitorSnapshot:
        """Per-stream and aggregate state for presentation, from one atomic registry read."""
        now = self.clock.now() if now is None else now
        streams = self.registry.snapshot(now)
        aggregate = AggregateSnapshot(
            active_stream_count=sum(1 for s in streams if s.is_active),
            well_calibrated_count=sum(1 for s in streams if s.is_well_calibrated),
            messages_per_second=self._messages_per_second,
            backlog_active=self._backlog_active,
            backlog_ticks=self._backlog_ticks,
            purge_count=self.purge_count,
        )
        return MonitorSnapshot(taken_at=now, streams=streams, aggregate=aggregate)
