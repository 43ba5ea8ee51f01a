"""
Main entry point for the acceleration monitor.

This module wires the core components together and starts the application.
It handles signal management, logging setup, and system lifecycle.
"""

import asyncio
import logging
import signal
import sys
from typing import Any, Dict, Optional

import structlog

from accelmon.core import (
    ApplicationConfig, EventBus, EventRegistry, EventTracer, MonotonicClock, get_config
)
from accelmon.core.service import BaseService
from accelmon.events import register_all_events
from accelmon.events.system import ApplicationStartupCompletedEvent
from accelmon.hardware import BaseHardware, SerialLineSource
from accelmon.ingestion import IngestionScheduler, LineSource
from accelmon.services import IngestionService
from accelmon.streams import StreamRegistry, build_smoothing_policy


def setup_logging(level: str = "INFO"):
    """Configure structured logging for the application."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level, logging.INFO),
        stream=sys.stdout,
    )


class AccelMonApplication:
    """
    Main application class.

    Owns the event system, the line source, the stream registry and the
    ingestion service, and runs them until interrupted.
    """

    def __init__(self,
                 config: Optional[ApplicationConfig] = None,
                 source: Optional[LineSource] = None):
        """
        Args:
            config: Application configuration (loaded from the environment if omitted)
            source: Line source to ingest from; a serial source is created if omitted
        """
        self.logger = structlog.get_logger(app="accelmon")
        self.config = config or get_config()
        self.clock = MonotonicClock()

        self.event_registry = EventRegistry()
        register_all_events(self.event_registry)

        if self.config.event.tracing_enabled:
            self.event_tracer = EventTracer(max_events=self.config.event.max_trace_events)
        else:
            self.event_tracer = None

        self.event_bus = EventBus(self.event_registry, self.event_tracer)

        self.source = source or SerialLineSource(self.config.serial)
        self.registry = StreamRegistry(
            stream_config=self.config.stream,
            calibration_config=self.config.calibration,
            motion_config=self.config.motion,
            smoothing=build_smoothing_policy(self.config.smoothing),
            clock=self.clock,
        )
        self.scheduler = IngestionScheduler(
            self.source,
            self.registry,
            config=self.config.scheduler,
            clock=self.clock,
        )

        self.services: Dict[str, BaseService] = {}
        self._running = True

    async def initialize(self):
        """Open the input device, start services and announce startup."""
        self.logger.info("Initializing acceleration monitor")

        try:
            if isinstance(self.source, BaseHardware):
                await self.source.initialize()

            self.services["ingestion"] = await self._init_service(
                IngestionService(self.event_bus, self.scheduler, clock=self.clock)
            )

            await self.event_bus.publish(
                ApplicationStartupCompletedEvent(producer_name="accelmon"),
                "accelmon"
            )

            self.logger.info("Acceleration monitor initialization complete")

        except Exception as e:
            self.logger.error("Failed to initialize application", error=str(e), exc_info=True)
            raise

    async def _init_service(self, service: BaseService) -> BaseService:
        """Start a service and return it."""
        self.logger.info("Starting service", service=service.name)
        try:
            await service.start()
            return service
        except Exception as e:
            self.logger.error("Failed to start service", service=service.name,
                              error=str(e), exc_info=True)
            raise

    async def run(self):
        """Run the application main loop."""
        try:
            while self._running:
                await asyncio.sleep(1)

        except asyncio.CancelledError:
            self.logger.info("Application task cancelled")

        finally:
            await self.shutdown()

    async def shutdown(self):
        """Stop services and release the input device."""
        if not self.services and not self._running:
            return

        self._running = False
        self.logger.info("Shutting down acceleration monitor")
        self.logger.info("Final status", **await self.get_status())

        for name, service in reversed(list(self.services.items())):
            try:
                self.logger.info("Stopping service", service=name)
                await service.stop()
            except Exception as e:
                self.logger.error("Error stopping service", service=name, error=str(e))
        self.services.clear()

        if isinstance(self.source, BaseHardware) and self.source.is_initialized():
            try:
                await self.source.shutdown()
            except Exception as e:
                self.logger.error("Error shutting down input device", error=str(e))

        self.logger.info("Acceleration monitor shutdown complete")

    async def get_status(self) -> Dict[str, Any]:
        """Ingestion counters, input device health and event statistics."""
        status: Dict[str, Any] = {}
        service = self.services.get("ingestion")
        if service is not None:
            status["ingestion"] = service.get_status()
        if isinstance(self.source, BaseHardware):
            status["input"] = await self.source.check_health()
        if self.event_tracer is not None:
            status["events"] = self.event_tracer.get_event_stats()
        return status

    def handle_signal(self, sig):
        """Stop the main loop on SIGINT/SIGTERM."""
        self.logger.info("Received signal, shutting down", signal=sig.name)
        self._running = False


async def main():
    """Application entry point."""
    config = get_config()
    setup_logging(config.log_level.value)

    app = AccelMonApplication(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda s=sig: app.handle_signal(s))

    await app.initialize()
    await app.run()


def cli():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
