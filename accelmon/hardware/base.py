"""
Base hardware abstraction for sensor input devices.

All device adapters inherit from BaseHardware, which owns the lifecycle
(initialize/shutdown), the last device error and health reporting. A device
can be initialized yet disconnected: a serial adapter that loses its port
stays initialized until shut down, and reports itself as disconnected.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog


class BaseHardware(ABC):
    """
    Base class for all hardware abstractions.

    Subclasses implement ``_initialize_impl`` and ``_shutdown_impl``, and
    override ``connected`` when the link can drop while initialized.
    """

    def __init__(self, config: Optional[Any] = None, name: Optional[str] = None):
        """
        Initialize the hardware component.

        Args:
            config: Optional hardware-specific configuration
            name: Optional name for this hardware instance
        """
        self.config = config
        self.name = name or self.__class__.__name__
        self.logger = structlog.get_logger(hardware=self.name)
        self.last_error: Optional[str] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Open the device. Safe to call twice; the second call only warns."""
        async with self._lock:
            if self._initialized:
                self.logger.warning("Hardware already initialized")
                return

            try:
                await self._initialize_impl()
            except Exception as e:
                self._record_error("Error initializing hardware", e)
                raise

            self._initialized = True
            self.last_error = None
            self.logger.info("Hardware initialized")

    async def shutdown(self) -> None:
        """Release the device."""
        async with self._lock:
            if not self._initialized:
                self.logger.warning("Hardware not initialized")
                return

            try:
                await self._shutdown_impl()
            except Exception as e:
                self._record_error("Error shutting down hardware", e)
                raise

            self._initialized = False
            self.logger.info("Hardware shut down")

    def is_initialized(self) -> bool:
        return self._initialized

    def _record_error(self, message: str, error: Exception, **context) -> None:
        """Keep the error for health reports and log it."""
        self.last_error = str(error)
        self.logger.error(message, error=self.last_error, **context)

    @abstractmethod
    async def _initialize_impl(self) -> None:
        """Device-specific initialization."""

    @abstractmethod
    async def _shutdown_impl(self) -> None:
        """Device-specific cleanup."""

    async def check_health(self) -> Dict[str, Any]:
        """
        Report the health of the device.

        Returns:
            Dictionary with health information. ``status`` is ``offline``
            before initialization, ``disconnected`` when initialized but the
            link is down, and ``ok`` otherwise.
        """
        if not self._initialized:
            status = "offline"
        elif not self.connected:
            status = "disconnected"
        else:
            status = "ok"

        return {
            "name": self.name,
            "initialized": self._initialized,
            "connected": self.connected,
            "status": status,
            "last_error": self.last_error,
        }
