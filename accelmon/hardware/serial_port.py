"""
Serial line source.

Reads newline-terminated sensor messages from a serial port without blocking
the ingestion tick: each ``read_line`` call only consumes bytes that are
already waiting in the driver.
"""

from collections import deque
from typing import Deque, Optional

import serial
import serial.tools.list_ports

from accelmon.core.config import SerialConfig
from accelmon.ingestion.source import LineSource
from .base import BaseHardware

# Substrings of device names that usually belong to a USB serial bridge
PORT_HINTS = ("ttyUSB", "ttyACM", "usbmodem", "usbserial", "COM")


def find_serial_port() -> Optional[str]:
    """Pick a serial port, preferring USB serial bridges over anything else."""
    ports = list(serial.tools.list_ports.comports())
    for port in ports:
        if any(hint in port.device for hint in PORT_HINTS):
            return port.device
    return ports[0].device if ports else None


class SerialLineSource(BaseHardware, LineSource):
    """
    pyserial-backed LineSource.

    Bytes are decoded as UTF-8 (invalid bytes replaced), split on ``\\n`` and
    stripped of a trailing ``\\r``. An incomplete trailing line stays buffered
    until its terminator arrives.
    """

    def __init__(self, config: Optional[SerialConfig] = None):
        super().__init__(config or SerialConfig(), name="serial")
        self._serial: Optional[serial.Serial] = None
        self._buffer = bytearray()
        self._lines: Deque[str] = deque()
        self.port: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    async def _initialize_impl(self) -> None:
        port = self.config.port or find_serial_port()
        if not port:
            raise RuntimeError("No serial ports found")

        self._serial = serial.Serial(port=port, baudrate=self.config.baudrate, timeout=0)
        self.port = port
        self.logger.info("Serial port opened", port=port, baudrate=self.config.baudrate)

    async def _shutdown_impl(self) -> None:
        self._close()
        self._buffer.clear()
        self._lines.clear()

    def read_line(self) -> Optional[str]:
        if not self._lines and self.connected:
            self._fill()
        if self._lines:
            return self._lines.popleft()
        return None

    def _fill(self) -> None:
        try:
            waiting = self._serial.in_waiting
            if not waiting:
                return
            chunk = self._serial.read(waiting)
        except (serial.SerialException, OSError) as e:
            self._record_error("Serial read failed, port disconnected", e, port=self.port)
            self._close()
            return

        self._buffer.extend(chunk)
        *complete, rest = self._buffer.split(b"\n")
        for raw in complete:
            self._lines.append(raw.decode("utf-8", errors="replace").rstrip("\r"))
        self._buffer = bytearray(rest)

        if len(self._buffer) > self.config.max_buffer_bytes:
            self.logger.warning("Dropping oversized partial line", size=len(self._buffer))
            self._buffer.clear()

    def _close(self) -> None:
        if self._serial is None:
            return
        try:
            self._serial.close()
        except (serial.SerialException, OSError) as e:
            self.logger.warning("Error closing serial port", error=str(e))
        self._serial = None

    async def check_health(self):
        health = await super().check_health()
        health.update({
            "port": self.port,
            "buffered_lines": len(self._lines),
        })
        return health
