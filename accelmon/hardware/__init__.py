"""
Hardware abstractions for sensor input devices.
"""

from .base import BaseHardware
from .serial_port import SerialLineSource, find_serial_port

__all__ = [
    'BaseHardware',
    'SerialLineSource',
    'find_serial_port',
]
