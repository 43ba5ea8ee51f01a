"""
Ingestion: wire protocol parsing, line sources and the bounded-latency scheduler.
"""

from .parser import MessageParser, Registration, Data, Invalid, Message, parse_line
from .source import LineSource, QueueLineSource
from .scheduler import IngestionScheduler, TickReport, PurgeReport

__all__ = [
    'MessageParser',
    'Registration',
    'Data',
    'Invalid',
    'Message',
    'parse_line',
    'LineSource',
    'QueueLineSource',
    'IngestionScheduler',
    'TickReport',
    'PurgeReport',
]
