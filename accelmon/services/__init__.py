"""
Service implementations for the acceleration monitor.

Services own the asynchronous side of the application and communicate with
the rest of the system through events on the bus.
"""

from .ingestion import IngestionService

__all__ = ['IngestionService']
