"""Data models for apptrace."""

from .events import Event
from .request import RequestView, build_request_view
from .wire import (
    Classification,
    EventEntry,
    ExceptionEntry,
    LogEntry,
    TransactionRecord,
)

__all__ = [
    # Events
    "Event",
    # Request
    "RequestView",
    "build_request_view",
    # Wire
    "Classification",
    "EventEntry",
    "ExceptionEntry",
    "LogEntry",
    "TransactionRecord",
]
