"""Instrumentation module."""

from .notifier import (
    PROCESS_EVENT_PATTERN,
    EventHandler,
    INotifier,
    Notifier,
    TransactionSubscriber,
)

__all__ = [
    "PROCESS_EVENT_PATTERN",
    "EventHandler",
    "INotifier",
    "Notifier",
    "TransactionSubscriber",
]
