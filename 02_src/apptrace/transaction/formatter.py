"""Classification-specific formatting of transactions into wire records."""

import traceback
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING

from ..models import (
    Classification,
    Event,
    EventEntry,
    ExceptionEntry,
    LogEntry,
    TransactionRecord,
)

if TYPE_CHECKING:
    from .transaction import Transaction

Formatter = Callable[["Transaction"], TransactionRecord]


def _milliseconds(duration: timedelta) -> float:
    return duration.total_seconds() * 1000


def _log_entry(transaction: "Transaction", detailed: bool = False) -> LogEntry:
    request = transaction.request
    event = transaction.process_event
    payload = event.payload if event is not None else None

    entry = LogEntry(
        path=request.fullpath if request else None,
        method=request.method if request else None,
    )
    if payload and isinstance(payload.get("status"), int):
        entry.status = payload["status"]

    duration = transaction.duration()
    if event is not None and duration is not None:
        entry.duration = _milliseconds(duration)
        entry.time = event.start.timestamp()
        entry.end = event.end.timestamp()

    if detailed:
        entry.environment = dict(request.headers) if request else {}
        entry.payload = dict(payload) if payload is not None else {}
    return entry


def _event_entry(event: Event) -> EventEntry:
    return EventEntry(
        name=event.name,
        duration=_milliseconds(event.duration),
        time=event.start.timestamp(),
        end=event.end.timestamp(),
        payload=event.payload or {},
    )


def _exception_entry(exception: object) -> ExceptionEntry:
    tb = getattr(exception, "__traceback__", None)
    backtrace = [line.rstrip("\n") for line in traceback.format_tb(tb)] if tb else []
    return ExceptionEntry(
        exception=type(exception).__name__,
        message=str(exception),
        backtrace=backtrace,
    )


def regular(transaction: "Transaction") -> TransactionRecord:
    """Timing only."""
    return TransactionRecord(
        request_id=transaction.id,
        action=transaction.action,
        kind=Classification.REGULAR,
        log_entry=_log_entry(transaction),
    )


def slow(transaction: "Transaction") -> TransactionRecord:
    """Timing, request environment, process payload and sub-events."""
    return TransactionRecord(
        request_id=transaction.id,
        action=transaction.action,
        kind=Classification.SLOW,
        log_entry=_log_entry(transaction, detailed=True),
        events=[_event_entry(event) for event in transaction.events],
    )


def faulty(transaction: "Transaction") -> TransactionRecord:
    """Everything slow() carries plus the exception."""
    return TransactionRecord(
        request_id=transaction.id,
        action=transaction.action,
        kind=Classification.FAULTY,
        failed=True,
        log_entry=_log_entry(transaction, detailed=True),
        events=[_event_entry(event) for event in transaction.events],
        exception=_exception_entry(transaction.exception),
    )


FORMATTERS: dict[Classification, Formatter] = {
    Classification.REGULAR: regular,
    Classification.SLOW: slow,
    Classification.FAULTY: faulty,
}


def format_transaction(transaction: "Transaction") -> TransactionRecord:
    """Route a transaction to the formatter of its classification."""
    return FORMATTERS[transaction.classification()](transaction)
