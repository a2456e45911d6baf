"""Wire records handed to the transmission agent."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Classification(str, Enum):
    """Kind of a completed transaction."""

    REGULAR = "regular"
    SLOW = "slow"
    FAULTY = "faulty"


class EventEntry(BaseModel):
    """A sub-event of a slow or faulty transaction."""

    name: str
    duration: float  # milliseconds
    time: float  # epoch seconds
    end: float
    payload: dict[str, Any] = Field(default_factory=dict)


class ExceptionEntry(BaseModel):
    """Failure details of a faulty transaction."""

    exception: str  # exception class name
    message: str
    backtrace: list[str] = Field(default_factory=list)


class LogEntry(BaseModel):
    """Request-level timing and context."""

    path: str | None = None
    method: str | None = None
    kind: str = "http_request"
    status: int | None = None
    duration: float | None = None  # milliseconds
    time: float | None = None
    end: float | None = None
    environment: dict[str, str] | None = None
    payload: dict[str, Any] | None = None


class TransactionRecord(BaseModel):
    """Sanitized, classified representation of one transaction."""

    request_id: str
    action: str | None = None
    kind: Classification
    failed: bool = False
    log_entry: LogEntry
    events: list[EventEntry] = Field(default_factory=list)
    exception: ExceptionEntry | None = None
