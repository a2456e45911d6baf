"""Instrumentation event data model."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta


@dataclass(frozen=True)
class Event:
    """A named, timed span emitted by instrumentation."""

    name: str  # e.g. "process_action.asgi", "db.query"
    start: datetime
    end: datetime
    payload: dict | None = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Event requires a non-empty name")
        if self.end < self.start:
            raise ValueError("Event end must not be before its start")
        if self.payload is not None and not isinstance(self.payload, dict):
            if not isinstance(self.payload, Mapping):
                raise TypeError(
                    f"Event payload must be a dict, got {type(self.payload).__name__}"
                )
            object.__setattr__(self, "payload", dict(self.payload))

    @property
    def duration(self) -> timedelta:
        """Time between start and end."""
        return self.end - self.start

    def with_payload(self, payload: dict | None) -> "Event":
        """Copy of this event carrying another payload."""
        return replace(self, payload=payload)
