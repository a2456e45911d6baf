"""Instrumentation notifier: pub/sub for timed events."""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from fnmatch import fnmatchcase
from typing import Protocol

from ..logging_config import get_logger
from ..models import Event
from ..registry import ITransactionRegistry

logger = get_logger(__name__)

PROCESS_EVENT_PATTERN = "process_action.*"

EventHandler = Callable[[Event], None]


class INotifier(Protocol):
    """Synchronous pub/sub for instrumentation events."""

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Subscribe a handler to event names matching a glob pattern."""
        ...

    def publish(self, event: Event) -> None:
        """Call every matching handler on the calling worker."""
        ...


class Notifier:
    """In-process notifier. Handlers run on the publishing worker."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[tuple[str, EventHandler]] = []

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Subscribe a handler to event names matching a glob pattern."""
        with self._lock:
            self._subscribers.append((pattern, handler))

    def publish(self, event: Event) -> None:
        """Call every matching handler; handler errors are logged, not raised."""
        with self._lock:
            handlers = [
                handler
                for pattern, handler in self._subscribers
                if fnmatchcase(event.name, pattern)
            ]

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error("Error in handler for %s: %s", event.name, e)

    @contextmanager
    def instrument(self, name: str, payload: dict | None = None) -> Iterator[dict]:
        """
        Time the enclosed block and publish it as an Event.

        The yielded payload may be filled in by the block. If the block
        raises, the exception class and message are added to the payload and
        the exception propagates.
        """
        payload = {} if payload is None else payload
        start = datetime.now(timezone.utc)
        try:
            yield payload
        except Exception as e:
            payload["exception"] = [type(e).__name__, str(e)]
            raise
        finally:
            end = max(datetime.now(timezone.utc), start)
            self.publish(Event(name=name, start=start, end=end, payload=payload))


class TransactionSubscriber:
    """Routes events to the open transaction of the publishing worker."""

    def __init__(self, registry: ITransactionRegistry):
        self._registry = registry

    def attach(self, notifier: INotifier) -> None:
        """Subscribe to all events."""
        notifier.subscribe("*", self)

    def __call__(self, event: Event) -> None:
        transaction = self._registry.current()
        if transaction is None:
            return

        if fnmatchcase(event.name, PROCESS_EVENT_PATTERN):
            transaction.set_process_event(event)
        else:
            transaction.add_event(event)
