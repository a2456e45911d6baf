"""Transaction lifecycle: creation, mutation and completion."""

import threading
from collections.abc import Mapping
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING

from ..errors import AlreadyCompleted, InvalidIdentity, MalformedEnvironment
from ..logging_config import get_logger
from ..models import (
    Classification,
    Event,
    RequestView,
    TransactionRecord,
    build_request_view,
)
from ..registry import (
    ITransactionRegistry,
    WorkerId,
    current_worker_id,
    enter_worker,
    leave_worker,
    new_worker_id,
)
from .formatter import format_transaction
from .sanitizer import sanitize as sanitize_value
from .size_control import SizeControl

if TYPE_CHECKING:
    from ..agent import ITransmitter

logger = get_logger(__name__)

SLOW_REQUEST_THRESHOLD = timedelta(milliseconds=200)


class TransactionState(str, Enum):
    """Lifecycle state of a transaction."""

    OPEN = "open"
    COMPLETED = "completed"


class Transaction:
    """
    One unit of work, from creation until it is handed to the transmitter.

    Only the worker that created the transaction mutates it while it is open.
    complete() moves it out of the registry and enqueues its wire record.
    """

    def __init__(
        self,
        transaction_id: str,
        request: RequestView | None,
        *,
        registry: ITransactionRegistry,
        transmitter: "ITransmitter",
        size_control: SizeControl | None = None,
        worker_id: WorkerId | None = None,
    ):
        self.id = transaction_id
        self.request = request
        self.process_event: Event | None = None
        self.events: list[Event] = []
        self.exception: BaseException | None = None
        self.worker_id = worker_id if worker_id is not None else current_worker_id()
        self._action: str | None = None
        self._registry = registry
        self._transmitter = transmitter
        self._size_control = size_control
        self._state = TransactionState.OPEN
        self._state_lock = threading.Lock()

    @classmethod
    def create(
        cls,
        transaction_id: str,
        environment: Mapping,
        *,
        registry: ITransactionRegistry,
        transmitter: "ITransmitter",
        size_control: SizeControl | None = None,
        worker_id: WorkerId | None = None,
    ) -> "Transaction":
        """
        Open a transaction, register it and bind it to the worker.

        Raises:
            InvalidIdentity: transaction_id is empty or not a string.
            DuplicateIdentity: a transaction with this id is already open.
        """
        if not isinstance(transaction_id, str) or not transaction_id:
            raise InvalidIdentity(transaction_id)

        try:
            request = build_request_view(environment)
        except MalformedEnvironment as e:
            logger.warning(
                "Continuing without request context: %s",
                e,
                extra={"context": {"transaction_id": transaction_id}},
            )
            request = None

        # Without an explicit worker the transaction owns a fresh worker id,
        # entered into the calling context so code run on its behalf (tasks,
        # threadpool calls) resolves to it.
        owns_worker = worker_id is None
        if owns_worker:
            worker_id = new_worker_id()

        transaction = cls(
            transaction_id,
            request,
            registry=registry,
            transmitter=transmitter,
            size_control=size_control,
            worker_id=worker_id,
        )
        registry.register(transaction_id, transaction)

        if owns_worker:
            previous = registry.current()
            if previous is not None:
                logger.warning(
                    "Worker still has open transaction %s",
                    previous.id,
                    extra={"context": {"transaction_id": transaction_id}},
                )
            enter_worker(worker_id)
        registry.bind_worker(worker_id, transaction_id)
        return transaction

    @staticmethod
    def current(
        registry: ITransactionRegistry, worker_id: WorkerId | None = None
    ) -> "Transaction | None":
        """Open transaction bound to the calling (or given) worker."""
        return registry.current(worker_id)

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def action(self) -> str | None:
        """Controller#action label taken from the process event."""
        return self._action

    def set_process_event(self, event: Event | None) -> None:
        """Replace the process event; None clears it."""
        self.process_event = event
        self._action = _action_name(event)

    def add_event(self, event: Event) -> None:
        self.events.append(event)

    def add_exception(self, exception: BaseException) -> None:
        self.exception = exception

    def duration(self) -> timedelta | None:
        if self.process_event is None or self.process_event.payload is None:
            return None
        return self.process_event.duration

    def is_slow(self) -> bool:
        duration = self.duration()
        return duration is not None and duration >= SLOW_REQUEST_THRESHOLD

    def slower_than(self, other: "Transaction") -> bool:
        """Strictly longer than other; missing durations count as zero."""
        return (self.duration() or timedelta(0)) > (other.duration() or timedelta(0))

    def classification(self) -> Classification:
        if self.exception is not None:
            return Classification.FAULTY
        if self.is_slow():
            return Classification.SLOW
        return Classification.REGULAR

    def truncate(self) -> None:
        """Drop the process payload and all sub-events."""
        if self.process_event is not None and self.process_event.payload is not None:
            self.process_event = self.process_event.with_payload({})
        self.events = []

    def sanitize(self) -> None:
        """Replace non-primitive payload values in all events."""
        if self.process_event is not None and self.process_event.payload is not None:
            self.process_event = self.process_event.with_payload(
                sanitize_value(self.process_event.payload)
            )
        self.events = [
            event.with_payload(sanitize_value(event.payload))
            if event.payload is not None
            else event
            for event in self.events
        ]

    def to_wire(self) -> TransactionRecord:
        """Wire record for the current classification. Call after sanitize()."""
        return format_transaction(self)

    def complete(self) -> bool:
        """
        Finalize, hand off and deregister the transaction.

        Runs once; later calls log a warning and return False. Errors while
        building or handing off the record are logged, never raised, and the
        transaction is always removed from the registry.
        """
        with self._state_lock:
            already_completed = self._state is TransactionState.COMPLETED
            self._state = TransactionState.COMPLETED

        context = {"transaction_id": self.id}
        if already_completed:
            logger.warning("%s", AlreadyCompleted(self.id), extra={"context": context})
            return False

        try:
            self._report()
        except Exception:
            logger.exception("Failed to report transaction", extra={"context": context})
        finally:
            self._registry.deregister(self.id, expected=self)
            self._registry.unbind_worker(self.worker_id, expected=self.id)
            leave_worker(self.worker_id)
        return True

    def _report(self) -> None:
        if self.process_event is None and self.exception is None:
            logger.debug(
                "Nothing to report", extra={"context": {"transaction_id": self.id}}
            )
            return

        if self._size_control is not None and self._size_control.should_truncate(self):
            self.truncate()
        self.sanitize()
        self._transmitter.enqueue(self.to_wire())


def _action_name(event: Event | None) -> str | None:
    if event is None or not event.payload:
        return None
    controller = event.payload.get("controller")
    action = event.payload.get("action")
    if controller and action:
        return f"{controller}#{action}"
    return None
