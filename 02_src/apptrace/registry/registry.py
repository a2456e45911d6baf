"""Process-wide registry of open transactions."""

import asyncio
import itertools
import threading
import warnings
from collections.abc import Hashable
from contextvars import ContextVar
from typing import TYPE_CHECKING, Protocol

from ..errors import DuplicateIdentity, RegistryWarning
from ..logging_config import get_logger

if TYPE_CHECKING:
    from ..transaction import Transaction

logger = get_logger(__name__)

WorkerId = Hashable

# Worker id of the unit of work running in this context. asyncio tasks and
# anyio worker threads (FastAPI's threadpool) get a copy of it.
bound_worker: ContextVar[WorkerId | None] = ContextVar("apptrace_worker", default=None)

_worker_sequence = itertools.count(1)


def current_worker_id() -> WorkerId:
    """
    Identity of the calling worker.

    The worker entered in this context wins; otherwise the running asyncio
    task, else the OS thread.
    """
    worker_id = bound_worker.get()
    if worker_id is not None:
        return worker_id
    task = _running_task()
    if task is not None:
        return ("task", id(task))
    return ("thread", threading.get_ident())


def new_worker_id() -> WorkerId:
    """Fresh worker id, never reused within the process."""
    kind = "task" if _running_task() is not None else "thread"
    return (kind, next(_worker_sequence))


def enter_worker(worker_id: WorkerId) -> None:
    """Make worker_id current for this context and its copies."""
    bound_worker.set(worker_id)


def leave_worker(worker_id: WorkerId) -> None:
    """Clear the context binding if it still points at worker_id."""
    if bound_worker.get() == worker_id:
        bound_worker.set(None)


def _running_task() -> "asyncio.Task | None":
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class ITransactionRegistry(Protocol):
    """Index of open transactions and the workers that own them."""

    def register(self, transaction_id: str, transaction: "Transaction") -> None:
        """Add an open transaction. Raises DuplicateIdentity on collision."""
        ...

    def lookup(self, transaction_id: str) -> "Transaction | None":
        """Get an open transaction by id."""
        ...

    def deregister(
        self, transaction_id: str, expected: "Transaction | None" = None
    ) -> "Transaction | None":
        """Remove a transaction. No-op if absent."""
        ...

    def bind_worker(self, worker_id: WorkerId, transaction_id: str) -> None:
        """Bind a worker to its active transaction id."""
        ...

    def unbind_worker(self, worker_id: WorkerId, expected: str | None = None) -> None:
        """Drop a worker binding. No-op if absent."""
        ...

    def resolve_worker(self, worker_id: WorkerId) -> str | None:
        """Get the transaction id bound to a worker."""
        ...

    def current(self, worker_id: WorkerId | None = None) -> "Transaction | None":
        """Open transaction of the calling (or given) worker."""
        ...


class TransactionRegistry:
    """Thread-safe id -> Transaction and worker -> id maps behind one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._transactions: dict[str, "Transaction"] = {}
        self._workers: dict[WorkerId, str] = {}

    def register(self, transaction_id: str, transaction: "Transaction") -> None:
        with self._lock:
            if transaction_id in self._transactions:
                raise DuplicateIdentity(transaction_id)
            self._transactions[transaction_id] = transaction

    def lookup(self, transaction_id: str) -> "Transaction | None":
        with self._lock:
            return self._transactions.get(transaction_id)

    def deregister(
        self, transaction_id: str, expected: "Transaction | None" = None
    ) -> "Transaction | None":
        """Remove and return the entry for transaction_id.

        With expected given, the entry is only removed when it is that exact
        transaction; a mismatch is reported as a RegistryWarning.
        """
        with self._lock:
            current = self._transactions.get(transaction_id)
            if current is None:
                return None
            if expected is not None and current is not expected:
                mismatch = True
            else:
                mismatch = False
                del self._transactions[transaction_id]

        if mismatch:
            self._warn(f"Registry entry for {transaction_id!r} belongs to another transaction")
            return None
        return current

    def bind_worker(self, worker_id: WorkerId, transaction_id: str) -> None:
        with self._lock:
            previous = self._workers.get(worker_id)
            self._workers[worker_id] = transaction_id

        if previous is not None and previous != transaction_id:
            logger.warning(
                "Worker rebound while transaction %s still open",
                previous,
                extra={"context": {"transaction_id": transaction_id}},
            )

    def unbind_worker(self, worker_id: WorkerId, expected: str | None = None) -> None:
        with self._lock:
            current = self._workers.get(worker_id)
            if current is None:
                return
            if expected is not None and current != expected:
                mismatch = True
            else:
                mismatch = False
                del self._workers[worker_id]

        if mismatch:
            # The worker already moved on to another transaction
            self._warn(f"Worker is bound to {current!r}, not {expected!r}")

    def resolve_worker(self, worker_id: WorkerId) -> str | None:
        with self._lock:
            return self._workers.get(worker_id)

    def current(self, worker_id: WorkerId | None = None) -> "Transaction | None":
        """Resolve the worker's bound id to its open transaction."""
        if worker_id is None:
            worker_id = current_worker_id()
        with self._lock:
            transaction_id = self._workers.get(worker_id)
            if transaction_id is None:
                return None
            return self._transactions.get(transaction_id)

    def open_ids(self) -> list[str]:
        """Ids of all open transactions."""
        with self._lock:
            return list(self._transactions)

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._transactions.clear()
            self._workers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)

    def __contains__(self, transaction_id: object) -> bool:
        with self._lock:
            return transaction_id in self._transactions

    @staticmethod
    def _warn(message: str) -> None:
        logger.warning(message)
        warnings.warn(message, RegistryWarning, stacklevel=3)
