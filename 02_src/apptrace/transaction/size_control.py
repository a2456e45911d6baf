"""Payload size control for slow and faulty transactions."""

import threading
from typing import TYPE_CHECKING

from ..models import Classification

if TYPE_CHECKING:
    from .transaction import Transaction


class SizeControl:
    """Keeps the slowest slow/faulty transaction per action in full for one flush window.

    Every later slow/faulty transaction of the same action that is not slower
    gets truncated. The agent calls reset() after each flush.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slowest: dict[str | None, "Transaction"] = {}

    def should_truncate(self, transaction: "Transaction") -> bool:
        """Decide whether this transaction's payload must be dropped."""
        if transaction.classification() is Classification.REGULAR:
            return False

        with self._lock:
            retained = self._slowest.get(transaction.action)
            if retained is None or transaction.slower_than(retained):
                self._slowest[transaction.action] = transaction
                return False
            return True

    def reset(self) -> None:
        """Start a new flush window."""
        with self._lock:
            self._slowest.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._slowest)
