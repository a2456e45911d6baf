"""Transaction module."""

from .formatter import FORMATTERS, format_transaction
from .sanitizer import sanitize
from .size_control import SizeControl
from .transaction import SLOW_REQUEST_THRESHOLD, Transaction, TransactionState

__all__ = [
    "FORMATTERS",
    "SLOW_REQUEST_THRESHOLD",
    "SizeControl",
    "Transaction",
    "TransactionState",
    "format_transaction",
    "sanitize",
]
