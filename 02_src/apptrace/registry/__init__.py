"""Transaction registry module."""

from .registry import (
    ITransactionRegistry,
    TransactionRegistry,
    WorkerId,
    bound_worker,
    current_worker_id,
    enter_worker,
    leave_worker,
    new_worker_id,
)

__all__ = [
    "ITransactionRegistry",
    "TransactionRegistry",
    "WorkerId",
    "bound_worker",
    "current_worker_id",
    "enter_worker",
    "leave_worker",
    "new_worker_id",
]
