"""Error hierarchy for the transaction lifecycle.

Creation errors are raised to the caller of Transaction.create; integrations
catch them and let the unit of work run unmonitored. Completion never raises.
"""


class ApptraceError(Exception):
    """Base exception for all apptrace errors."""


class InvalidIdentity(ApptraceError):
    """Transaction id is empty or not a string."""

    def __init__(self, transaction_id: object):
        super().__init__(f"Invalid transaction id: {transaction_id!r}")
        self.transaction_id = transaction_id


class DuplicateIdentity(ApptraceError):
    """A transaction with this id is already open."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id!r} is already registered")
        self.transaction_id = transaction_id


class AlreadyCompleted(ApptraceError):
    """Transaction was completed before."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id!r} is already completed")
        self.transaction_id = transaction_id


class MalformedEnvironment(ApptraceError):
    """Request environment could not be turned into a request view."""


class RegistryWarning(RuntimeWarning):
    """Registry state does not match what the caller expected."""
