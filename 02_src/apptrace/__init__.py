"""apptrace: in-process transaction monitoring."""

from .agent import Agent, ITransmitter
from .app import IMonitor, Monitor
from .config import Config, load_config
from .errors import (
    AlreadyCompleted,
    ApptraceError,
    DuplicateIdentity,
    InvalidIdentity,
    MalformedEnvironment,
    RegistryWarning,
)
from .instrumentation import INotifier, Notifier, TransactionSubscriber
from .marker import Marker
from .models import (
    Classification,
    Event,
    RequestView,
    TransactionRecord,
    build_request_view,
)
from .registry import ITransactionRegistry, TransactionRegistry, current_worker_id
from .transaction import SLOW_REQUEST_THRESHOLD, SizeControl, Transaction, TransactionState

__all__ = [
    # Monitor
    "Monitor",
    "IMonitor",
    "Config",
    "load_config",
    # Models
    "Event",
    "RequestView",
    "build_request_view",
    "Classification",
    "TransactionRecord",
    # Components
    "Transaction",
    "TransactionState",
    "SLOW_REQUEST_THRESHOLD",
    "SizeControl",
    "ITransactionRegistry",
    "TransactionRegistry",
    "current_worker_id",
    "INotifier",
    "Notifier",
    "TransactionSubscriber",
    "ITransmitter",
    "Agent",
    "Marker",
    # Errors
    "ApptraceError",
    "InvalidIdentity",
    "DuplicateIdentity",
    "AlreadyCompleted",
    "MalformedEnvironment",
    "RegistryWarning",
]
