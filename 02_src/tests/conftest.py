"""Pytest configuration and fixtures."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from apptrace.config import Config
from apptrace.models import Event
from apptrace.registry import TransactionRegistry, bound_worker
from apptrace.transaction import SizeControl, Transaction

ENV_KEYS = [
    "APPTRACE_ENV",
    "APPTRACE_PUSH_API_KEY",
    "APPTRACE_ENDPOINT",
    "APPTRACE_ACTIVE",
    "APPTRACE_FLUSH_INTERVAL",
    "APPTRACE_LOG_PATH",
    "APPTRACE_LOG_LEVEL",
]

START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class RecordingTransmitter:
    """Transmitter that keeps every enqueued record."""

    def __init__(self):
        self.records = []

    def enqueue(self, record) -> None:
        self.records.append(record)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove APPTRACE_* variables, including any loaded from .env during a test."""
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def unbound_worker():
    """Start every test without a worker entered in the main context."""
    token = bound_worker.set(None)
    yield
    bound_worker.reset(token)


@pytest.fixture
def registry():
    """Create an empty registry."""
    return TransactionRegistry()


@pytest.fixture
def transmitter():
    """Create a recording transmitter."""
    return RecordingTransmitter()


@pytest.fixture
def size_control():
    """Create size control."""
    return SizeControl()


@pytest.fixture
def config(tmp_path):
    """Create an inactive config rooted in a temp dir."""
    return Config(root_path=tmp_path)


@pytest.fixture
def active_config(tmp_path):
    """Create an active config pointing at a fake collector."""
    return Config(
        root_path=tmp_path,
        environment="production",
        push_api_key="test-key",
        endpoint="https://collector.test",
        active=True,
        flush_interval=0.01,
    )


@pytest.fixture
def notification_event():
    """Build events; defaults mimic a controller action taking 100ms."""

    def _build(
        name: str = "process_action.asgi",
        start: datetime = START,
        duration: timedelta = timedelta(milliseconds=100),
        payload: dict | None = None,
    ) -> Event:
        if payload is None:
            payload = {
                "controller": "BlogPostsController",
                "action": "show",
                "path": "/blog",
                "status": 200,
            }
        return Event(name=name, start=start, end=start + duration, payload=payload)

    return _build


@pytest.fixture
def create_transaction(registry, transmitter):
    """Create registered transactions, each bound to its own worker id."""

    def _create(transaction_id: str, environment: dict | None = None, **kwargs) -> Transaction:
        kwargs.setdefault("worker_id", ("test-worker", transaction_id))
        kwargs.setdefault("transmitter", transmitter)
        return Transaction.create(
            transaction_id,
            environment if environment is not None else {},
            registry=registry,
            **kwargs,
        )

    return _create


@pytest.fixture
def transaction(create_transaction):
    """Create a transaction with a small request environment."""
    return create_transaction(
        "1",
        {
            "HTTP_USER_AGENT": "IE6",
            "SERVER_NAME": "localhost",
            "action_dispatch.routes": "not_available",
        },
    )


@pytest.fixture
def regular_transaction(create_transaction, notification_event):
    """Create a transaction whose process event took 100ms."""
    txn = create_transaction("regular")
    txn.set_process_event(notification_event())
    return txn


@pytest.fixture
def slow_transaction(create_transaction, notification_event):
    """Create a transaction whose process event took 5s, with one sub-event."""
    txn = create_transaction("slow")
    txn.set_process_event(notification_event(duration=timedelta(seconds=5)))
    txn.add_event(
        notification_event(
            name="db.query",
            duration=timedelta(milliseconds=50),
            payload={"sql": "SELECT 1", "rows": 1},
        )
    )
    return txn


@pytest.fixture
def transaction_with_exception(create_transaction, notification_event):
    """Create a transaction carrying an exception."""
    txn = create_transaction("faulty")
    txn.set_process_event(notification_event())
    try:
        raise ValueError("broken")
    except ValueError as e:
        txn.add_exception(e)
    return txn
