"""Monitor bootstrap and lifecycle management."""

from collections.abc import Mapping
from contextlib import AbstractContextManager
from typing import Protocol

import httpx

from .agent import Agent
from .config import Config, load_config
from .instrumentation import Notifier, TransactionSubscriber
from .logging_config import get_logger
from .registry import TransactionRegistry, WorkerId
from .transaction import SizeControl, Transaction

logger = get_logger(__name__)


class IMonitor(Protocol):
    """Per-process entry point for creating and reporting transactions."""

    def create_transaction(
        self, transaction_id: str, environment: Mapping, worker_id: WorkerId | None = None
    ) -> Transaction:
        """Open and register a transaction for the calling worker."""
        ...

    def current_transaction(self, worker_id: WorkerId | None = None) -> Transaction | None:
        """Open transaction of the calling worker."""
        ...

    def instrument(self, name: str, payload: dict | None = None) -> AbstractContextManager[dict]:
        """Time a block and attach it to the current transaction."""
        ...

    async def start(self) -> None:
        """Start background transmission."""
        ...

    async def stop(self) -> None:
        """Flush and stop background transmission."""
        ...


class Monitor:
    """Wires registry, size control, agent and notifier for one process."""

    def __init__(
        self,
        config: Config | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or load_config()
        self.registry = TransactionRegistry()
        self.size_control = SizeControl()
        self.agent = Agent(self.config, size_control=self.size_control, client=client)
        self.notifier = Notifier()
        TransactionSubscriber(self.registry).attach(self.notifier)

    def create_transaction(
        self, transaction_id: str, environment: Mapping, worker_id: WorkerId | None = None
    ) -> Transaction:
        """Open and register a transaction for the calling worker."""
        return Transaction.create(
            transaction_id,
            environment,
            registry=self.registry,
            transmitter=self.agent,
            size_control=self.size_control,
            worker_id=worker_id,
        )

    def current_transaction(self, worker_id: WorkerId | None = None) -> Transaction | None:
        """Open transaction of the calling worker."""
        return Transaction.current(self.registry, worker_id)

    def instrument(self, name: str, payload: dict | None = None) -> AbstractContextManager[dict]:
        """Time a block and attach it to the current transaction."""
        return self.notifier.instrument(name, payload)

    async def start(self) -> None:
        """Start background transmission when reporting is active."""
        context = {"environment": self.config.environment}
        if not self.config.is_active:
            logger.info("apptrace reporting inactive", extra={"context": context})
            return

        await self.agent.start()
        logger.info("apptrace agent started", extra={"context": context})

    async def stop(self) -> None:
        """Flush queued records and stop the agent."""
        await self.agent.stop()

        open_count = len(self.registry)
        if open_count:
            logger.warning("%d transactions still open at shutdown", open_count)
        logger.info("apptrace agent stopped")
