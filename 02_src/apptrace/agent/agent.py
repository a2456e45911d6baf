"""Transmission agent: batches wire records and posts them to the collector."""

import asyncio
import threading
from typing import TYPE_CHECKING, Protocol

import httpx

from ..config import Config
from ..logging_config import get_logger
from ..models import TransactionRecord

if TYPE_CHECKING:
    from ..transaction import SizeControl

logger = get_logger(__name__)

TRANSACTIONS_PATH = "/1/transactions"
REQUEST_TIMEOUT = 10.0
MAX_QUEUE_LENGTH = 10_000


class ITransmitter(Protocol):
    """Receives completed wire records."""

    def enqueue(self, record: TransactionRecord) -> None:
        """Accept a record without blocking on the network."""
        ...


class Agent:
    """Queues records from any worker and flushes them from an asyncio loop."""

    def __init__(
        self,
        config: Config,
        size_control: "SizeControl | None" = None,
        client: httpx.AsyncClient | None = None,
        max_queue_length: int = MAX_QUEUE_LENGTH,
    ):
        self._config = config
        self._max_queue_length = max_queue_length
        self._dropped = 0
        self._size_control = size_control
        self._client = client
        self._owns_client = client is None
        self._lock = threading.Lock()
        self._queue: list[TransactionRecord] = []
        self._running = False
        self._task: asyncio.Task | None = None

    def enqueue(self, record: TransactionRecord) -> None:
        """
        Queue a record for the next flush.

        Records are dropped while reporting is inactive, and once the queue
        holds max_queue_length records until the next flush empties it.
        """
        if not self._config.is_active:
            if self._size_control is not None:
                self._size_control.reset()
            return

        with self._lock:
            if len(self._queue) >= self._max_queue_length:
                self._dropped += 1
                dropped = self._dropped
            else:
                self._queue.append(record)
                return

        if dropped == 1:
            logger.warning(
                "Queue full at %d records, dropping until next flush",
                self._max_queue_length,
            )

    @property
    def queue_length(self) -> int:
        with self._lock:
            return len(self._queue)

    async def send_queue(self) -> int:
        """
        Post all queued records in one request.

        Returns the number of records delivered. The batch is dropped when
        reporting is inactive or the request fails.
        """
        with self._lock:
            batch, self._queue = self._queue, []
            dropped, self._dropped = self._dropped, 0
        if self._size_control is not None:
            self._size_control.reset()
        if dropped:
            logger.warning("Dropped %d transactions while the queue was full", dropped)

        if not batch:
            return 0
        if not self._config.is_active:
            logger.debug("Reporting inactive, dropping %d records", len(batch))
            return 0

        client = self._get_client()
        try:
            response = await client.post(
                f"{self._config.endpoint}{TRANSACTIONS_PATH}",
                params={
                    "api_key": self._config.push_api_key,
                    "environment": self._config.environment,
                },
                json=[record.model_dump(mode="json") for record in batch],
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to send %d transactions: %s", len(batch), e)
            return 0

        logger.debug("Sent %d transactions", len(batch))
        return len(batch)

    async def start(self) -> None:
        """Start the background flush loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the loop, flush what is left and close the client."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        await self.send_queue()

        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self._config.flush_interval)
            try:
                await self.send_queue()
            except Exception:
                logger.exception("Flush failed")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=REQUEST_TIMEOUT)
        return self._client
