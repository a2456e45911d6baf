"""Integration tests for concurrent transaction handling."""

import asyncio
import json
import threading
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from apptrace.app import Monitor
from apptrace.models import Classification, Event


def run_unit_of_work(monitor: Monitor, transaction_id: str, duration: timedelta) -> None:
    """Simulate one request on the calling thread."""
    txn = monitor.create_transaction(transaction_id, {"PATH_INFO": f"/jobs/{transaction_id}"})
    with monitor.instrument("db.query", {"sql": "SELECT 1", "id": transaction_id}):
        pass
    start = datetime.now(timezone.utc)
    monitor.notifier.publish(
        Event(
            name="process_action.worker",
            start=start,
            end=start + duration,
            payload={"controller": "Jobs", "action": transaction_id},
        )
    )
    assert monitor.current_transaction() is txn
    txn.complete()


class TestConcurrentWorkers:
    """Tests with many workers sharing one monitor."""

    def test_threads_report_once_each(self, active_config):
        """Test that parallel workers each report exactly their own record."""
        monitor = Monitor(active_config)
        barrier = threading.Barrier(16)
        errors = []

        def worker(index: int) -> None:
            try:
                barrier.wait()
                run_unit_of_work(monitor, f"job-{index}", timedelta(milliseconds=10 * index + 50))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(monitor.registry) == 0
        records = monitor.agent._queue
        assert sorted(r.request_id for r in records) == sorted(f"job-{i}" for i in range(16))
        for record in records:
            if record.kind is Classification.SLOW:
                # events never leak between workers
                assert [e.payload["id"] for e in record.events] == [record.request_id]

    @pytest.mark.asyncio
    async def test_tasks_report_once_each(self, active_config):
        """Test that concurrent asyncio tasks keep separate transactions."""
        monitor = Monitor(active_config)

        async def handle(index: int) -> None:
            txn = monitor.create_transaction(f"task-{index}", {})
            await asyncio.sleep(0)
            with monitor.instrument("db.query", {"id": f"task-{index}"}):
                await asyncio.sleep(0)
            with monitor.instrument("process_action.task", {"controller": "T", "action": "a"}):
                pass
            assert monitor.current_transaction() is txn
            txn.complete()

        await asyncio.gather(*(handle(i) for i in range(10)))

        assert len(monitor.registry) == 0
        assert monitor.agent.queue_length == 10


class TestEndToEnd:
    """Request to collector."""

    @pytest.mark.asyncio
    async def test_slow_request_reaches_collector(self, active_config):
        """Test that a slow transaction is posted with its sub-event."""
        batches = []

        def handler(request: httpx.Request) -> httpx.Response:
            batches.append(json.loads(request.content))
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            monitor = Monitor(active_config, client=client)
            txn = monitor.create_transaction("42", {})
            with monitor.instrument("db.query", {"sql": "SELECT * FROM posts", "model": object()}):
                pass
            start = datetime.now(timezone.utc)
            monitor.notifier.publish(
                Event(
                    name="process_action.asgi",
                    start=start,
                    end=start + timedelta(milliseconds=250),
                    payload={"controller": "Posts", "action": "index"},
                )
            )
            txn.complete()

            assert await monitor.agent.send_queue() == 1

        [batch] = batches
        [record] = batch
        assert record["request_id"] == "42"
        assert record["kind"] == "slow"
        assert record["action"] == "Posts#index"
        assert [e["name"] for e in record["events"]] == ["db.query"]
        assert isinstance(record["events"][0]["payload"]["model"], str)
        assert monitor.registry.lookup("42") is None
