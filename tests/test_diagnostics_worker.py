import asyncio
import logging

from directory_app.diagnostics.models import StoreFailure
from directory_app.diagnostics.worker import DiagnosticsWorker


def failure(operation="delete_by_id", entry_id="abc"):
    return StoreFailure(operation=operation, entry_id=entry_id, error="entry not found", error_type="EntryNotFoundError")


class TestDiagnosticsWorker:
    """Test that failures are consumed and logged"""

    def test_run_once_logs_each_failure(self, diagnostics_queue, caplog):
        asyncio.run(diagnostics_queue.publish("store_failures", failure()))
        asyncio.run(diagnostics_queue.publish("store_failures", failure("create", None)))
        worker = DiagnosticsWorker(diagnostics_queue, queue_name="store_failures", batch_size=10, poll_interval=0)

        with caplog.at_level(logging.ERROR, logger="directory_app.diagnostics.worker"):
            processed = asyncio.run(worker.run_once())

        assert processed == 2
        assert worker.processed_count == 2
        assert asyncio.run(diagnostics_queue.get_queue_length("store_failures")) == 0
        messages = [r.getMessage() for r in caplog.records]
        assert any("delete_by_id" in m and "abc" in m for m in messages)
        assert any("create" in m and "entry=-" in m for m in messages)

    def test_batches_are_bounded(self, diagnostics_queue):
        for i in range(5):
            asyncio.run(diagnostics_queue.publish("store_failures", failure(entry_id=str(i))))
        worker = DiagnosticsWorker(diagnostics_queue, queue_name="store_failures", batch_size=2, poll_interval=0)

        assert asyncio.run(worker.run_once()) == 2
        assert asyncio.run(diagnostics_queue.get_queue_length("store_failures")) == 3

    def test_empty_queue(self, diagnostics_queue):
        worker = DiagnosticsWorker(diagnostics_queue, queue_name="store_failures", poll_interval=0)
        assert asyncio.run(worker.run_once()) == 0

    def test_start_until_stopped(self, diagnostics_queue):
        asyncio.run(diagnostics_queue.publish("store_failures", failure()))
        worker = DiagnosticsWorker(diagnostics_queue, queue_name="store_failures", poll_interval=0.01)

        async def scenario():
            task = asyncio.create_task(worker.start())
            while worker.processed_count < 1:
                await asyncio.sleep(0.01)
            worker.stop()
            await asyncio.wait_for(task, timeout=1)

        asyncio.run(scenario())
        assert worker.running is False
        assert worker.processed_count == 1
