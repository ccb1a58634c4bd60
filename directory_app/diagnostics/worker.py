"""
Diagnostics Worker

Consumes StoreFailure events from the diagnostics channel and logs them.
The gateway never waits for this: it only publishes.

Runs either as a task inside the API process (lifespan in main.py), which
is required for the in-memory queue, or standalone against Redis Streams:

    python -m directory_app.diagnostics.worker
"""

import asyncio
import logging
import signal
import sys
from typing import List

from directory_app.config import settings
from directory_app.diagnostics.models import StoreFailure
from directory_app.diagnostics.strategies import QueueStrategy

logger = logging.getLogger(__name__)


class DiagnosticsWorker:
    """
    Batch consumer for store failures.

    Each failure is logged at ERROR and acknowledged. There is no retry of
    the failed store operation itself.
    """

    def __init__(
        self,
        queue: QueueStrategy,
        queue_name: str = None,
        batch_size: int = None,
        poll_interval: float = None,
    ):
        """
        Args:
            queue: Queue strategy to consume from
            queue_name: Defaults to settings.diagnostics_queue_name
            batch_size: Max failures per batch
            poll_interval: Seconds to sleep when the queue is empty
        """
        self.queue = queue
        self.queue_name = queue_name or settings.diagnostics_queue_name
        self.batch_size = batch_size or settings.diagnostics_batch_size
        self.poll_interval = settings.diagnostics_poll_interval if poll_interval is None else poll_interval
        self.running = False
        self.processed_count = 0

    async def run_once(self) -> int:
        """
        Consume, log and acknowledge one batch.

        Returns:
            Number of failures processed
        """
        messages = await self.queue.consume(
            self.queue_name,
            batch_size=self.batch_size,
            block_time=int(self.poll_interval * 1000),
        )
        if not messages:
            return 0

        self._log_batch(messages)

        message_ids = [msg.message_id for msg in messages if msg.message_id]
        if message_ids:
            await self.queue.ack(self.queue_name, message_ids)

        self.processed_count += len(messages)
        return len(messages)

    def _log_batch(self, messages: List[StoreFailure]):
        for failure in messages:
            logger.error(
                "Store operation %s failed (entry=%s, at=%s): %s: %s",
                failure.operation,
                failure.entry_id or "-",
                failure.timestamp.isoformat(),
                failure.error_type,
                failure.error,
            )

    async def start(self):
        """Consume until stop() is called or the task is cancelled"""
        self.running = True
        logger.info("Diagnostics worker started (queue=%s, batch=%d)", self.queue_name, self.batch_size)

        while self.running:
            try:
                if not await self.run_once():
                    await asyncio.sleep(self.poll_interval)
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Error processing diagnostics batch")
                await asyncio.sleep(self.poll_interval)

        logger.info("Diagnostics worker stopped after %d failures", self.processed_count)

    def stop(self):
        """Stop the worker"""
        self.running = False


async def main():
    """Standalone entry point (Redis Streams backend)"""
    from directory_app.diagnostics.factory import QueueFactory, QueueBackend
    from directory_app.logging_config import configure_logging

    configure_logging()
    logger.info(
        "Link directory diagnostics worker (environment=%s, backend=%s)",
        settings.environment,
        settings.diagnostics_backend,
    )

    queue = QueueFactory.create(QueueBackend(settings.diagnostics_backend))
    worker = DiagnosticsWorker(queue=queue)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, worker.stop)

    try:
        await worker.start()
    except Exception:
        logger.exception("Fatal error in diagnostics worker")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
