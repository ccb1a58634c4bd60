"""
Diagnostics channel strategies using Strategy Pattern.
Allows switching between different queue backends (Redis Streams, In-Memory).
"""

from abc import ABC, abstractmethod
from typing import List, Dict
import asyncio
import json
import logging
import socket
from collections import deque
from .models import StoreFailure

logger = logging.getLogger(__name__)


class QueueStrategy(ABC):
    """
    Abstract base class for diagnostics queues.

    The gateway publishes StoreFailure events; the diagnostics worker
    consumes and acknowledges them. Publishing must never raise, since it
    runs inside the gateway's error handler.
    """

    @abstractmethod
    async def publish(self, queue_name: str, message: StoreFailure) -> bool:
        """
        Publish a message to the queue.

        Args:
            queue_name: Name of the queue
            message: StoreFailure to publish

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[StoreFailure]:
        """
        Consume messages from the queue.

        Args:
            queue_name: Name of the queue
            batch_size: Maximum number of messages to retrieve
            block_time: Time to wait for messages (milliseconds)

        Returns:
            List of StoreFailure messages
        """
        pass

    @abstractmethod
    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        """
        Acknowledge messages (mark as processed).

        Args:
            queue_name: Name of the queue
            message_ids: List of message IDs to acknowledge

        Returns:
            True if successful
        """
        pass

    @abstractmethod
    async def get_queue_length(self, queue_name: str) -> int:
        """Get the number of pending messages in queue"""
        pass


class RedisStreamQueue(QueueStrategy):
    """
    Redis Streams implementation.

    Failures survive restarts and can be consumed by a separate worker
    process (see ``python -m directory_app.diagnostics.worker``):
    1. Gateway publishes with XADD
    2. Worker reads with XREADGROUP
    3. Worker acknowledges with XACK
    """

    def __init__(self, redis_client, consumer_group: str = "diagnostics_workers"):
        """
        Args:
            redis_client: Redis client instance (decode_responses=False)
            consumer_group: Name of consumer group for workers
        """
        self.redis = redis_client
        self.consumer_group = consumer_group
        self.consumer_name = f"worker-{socket.gethostname()}-{id(self)}"
        self._initialized_streams = set()

    async def _ensure_stream_exists(self, queue_name: str):
        """Create the stream and consumer group if they don't exist"""
        if queue_name in self._initialized_streams:
            return

        try:
            self.redis.xgroup_create(
                name=queue_name,
                groupname=self.consumer_group,
                id='0',
                mkstream=True
            )
            logger.info("Created Redis stream %s", queue_name)
        except Exception as e:
            # Group might already exist, that's OK
            if "BUSYGROUP" not in str(e):
                logger.warning("Stream creation warning for %s: %s", queue_name, e)

        self._initialized_streams.add(queue_name)

    async def publish(self, queue_name: str, message: StoreFailure) -> bool:
        try:
            await self._ensure_stream_exists(queue_name)
            self.redis.xadd(queue_name, {'data': message.model_dump_json()})
            return True
        except Exception as e:
            logger.error("Redis publish error: %s", e)
            return False

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[StoreFailure]:
        """
        Consume messages with XREADGROUP.
        Messages stay pending until acknowledged.
        """
        try:
            await self._ensure_stream_exists(queue_name)

            # '>' means "messages never delivered to other consumers".
            # Blocks for up to block_time ms, so it runs off the event loop
            messages = await asyncio.to_thread(
                self.redis.xreadgroup,
                groupname=self.consumer_group,
                consumername=self.consumer_name,
                streams={queue_name: '>'},
                count=batch_size,
                block=block_time
            )

            if not messages:
                return []

            events = []
            for stream_name, stream_messages in messages:
                for message_id, message_data in stream_messages:
                    try:
                        data = json.loads(message_data[b'data'].decode('utf-8'))
                        event = StoreFailure(**data)
                        event.message_id = message_id.decode('utf-8')
                        events.append(event)
                    except Exception as e:
                        logger.warning("Failed to parse message %s: %s", message_id, e)

            return events

        except Exception as e:
            logger.error("Redis consume error: %s", e)
            return []

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        try:
            if not message_ids:
                return True
            self.redis.xack(queue_name, self.consumer_group, *message_ids)
            return True
        except Exception as e:
            logger.error("Redis ack error: %s", e)
            return False

    async def get_queue_length(self, queue_name: str) -> int:
        """Get approximate queue length"""
        try:
            info = self.redis.xinfo_stream(queue_name)
            return info['length']
        except Exception:
            return 0


class InMemoryQueue(QueueStrategy):
    """
    In-memory queue implementation using Python deque.

    Lives in the API process, so the diagnostics worker must run there too
    (the lifespan task in main.py). Messages are removed on consume.
    """

    def __init__(self):
        self._queues: Dict[str, deque] = {}

    def _get_queue(self, queue_name: str) -> deque:
        """Get or create queue"""
        if queue_name not in self._queues:
            self._queues[queue_name] = deque()
        return self._queues[queue_name]

    async def publish(self, queue_name: str, message: StoreFailure) -> bool:
        self._get_queue(queue_name).append(message)
        return True

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[StoreFailure]:
        """
        Consume messages from in-memory queue.

        Note: block_time is ignored (no blocking in this simple implementation)
        """
        queue = self._get_queue(queue_name)
        messages = []
        while queue and len(messages) < batch_size:
            messages.append(queue.popleft())
        return messages

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        """Nothing to acknowledge: messages are removed on consume"""
        return True

    async def get_queue_length(self, queue_name: str) -> int:
        return len(self._get_queue(queue_name))
