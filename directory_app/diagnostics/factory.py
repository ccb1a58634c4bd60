"""
Factory for creating diagnostics queue instances.
Simple, clean factory with singleton caching.
"""

from enum import Enum
import logging

from .strategies import QueueStrategy, RedisStreamQueue, InMemoryQueue
from directory_app.config import settings

logger = logging.getLogger(__name__)


class QueueBackend(Enum):
    """Available queue backends"""
    REDIS_STREAMS = "redis_streams"
    MEMORY = "memory"


class QueueFactory:
    """
    Simple factory for creating diagnostics queue instances.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: QueueStrategy = None  # Single cached instance

    @classmethod
    def create(cls, backend: QueueBackend) -> QueueStrategy:
        """
        Create or return cached queue instance.

        Args:
            backend: Type of queue backend (from enum)

        Returns:
            Singleton queue instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == QueueBackend.REDIS_STREAMS:
            import redis

            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=False,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                redis_client.ping()

                cls._instance = RedisStreamQueue(
                    redis_client,
                    settings.diagnostics_consumer_group
                )
                logger.info("Redis diagnostics queue initialized")

            except Exception as e:
                # Losing diagnostics must not take the app down
                logger.warning("Redis connection failed: %s", e)
                logger.warning("Falling back to in-memory diagnostics queue")
                cls._instance = InMemoryQueue()

        elif backend == QueueBackend.MEMORY:
            cls._instance = InMemoryQueue()
            logger.info("In-memory diagnostics queue initialized")

        else:
            raise ValueError(f"Unknown queue backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
