"""
Factory for creating entry store instances.
Simple, clean factory with singleton caching.
"""

from enum import Enum
import logging

from .strategies import EntryStoreStrategy, SQLEntryStore, RedisEntryStore, InMemoryEntryStore
from directory_app.config import settings

logger = logging.getLogger(__name__)


class StoreBackend(Enum):
    """Available entry store backends"""
    SQL = "sql"
    REDIS = "redis"
    MEMORY = "memory"


class StoreFactory:
    """
    Simple factory for creating entry store instances.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: EntryStoreStrategy = None  # Single cached instance

    @classmethod
    def create(cls, backend: StoreBackend) -> EntryStoreStrategy:
        """
        Create or return cached store instance.

        Args:
            backend: Type of store backend (from enum)

        Returns:
            Singleton store instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == StoreBackend.SQL:
            from directory_app.database.connection import Base, SessionLocal, engine

            Base.metadata.create_all(bind=engine)
            cls._instance = SQLEntryStore(SessionLocal)
            logger.info("SQL entry store initialized (%s)", engine.url.render_as_string(hide_password=True))

        elif backend == StoreBackend.REDIS:
            import redis

            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            # Fail at startup rather than on the first write
            redis_client.ping()
            cls._instance = RedisEntryStore(redis_client, key_prefix=settings.redis_key_prefix)
            logger.info("Redis entry store initialized")

        elif backend == StoreBackend.MEMORY:
            cls._instance = InMemoryEntryStore()
            logger.info("In-memory entry store initialized")

        else:
            raise ValueError(f"Unknown store backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
