"""
Diagnostics channel for rejected store operations.
Implements Strategy Pattern for flexible queue backends.
"""

from .strategies import QueueStrategy, RedisStreamQueue, InMemoryQueue
from .factory import QueueFactory, QueueBackend
from .models import StoreFailure

__all__ = [
    "QueueStrategy",
    "RedisStreamQueue",
    "InMemoryQueue",
    "QueueFactory",
    "QueueBackend",
    "StoreFailure",
]
