"""
Entry store module.

Implements the Strategy Pattern for the remote document store that holds
entries; the gateway depends only on the interface.
"""

from .strategies import EntryStoreStrategy, SQLEntryStore, RedisEntryStore, InMemoryEntryStore
from .factory import StoreFactory, StoreBackend

__all__ = [
    "EntryStoreStrategy",
    "SQLEntryStore",
    "RedisEntryStore",
    "InMemoryEntryStore",
    "StoreFactory",
    "StoreBackend",
]
