"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the entry store, the
diagnostics queue and the category registry, and builds the gateway and
acting session for each request.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (override with in-memory backends)
- Flexible (swap implementations via config)
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from directory_app.categories import CategoryRegistry
from directory_app.config import settings
from directory_app.diagnostics.factory import QueueFactory, QueueBackend
from directory_app.diagnostics.strategies import QueueStrategy
from directory_app.services.gateway import EntryGateway
from directory_app.session import ActingSession
from directory_app.storage.factory import StoreFactory, StoreBackend
from directory_app.storage.strategies import EntryStoreStrategy


@lru_cache()
def get_store() -> EntryStoreStrategy:
    """
    Get entry store instance (singleton).

    Returns:
        EntryStoreStrategy instance based on settings
    """
    return StoreFactory.create(StoreBackend(settings.store_backend))


@lru_cache()
def get_diagnostics_queue() -> QueueStrategy:
    """
    Get diagnostics queue instance (singleton).

    Returns:
        QueueStrategy instance based on settings
    """
    return QueueFactory.create(QueueBackend(settings.diagnostics_backend))


@lru_cache()
def get_category_registry() -> CategoryRegistry:
    """Category registry built once from settings.categories"""
    return CategoryRegistry.from_names(settings.categories)


def get_gateway(
    store: EntryStoreStrategy = Depends(get_store),
    diagnostics: QueueStrategy = Depends(get_diagnostics_queue),
) -> EntryGateway:
    """Gateway over the configured store, reporting to the diagnostics queue"""
    return EntryGateway(store=store, diagnostics=diagnostics)


def get_acting_session(
    x_user_name: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
) -> ActingSession:
    """
    Acting user from request headers.

    Authentication happens upstream; both headers are optional.
    """
    return ActingSession(display_name=x_user_name, uid=x_user_id)
