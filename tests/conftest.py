"""
Test configuration and fixtures for the link directory.
This centralizes all test setup, making individual tests clean.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from directory_app.categories import CategoryRegistry
from directory_app.config import settings
from directory_app.database.connection import Base
from directory_app.dependencies import get_diagnostics_queue, get_store
from directory_app.diagnostics.strategies import InMemoryQueue
from directory_app.schemas.entry import EntryCreate
from directory_app.services.gateway import EntryGateway
from directory_app.storage.strategies import InMemoryEntryStore, SQLEntryStore

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def sql_store():
    """
    SQL store on a fresh database for each test.
    This ensures tests are isolated and don't affect each other.
    """
    Base.metadata.create_all(bind=engine)
    try:
        yield SQLEntryStore(TestingSessionLocal)
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def memory_store():
    return InMemoryEntryStore()


@pytest.fixture(scope="function")
def diagnostics_queue():
    return InMemoryQueue()


@pytest.fixture(scope="function")
def registry():
    return CategoryRegistry.from_names(["Startup", "Internal", "Project", "Community", "Misc"])


@pytest.fixture(scope="function")
def gateway(memory_store, diagnostics_queue):
    return EntryGateway(store=memory_store, diagnostics=diagnostics_queue, atomic_hit_increment=False)


@pytest.fixture(scope="function")
def make_entry(memory_store):
    """Create an entry directly in the in-memory store and return its snapshot"""
    def _make_entry(name="Example", link="example.com", hits=0, category=0, userid="u1", **extra):
        fields = EntryCreate(
            name=name, link=link, category=category, user="Tester", userid=userid, **extra
        )
        entry_id = asyncio.run(memory_store.create(fields))
        if hits:
            asyncio.run(memory_store.set_hits(entry_id, hits))
        return asyncio.run(memory_store.get(entry_id))

    return _make_entry


@pytest.fixture(scope="function")
def client(sql_store, diagnostics_queue, monkeypatch):
    """
    Create a test client with the store and diagnostics queue overridden.
    This is the main fixture that tests will use.
    """
    # Failures must stay in the queue so tests can inspect them
    monkeypatch.setattr(settings, "diagnostics_worker_enabled", False)

    app.dependency_overrides[get_store] = lambda: sql_store
    app.dependency_overrides[get_diagnostics_queue] = lambda: diagnostics_queue

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()
