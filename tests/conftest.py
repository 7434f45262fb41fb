"""
Global pytest fixtures for the shortlink test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory and SQLite storage fixtures for direct testing
    - Provide a MappingService fixture wired to the in-memory storage fixture
    - Provide small test doubles (fixed generator, broken storage) for forcing
      collision and store-failure paths

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

from typing import List

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink.errors import StoreUnavailableError
from shortlink.manager.allocator import AliasAllocator
from shortlink.manager.generator import BaseAliasGenerator
from shortlink.manager.mapping_service import MappingService
from shortlink.storage.base import BaseStorage
from shortlink.storage.sqlite_storage import SQLiteStorage
from shortlink.storage.storage import Storage


class FixedAliasGenerator(BaseAliasGenerator):
    """Returns the queued candidates in order, repeating the last one forever."""

    def __init__(self, *candidates: str):
        self.candidates: List[str] = list(candidates)
        self.calls = 0

    def generate(self, length: int) -> str:
        self.calls += 1
        if len(self.candidates) > 1:
            return self.candidates.pop(0)
        return self.candidates[0]


class BrokenStorage(BaseStorage):
    """Every operation fails the way an unreachable database would."""

    def __init__(self):
        self.calls: List[str] = []

    def _fail(self, op: str):
        self.calls.append(op)
        raise StoreUnavailableError(f"storage.broken.{op}: connection refused")

    def insert(self, alias: str, url: str) -> int:
        self._fail("insert")

    def get(self, alias: str) -> str:
        self._fail("get")

    def delete(self, alias: str) -> None:
        self._fail("delete")

    def exists(self, alias: str) -> bool:
        self._fail("exists")


@pytest.fixture
def storage() -> Storage:
    """Provide a fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def sqlite_storage(tmp_path) -> SQLiteStorage:
    """Provide a SQLite backend on a throwaway file."""
    return SQLiteStorage(str(tmp_path / "storage.db"))


@pytest.fixture
def service(storage: Storage) -> MappingService:
    """
    Provide a MappingService wired to the storage fixture, with the default
    6-character random allocator.
    """
    return MappingService(storage=storage, allocator=AliasAllocator(storage))


@pytest.fixture
def client(storage: Storage) -> TestClient:
    """
    Provide a fresh TestClient with a new app instance.

    Notes:
        - Uses the app factory with the in-memory storage fixture, so tests can
          also inspect the store directly.
        - `users={}` keeps auth off regardless of the environment.
    """
    app = create_app(storage=storage, users={})
    return TestClient(app)


@pytest.fixture
def broken_storage() -> BrokenStorage:
    """Provide a storage double whose every call raises StoreUnavailableError."""
    return BrokenStorage()


@pytest.fixture
def fixed_generator():
    """Provide a factory for generators that emit chosen candidates."""
    return FixedAliasGenerator
