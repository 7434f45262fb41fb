"""
Storage module for shortlink (in-memory implementation).

Responsibilities:
    - Map aliases to their destination URLs
    - Assign monotonically increasing ids on insert
    - Enforce alias uniqueness atomically

Design:
    - This is an in-memory reference implementation that satisfies the BaseStorage contract.
    - A single lock makes insert-if-absent and delete atomic, playing the role
      a unique index plays in the SQL backends.
    - It is intentionally simple to keep unit/integration tests fast and deterministic.
    - Data does not survive a restart; use the "sqlite" or "postgres" backend for that.
"""

import itertools
import threading
from typing import Dict

from ..errors import DuplicateAliasError, NotFoundError
from .base import BaseStorage, Mapping


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.mappings = {
                alias: Mapping(id=int, alias=str, url=str)
            }
        """
        self.mappings: Dict[str, Mapping] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def insert(self, alias: str, url: str) -> int:
        """
        Insert a mapping unless the alias is taken.

        The membership test and the write happen under one lock, so among
        concurrent inserts of the same alias exactly one succeeds.
        """
        with self._lock:
            if alias in self.mappings:
                raise DuplicateAliasError(alias)
            mapping = Mapping(id=next(self._ids), alias=alias, url=url)
            self.mappings[alias] = mapping
            return mapping.id

    def get(self, alias: str) -> str:
        mapping = self.mappings.get(alias)
        if mapping is None:
            raise NotFoundError(alias)
        return mapping.url

    def delete(self, alias: str) -> None:
        with self._lock:
            if self.mappings.pop(alias, None) is None:
                raise NotFoundError(alias)

    def exists(self, alias: str) -> bool:
        return alias in self.mappings
