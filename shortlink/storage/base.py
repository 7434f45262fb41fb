"""
Base storage interface for shortlink.

Purpose:
    Define a small, stable contract that multiple storage backends
    (in-memory, SQLite, PostgreSQL) implement without requiring changes
    to the mapping service.

Contract:
    - The store, not the application, is the arbiter of alias uniqueness.
      `insert` must detect a duplicate through the engine's own constraint
      (or an equivalent atomic insert-if-absent), never via a prior lookup.
    - `get` and `delete` raise `NotFoundError` exactly when no row matches.
    - Every other persistence fault surfaces as `StoreUnavailableError`.
    - Implementations must be safe to share across request threads.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Mapping:
    """A persisted alias -> url pair. `id` only records insertion order."""

    id: int
    alias: str
    url: str


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def insert(self, alias: str, url: str) -> int:
        """
        Persist a new mapping.

        Returns:
            int: The store-assigned id of the new row.

        Raises:
            DuplicateAliasError: The alias is already present.
            StoreUnavailableError: Any other persistence fault.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get(self, alias: str) -> str:
        """
        Return the url mapped to `alias`.

        Raises:
            NotFoundError: No row matches.
            StoreUnavailableError: Any other persistence fault.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete(self, alias: str) -> None:
        """
        Remove the mapping for `alias`.

        Raises:
            NotFoundError: Zero rows were affected.
            StoreUnavailableError: Any other persistence fault.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def exists(self, alias: str) -> bool:
        """
        Best-effort existence probe used by the allocator's pre-check.

        Raises:
            StoreUnavailableError: The probe itself failed.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources (pools, handles). No-op by default."""
        return None
