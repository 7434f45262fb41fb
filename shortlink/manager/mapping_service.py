"""
MappingService module for shortlink.

Responsibilities:
    - Create alias -> url mappings, with a caller-supplied or generated alias
    - Resolve an alias to its url for redirection
    - Delete a mapping by alias
    - Translate storage-level conditions into the error taxonomy the HTTP
      layer relies on

Error contract (see shortlink.errors):
    create_mapping  InvalidRequestError | AliasNotUniqueError | AliasExistsError | StoreUnavailableError
    resolve_alias   InvalidRequestError | NotFoundError | StoreUnavailableError
    delete_mapping  InvalidRequestError | NotFoundError | StoreUnavailableError

Design notes:
    - Stateless apart from the injected store; every call is independent.
    - Nothing is retried here. A store fault surfaces immediately.
    - Empty aliases and urls are rejected before storage is touched.
    - URL well-formedness is validated upstream by the HTTP layer and is not
      re-checked here.

LLM Prompt Example:
    "Explain how a thin service facade keeps the storage contract and the
    HTTP error mapping decoupled, with dependencies injected for tests."
"""

import logging
from typing import Optional

from ..errors import AliasExistsError, DuplicateAliasError, InvalidRequestError
from ..storage.base import BaseStorage, Mapping
from .allocator import AliasAllocator

log = logging.getLogger(__name__)


class MappingService:
    """Facade the HTTP handlers call."""

    def __init__(self, storage: BaseStorage, allocator: Optional[AliasAllocator] = None):
        """
        Args:
            storage (BaseStorage): Backend store shared by all requests.
            allocator (Optional[AliasAllocator]): Alias source for requests without
                an alias; defaults to a random 6-character allocator over `storage`.
        """
        self.storage = storage
        self.allocator = allocator or AliasAllocator(storage)

    def create_mapping(self, url: str, alias: Optional[str] = None) -> Mapping:
        """
        Persist `url` under `alias`, generating an alias when none is given.

        Args:
            url (str): Destination URL (already validated for format).
            alias (Optional[str]): Requested alias; None or "" means generate one.

        Returns:
            Mapping: The stored mapping, including the store-assigned id.

        Raises:
            InvalidRequestError: `url` is empty.
            AliasNotUniqueError: The generated alias collided on the pre-check.
            AliasExistsError: The alias was already mapped at insert time.
            StoreUnavailableError: The store failed.
        """
        if not url:
            raise InvalidRequestError("field url is required to fill")

        if not alias:
            alias = self.allocator.allocate()

        try:
            mapping_id = self.storage.insert(alias, url)
        except DuplicateAliasError as exc:
            raise AliasExistsError(alias) from exc

        log.info("url added: id=%s alias=%s", mapping_id, alias)
        return Mapping(id=mapping_id, alias=alias, url=url)

    def resolve_alias(self, alias: str) -> str:
        """
        Return the destination url for `alias`.

        Raises:
            InvalidRequestError: `alias` is empty.
            NotFoundError: No mapping exists.
            StoreUnavailableError: The store failed.
        """
        if not alias:
            raise InvalidRequestError("invalid request")
        return self.storage.get(alias)

    def delete_mapping(self, alias: str) -> None:
        """
        Remove the mapping for `alias`.

        Raises:
            InvalidRequestError: `alias` is empty.
            NotFoundError: Nothing was mapped under `alias`.
            StoreUnavailableError: The store failed.
        """
        if not alias:
            raise InvalidRequestError("invalid request")
        self.storage.delete(alias)
        log.info("alias deleted: alias=%s", alias)
