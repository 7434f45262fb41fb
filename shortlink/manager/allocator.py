"""
AliasAllocator for shortlink.

Produces a fresh alias, confirmed absent by the store, for create requests
that did not supply one.

Algorithm:
    1. Generate a candidate of `length` characters.
    2. Probe `storage.exists(candidate)`.
    3. Free -> return it. Taken -> next attempt, up to `max_attempts`.
    4. All attempts taken -> AliasNotUniqueError.

A failing probe raises StoreUnavailableError straight away: "the store is
broken" and "try again" must stay distinguishable for the HTTP layer.

The probe and the later insert are not one transaction. The store's unique
constraint remains the authority; the probe only keeps most collisions from
reaching an insert.
"""

import logging
from typing import Optional

from ..errors import AliasNotUniqueError
from ..storage.base import BaseStorage
from .generator import BaseAliasGenerator, RandomAliasGenerator

log = logging.getLogger(__name__)

DEFAULT_ALIAS_LENGTH = 6


class AliasAllocator:
    def __init__(
        self,
        storage: BaseStorage,
        generator: Optional[BaseAliasGenerator] = None,
        length: int = DEFAULT_ALIAS_LENGTH,
        max_attempts: int = 1,
    ):
        """
        Args:
            storage (BaseStorage): Store probed for existing aliases.
            generator (Optional[BaseAliasGenerator]): Candidate source; random by default.
            length (int): Length of generated aliases.
            max_attempts (int): Generate-and-check passes before giving up.
                The default of 1 fails fast on the first collision.
        """
        if length < 1:
            raise ValueError("length must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.storage = storage
        self.generator = generator or RandomAliasGenerator()
        self.length = length
        self.max_attempts = max_attempts

    def allocate(self) -> str:
        """
        Return a generated alias that the store reported as unused.

        Raises:
            AliasNotUniqueError: Every candidate was already taken.
            StoreUnavailableError: The existence probe failed.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generator.generate(self.length)
            if not self.storage.exists(candidate):
                return candidate
            log.info("generated alias collided: alias=%s attempt=%d/%d",
                     candidate, attempt, self.max_attempts)
        raise AliasNotUniqueError()
