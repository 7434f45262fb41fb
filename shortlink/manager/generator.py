"""
Alias generators for shortlink.

Provided generators:
- RandomAliasGenerator: uniform random string over the 62-symbol alphabet
  (a-z, A-Z, 0-9), each character drawn independently

Notes:
- Generators only produce candidates; uniqueness is the allocator's and,
  ultimately, the store's concern.
- The random source is an injected field rather than the process-wide
  `random` module state, so tests can pass `random.Random(seed)` and get a
  reproducible sequence without touching globals.
- The default source is `random.SystemRandom()`; `SystemRandom.choice` is safe
  to call from many request threads at once.
"""

import random
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits


class BaseAliasGenerator(ABC):
    """Abstract base for alias candidate generators."""

    @abstractmethod
    def generate(self, length: int) -> str:
        """Return a candidate alias of exactly `length` characters."""
        raise NotImplementedError


@dataclass(frozen=True)
class RandomAliasGenerator(BaseAliasGenerator):
    """Random Base62 aliases; rely on the store's unique constraint for correctness."""

    rng: random.Random = field(default_factory=random.SystemRandom)

    def generate(self, length: int) -> str:
        if length < 1:
            raise ValueError("alias length must be at least 1")
        return "".join(self.rng.choice(ALPHABET) for _ in range(length))
