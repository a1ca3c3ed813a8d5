"""
Slug generation for links created without an explicit slug.

RandomSlugStrategy draws a fixed-length identifier from an unambiguous
lowercase alphabet (no 0/o, 1/l/i). Uniqueness is never pre-checked here:
the storage layer's unique constraint is the only arbiter, and a collision
surfaces to the caller as a conflict.

Configuration:
- SHORTLINK_SLUG_LENGTH: default generated length (5), via shortlink.config.Settings
"""

import random
from dataclasses import dataclass, field
from typing import Optional

SLUG_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
DEFAULT_LENGTH = 5

_rng = random.SystemRandom()


def generate_slug(length: int = DEFAULT_LENGTH, alphabet: str = SLUG_ALPHABET) -> str:
    """Return a random slug of exactly `length` characters from `alphabet`."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(_rng.choice(alphabet) for _ in range(length))


@dataclass(frozen=True)
class RandomSlugStrategy:
    """Random slugs; rely on storage-level uniqueness."""
    length: int = DEFAULT_LENGTH
    alphabet: str = field(default=SLUG_ALPHABET)

    def generate(self) -> str:
        return generate_slug(self.length, self.alphabet)


def get_slug_strategy(length: Optional[int] = None) -> RandomSlugStrategy:
    """Build the default strategy, optionally overriding the length."""
    return RandomSlugStrategy(length=length or DEFAULT_LENGTH)
