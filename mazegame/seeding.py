"""Seeded pseudo-random streams shared by maze planning and carving.

Every seeded draw in the package goes through :class:`SeededRandom`, a
Mulberry32 generator whose arithmetic is carried out modulo 2**32 so the
same seed yields the same stream on any platform.
"""

from __future__ import annotations

import random
from typing import List, MutableSequence, Sequence, TypeVar, Union

T = TypeVar("T")
SeedLike = Union[int, str]

MASK_32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5
MAX_RANDOM_SEED = 2147483647


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK_32


def _to_int32(value: int) -> int:
    value &= MASK_32
    return value - 0x100000000 if value & 0x80000000 else value


def hash_string(text: str) -> int:
    """Reduce ``text`` to a non-negative 32-bit seed with a rolling hash.

    The accumulator is wrapped to a signed 32-bit integer after every
    character and its absolute value is returned. Characters contribute
    their UTF-16 code units.
    """

    units = text.encode("utf-16-le")
    hash_value = 0
    for index in range(0, len(units), 2):
        code = units[index] | (units[index + 1] << 8)
        hash_value = _to_int32((hash_value << 5) - hash_value + code)
    return abs(hash_value)


class SeededRandom:
    """Mulberry32 stream producing floats in ``[0, 1)``."""

    def __init__(self, seed: SeedLike) -> None:
        if isinstance(seed, bool) or not isinstance(seed, (int, str)):
            raise TypeError(f"Seed must be an int or str, got {type(seed).__name__}")
        numeric = hash_string(seed) if isinstance(seed, str) else seed
        self.seed = numeric
        self._state = numeric & MASK_32

    def random(self) -> float:
        self._state = (self._state + MULBERRY_INCREMENT) & MASK_32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32
        return ((t ^ (t >> 14)) & MASK_32) / 4294967296

    __call__ = random

    def randbelow(self, n: int) -> int:
        """Return ``floor(random() * n)``."""

        return int(self.random() * n)

    def shuffle(self, items: MutableSequence[T]) -> None:
        """In-place Fisher-Yates shuffle, last index first."""

        for i in range(len(items) - 1, 0, -1):
            j = self.randbelow(i + 1)
            items[i], items[j] = items[j], items[i]


def create_seeded_random(seed: SeedLike) -> SeededRandom:
    return SeededRandom(seed)


def seeded_shuffle(items: Sequence[T], rng: SeededRandom) -> List[T]:
    """Return a shuffled copy of ``items`` drawn from ``rng``."""

    shuffled = list(items)
    rng.shuffle(shuffled)
    return shuffled


def generate_random_seed() -> int:
    """Draw a fresh seed in ``[0, 2**31 - 1)`` from an unseeded source."""

    return int(random.random() * MAX_RANDOM_SEED)


__all__ = [
    "SeededRandom",
    "SeedLike",
    "create_seeded_random",
    "hash_string",
    "seeded_shuffle",
    "generate_random_seed",
    "MAX_RANDOM_SEED",
]
