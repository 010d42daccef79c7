"""Pure, seed-driven selection helpers.

Given the same seed these always return the same order, which makes a
session's discovery content reproducible while still varying between
sessions.
"""

import random
import time
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def generate_session_seed(now: Optional[float] = None, rng: Optional[random.Random] = None) -> int:
    """Timestamp-derived seed with a random component."""
    now_ms = int((time.time() if now is None else now) * 1000)
    return now_ms % 1_000_000 + (rng or random).randrange(100_000)


def key_hash(key: str) -> int:
    """Stable per-key offset (sum of character codes)."""
    return sum(ord(ch) for ch in key)


def seeded_shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Shuffled copy of `items`, deterministic for a given seed."""
    return random.Random(seed).sample(list(items), len(items))


def seeded_pick(items: Sequence[T], count: int, seed: int) -> list[T]:
    """Pick up to `count` items, deterministic for a given seed."""
    return seeded_shuffle(items, seed)[: max(0, count)]


def ordered_terms(seed: int, key: str, queries: Sequence[str]) -> list[str]:
    """Session order in which a bucket tries its pool's search terms."""
    return seeded_shuffle(queries, seed + key_hash(key))
