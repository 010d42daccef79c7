"""Discovery domain - session-seeded content buckets.

This domain handles:
- Curated search-term pools per language and theme
- The per-session seed, seen-set and played-set
- "For You", language and themed buckets with term fallback
"""

from .engine import FOR_YOU_KEY, Bucket, DiscoveryEngine
from .pools import LANGUAGE_POOLS, THEME_POOLS, Pool, display_name, get_pool
from .seed import (
    generate_session_seed,
    ordered_terms,
    seeded_pick,
    seeded_shuffle,
)
from .session import DiscoverySession

__all__ = [
    "Bucket",
    "DiscoveryEngine",
    "DiscoverySession",
    "FOR_YOU_KEY",
    "LANGUAGE_POOLS",
    "THEME_POOLS",
    "Pool",
    "display_name",
    "generate_session_seed",
    "get_pool",
    "ordered_terms",
    "seeded_pick",
    "seeded_shuffle",
]
