"""
Per-session discovery state.

Lives in the session store so it disappears with the session: the seed,
the ids already shown, the ids played, and how far each bucket has walked
through its term order.
"""

import random
from typing import Any, Iterable, Optional

from loguru import logger

from saafy.core.storage import KeyValueStore

from .seed import generate_session_seed

SEED_KEY = "discovery_seed"
SEEN_KEY = "discovery_seen"
CURSOR_KEY = "discovery_cursor"
PLAYED_KEY = "played_songs_session"


class DiscoverySession:
    """Session seed, seen-set, played-set and term cursors."""

    def __init__(self, store: KeyValueStore, rng: Optional[random.Random] = None):
        self.store = store
        self._rng = rng

    def _list(self, key: str) -> list[str]:
        value = self.store.get(key, [])
        if not isinstance(value, list):
            logger.debug(f"Resetting malformed session value {key!r}")
            return []
        return [str(item) for item in value]

    @property
    def seed(self) -> int:
        """The session seed, created on first use."""
        seed = self.store.get(SEED_KEY)
        if isinstance(seed, int) and not isinstance(seed, bool):
            return seed
        seed = generate_session_seed(rng=self._rng)
        self.store.set(SEED_KEY, seed)
        logger.debug(f"New discovery seed: {seed}")
        return seed

    def refresh(self) -> int:
        """New seed, empty seen-set and cursors. Returns the new seed."""
        seed = generate_session_seed(rng=self._rng)
        self.store.set(SEED_KEY, seed)
        self.store.remove(SEEN_KEY)
        self.store.remove(CURSOR_KEY)
        logger.info(f"Discovery refreshed (seed={seed})")
        return seed

    # Seen / played

    def seen_ids(self) -> set[str]:
        return set(self._list(SEEN_KEY))

    def played_ids(self) -> list[str]:
        """Songs played this session, in first-play order."""
        return self._list(PLAYED_KEY)

    def excluded_ids(self) -> set[str]:
        return self.seen_ids() | set(self.played_ids())

    def mark_seen(self, song_ids: Iterable[str]) -> None:
        seen = self._list(SEEN_KEY)
        known = set(seen)
        for song_id in song_ids:
            if song_id not in known:
                seen.append(song_id)
                known.add(song_id)
        self.store.set(SEEN_KEY, seen)

    def mark_played(self, song_id: Any) -> list[str]:
        if not song_id:
            return self.played_ids()
        played = self.played_ids()
        if str(song_id) not in played:
            played.append(str(song_id))
            self.store.set(PLAYED_KEY, played)
        return played

    def has_played(self, song_id: str) -> bool:
        return bool(song_id) and song_id in self.played_ids()

    def clear_played(self) -> None:
        self.store.remove(PLAYED_KEY)

    # Term cursors

    def _cursors(self) -> dict[str, int]:
        value = self.store.get(CURSOR_KEY, {})
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if isinstance(v, int)}

    def cursor(self, key: str) -> int:
        return self._cursors().get(key, 0)

    def advance_cursor(self, key: str, steps: int) -> None:
        if steps <= 0:
            return
        cursors = self._cursors()
        cursors[key] = cursors.get(key, 0) + steps
        self.store.set(CURSOR_KEY, cursors)
