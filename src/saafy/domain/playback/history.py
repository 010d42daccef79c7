"""
Listening history.

The most recently started songs, newest first, deduplicated by id and
persisted in the durable store.
"""

from loguru import logger

from saafy.core.storage import KeyValueStore
from saafy.domain.catalog.models import Song

HISTORY_KEY = "recently_played"
MAX_HISTORY_ENTRIES = 10


class ListeningHistory:
    """Recently played songs backed by a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        max_entries: int = MAX_HISTORY_ENTRIES,
        key: str = HISTORY_KEY,
    ):
        self.store = store
        self.max_entries = max(1, max_entries)
        self.key = key

    def entries(self) -> list[Song]:
        """Stored songs, newest first. Malformed entries are skipped."""
        raw = self.store.get(self.key, [])
        if not isinstance(raw, list):
            logger.warning(f"Discarding malformed listening history ({type(raw).__name__})")
            return []

        songs = []
        for item in raw:
            try:
                songs.append(Song.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.debug(f"Skipping malformed history entry: {item!r}")
        return songs[: self.max_entries]

    def record(self, song: Song) -> list[Song]:
        """Move `song` to the front, trimming to max_entries."""
        songs = [song] + [s for s in self.entries() if s.id != song.id]
        songs = songs[: self.max_entries]
        self.store.set(self.key, [s.to_dict() for s in songs])
        return songs

    def clear(self) -> None:
        self.store.remove(self.key)

    def __len__(self) -> int:
        return len(self.entries())
