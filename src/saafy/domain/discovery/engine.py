"""
Discovery engine.

Builds "For You", per-language and themed buckets from curated search
terms without any backend personalization. The session seed fixes the
order in which each bucket walks its terms; a session seen-set keeps songs
from repeating until a bucket's pool runs dry.

Search failures never escape: a failed or empty term falls through to the
next one, and a bucket whose every attempted term fails resolves empty.
"""

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from loguru import logger

from saafy.core.events import EventEmitter
from saafy.domain.catalog.exceptions import CatalogError
from saafy.domain.catalog.models import Song

from .pools import LANGUAGE_POOLS, THEME_POOLS, Pool, display_name
from .seed import ordered_terms, seeded_pick, seeded_shuffle
from .session import DiscoverySession

FOR_YOU_KEY = "for_you"
FOR_YOU_TITLE = "For You"
MAX_FETCH_LIMIT = 50

BucketCallback = Callable[["Bucket"], None]


@dataclass(frozen=True)
class Bucket:
    """One row of discovery content."""

    key: str
    title: str
    songs: tuple[Song, ...] = ()
    loading: bool = False
    queries: tuple[str, ...] = ()
    error: Optional[str] = None

    @classmethod
    def pending(cls, key: str) -> "Bucket":
        """Placeholder shown while a bucket is still loading."""
        return cls(key=key, title=display_name(key), loading=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "songs": [song.to_dict() for song in self.songs],
            "loading": self.loading,
            "queries": list(self.queries),
            "error": self.error,
        }


@dataclass
class _Collected:
    """Raw candidates gathered for a bucket before final de-duplication."""

    fresh: list[Song] = field(default_factory=list)
    repeats: list[Song] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    error: Optional[str] = None

    def merge(self, other: "_Collected") -> None:
        known = {s.id for s in self.fresh} | {s.id for s in self.repeats}
        for song in other.fresh:
            if song.id not in known:
                self.fresh.append(song)
                known.add(song.id)
        for song in other.repeats:
            if song.id not in known:
                self.repeats.append(song)
                known.add(song.id)
        self.queries.extend(other.queries)
        if not self.error:
            self.error = other.error


class DiscoveryEngine:
    """Session-seeded content buckets backed by song search."""

    def __init__(
        self,
        catalog: Any,
        session: DiscoverySession,
        max_term_attempts: int = 5,
        for_you_limit: int = 12,
        songs_per_bucket: int = 8,
        languages_per_mix: int = 3,
    ):
        self.catalog = catalog
        self.session = session
        self.max_term_attempts = max(1, max_term_attempts)
        self.for_you_limit = for_you_limit
        self.songs_per_bucket = songs_per_bucket
        self.languages_per_mix = max(1, languages_per_mix)
        self.events = EventEmitter()

    # ------------------------------------------------------------------
    # Catalog of buckets
    # ------------------------------------------------------------------

    @staticmethod
    def available_languages() -> list[str]:
        return list(LANGUAGE_POOLS)

    @staticmethod
    def available_themes() -> list[str]:
        return list(THEME_POOLS)

    @staticmethod
    def display_name(key: str) -> str:
        if key == FOR_YOU_KEY:
            return FOR_YOU_TITLE
        return display_name(key)

    def refresh_discovery(self) -> int:
        """Start a fresh selection: new seed, empty seen-set."""
        seed = self.session.refresh()
        self.events.emit("refresh", seed)
        return seed

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    async def _collect(self, pool: Pool, want: int) -> _Collected:
        """Walk the pool's terms in session order until `want` fresh songs are found."""
        collected = _Collected()
        terms = ordered_terms(self.session.seed, pool.key, pool.queries)
        if not terms:
            collected.error = "No search terms"
            return collected

        start = self.session.cursor(pool.key)
        attempts = min(self.max_term_attempts, len(terms))
        fetch_limit = min(MAX_FETCH_LIMIT, max(want * 2, 10))
        known: set[str] = set()
        used = 0

        for offset in range(attempts):
            term = terms[(start + offset) % len(terms)]
            used += 1
            try:
                page = await self.catalog.search_songs(term, 0, fetch_limit)
            except CatalogError as e:
                logger.warning(f"Discovery search failed for {term!r}: {e}")
                collected.error = str(e)
                continue

            songs = list(page.results)
            if not songs:
                logger.debug(f"No results for {term!r}, trying next term")
                continue

            collected.queries.append(term)
            excluded = self.session.excluded_ids()
            for song in songs:
                if song.id in known:
                    continue
                known.add(song.id)
                if song.id in excluded:
                    collected.repeats.append(song)
                else:
                    collected.fresh.append(song)

            if len(collected.fresh) >= want:
                break

        self.session.advance_cursor(pool.key, used)
        if not collected.fresh and not collected.repeats and not collected.error:
            collected.error = "No results"
        return collected

    def _finalize(
        self, key: str, title: str, collected: _Collected, limit: int, shuffle_seed: Optional[int] = None
    ) -> Bucket:
        """Apply the seen-set, mark what is returned and announce the bucket.

        Runs without awaiting, so concurrently finishing buckets see each
        other's marks.
        """
        excluded = self.session.excluded_ids()
        fresh = [s for s in collected.fresh if s.id not in excluded]
        if shuffle_seed is not None:
            fresh = seeded_shuffle(fresh, shuffle_seed)
        songs = fresh[:limit]

        if not songs:
            # Pool exhausted: repeats beat an empty row
            repeats = collected.repeats + [s for s in collected.fresh if s.id in excluded]
            if shuffle_seed is not None:
                repeats = seeded_shuffle(repeats, shuffle_seed)
            songs = repeats[:limit]
            if songs:
                logger.info(f"Discovery pool for {key!r} exhausted; allowing repeats")

        self.session.mark_seen(s.id for s in songs)
        bucket = Bucket(
            key=key,
            title=title,
            songs=tuple(songs),
            loading=False,
            queries=tuple(collected.queries),
            error=None if songs else collected.error,
        )
        self.events.emit("bucket", bucket)
        return bucket

    async def _pool_bucket(self, pool: Pool, limit: int) -> Bucket:
        collected = await self._collect(pool, limit)
        return self._finalize(pool.key, pool.title, collected, limit)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def get_for_you_mix(self, limit: Optional[int] = None) -> Bucket:
        """Seed-picked languages mixed into one shuffled row."""
        limit = self.for_you_limit if limit is None else max(0, limit)
        seed = self.session.seed
        languages = seeded_pick(self.available_languages(), self.languages_per_mix, seed)
        per_language = max(1, math.ceil(limit / len(languages))) if limit else 1

        results = await asyncio.gather(
            *(self._collect(LANGUAGE_POOLS[lang], per_language) for lang in languages)
        )
        combined = _Collected()
        for result in results:
            combined.merge(result)

        return self._finalize(FOR_YOU_KEY, FOR_YOU_TITLE, combined, limit, shuffle_seed=seed + 999)

    async def get_discovery_songs(self, language: str, limit: Optional[int] = None) -> Bucket:
        limit = self.songs_per_bucket if limit is None else max(0, limit)
        pool = LANGUAGE_POOLS.get(language)
        if pool is None:
            return Bucket(key=language, title=language, error="Unknown language")
        return await self._pool_bucket(pool, limit)

    async def get_themed_songs(self, theme: str, limit: Optional[int] = None) -> Bucket:
        limit = self.songs_per_bucket if limit is None else max(0, limit)
        pool = THEME_POOLS.get(theme)
        if pool is None:
            return Bucket(key=theme, title=theme, error="Unknown theme")
        return await self._pool_bucket(pool, limit)

    async def _fan_out(
        self, keys: list[str], fetch: Callable, limit: Optional[int], on_bucket: Optional[BucketCallback]
    ) -> dict[str, Bucket]:
        async def run(key: str) -> Bucket:
            bucket = await fetch(key, limit)
            if on_bucket is not None:
                on_bucket(bucket)
            return bucket

        buckets = await asyncio.gather(*(run(key) for key in keys))
        return {bucket.key: bucket for bucket in buckets}

    async def get_all_discovery_content(
        self, limit_per_bucket: Optional[int] = None, on_bucket: Optional[BucketCallback] = None
    ) -> dict[str, Bucket]:
        """Every language bucket, fetched concurrently.

        `on_bucket` is called as each bucket finishes, so callers can render
        progressively.
        """
        return await self._fan_out(
            self.available_languages(), self.get_discovery_songs, limit_per_bucket, on_bucket
        )

    async def get_all_themed_content(
        self, limit_per_bucket: Optional[int] = None, on_bucket: Optional[BucketCallback] = None
    ) -> dict[str, Bucket]:
        """Every theme bucket, fetched concurrently."""
        return await self._fan_out(
            self.available_themes(), self.get_themed_songs, limit_per_bucket, on_bucket
        )
