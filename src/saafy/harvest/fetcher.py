"""
Song fetcher.

Searches a public song-search API with curated English and Marathi queries
and appends one CSV row per new song until each language reaches its
target. Rows already in the output file are never written twice.
"""

import csv
import re
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import requests
from loguru import logger

from saafy.core.config import HarvestConfig
from saafy.core.output import log

from .queries import ENGLISH_QUERIES, KNOWN_ENGLISH_ARTISTS, MARATHI_QUERIES, MARATHI_QUERY_TERMS

CSV_HEADER = ["song_id", "song_name", "artist", "album", "year"]

_ASCII_TEXT = re.compile(r"^[a-z0-9\s\-&,.'()]+$", re.IGNORECASE)
_DEVANAGARI = re.compile("[\u0900-\u097F]")


@dataclass(frozen=True)
class SongRow:
    song_id: str
    song_name: str
    artist: str
    album: str
    year: str

    def as_row(self) -> list[str]:
        return [self.song_id, self.song_name, self.artist, self.album, self.year]


@dataclass
class FetchStats:
    existing: int = 0
    english: int = 0
    marathi: int = 0
    added: int = 0
    queries: int = 0
    failed_queries: int = 0

    @property
    def total(self) -> int:
        return self.existing + self.added


def _clean(value: Any) -> str:
    return re.sub(r'[",]', " ", str(value)).strip()


def parse_song_data(song: dict[str, Any], today: Optional[date] = None) -> SongRow:
    """Flatten one API song into CSV fields.

    Quotes and commas are blanked out. Missing artist reads 'Unknown',
    missing album reads 'Single', and a missing year falls back to the
    release date, then to the current year.
    """
    name = song.get("name") or song.get("title") or ""

    artist = song.get("primaryArtists") or song.get("singers")
    if not artist and isinstance(song.get("artist"), dict):
        artist = song["artist"].get("name")

    album = song.get("album")
    album_name = album.get("name") if isinstance(album, dict) else None
    album_name = album_name or song.get("albumName") or "Single"

    year = song.get("year")
    if not year and isinstance(song.get("releaseDate"), str):
        year = song["releaseDate"].split("-")[0]
    if not year:
        year = (today or date.today()).year

    return SongRow(
        song_id=str(song.get("id") or ""),
        song_name=_clean(name),
        artist=_clean(artist or "Unknown"),
        album=_clean(album_name),
        year=str(year),
    )


def detect_language(song: dict[str, Any], query: str = "") -> str:
    """Guess 'english', 'marathi' or 'other' from text and the search query.

    Known English artists win outright. Marathi-targeted queries accept
    everything else. Otherwise a plain-ASCII title and artist counts as
    English unless the query asked for Marathi.
    """
    row = parse_song_data(song)
    text = f"{row.song_name} {row.artist} {row.album}".lower()
    query = query.lower()

    if any(artist in text for artist in KNOWN_ENGLISH_ARTISTS):
        return "english"
    if any(term in query for term in MARATHI_QUERY_TERMS):
        return "marathi"
    if _ASCII_TEXT.match(f"{row.song_name} {row.artist}") and "marathi" not in query:
        return "english"
    return "other"


def _classify_existing(row: dict[str, str]) -> str:
    text = f"{row.get('song_name', '')} {row.get('artist', '')}"
    if _DEVANAGARI.search(text) or "marathi" in text.lower():
        return "marathi"
    if _ASCII_TEXT.match(text.strip() or "-"):
        return "english"
    return "other"


def load_existing(path: Path) -> tuple[set[str], dict[str, int]]:
    """Read song ids already in the CSV, plus a rough per-language count."""
    ids: set[str] = set()
    counts = {"english": 0, "marathi": 0, "other": 0}
    if not path.exists():
        return ids, counts

    with open(path, newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            song_id = (row.get("song_id") or "").strip()
            if not song_id or song_id in ids:
                continue
            ids.add(song_id)
            counts[_classify_existing(row)] += 1
    return ids, counts


def load_existing_ids(path: Path) -> set[str]:
    return load_existing(path)[0]


def search_songs(
    session: requests.Session,
    base_url: str,
    query: str,
    limit: int = 25,
    timeout: float = 15.0,
) -> list[dict[str, Any]]:
    """One search request. Failures are logged and read as no results."""
    try:
        response = session.get(
            f"{base_url.rstrip('/')}/search/songs",
            params={"query": query, "limit": limit},
            timeout=timeout,
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Search failed for {query!r}: {e}")
        return []

    data = payload.get("data") if isinstance(payload, dict) else None
    results = data.get("results") if isinstance(data, dict) else None
    return [song for song in results or [] if isinstance(song, dict)]


def _ensure_csv(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists() or path.stat().st_size == 0:
        with open(path, "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(CSV_HEADER)


def _run_phase(
    *,
    language: str,
    queries: Iterable[str],
    target: int,
    start_count: int,
    accept: Callable[[str], bool],
    seen: set[str],
    writer: Any,
    session: requests.Session,
    config: HarvestConfig,
    stats: FetchStats,
    sleep: Callable[[float], None],
) -> int:
    count = start_count
    for query in queries:
        if count >= target:
            log(f"Reached target of {target} {language} songs", level="success")
            break

        logger.info(f"[{count}/{target}] Searching {language}: {query!r}")
        results = search_songs(session, config.fetch_api_url, query, config.fetch_results_per_query)
        stats.queries += 1
        if not results:
            stats.failed_queries += 1

        added = 0
        for song in results:
            if count >= target:
                break
            row = parse_song_data(song)
            if not row.song_id or row.song_id in seen:
                continue
            if not accept(detect_language(song, query)):
                continue

            seen.add(row.song_id)
            writer.writerow(row.as_row())
            added += 1
            count += 1

        stats.added += added
        logger.debug(f"Added {added} songs for {query!r} ({language}: {count}/{target})")
        sleep(config.fetch_delay_seconds)
    return count


def fetch_songs(
    config: HarvestConfig,
    output_path: Path,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchStats:
    """Fill `output_path` with English songs, then Marathi songs.

    English results are kept only when detected as English. Marathi results
    are kept unless detected as English.
    """
    output_path = Path(output_path)
    seen, existing = load_existing(output_path)
    stats = FetchStats(existing=len(seen))
    if seen:
        log(
            f"Loaded {len(seen)} existing songs "
            f"(~{existing['english']} English, ~{existing['marathi']} Marathi)"
        )
    _ensure_csv(output_path)

    own_session = session is None
    session = session or requests.Session()
    try:
        with open(output_path, "a", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL)
            common = dict(seen=seen, writer=writer, session=session, config=config, stats=stats, sleep=sleep)

            english = _run_phase(
                language="English",
                queries=ENGLISH_QUERIES,
                target=config.english_target,
                start_count=existing["english"],
                accept=lambda lang: lang == "english",
                **common,
            )
            marathi = _run_phase(
                language="Marathi",
                queries=MARATHI_QUERIES,
                target=config.marathi_target,
                start_count=existing["marathi"],
                accept=lambda lang: lang != "english",
                **common,
            )
    finally:
        if own_session:
            session.close()

    stats.english = english
    stats.marathi = marathi
    log(
        f"Fetch complete: {english}/{config.english_target} English, "
        f"{marathi}/{config.marathi_target} Marathi, {stats.added} new "
        f"({stats.total} total) -> {output_path}",
        level="success",
    )
    return stats
