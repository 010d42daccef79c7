"""
Album scraper.

Walks an album site's per-year listings and writes one CSV row per song
(`song_name,artist,album,year`). Requests that fail are retried with
exponential backoff; a site that keeps answering 403 aborts the run with
ScraperBlockedError.
"""

import csv
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from bs4 import BeautifulSoup
from loguru import logger

from saafy.core.config import HarvestConfig
from saafy.core.output import log

from .exceptions import ScraperBlockedError

CSV_HEADER = ["song_name", "artist", "album", "year"]

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
    "DNT": "1",
}

ALBUM_LINK_PATTERN = re.compile(r"^/album/[a-z0-9-]+-\d{4}$")
SONG_SELECTOR = '.song-title, .track-name, a[href*="/song_details/"]'
ROW_ARTIST_SELECTOR = '.artist, [class*="artist"]'
MAX_TITLE_LENGTH = 200
FALLBACK_ARTIST = "Various Artists"
REQUEST_TIMEOUT = 30


@dataclass(frozen=True)
class ScrapedSong:
    song_name: str
    artist: str
    album: str
    year: str

    def as_row(self) -> list[str]:
        return [self.song_name, self.artist, self.album, self.year]


@dataclass
class ScrapeStats:
    years: int = 0
    albums: int = 0
    songs: int = 0
    errors: int = 0


def clean_text(text: str) -> str:
    """Commas become spaces, whitespace runs collapse."""
    return re.sub(r"\s+", " ", text.replace(",", " ")).strip()


def create_session() -> requests.Session:
    session = requests.Session()
    session.headers.update(BROWSER_HEADERS)
    return session


def fetch_with_retry(
    session: requests.Session,
    url: str,
    max_retries: int = 3,
    delay: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """GET a page, retrying with `delay * 2**attempt` backoff.

    Raises:
        ScraperBlockedError: If the last attempt still got HTTP 403
        requests.RequestException: If the last attempt failed otherwise
    """
    attempts = max(1, max_retries)
    for attempt in range(attempts):
        try:
            response = session.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            response = getattr(e, "response", None)
            status = response.status_code if response is not None else None
            logger.warning(f"Attempt {attempt + 1}/{attempts} failed for {url}: {e} (status={status})")

            if attempt == attempts - 1:
                if status == 403:
                    raise ScraperBlockedError(url, attempts) from e
                raise

            wait = delay * 2**attempt
            logger.debug(f"Waiting {wait:.1f}s before retrying {url}")
            sleep(wait)

    raise AssertionError("unreachable")


def extract_album_urls(html: str, base_url: str) -> list[str]:
    """Album detail links on a year listing page, in page order."""
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for link in soup.select('a[href*="/album/"]'):
        href = link.get("href") or ""
        if ALBUM_LINK_PATTERN.match(href) and "/year/" not in href:
            url = f"{base_url.rstrip('/')}{href}"
            if url not in urls:
                urls.append(url)
    return urls


def _labelled_links(soup: BeautifulSoup, label: str) -> str:
    names: list[str] = []
    for bold in soup.find_all("b"):
        if label in bold.get_text() and bold.parent is not None:
            names.extend(a.get_text(strip=True) for a in bold.parent.find_all("a"))
    return ", ".join(name for name in names if name)


def parse_album_page(html: str, album_url: str) -> list[ScrapedSong]:
    """Songs listed on one album page.

    The album-level artist is the "Artist:" links, or the "Music Director:"
    links when there are none. An artist element in the song's own row wins
    over both.
    """
    soup = BeautifulSoup(html, "html.parser")

    heading = soup.find("h1")
    album = clean_text(heading.get_text()) if heading else ""
    year_match = re.search(r"-(\d{4})$", album_url)
    year = year_match.group(1) if year_match else ""

    album_artist = _labelled_links(soup, "Artist:") or _labelled_links(soup, "Music Director:")

    songs: list[ScrapedSong] = []
    seen: set[tuple[str, str]] = set()
    for element in soup.select(SONG_SELECTOR):
        title = element.get_text().strip()
        if not title or len(title) >= MAX_TITLE_LENGTH:
            continue

        artist = album_artist
        row = element.find_parent(["tr", "div"])
        if row is not None:
            row_artist = "".join(a.get_text() for a in row.select(ROW_ARTIST_SELECTOR)).strip()
            if row_artist:
                artist = row_artist

        song = ScrapedSong(
            song_name=clean_text(title),
            artist=clean_text(artist) or FALLBACK_ARTIST,
            album=album,
            year=year,
        )
        key = (song.song_name, song.artist)
        if key not in seen:
            seen.add(key)
            songs.append(song)
    return songs


def get_album_urls(
    session: requests.Session, config: HarvestConfig, year: int, sleep: Callable[[float], None] = time.sleep
) -> list[str]:
    html = fetch_with_retry(
        session,
        f"{config.scrape_base_url.rstrip('/')}/album/year/{year}",
        max_retries=config.scrape_max_retries,
        delay=config.scrape_delay_seconds,
        sleep=sleep,
    )
    urls = extract_album_urls(html, config.scrape_base_url)
    logger.info(f"Found {len(urls)} albums for {year}")
    return urls


def get_album_songs(
    session: requests.Session, config: HarvestConfig, album_url: str, sleep: Callable[[float], None] = time.sleep
) -> list[ScrapedSong]:
    sleep(config.scrape_delay_seconds)
    html = fetch_with_retry(
        session,
        album_url,
        max_retries=config.scrape_max_retries,
        delay=config.scrape_delay_seconds,
        sleep=sleep,
    )
    songs = parse_album_page(html, album_url)
    if songs:
        logger.debug(f"{songs[0].album}: {len(songs)} songs")
    return songs


def scrape_songs(
    config: HarvestConfig,
    output_path: Path,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ScrapeStats:
    """Scrape every album for each year in range into a fresh CSV.

    Per-year and per-album request failures are counted and skipped.

    Raises:
        ScraperBlockedError: The site blocked us; the run stops
    """
    start = config.scrape_start_year if start_year is None else start_year
    end = config.scrape_end_year if end_year is None else end_year
    if start > end:
        raise ValueError(f"start year {start} is after end year {end}")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    stats = ScrapeStats()

    own_session = session is None
    session = session or create_session()
    log(f"Scraping {config.scrape_base_url} for {start}-{end} -> {output_path}")
    try:
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)

            for year in range(start, end + 1):
                stats.years += 1
                try:
                    album_urls = get_album_urls(session, config, year, sleep=sleep)
                except requests.RequestException as e:
                    stats.errors += 1
                    logger.error(f"Failed to fetch albums for {year}: {e}")
                    continue
                stats.albums += len(album_urls)

                for album_url in album_urls:
                    try:
                        songs = get_album_songs(session, config, album_url, sleep=sleep)
                    except requests.RequestException as e:
                        stats.errors += 1
                        logger.error(f"Failed to scrape {album_url}: {e}")
                        continue
                    for song in songs:
                        writer.writerow(song.as_row())
                    stats.songs += len(songs)
                    f.flush()

                log(f"{year} complete | total songs: {stats.songs}")
    finally:
        if own_session:
            session.close()

    log(
        f"Scraping complete: {stats.years} years, {stats.albums} albums, "
        f"{stats.songs} songs, {stats.errors} errors",
        level="success",
    )
    return stats
