"""Offline tools that harvest song lists into CSV files."""

from .exceptions import HarvestError, ScraperBlockedError
from .fetcher import FetchStats, detect_language, fetch_songs, load_existing_ids, parse_song_data
from .scraper import ScrapeStats, fetch_with_retry, parse_album_page, scrape_songs

__all__ = [
    "FetchStats",
    "HarvestError",
    "ScrapeStats",
    "ScraperBlockedError",
    "detect_language",
    "fetch_songs",
    "fetch_with_retry",
    "load_existing_ids",
    "parse_album_page",
    "parse_song_data",
    "scrape_songs",
]
