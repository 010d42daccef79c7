"""Tests for the album site scraper."""

import csv
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from saafy.core.config import HarvestConfig
from saafy.harvest.exceptions import ScraperBlockedError
from saafy.harvest.scraper import (
    BROWSER_HEADERS,
    CSV_HEADER,
    clean_text,
    create_session,
    extract_album_urls,
    fetch_with_retry,
    parse_album_page,
    scrape_songs,
)

BASE_URL = "https://site.test"

YEAR_PAGE = """
<html><body>
  <a href="/album/brahmastra-2022">Brahmastra</a>
  <a href="/album/year/2021">Previous year</a>
  <a href="/album/brahmastra-2022">Brahmastra again</a>
  <a href="/album/Upper-Case-2022">Bad link</a>
  <a href="/album/jawan-2022">Jawan</a>
</body></html>
"""

ALBUM_PAGE = """
<html><body>
  <h1>Brahmastra, Part One</h1>
  <p><b>Music Director:</b> <a href="/people/1">Pritam</a></p>
  <table>
    <tr><td><a href="/song_details/1">Kesariya</a></td></tr>
    <tr>
      <td><a href="/song_details/2">Deva Deva</a></td>
      <td class="artist">Arijit Singh, Jonita Gandhi</td>
    </tr>
    <tr><td><a href="/song_details/1">Kesariya</a></td></tr>
    <tr><td><a href="/song_details/3">   </a></td></tr>
  </table>
</body></html>
"""


def html_response(text: str, status: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    response.url = BASE_URL
    return response


class TestParsing:
    """Tests for HTML parsing."""

    def test_clean_text(self) -> None:
        assert clean_text("  Tum,  Hi\n Ho ") == "Tum Hi Ho"

    def test_extract_album_urls(self) -> None:
        urls = extract_album_urls(YEAR_PAGE, BASE_URL + "/")

        assert urls == [f"{BASE_URL}/album/brahmastra-2022", f"{BASE_URL}/album/jawan-2022"]

    def test_parse_album_page(self) -> None:
        songs = parse_album_page(ALBUM_PAGE, f"{BASE_URL}/album/brahmastra-2022")

        assert [s.as_row() for s in songs] == [
            ["Kesariya", "Pritam", "Brahmastra Part One", "2022"],
            ["Deva Deva", "Arijit Singh Jonita Gandhi", "Brahmastra Part One", "2022"],
        ]

    def test_artist_label_beats_music_director(self) -> None:
        html = """
        <h1>Album</h1>
        <div><b>Artist:</b> <a href="/a">Shreya Ghoshal</a> <a href="/b">Sonu Nigam</a></div>
        <p><b>Music Director:</b> <a href="/c">Pritam</a></p>
        <span class="song-title">Duet</span>
        """

        songs = parse_album_page(html, f"{BASE_URL}/album/album-2010")

        assert songs[0].artist == "Shreya Ghoshal Sonu Nigam"
        assert songs[0].year == "2010"

    def test_missing_credits_and_long_titles(self) -> None:
        html = f"""
        <h1>Album</h1>
        <span class="track-name">Short</span>
        <span class="track-name">{"x" * 250}</span>
        """

        songs = parse_album_page(html, f"{BASE_URL}/album/unknown")

        assert [s.as_row() for s in songs] == [["Short", "Various Artists", "Album", ""]]


class TestFetchWithRetry:
    """Tests for retry and backoff."""

    def test_success(self) -> None:
        session = MagicMock()
        session.get.return_value = html_response("<html>ok</html>")

        assert fetch_with_retry(session, BASE_URL) == "<html>ok</html>"
        session.get.assert_called_once_with(BASE_URL, timeout=30)

    def test_transient_failure_backs_off(self) -> None:
        session = MagicMock()
        session.get.side_effect = [
            requests.ConnectionError("reset"),
            requests.ConnectionError("reset"),
            html_response("ok"),
        ]
        sleeps = []

        assert fetch_with_retry(session, BASE_URL, max_retries=3, delay=2.0, sleep=sleeps.append) == "ok"
        assert sleeps == [2.0, 4.0]

    def test_persistent_403_is_blocked(self) -> None:
        session = MagicMock()
        session.get.return_value = html_response("denied", status=403)
        sleeps = []

        with pytest.raises(ScraperBlockedError) as exc_info:
            fetch_with_retry(session, BASE_URL, max_retries=3, delay=1.0, sleep=sleeps.append)

        assert exc_info.value.attempts == 3
        assert exc_info.value.url == BASE_URL
        assert sleeps == [1.0, 2.0]
        assert session.get.call_count == 3

    def test_other_errors_are_reraised(self) -> None:
        session = MagicMock()
        session.get.return_value = html_response("oops", status=500)

        with pytest.raises(requests.HTTPError):
            fetch_with_retry(session, BASE_URL, max_retries=2, sleep=lambda s: None)

    def test_session_uses_browser_headers(self) -> None:
        session = create_session()

        assert session.headers["User-Agent"] == BROWSER_HEADERS["User-Agent"]
        session.close()


class TestScrapeSongs:
    """Tests for a full scrape run."""

    def config(self) -> HarvestConfig:
        return HarvestConfig(scrape_base_url=BASE_URL, scrape_delay_seconds=0, scrape_max_retries=1)

    def test_writes_csv_and_counts_errors(self, tmp_path: Path) -> None:
        """Failed years and albums are counted and skipped."""
        pages = {
            f"{BASE_URL}/album/year/2022": html_response(YEAR_PAGE),
            f"{BASE_URL}/album/brahmastra-2022": html_response(ALBUM_PAGE),
            f"{BASE_URL}/album/jawan-2022": requests.ConnectionError("reset"),
            f"{BASE_URL}/album/year/2023": html_response("down", status=500),
        }

        def get(url, timeout=None):
            page = pages[url]
            if isinstance(page, Exception):
                raise page
            return page

        session = MagicMock()
        session.get.side_effect = get
        path = tmp_path / "songs.csv"

        stats = scrape_songs(self.config(), path, 2022, 2023, session=session, sleep=lambda s: None)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == CSV_HEADER
        assert rows[1:] == [
            ["Kesariya", "Pritam", "Brahmastra Part One", "2022"],
            ["Deva Deva", "Arijit Singh Jonita Gandhi", "Brahmastra Part One", "2022"],
        ]
        assert stats.years == 2
        assert stats.albums == 2
        assert stats.songs == 2
        assert stats.errors == 2
        session.close.assert_not_called()

    def test_block_stops_the_run(self, tmp_path: Path) -> None:
        session = MagicMock()
        session.get.return_value = html_response("denied", status=403)

        with pytest.raises(ScraperBlockedError):
            scrape_songs(self.config(), tmp_path / "songs.csv", 2020, 2021, session=session, sleep=lambda s: None)

        assert session.get.call_count == 1

    def test_rejects_reversed_range(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            scrape_songs(self.config(), tmp_path / "songs.csv", 2024, 2020, session=MagicMock())
