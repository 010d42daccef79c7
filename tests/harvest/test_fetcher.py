"""Tests for the API song fetcher."""

import csv
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import requests

from saafy.core.config import HarvestConfig
from saafy.harvest.fetcher import (
    CSV_HEADER,
    detect_language,
    fetch_songs,
    load_existing,
    parse_song_data,
    search_songs,
)
from saafy.harvest.queries import ENGLISH_QUERIES, MARATHI_QUERIES


def json_response(payload) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    return response


def results(*songs: dict) -> dict:
    return {"success": True, "data": {"results": list(songs)}}


def api_song(song_id: str, name: str, artist: str) -> dict:
    return {"id": song_id, "name": name, "primaryArtists": artist, "album": {"name": "Single"}, "year": "2020"}


def read_rows(path: Path) -> list[list[str]]:
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def query_session(answers: dict[str, dict]) -> MagicMock:
    """Session whose search answers depend on the query parameter."""
    session = MagicMock()

    def get(url, params=None, timeout=None):
        return json_response(answers.get(params["query"], results()))

    session.get.side_effect = get
    return session


class TestParseSongData:
    """Tests for parse_song_data."""

    def test_primary_fields(self) -> None:
        row = parse_song_data(
            {"id": 5, "name": 'Say "Hi", Now', "primaryArtists": "A, B", "album": {"name": "Alb"}, "year": "2019"}
        )

        assert row.as_row() == ["5", "Say  Hi   Now", "A  B", "Alb", "2019"]

    def test_fallback_fields(self) -> None:
        row = parse_song_data(
            {"id": "x", "title": "T", "singers": "S", "albumName": "AN", "releaseDate": "2015-06-01"}
        )

        assert row.as_row() == ["x", "T", "S", "AN", "2015"]

    def test_defaults(self) -> None:
        row = parse_song_data({"id": "y", "name": "N", "artist": {"name": "Solo"}}, today=date(2030, 1, 1))

        assert row.artist == "Solo"
        assert row.album == "Single"
        assert row.year == "2030"

    def test_empty_song(self) -> None:
        row = parse_song_data({})

        assert row.song_id == ""
        assert row.artist == "Unknown"


class TestDetectLanguage:
    """Tests for detect_language."""

    def test_known_english_artist_wins(self) -> None:
        song = {"name": "Shape of You", "primaryArtists": "Ed Sheeran"}
        assert detect_language(song, "marathi hits") == "english"

    def test_marathi_query(self) -> None:
        song = {"name": "Zingaat", "primaryArtists": "Ajay-Atul"}
        assert detect_language(song, "Sairat songs") == "marathi"

    def test_ascii_text_is_english(self) -> None:
        song = {"name": "Some Song", "primaryArtists": "Some Band"}
        assert detect_language(song, "English rock songs") == "english"

    def test_non_latin_is_other(self) -> None:
        song = {"name": "तुझी माझी", "primaryArtists": "Gayak"}
        assert detect_language(song, "love songs") == "other"


class TestLoadExisting:
    def test_missing_file(self, tmp_path: Path) -> None:
        ids, counts = load_existing(tmp_path / "none.csv")

        assert ids == set()
        assert counts == {"english": 0, "marathi": 0, "other": 0}

    def test_ids_and_counts(self, tmp_path: Path) -> None:
        path = tmp_path / "songs.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            writer.writerow(["1", "Hello", "Adele", "25", "2015"])
            writer.writerow(["2", "Marathi Gaana", "Someone", "Single", "2019"])
            writer.writerow(["3", "गाणे", "Gayak", "Single", "2018"])
            writer.writerow(["1", "Hello", "Adele", "25", "2015"])
            writer.writerow(["", "No id", "Nobody", "Single", "2000"])

        ids, counts = load_existing(path)

        assert ids == {"1", "2", "3"}
        assert counts == {"english": 1, "marathi": 2, "other": 0}


class TestSearchSongs:
    """Tests for a single search request."""

    def test_returns_song_dicts(self) -> None:
        session = MagicMock()
        session.get.return_value = json_response(results({"id": "a"}, "junk"))

        songs = search_songs(session, "https://api.test/", "hits", limit=7)

        assert songs == [{"id": "a"}]
        session.get.assert_called_once_with(
            "https://api.test/search/songs", params={"query": "hits", "limit": 7}, timeout=15.0
        )

    def test_request_failure_reads_as_empty(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")

        assert search_songs(session, "https://api.test", "hits") == []

    def test_bad_json_reads_as_empty(self) -> None:
        session = MagicMock()
        session.get.return_value.json.side_effect = ValueError("not json")

        assert search_songs(session, "https://api.test", "hits") == []

    def test_unexpected_shape(self) -> None:
        session = MagicMock()
        session.get.return_value = json_response({"data": []})

        assert search_songs(session, "https://api.test", "hits") == []


class TestFetchSongs:
    """Tests for the two-phase fetch run."""

    def config(self) -> HarvestConfig:
        return HarvestConfig(
            fetch_api_url="https://api.test", fetch_delay_seconds=0, english_target=2, marathi_target=1
        )

    def answers(self) -> dict[str, dict]:
        return {
            ENGLISH_QUERIES[0]: results(
                api_song("e1", "Shape of You", "Ed Sheeran"),
                api_song("e2", "Perfect", "Ed Sheeran"),
                api_song("e3", "Photograph", "Ed Sheeran"),
            ),
            MARATHI_QUERIES[0]: results(
                api_song("e1", "Shape of You", "Ed Sheeran"),
                api_song("m1", "Mogra Phulala", "Lata Mangeshkar"),
            ),
        }

    def test_fresh_run_fills_targets(self, tmp_path: Path) -> None:
        path = tmp_path / "out" / "songs.csv"
        session = query_session(self.answers())
        sleeps = []

        stats = fetch_songs(self.config(), path, session=session, sleep=sleeps.append)

        rows = read_rows(path)
        assert rows[0] == CSV_HEADER
        assert [r[0] for r in rows[1:]] == ["e1", "e2", "m1"]
        assert rows[3] == ["m1", "Mogra Phulala", "Lata Mangeshkar", "Single", "2020"]
        assert stats.english == 2
        assert stats.marathi == 1
        assert stats.added == 3
        assert stats.queries == 2
        assert stats.total == 3
        assert sleeps == [0, 0]
        session.close.assert_not_called()

    def test_resume_skips_existing_rows(self, tmp_path: Path) -> None:
        """Songs already in the file are neither rewritten nor recounted."""
        path = tmp_path / "songs.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            writer.writerow(["e2", "Perfect", "Ed Sheeran", "Single", "2020"])

        stats = fetch_songs(self.config(), path, session=query_session(self.answers()), sleep=lambda s: None)

        ids = [r[0] for r in read_rows(path)[1:]]
        assert ids == ["e2", "e1", "m1"]
        assert stats.existing == 1
        assert stats.added == 2
        assert stats.total == 3

    def test_failed_queries_are_counted(self, tmp_path: Path) -> None:
        config = self.config()
        config.english_target = 1
        config.marathi_target = 0
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")

        stats = fetch_songs(config, tmp_path / "songs.csv", session=session, sleep=lambda s: None)

        assert stats.queries == len(ENGLISH_QUERIES)
        assert stats.failed_queries == len(ENGLISH_QUERIES)
        assert stats.added == 0
        assert read_rows(tmp_path / "songs.csv") == [CSV_HEADER]
