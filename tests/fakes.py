"""Test doubles and factories shared across the test suite."""

import asyncio
from typing import Optional

from saafy.domain.catalog.exceptions import NetworkError
from saafy.domain.catalog.models import AlbumRef, SearchPage, Song
from saafy.domain.playback.exceptions import AudioLoadError


def audio_url(song_id: str) -> str:
    return f"https://aac.saavncdn.com/{song_id}.mp4"


def make_song(
    song_id: str,
    playable: bool = True,
    name: Optional[str] = None,
    duration: float = 200.0,
) -> Song:
    """Song with a predictable audio URL (or none)."""
    return Song(
        id=song_id,
        name=name or f"Song {song_id}",
        primary_artists="Test Artist",
        album=AlbumRef(name="Test Album"),
        duration=duration,
        download_url=audio_url(song_id) if playable else None,
    )


class FakeAudioBackend:
    """AudioBackend double that records calls.

    Loads can be made to fail (`fail_urls`), hang forever (`hang_urls`) or
    wait for a test-controlled event (`gates`).
    """

    def __init__(self, duration: float = 200.0):
        self.duration = duration
        self.listener = None
        self.calls: list[tuple] = []
        self.loaded: list[str] = []
        self.volume: Optional[float] = None
        self.fail_urls: set[str] = set()
        self.hang_urls: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    def set_listener(self, listener) -> None:
        self.listener = listener

    async def load(self, url: str) -> float:
        self.calls.append(("load", url))
        self.loaded.append(url)
        if url in self.gates:
            await self.gates[url].wait()
        if url in self.hang_urls:
            await asyncio.sleep(3600)
        if url in self.fail_urls:
            raise AudioLoadError(f"cannot load {url}")
        return self.duration

    async def play(self) -> None:
        self.calls.append(("play",))

    async def pause(self) -> None:
        self.calls.append(("pause",))

    async def seek(self, seconds: float) -> None:
        self.calls.append(("seek", seconds))

    async def set_volume(self, volume: float) -> None:
        self.calls.append(("volume", volume))
        self.volume = volume

    async def stop(self) -> None:
        self.calls.append(("stop",))

    async def close(self) -> None:
        self.closed = True


class FakeCatalogClient:
    """Catalog double: search terms map to fixed songs, ids to details."""

    def __init__(
        self,
        results: Optional[dict[str, list[Song]]] = None,
        details: Optional[dict[str, Song]] = None,
        failing_terms: Optional[set[str]] = None,
    ):
        self.results = results or {}
        self.details = details or {}
        self.failing_terms = failing_terms or set()
        self.searches: list[str] = []
        self.lookups: list[str] = []

    async def search_songs(self, query: str, page: int = 0, limit: int = 10) -> SearchPage:
        self.searches.append(query)
        if query in self.failing_terms:
            raise NetworkError("Request timeout")
        songs = self.results.get(query, [])[:limit]
        return SearchPage(results=tuple(songs), total=len(songs))

    async def get_song(self, song_id: str) -> Optional[Song]:
        self.lookups.append(song_id)
        if song_id in self.failing_terms:
            raise NetworkError()
        return self.details.get(song_id)

    async def aclose(self) -> None:
        pass
