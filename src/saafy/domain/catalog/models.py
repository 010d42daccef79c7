"""
Catalog domain models.

Canonical, immutable shapes for everything the song API returns. Raw API
payloads are converted into these at the client boundary (see normalize.py)
so nothing downstream deals with the API's shifting field names.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ImageVariant:
    """One artwork resolution (e.g. '50x50', '150x150', '500x500')."""

    quality: str
    url: str


@dataclass(frozen=True)
class DownloadVariant:
    """One audio bitrate (e.g. '96kbps', '320kbps')."""

    quality: str
    url: str


@dataclass(frozen=True)
class ArtistRef:
    """Artist credit attached to a song."""

    name: str
    id: Optional[str] = None
    url: Optional[str] = None
    image: Optional[str] = None


@dataclass(frozen=True)
class AlbumRef:
    """Album credit attached to a song."""

    name: str = "Unknown Album"
    id: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class Song:
    """A playable (or at least displayable) song.

    Image variants are ordered low to high resolution. `download_url` is the
    best direct audio URL, or None when the song has no playable source.
    """

    id: str
    name: str
    primary_artists: str = "Unknown Artist"
    artists: tuple[ArtistRef, ...] = ()
    album: AlbumRef = field(default_factory=AlbumRef)
    image: tuple[ImageVariant, ...] = ()
    duration: float = 0.0  # seconds
    download_url: Optional[str] = None
    download_urls: tuple[DownloadVariant, ...] = ()
    year: Optional[str] = None
    language: Optional[str] = None
    play_count: Optional[int] = None
    has_lyrics: bool = False
    url: Optional[str] = None

    @property
    def is_playable(self) -> bool:
        return bool(self.download_url)

    @property
    def artwork_url(self) -> Optional[str]:
        """Highest resolution artwork, if any."""
        for variant in reversed(self.image):
            if variant.url:
                return variant.url
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation (used for storage and the web API)."""
        return {
            "id": self.id,
            "name": self.name,
            "primary_artists": self.primary_artists,
            "artists": [
                {"name": a.name, "id": a.id, "url": a.url, "image": a.image}
                for a in self.artists
            ],
            "album": {"name": self.album.name, "id": self.album.id, "url": self.album.url},
            "image": [{"quality": i.quality, "url": i.url} for i in self.image],
            "duration": self.duration,
            "download_url": self.download_url,
            "download_urls": [
                {"quality": d.quality, "url": d.url} for d in self.download_urls
            ],
            "year": self.year,
            "language": self.language,
            "play_count": self.play_count,
            "has_lyrics": self.has_lyrics,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Song":
        """Rebuild a Song from `to_dict()` output.

        Raises:
            KeyError, TypeError, ValueError: If the data is malformed
        """
        album = data.get("album") or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or "Unknown"),
            primary_artists=str(data.get("primary_artists") or "Unknown Artist"),
            artists=tuple(
                ArtistRef(
                    name=str(a["name"]),
                    id=a.get("id"),
                    url=a.get("url"),
                    image=a.get("image"),
                )
                for a in data.get("artists") or []
            ),
            album=AlbumRef(
                name=str(album.get("name") or "Unknown Album"),
                id=album.get("id"),
                url=album.get("url"),
            ),
            image=tuple(
                ImageVariant(quality=str(i.get("quality", "")), url=str(i["url"]))
                for i in data.get("image") or []
            ),
            duration=float(data.get("duration") or 0),
            download_url=data.get("download_url"),
            download_urls=tuple(
                DownloadVariant(quality=str(d.get("quality", "")), url=str(d["url"]))
                for d in data.get("download_urls") or []
            ),
            year=data.get("year"),
            language=data.get("language"),
            play_count=data.get("play_count"),
            has_lyrics=bool(data.get("has_lyrics")),
            url=data.get("url"),
        )


@dataclass(frozen=True)
class Artist:
    """Artist profile (search hit or full artist page)."""

    id: str
    name: str
    role: str = "Artist"
    image: tuple[ImageVariant, ...] = ()
    type: str = "artist"
    url: Optional[str] = None
    follower_count: Optional[int] = None
    dominant_language: Optional[str] = None
    bio: Optional[str] = None
    top_songs: tuple[Song, ...] = ()


@dataclass(frozen=True)
class AlbumDetails:
    """Album search hit or full album with its songs."""

    id: str
    name: str
    primary_artists: str = "Unknown Artist"
    year: Optional[str] = None
    language: Optional[str] = None
    image: tuple[ImageVariant, ...] = ()
    url: Optional[str] = None
    song_count: int = 0
    songs: tuple[Song, ...] = ()


@dataclass(frozen=True)
class PlaylistDetails:
    """Playlist search hit or full playlist with its songs."""

    id: str
    name: str
    description: Optional[str] = None
    image: tuple[ImageVariant, ...] = ()
    url: Optional[str] = None
    song_count: int = 0
    songs: tuple[Song, ...] = ()


@dataclass(frozen=True)
class SearchPage:
    """One page of search results."""

    results: tuple[Any, ...] = ()
    total: int = 0
    start: int = 0


@dataclass(frozen=True)
class GlobalSearchResults:
    """Top hits across every result type."""

    songs: tuple[Song, ...] = ()
    albums: tuple[AlbumDetails, ...] = ()
    artists: tuple[Artist, ...] = ()
    playlists: tuple[PlaylistDetails, ...] = ()
