"""Normalize raw API payloads into catalog models.

The song API is inconsistent across endpoints and versions: names live in
`name` or `title`, artwork URLs in `url` or `link`, and audio in a
`downloadUrl` list or one of several flat fields. Everything is reduced to
the canonical models here.
"""

import html
from typing import Any, Iterable, Optional

from .models import (
    AlbumDetails,
    AlbumRef,
    Artist,
    ArtistRef,
    DownloadVariant,
    GlobalSearchResults,
    ImageVariant,
    PlaylistDetails,
    Song,
)

_FLAT_AUDIO_FIELDS = ("download_url", "downloadLink", "streamUrl", "previewUrl")


def decode_entities(value: Any) -> str:
    """Decode HTML entities such as &quot; and &amp; in API strings."""
    if value is None:
        return ""
    return html.unescape(str(value))


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0  # NaN


def _link(item: Any) -> str:
    """URL of an image/download entry, whichever key the API used."""
    if isinstance(item, dict):
        return str(item.get("url") or item.get("link") or "")
    if isinstance(item, str):
        return item
    return ""


def normalize_images(raw: Any) -> tuple[ImageVariant, ...]:
    """Artwork variants in API order (low to high resolution)."""
    if isinstance(raw, str):
        return (ImageVariant(quality="", url=raw),) if raw else ()
    if not isinstance(raw, list):
        return ()
    variants = []
    for item in raw:
        url = _link(item)
        if url:
            quality = item.get("quality", "") if isinstance(item, dict) else ""
            variants.append(ImageVariant(quality=str(quality), url=url))
    return tuple(variants)


def _download_variants(raw: Any) -> tuple[DownloadVariant, ...]:
    if not isinstance(raw, list):
        return ()
    variants = []
    for item in raw:
        url = _link(item)
        if url:
            quality = item.get("quality", "") if isinstance(item, dict) else ""
            variants.append(DownloadVariant(quality=str(quality), url=url))
    return tuple(variants)


def extract_audio_url(raw: dict[str, Any]) -> Optional[str]:
    """Best direct audio URL in a raw song payload.

    The last `downloadUrl` entry is the highest bitrate; flat fields are
    fallbacks for older payload shapes.
    """
    download = raw.get("downloadUrl")
    if isinstance(download, list) and download:
        url = _link(download[-1])
        if url:
            return url
    elif isinstance(download, str) and download:
        return download

    for key in _FLAT_AUDIO_FIELDS:
        value = raw.get(key)
        if isinstance(value, str) and value:
            return value

    media = raw.get("media")
    if isinstance(media, dict) and media.get("url"):
        return str(media["url"])
    return None


def _artist_refs(raw: dict[str, Any]) -> tuple[ArtistRef, ...]:
    artists = raw.get("artists")
    primary = artists.get("primary") if isinstance(artists, dict) else None
    if isinstance(primary, list) and primary:
        refs = []
        for artist in primary:
            if not isinstance(artist, dict):
                continue
            images = artist.get("image")
            image = None
            if isinstance(images, list) and len(images) > 1:
                image = _link(images[1]) or None
            refs.append(
                ArtistRef(
                    name=decode_entities(artist.get("name") or "Unknown"),
                    id=_optional_str(artist.get("id")),
                    url=_optional_str(artist.get("url")),
                    image=image,
                )
            )
        return tuple(refs)

    names = raw.get("primaryArtists")
    if isinstance(names, str) and names.strip():
        return tuple(
            ArtistRef(name=decode_entities(name.strip()))
            for name in names.split(",")
            if name.strip()
        )
    return ()


def _primary_artists(raw: dict[str, Any], refs: tuple[ArtistRef, ...]) -> str:
    names = raw.get("primaryArtists")
    if isinstance(names, str) and names.strip():
        return decode_entities(names.strip())
    if isinstance(names, list) and names:
        parts = [n.get("name", "") if isinstance(n, dict) else str(n) for n in names]
        joined = ", ".join(p for p in parts if p)
        if joined:
            return decode_entities(joined)
    if refs:
        return ", ".join(ref.name for ref in refs)
    return "Unknown Artist"


def _album_ref(raw: Any) -> AlbumRef:
    if isinstance(raw, dict):
        return AlbumRef(
            name=decode_entities(raw.get("name") or "Unknown Album"),
            id=_optional_str(raw.get("id")),
            url=_optional_str(raw.get("url")),
        )
    if isinstance(raw, str) and raw:
        return AlbumRef(name=decode_entities(raw))
    return AlbumRef()


def normalize_song(raw: Any) -> Optional[Song]:
    """Convert one raw song payload. Returns None for entries without an id."""
    if not isinstance(raw, dict) or not raw.get("id"):
        return None

    refs = _artist_refs(raw)
    return Song(
        id=str(raw["id"]),
        name=decode_entities(raw.get("name") or raw.get("title") or "Unknown"),
        primary_artists=_primary_artists(raw, refs),
        artists=refs,
        album=_album_ref(raw.get("album")),
        image=normalize_images(raw.get("image")),
        duration=_number(raw.get("duration")),
        download_url=extract_audio_url(raw),
        download_urls=_download_variants(raw.get("downloadUrl")),
        year=_optional_str(raw.get("year")),
        language=_optional_str(raw.get("language")),
        play_count=_optional_int(raw.get("playCount")),
        has_lyrics=bool(raw.get("hasLyrics")) and raw.get("hasLyrics") != "false",
        url=_optional_str(raw.get("url")),
    )


def normalize_songs(raw: Any) -> list[Song]:
    """Convert a list of raw songs, dropping invalid entries."""
    if not isinstance(raw, list):
        return []
    return [song for song in map(normalize_song, raw) if song is not None]


def normalize_artist(raw: Any) -> Optional[Artist]:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    return Artist(
        id=str(raw["id"]),
        name=decode_entities(raw.get("name") or raw.get("title") or "Unknown Artist"),
        role=str(raw.get("role") or "Artist"),
        image=normalize_images(raw.get("image")),
        type=str(raw.get("type") or "artist"),
        url=_optional_str(raw.get("url")),
        follower_count=_optional_int(raw.get("followerCount")),
        dominant_language=_optional_str(raw.get("dominantLanguage")),
        bio=_bio_text(raw.get("bio")),
        top_songs=tuple(normalize_songs(raw.get("topSongs"))),
    )


def _bio_text(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw or None
    if isinstance(raw, list):
        parts = [b.get("text", "") for b in raw if isinstance(b, dict)]
        text = "\n\n".join(p for p in parts if p)
        return text or None
    return None


def normalize_artists(raw: Any) -> list[Artist]:
    if not isinstance(raw, list):
        return []
    return [a for a in map(normalize_artist, raw) if a is not None]


def normalize_album(raw: Any) -> Optional[AlbumDetails]:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    songs = tuple(normalize_songs(raw.get("songs")))
    refs = _artist_refs(raw)
    artists = _primary_artists(raw, refs)
    if artists == "Unknown Artist" and isinstance(raw.get("artist"), str):
        artists = decode_entities(raw["artist"])
    return AlbumDetails(
        id=str(raw["id"]),
        name=decode_entities(raw.get("name") or raw.get("title") or "Unknown Album"),
        primary_artists=artists,
        year=_optional_str(raw.get("year")),
        language=_optional_str(raw.get("language")),
        image=normalize_images(raw.get("image")),
        url=_optional_str(raw.get("url")),
        song_count=_optional_int(raw.get("songCount")) or len(songs),
        songs=songs,
    )


def normalize_albums(raw: Any) -> list[AlbumDetails]:
    if not isinstance(raw, list):
        return []
    return [a for a in map(normalize_album, raw) if a is not None]


def normalize_playlist(raw: Any) -> Optional[PlaylistDetails]:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    songs = tuple(normalize_songs(raw.get("songs")))
    return PlaylistDetails(
        id=str(raw["id"]),
        name=decode_entities(raw.get("name") or raw.get("title") or "Untitled Playlist"),
        description=_optional_str(raw.get("description")),
        image=normalize_images(raw.get("image")),
        url=_optional_str(raw.get("url")),
        song_count=_optional_int(raw.get("songCount")) or len(songs),
        songs=songs,
    )


def normalize_playlists(raw: Any) -> list[PlaylistDetails]:
    if not isinstance(raw, list):
        return []
    return [p for p in map(normalize_playlist, raw) if p is not None]


def _section_results(data: dict[str, Any], key: str) -> Iterable[Any]:
    section = data.get(key)
    if isinstance(section, dict):
        return section.get("results") or []
    if isinstance(section, list):
        return section
    return []


def normalize_global_search(data: Any) -> GlobalSearchResults:
    """Convert the combined /api/search payload."""
    if not isinstance(data, dict):
        return GlobalSearchResults()
    return GlobalSearchResults(
        songs=tuple(normalize_songs(list(_section_results(data, "songs")))),
        albums=tuple(normalize_albums(list(_section_results(data, "albums")))),
        artists=tuple(normalize_artists(list(_section_results(data, "artists")))),
        playlists=tuple(normalize_playlists(list(_section_results(data, "playlists")))),
    )
