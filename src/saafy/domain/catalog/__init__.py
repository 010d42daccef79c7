"""Catalog domain - remote song API access and canonical song models.

This domain handles:
- Async HTTP access to the song API (search, lookups, suggestions)
- Response caching and client-side rate limiting
- Normalizing inconsistent payloads into immutable models
"""

from .cache import ResponseCache
from .client import CatalogClient
from .exceptions import ApiError, ApiErrorCode, CatalogError, NetworkError
from .models import (
    AlbumDetails,
    AlbumRef,
    Artist,
    ArtistRef,
    DownloadVariant,
    GlobalSearchResults,
    ImageVariant,
    PlaylistDetails,
    SearchPage,
    Song,
)
from .normalize import normalize_song, normalize_songs

__all__ = [
    # Client
    "CatalogClient",
    "ResponseCache",
    # Errors
    "ApiError",
    "ApiErrorCode",
    "CatalogError",
    "NetworkError",
    # Models
    "AlbumDetails",
    "AlbumRef",
    "Artist",
    "ArtistRef",
    "DownloadVariant",
    "GlobalSearchResults",
    "ImageVariant",
    "PlaylistDetails",
    "SearchPage",
    "Song",
    # Normalization
    "normalize_song",
    "normalize_songs",
]
