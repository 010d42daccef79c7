"""
Song API client.

Async wrapper around the saafy song API with input sanitization, a
client-side rate limit, response caching and typed errors. Every response
is normalized into catalog models before it leaves this module.
"""

from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from loguru import logger
from pydantic import ValidationError

from saafy.core.config import ApiConfig
from saafy.core.security import (
    RateLimiter,
    sanitize_id,
    sanitize_search_query,
    validate_pagination,
)

from .cache import MISSING, ResponseCache
from .exceptions import ApiError, ApiErrorCode, NetworkError
from .models import (
    AlbumDetails,
    Artist,
    GlobalSearchResults,
    PlaylistDetails,
    SearchPage,
    Song,
)
from .normalize import (
    normalize_album,
    normalize_albums,
    normalize_artist,
    normalize_artists,
    normalize_global_search,
    normalize_playlist,
    normalize_playlists,
    normalize_song,
    normalize_songs,
)
from .schemas import ApiEnvelope, PagedData

ARTIST_SORT_FIELDS = ("popularity", "latest", "alphabetical")
SORT_ORDERS = ("asc", "desc")

_STATUS_MESSAGES = {
    404: (ApiErrorCode.NOT_FOUND, "Resource not found"),
    429: (ApiErrorCode.RATE_LIMITED, "Too many requests. Please slow down."),
}


def _error_for_response(response: httpx.Response) -> ApiError:
    """Build a typed error for a non-2xx response."""
    status = response.status_code
    code, message = _STATUS_MESSAGES.get(
        status, (ApiErrorCode.SERVER_ERROR, f"HTTP Error: {status}")
    )
    if status >= 500:
        message = "Server error. Please try again later."

    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = str(body["message"])

    return ApiError(message, status, code)


class CatalogClient:
    """Client for the remote song/artist/album/playlist API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        detail_cache_ttl: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache or ResponseCache()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.detail_cache_ttl = detail_cache_ttl or self.cache.default_ttl * 2
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: ApiConfig, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "CatalogClient":
        return cls(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            cache=ResponseCache(
                max_size=config.cache_max_size, default_ttl=config.cache_ttl_seconds
            ),
            rate_limiter=RateLimiter(
                max_tokens=config.rate_limit_burst,
                refill_rate=config.rate_limit_per_second,
            ),
            detail_cache_ttl=config.detail_cache_ttl_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        *,
        use_cache: bool = True,
        cache_ttl: Optional[float] = None,
    ) -> ApiEnvelope:
        """GET an endpoint and parse its envelope.

        Raises:
            NetworkError: Connection failure or timeout
            ApiError: Non-2xx response, unparseable body or unsuccessful envelope
        """
        endpoint = f"{path}?{urlencode(params)}" if params else path

        if use_cache:
            cached = self.cache.get(endpoint)
            if cached is not MISSING:
                logger.debug(f"Cache hit: {endpoint}")
                return cached

        await self.rate_limiter.acquire()

        try:
            response = await self._http.get(endpoint)
        except httpx.TimeoutException as e:
            logger.warning(f"Request timeout: {endpoint}")
            raise NetworkError("Request timeout") from e
        except httpx.TransportError as e:
            logger.warning(f"Network error for {endpoint}: {e}")
            raise NetworkError(f"Network error occurred: {e}") from e

        if not response.is_success:
            error = _error_for_response(response)
            logger.warning(f"API error {error.status} for {endpoint}: {error.message}")
            raise error

        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ApiError(
                "Failed to parse response", response.status_code, ApiErrorCode.PARSE_ERROR
            ) from e

        if not envelope.success:
            raise ApiError(
                envelope.message or "Request was not successful",
                response.status_code,
                ApiErrorCode.VALIDATION_ERROR,
            )

        if use_cache:
            self.cache.set(endpoint, envelope, cache_ttl)
        return envelope

    async def _search(self, kind: str, query: str, page: int, limit: int) -> Optional[PagedData]:
        clean_query = sanitize_search_query(query)
        if not clean_query:
            return None
        valid_page, valid_limit = validate_pagination(page, limit)
        envelope = await self._request(
            f"/api/search/{kind}",
            {"query": clean_query, "page": valid_page, "limit": valid_limit},
        )
        data = envelope.data if isinstance(envelope.data, dict) else {}
        try:
            return PagedData.model_validate(
                {
                    "total": data.get("total") or 0,
                    "start": data.get("start") or 0,
                    "results": data.get("results") or [],
                }
            )
        except ValidationError as e:
            raise ApiError(
                "Failed to parse search results", 200, ApiErrorCode.PARSE_ERROR
            ) from e

    async def search_all(self, query: str) -> GlobalSearchResults:
        """Top hits for songs, albums, artists and playlists at once."""
        clean_query = sanitize_search_query(query)
        if not clean_query:
            return GlobalSearchResults()
        envelope = await self._request("/api/search", {"query": clean_query})
        return normalize_global_search(envelope.data)

    async def search_songs(self, query: str, page: int = 0, limit: int = 10) -> SearchPage:
        data = await self._search("songs", query, page, limit)
        if data is None:
            return SearchPage()
        return SearchPage(
            results=tuple(normalize_songs(data.results)), total=data.total, start=data.start
        )

    async def search_albums(self, query: str, page: int = 0, limit: int = 10) -> SearchPage:
        data = await self._search("albums", query, page, limit)
        if data is None:
            return SearchPage()
        return SearchPage(
            results=tuple(normalize_albums(data.results)), total=data.total, start=data.start
        )

    async def search_artists(self, query: str, page: int = 0, limit: int = 10) -> SearchPage:
        data = await self._search("artists", query, page, limit)
        if data is None:
            return SearchPage()
        return SearchPage(
            results=tuple(normalize_artists(data.results)), total=data.total, start=data.start
        )

    async def search_playlists(self, query: str, page: int = 0, limit: int = 10) -> SearchPage:
        data = await self._search("playlists", query, page, limit)
        if data is None:
            return SearchPage()
        return SearchPage(
            results=tuple(normalize_playlists(data.results)),
            total=data.total,
            start=data.start,
        )

    def _require_id(self, value: Any, kind: str) -> str:
        clean = sanitize_id(value)
        if not clean:
            raise ApiError(f"Invalid {kind} ID", 0, ApiErrorCode.INVALID_INPUT)
        return clean

    async def get_song(self, song_id: str) -> Optional[Song]:
        """Full song details (including audio URLs), or None if the API has none."""
        clean_id = self._require_id(song_id, "song")
        envelope = await self._request(
            f"/api/songs/{clean_id}", cache_ttl=self.detail_cache_ttl
        )
        data = envelope.data
        if isinstance(data, list):
            data = data[0] if data else None
        return normalize_song(data)

    async def get_song_suggestions(self, song_id: str, limit: int = 10) -> list[Song]:
        """Songs similar to `song_id`, for continuing playback."""
        clean_id = self._require_id(song_id, "song")
        _, valid_limit = validate_pagination(0, limit)
        envelope = await self._request(
            f"/api/songs/{clean_id}/suggestions", {"limit": valid_limit}
        )
        return normalize_songs(envelope.data)

    async def get_album(self, album_id: str) -> Optional[AlbumDetails]:
        clean_id = self._require_id(album_id, "album")
        envelope = await self._request(
            "/api/albums", {"id": clean_id}, cache_ttl=self.detail_cache_ttl
        )
        return normalize_album(envelope.data)

    async def get_artist(self, artist_id: str) -> Optional[Artist]:
        clean_id = self._require_id(artist_id, "artist")
        envelope = await self._request(
            f"/api/artists/{clean_id}", cache_ttl=self.detail_cache_ttl
        )
        return normalize_artist(envelope.data)

    async def get_artist_songs(
        self,
        artist_id: str,
        page: int = 0,
        sort_by: str = "popularity",
        sort_order: str = "desc",
    ) -> list[Song]:
        """One page of an artist's songs. Unknown sort options use the defaults."""
        clean_id = self._require_id(artist_id, "artist")
        valid_page, _ = validate_pagination(page, 10)
        if sort_by not in ARTIST_SORT_FIELDS:
            sort_by = "popularity"
        if sort_order not in SORT_ORDERS:
            sort_order = "desc"

        envelope = await self._request(
            f"/api/artists/{clean_id}/songs",
            {"page": valid_page, "sortBy": sort_by, "sortOrder": sort_order},
        )
        data = envelope.data if isinstance(envelope.data, dict) else {}
        return normalize_songs(data.get("songs") or data.get("results"))

    async def get_playlist(self, playlist_id: str) -> Optional[PlaylistDetails]:
        clean_id = self._require_id(playlist_id, "playlist")
        envelope = await self._request("/api/playlists", {"id": clean_id})
        return normalize_playlist(envelope.data)

    def clear_cache(self) -> None:
        self.cache.clear()
