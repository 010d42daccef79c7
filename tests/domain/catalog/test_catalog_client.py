"""Tests for the song API client against a mocked transport."""

from typing import Callable

import httpx
import pytest

from saafy.domain.catalog.client import CatalogClient
from saafy.domain.catalog.exceptions import ApiError, ApiErrorCode, NetworkError

BASE_URL = "https://songs.test"


def song_payload(song_id: str, **extra) -> dict:
    payload = {
        "id": song_id,
        "name": f"Song {song_id}",
        "downloadUrl": [{"quality": "320kbps", "url": f"https://aac.saavncdn.com/{song_id}.mp4"}],
    }
    payload.update(extra)
    return payload


class Recorder:
    """MockTransport handler that records requests and replays a responder."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


def make_client(responder: Callable[[httpx.Request], httpx.Response]) -> tuple[CatalogClient, Recorder]:
    recorder = Recorder(responder)
    client = CatalogClient(BASE_URL, transport=httpx.MockTransport(recorder))
    return client, recorder


def ok(data) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, json={"success": True, "data": data})


class TestSearch:
    """Tests for the search endpoints."""

    @pytest.mark.anyio
    async def test_search_songs_sanitizes_and_paginates(self) -> None:
        client, recorder = make_client(
            ok({"total": 42, "start": 10, "results": [song_payload("a"), {"no": "id"}]})
        )

        page = await client.search_songs("  kesariya';  ", page=-1, limit=500)

        request = recorder.requests[0]
        assert request.url.path == "/api/search/songs"
        assert request.url.params["query"] == "kesariya"
        assert request.url.params["page"] == "0"
        assert request.url.params["limit"] == "50"
        assert [s.id for s in page.results] == ["a"]
        assert page.total == 42
        assert page.start == 10
        await client.aclose()

    @pytest.mark.anyio
    async def test_empty_query_skips_request(self) -> None:
        client, recorder = make_client(ok({}))

        page = await client.search_songs("';\\")

        assert page.results == ()
        assert recorder.requests == []
        await client.aclose()

    @pytest.mark.anyio
    async def test_responses_are_cached(self) -> None:
        client, recorder = make_client(ok({"results": [song_payload("a")]}))

        await client.search_songs("hits")
        await client.search_songs("hits")

        assert len(recorder.requests) == 1
        client.clear_cache()
        await client.search_songs("hits")
        assert len(recorder.requests) == 2
        await client.aclose()

    @pytest.mark.anyio
    async def test_search_all(self) -> None:
        client, _ = make_client(
            ok(
                {
                    "songs": {"results": [song_payload("a")]},
                    "albums": {"results": [{"id": "al", "title": "Album"}]},
                    "artists": {"results": [{"id": "ar", "title": "Artist"}]},
                    "playlists": {"results": [{"id": "pl", "title": "Mix"}]},
                }
            )
        )

        results = await client.search_all("a")

        assert results.songs[0].id == "a"
        assert results.albums[0].name == "Album"
        assert results.artists[0].name == "Artist"
        assert results.playlists[0].name == "Mix"
        await client.aclose()

    @pytest.mark.anyio
    async def test_search_albums_artists_playlists(self) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            kind = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(
                200, json={"success": True, "data": {"total": 1, "results": [{"id": kind, "name": kind}]}}
            )

        client, _ = make_client(responder)

        assert (await client.search_albums("x")).results[0].id == "albums"
        assert (await client.search_artists("x")).results[0].id == "artists"
        assert (await client.search_playlists("x")).results[0].id == "playlists"
        await client.aclose()


class TestLookups:
    """Tests for id-based lookups."""

    @pytest.mark.anyio
    async def test_get_song_takes_first_of_list(self) -> None:
        client, recorder = make_client(ok([song_payload("abc")]))

        song = await client.get_song("abc")

        assert recorder.requests[0].url.path == "/api/songs/abc"
        assert song.download_url == "https://aac.saavncdn.com/abc.mp4"
        await client.aclose()

    @pytest.mark.anyio
    async def test_get_song_empty_list(self) -> None:
        client, _ = make_client(ok([]))
        assert await client.get_song("abc") is None
        await client.aclose()

    @pytest.mark.anyio
    async def test_invalid_id_is_rejected_locally(self) -> None:
        client, recorder = make_client(ok({}))

        with pytest.raises(ApiError) as exc_info:
            await client.get_song("../..")

        assert exc_info.value.code == ApiErrorCode.INVALID_INPUT
        assert recorder.requests == []
        await client.aclose()

    @pytest.mark.anyio
    async def test_suggestions(self) -> None:
        client, recorder = make_client(ok([song_payload("b"), song_payload("c")]))

        songs = await client.get_song_suggestions("a", limit=5)

        assert recorder.requests[0].url.path == "/api/songs/a/suggestions"
        assert recorder.requests[0].url.params["limit"] == "5"
        assert [s.id for s in songs] == ["b", "c"]
        await client.aclose()

    @pytest.mark.anyio
    async def test_album_and_playlist_use_query_id(self) -> None:
        client, recorder = make_client(ok({"id": "42", "name": "Thing", "songs": [song_payload("s")]}))

        album = await client.get_album("42")
        playlist = await client.get_playlist("42")

        assert [r.url.path for r in recorder.requests] == ["/api/albums", "/api/playlists"]
        assert recorder.requests[0].url.params["id"] == "42"
        assert album.song_count == 1
        assert playlist.songs[0].id == "s"
        await client.aclose()

    @pytest.mark.anyio
    async def test_artist_songs_defaults_bad_sort(self) -> None:
        client, recorder = make_client(ok({"total": 1, "songs": [song_payload("s")]}))

        songs = await client.get_artist_songs("459320", page=2, sort_by="random", sort_order="up")

        params = recorder.requests[0].url.params
        assert params["page"] == "2"
        assert params["sortBy"] == "popularity"
        assert params["sortOrder"] == "desc"
        assert [s.id for s in songs] == ["s"]
        await client.aclose()

    @pytest.mark.anyio
    async def test_get_artist(self) -> None:
        client, _ = make_client(ok({"id": "459320", "name": "Arijit Singh", "topSongs": [song_payload("t")]}))

        artist = await client.get_artist("459320")

        assert artist.name == "Arijit Singh"
        assert artist.top_songs[0].id == "t"
        await client.aclose()


class TestErrors:
    """Tests for error mapping."""

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "status, code, message",
        [
            (404, ApiErrorCode.NOT_FOUND, "Resource not found"),
            (429, ApiErrorCode.RATE_LIMITED, "Too many requests. Please slow down."),
            (503, ApiErrorCode.SERVER_ERROR, "Server error. Please try again later."),
            (418, ApiErrorCode.SERVER_ERROR, "HTTP Error: 418"),
        ],
    )
    async def test_status_codes(self, status: int, code: ApiErrorCode, message: str) -> None:
        client, _ = make_client(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(ApiError) as exc_info:
            await client.get_song("abc")

        assert exc_info.value.status == status
        assert exc_info.value.code == code
        assert exc_info.value.message == message
        await client.aclose()

    @pytest.mark.anyio
    async def test_body_message_wins(self) -> None:
        client, _ = make_client(lambda request: httpx.Response(400, json={"message": "bad query"}))

        with pytest.raises(ApiError, match="bad query"):
            await client.search_songs("x")
        await client.aclose()

    @pytest.mark.anyio
    async def test_unparseable_body(self) -> None:
        client, _ = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ApiError) as exc_info:
            await client.get_song("abc")

        assert exc_info.value.code == ApiErrorCode.PARSE_ERROR
        await client.aclose()

    @pytest.mark.anyio
    async def test_unsuccessful_envelope(self) -> None:
        client, _ = make_client(
            lambda request: httpx.Response(200, json={"success": False, "message": "Song not found"})
        )

        with pytest.raises(ApiError) as exc_info:
            await client.get_song("abc")

        assert exc_info.value.code == ApiErrorCode.VALIDATION_ERROR
        assert exc_info.value.message == "Song not found"
        await client.aclose()

    @pytest.mark.anyio
    async def test_timeout_is_network_error(self) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client, _ = make_client(responder)

        with pytest.raises(NetworkError, match="Request timeout"):
            await client.get_song("abc")
        await client.aclose()

    @pytest.mark.anyio
    async def test_connection_failure_is_network_error(self) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client, _ = make_client(responder)

        with pytest.raises(NetworkError) as exc_info:
            await client.search_songs("x")

        assert exc_info.value.to_dict()["code"] == "NETWORK_ERROR"
        await client.aclose()

    @pytest.mark.anyio
    async def test_errors_are_not_cached(self) -> None:
        responses = iter(
            [
                httpx.Response(500),
                httpx.Response(200, json={"success": True, "data": song_payload("abc")}),
            ]
        )
        client, recorder = make_client(lambda request: next(responses))

        with pytest.raises(ApiError):
            await client.get_song("abc")
        song = await client.get_song("abc")

        assert song.id == "abc"
        assert len(recorder.requests) == 2
        await client.aclose()
