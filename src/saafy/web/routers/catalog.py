"""Catalog router: search and lookups proxied through the song API client.

CatalogError raised here is turned into an HTTP error by the app's
exception handler.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from saafy.domain.catalog.client import CatalogClient

from ..deps import get_catalog
from ..serialize import to_payload

router = APIRouter()


def _page(page) -> dict:
    return {"results": to_payload(page.results), "total": page.total, "start": page.start}


def _found(value, kind: str, item_id: str):
    if value is None:
        raise HTTPException(404, f"{kind} {item_id} not found")
    return to_payload(value)


@router.get("/search")
async def search_all(q: str = Query(""), catalog: CatalogClient = Depends(get_catalog)):
    return to_payload(await catalog.search_all(q))


@router.get("/search/songs")
async def search_songs(
    q: str = Query(""), page: int = 0, limit: int = 10, catalog: CatalogClient = Depends(get_catalog)
):
    return _page(await catalog.search_songs(q, page, limit))


@router.get("/search/albums")
async def search_albums(
    q: str = Query(""), page: int = 0, limit: int = 10, catalog: CatalogClient = Depends(get_catalog)
):
    return _page(await catalog.search_albums(q, page, limit))


@router.get("/search/artists")
async def search_artists(
    q: str = Query(""), page: int = 0, limit: int = 10, catalog: CatalogClient = Depends(get_catalog)
):
    return _page(await catalog.search_artists(q, page, limit))


@router.get("/search/playlists")
async def search_playlists(
    q: str = Query(""), page: int = 0, limit: int = 10, catalog: CatalogClient = Depends(get_catalog)
):
    return _page(await catalog.search_playlists(q, page, limit))


@router.get("/songs/{song_id}")
async def get_song(song_id: str, catalog: CatalogClient = Depends(get_catalog)):
    return _found(await catalog.get_song(song_id), "Song", song_id)


@router.get("/songs/{song_id}/suggestions")
async def get_song_suggestions(
    song_id: str, limit: int = 10, catalog: CatalogClient = Depends(get_catalog)
):
    return to_payload(await catalog.get_song_suggestions(song_id, limit))


@router.get("/albums/{album_id}")
async def get_album(album_id: str, catalog: CatalogClient = Depends(get_catalog)):
    return _found(await catalog.get_album(album_id), "Album", album_id)


@router.get("/artists/{artist_id}")
async def get_artist(artist_id: str, catalog: CatalogClient = Depends(get_catalog)):
    return _found(await catalog.get_artist(artist_id), "Artist", artist_id)


@router.get("/artists/{artist_id}/songs")
async def get_artist_songs(
    artist_id: str,
    page: int = 0,
    sort_by: str = Query("popularity", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    catalog: CatalogClient = Depends(get_catalog),
):
    return to_payload(await catalog.get_artist_songs(artist_id, page, sort_by, sort_order))


@router.get("/playlists/{playlist_id}")
async def get_playlist(playlist_id: str, catalog: CatalogClient = Depends(get_catalog)):
    return _found(await catalog.get_playlist(playlist_id), "Playlist", playlist_id)
