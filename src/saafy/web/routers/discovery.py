"""Discovery router: For You mix, language and theme buckets."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from saafy.domain.discovery.engine import DiscoveryEngine

from ..deps import get_discovery

router = APIRouter()


def _buckets(buckets: dict) -> list[dict]:
    return [bucket.to_dict() for bucket in buckets.values()]


@router.get("/for-you")
async def for_you(
    limit: Optional[int] = Query(None, ge=0, le=50),
    discovery: DiscoveryEngine = Depends(get_discovery),
):
    bucket = await discovery.get_for_you_mix(limit)
    return bucket.to_dict()


@router.get("/languages")
async def list_languages(discovery: DiscoveryEngine = Depends(get_discovery)):
    return [
        {"key": key, "title": discovery.display_name(key)}
        for key in discovery.available_languages()
    ]


@router.get("/languages/all")
async def all_languages(
    limit: Optional[int] = Query(None, ge=0, le=50),
    discovery: DiscoveryEngine = Depends(get_discovery),
):
    """Every language bucket; each is also pushed over /ws/sync as it finishes."""
    return _buckets(await discovery.get_all_discovery_content(limit))


@router.get("/languages/{language}")
async def language_bucket(
    language: str,
    limit: Optional[int] = Query(None, ge=0, le=50),
    discovery: DiscoveryEngine = Depends(get_discovery),
):
    if language not in discovery.available_languages():
        raise HTTPException(404, f"Unknown language: {language}")
    bucket = await discovery.get_discovery_songs(language, limit)
    return bucket.to_dict()


@router.get("/themes")
async def list_themes(discovery: DiscoveryEngine = Depends(get_discovery)):
    return [
        {"key": key, "title": discovery.display_name(key)}
        for key in discovery.available_themes()
    ]


@router.get("/themes/all")
async def all_themes(
    limit: Optional[int] = Query(None, ge=0, le=50),
    discovery: DiscoveryEngine = Depends(get_discovery),
):
    return _buckets(await discovery.get_all_themed_content(limit))


@router.get("/themes/{theme}")
async def theme_bucket(
    theme: str,
    limit: Optional[int] = Query(None, ge=0, le=50),
    discovery: DiscoveryEngine = Depends(get_discovery),
):
    if theme not in discovery.available_themes():
        raise HTTPException(404, f"Unknown theme: {theme}")
    bucket = await discovery.get_themed_songs(theme, limit)
    return bucket.to_dict()


@router.post("/refresh")
async def refresh(discovery: DiscoveryEngine = Depends(get_discovery)):
    """New session seed; the next requests return a fresh selection."""
    return {"seed": discovery.refresh_discovery()}
