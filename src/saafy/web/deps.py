from fastapi import Request

from saafy.context import AppContext
from saafy.domain.catalog.client import CatalogClient
from saafy.domain.discovery.engine import DiscoveryEngine
from saafy.domain.playback.engine import PlaybackEngine


def get_ctx(request: Request) -> AppContext:
    """FastAPI dependency for the running application context."""
    return request.app.state.ctx


def get_player(request: Request) -> PlaybackEngine:
    return get_ctx(request).player


def get_discovery(request: Request) -> DiscoveryEngine:
    return get_ctx(request).discovery


def get_catalog(request: Request) -> CatalogClient:
    return get_ctx(request).catalog
