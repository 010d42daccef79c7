"""HTTP and WebSocket surface for the player, discovery and catalog."""

from .main import create_app

__all__ = ["create_app"]
