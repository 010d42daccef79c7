"""Playback-specific exceptions for error handling."""

from typing import Optional

from saafy.domain.catalog.models import Song


class PlaybackError(Exception):
    """Base exception for playback operations."""

    pass


class NoPlayableSourceError(PlaybackError):
    """Raised when a song has no usable audio URL."""

    def __init__(self, song: Song, message: Optional[str] = None):
        self.song = song
        super().__init__(message or f'Cannot play "{song.name}" - no audio available')


class StaleRequestError(PlaybackError):
    """Raised when a load has been superseded by a newer one."""

    def __init__(self, request_id: int, latest_id: int):
        self.request_id = request_id
        self.latest_id = latest_id
        super().__init__(f"Load #{request_id} superseded by #{latest_id}")


class AudioLoadError(PlaybackError):
    """Raised when the audio backend cannot load or play a URL."""

    pass
