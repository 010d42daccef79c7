"""
Audio backend interface.

The playback engine drives any object implementing AudioBackend and
receives media events through the PlaybackListener it registers.
"""

from typing import Optional, Protocol


class PlaybackListener(Protocol):
    """Media callbacks the engine exposes to backends."""

    def on_time_update(self, seconds: float) -> None: ...

    def on_duration(self, seconds: float) -> None: ...

    def on_ended(self) -> None: ...

    def on_error(self, message: str) -> None: ...


class AudioBackend(Protocol):
    """Something that can load and play a single audio URL at a time."""

    def set_listener(self, listener: Optional[PlaybackListener]) -> None: ...

    async def load(self, url: str) -> float:
        """Load a URL, paused, and return its duration (0.0 if unknown).

        Raises:
            AudioLoadError: If the URL cannot be loaded
        """
        ...

    async def play(self) -> None: ...

    async def pause(self) -> None: ...

    async def seek(self, seconds: float) -> None: ...

    async def set_volume(self, volume: float) -> None: ...

    async def stop(self) -> None: ...

    async def close(self) -> None: ...


class NullAudioBackend:
    """Backend that plays nothing.

    Used when a remote client (e.g. the browser behind the web API) renders
    the audio and reports progress back, so the engine is only the state
    authority.
    """

    def __init__(self) -> None:
        self.listener: Optional[PlaybackListener] = None
        self.url: Optional[str] = None
        self.volume = 1.0

    def set_listener(self, listener: Optional[PlaybackListener]) -> None:
        self.listener = listener

    async def load(self, url: str) -> float:
        self.url = url
        return 0.0

    async def play(self) -> None:
        pass

    async def pause(self) -> None:
        pass

    async def seek(self, seconds: float) -> None:
        pass

    async def set_volume(self, volume: float) -> None:
        self.volume = volume

    async def stop(self) -> None:
        self.url = None

    async def close(self) -> None:
        self.url = None
