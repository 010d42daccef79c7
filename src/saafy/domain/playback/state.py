"""
Playback state types.

The engine owns one mutable PlaybackState; callers only ever see the
immutable PlaybackSnapshot it produces.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from saafy.domain.catalog.models import Song


class RepeatMode(str, Enum):
    NONE = "none"
    ALL = "all"
    ONE = "one"

    def next(self) -> "RepeatMode":
        """Cycle none -> all -> one -> none."""
        order = [RepeatMode.NONE, RepeatMode.ALL, RepeatMode.ONE]
        return order[(order.index(self) + 1) % len(order)]


class PlayerStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"
    ERROR = "error"


@dataclass
class PlaybackState:
    """Mutable playback record owned by PlaybackEngine."""

    current_song: Optional[Song] = None
    is_playing: bool = False
    progress: float = 0.0  # seconds
    duration: float = 0.0  # seconds
    volume: float = 0.7
    repeat_mode: RepeatMode = RepeatMode.NONE
    shuffle_mode: bool = False
    status: PlayerStatus = PlayerStatus.IDLE
    error: Optional[str] = None
    queue: list[Song] = field(default_factory=list)


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Point-in-time, read-only view of the player."""

    current_song: Optional[Song]
    is_playing: bool
    progress: float
    duration: float
    volume: float
    repeat_mode: RepeatMode
    shuffle_mode: bool
    status: PlayerStatus
    error: Optional[str]
    queue: tuple[Song, ...]

    @classmethod
    def of(cls, state: PlaybackState) -> "PlaybackSnapshot":
        return cls(
            current_song=state.current_song,
            is_playing=state.is_playing,
            progress=state.progress,
            duration=state.duration,
            volume=state.volume,
            repeat_mode=state.repeat_mode,
            shuffle_mode=state.shuffle_mode,
            status=state.status,
            error=state.error,
            queue=tuple(state.queue),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_song": self.current_song.to_dict() if self.current_song else None,
            "is_playing": self.is_playing,
            "progress": self.progress,
            "duration": self.duration,
            "volume": self.volume,
            "repeat_mode": self.repeat_mode.value,
            "shuffle_mode": self.shuffle_mode,
            "status": self.status.value,
            "error": self.error,
            "queue": [song.to_dict() for song in self.queue],
        }
