"""Playback domain - queue engine, audio backends and listening history.

This domain handles:
- Current song, upcoming queue and next/previous/shuffle/repeat rules
- Audio backends (mpv via JSON IPC, or none when a remote client plays)
- Stale-load protection for overlapping play requests
- Persisted listening history
"""

from .audio import AudioBackend, NullAudioBackend, PlaybackListener
from .engine import PlaybackEngine
from .exceptions import (
    AudioLoadError,
    NoPlayableSourceError,
    PlaybackError,
    StaleRequestError,
)
from .history import ListeningHistory
from .mpv import MpvBackend, check_mpv_available
from .state import PlaybackSnapshot, PlaybackState, PlayerStatus, RepeatMode

__all__ = [
    # Engine
    "PlaybackEngine",
    # Backends
    "AudioBackend",
    "MpvBackend",
    "NullAudioBackend",
    "PlaybackListener",
    "check_mpv_available",
    # Errors
    "AudioLoadError",
    "NoPlayableSourceError",
    "PlaybackError",
    "StaleRequestError",
    # State
    "ListeningHistory",
    "PlaybackSnapshot",
    "PlaybackState",
    "PlayerStatus",
    "RepeatMode",
]
