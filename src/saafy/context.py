"""Application context for explicit dependency passing.

AppContext wires exactly one instance of every service for a running app.
Surfaces (CLI, web API) receive it explicitly instead of reaching for
module-level singletons.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx
from loguru import logger

from saafy.core.config import Config, get_data_dir
from saafy.core.storage import JsonFileStore, KeyValueStore, MemoryStore
from saafy.domain.catalog.client import CatalogClient
from saafy.domain.catalog.models import Song
from saafy.domain.discovery.engine import DiscoveryEngine
from saafy.domain.discovery.session import DiscoverySession
from saafy.domain.playback.audio import AudioBackend, NullAudioBackend
from saafy.domain.playback.engine import PlaybackEngine
from saafy.domain.playback.history import ListeningHistory
from saafy.domain.playback.mpv import MpvBackend, check_mpv_available
from saafy.notifications import ToastCenter
from saafy.preferences import Preferences


def create_audio_backend(config: Config) -> AudioBackend:
    """mpv when configured and installed, otherwise a silent backend."""
    if config.player.audio_backend == "mpv":
        if check_mpv_available():
            return MpvBackend(
                socket_path=config.player.mpv_socket_path,
                poll_interval=config.player.poll_interval_seconds,
                volume=config.player.volume,
            )
        logger.warning("mpv not found; audio output disabled")
    return NullAudioBackend()


@dataclass
class AppContext:
    """All services of one running app.

    Attributes:
        config: Application configuration
        durable_store: Survives restarts (history, preferences)
        session_store: Lives for this process (seed, seen/played sets)
        catalog: Song API client
        toasts: Transient notifications
        history: Listening history
        preferences: Theme and UI flags
        discovery: Discovery engine
        player: Playback engine
    """

    config: Config
    durable_store: KeyValueStore
    session_store: KeyValueStore
    catalog: CatalogClient
    toasts: ToastCenter
    history: ListeningHistory
    preferences: Preferences
    discovery: DiscoveryEngine
    player: PlaybackEngine

    @classmethod
    def create(
        cls,
        config: Config,
        audio: Optional[AudioBackend] = None,
        data_dir: Optional[Path] = None,
        durable_store: Optional[KeyValueStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AppContext":
        """Build and wire every service from configuration."""
        durable = durable_store or JsonFileStore((data_dir or get_data_dir()) / "state")
        session_store = MemoryStore()

        catalog = CatalogClient.from_config(config.api, transport=transport)
        toasts = ToastCenter(
            default_duration=config.notifications.toast_duration_seconds,
            desktop=config.notifications.desktop,
        )
        history = ListeningHistory(durable, max_entries=config.history.max_entries)
        session = DiscoverySession(session_store)

        discovery = DiscoveryEngine(
            catalog,
            session,
            max_term_attempts=config.discovery.max_term_attempts,
            for_you_limit=config.discovery.for_you_limit,
            songs_per_bucket=config.discovery.songs_per_bucket,
            languages_per_mix=config.discovery.languages_per_mix,
        )
        player = PlaybackEngine(
            audio or create_audio_backend(config),
            catalog=catalog,
            history=history,
            toasts=toasts,
            volume=config.player.volume,
            load_timeout=config.player.load_timeout_seconds,
            restart_threshold=config.player.restart_threshold_seconds,
            max_skip_attempts=config.player.max_skip_attempts,
        )

        def track_started(song: Song) -> None:
            session.mark_played(song.id)

        player.events.on("track", track_started)

        return cls(
            config=config,
            durable_store=durable,
            session_store=session_store,
            catalog=catalog,
            toasts=toasts,
            history=history,
            preferences=Preferences(durable),
            discovery=discovery,
            player=player,
        )

    async def aclose(self) -> None:
        """Stop playback and release network resources."""
        await self.player.close()
        await self.catalog.aclose()
