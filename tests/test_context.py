"""Tests for application wiring."""

from unittest.mock import patch

import httpx
import pytest

from fakes import FakeAudioBackend, make_song
from saafy.context import AppContext, create_audio_backend
from saafy.core.config import Config
from saafy.core.storage import MemoryStore
from saafy.domain.playback.audio import NullAudioBackend


def no_network(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503)


class TestCreateAudioBackend:
    def test_none_backend(self) -> None:
        config = Config()
        config.player.audio_backend = "none"
        assert isinstance(create_audio_backend(config), NullAudioBackend)

    def test_missing_mpv_falls_back(self) -> None:
        with patch("saafy.context.check_mpv_available", return_value=False):
            assert isinstance(create_audio_backend(Config()), NullAudioBackend)


class TestAppContext:
    """Tests for AppContext.create."""

    @pytest.mark.anyio
    async def test_services_share_stores(self, audio: FakeAudioBackend) -> None:
        """Played songs land in durable history and the session played-set."""
        durable = MemoryStore()
        ctx = AppContext.create(
            Config(), audio=audio, durable_store=durable, transport=httpx.MockTransport(no_network)
        )

        await ctx.player.play_song(make_song("s1"))

        assert [s.id for s in ctx.history.entries()] == ["s1"]
        assert ctx.discovery.session.played_ids() == ["s1"]
        assert "recently_played" in durable.keys()
        assert "played_songs_session" in ctx.session_store.keys()
        assert ctx.preferences.store is durable

        await ctx.aclose()
        assert audio.closed is True

    @pytest.mark.anyio
    async def test_config_reaches_services(self, audio: FakeAudioBackend) -> None:
        config = Config()
        config.player.volume = 0.3
        config.history.max_entries = 2
        config.discovery.max_term_attempts = 2
        ctx = AppContext.create(
            config, audio=audio, durable_store=MemoryStore(), transport=httpx.MockTransport(no_network)
        )

        assert ctx.player.volume == 0.3
        assert ctx.history.max_entries == 2
        assert ctx.discovery.max_term_attempts == 2
        assert ctx.catalog.base_url == config.api.base_url
        await ctx.aclose()
