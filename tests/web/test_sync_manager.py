"""Tests for WebSocket event forwarding."""

import asyncio

import httpx
import pytest

from fakes import FakeAudioBackend, make_song
from saafy.context import AppContext
from saafy.core.config import Config
from saafy.core.storage import MemoryStore
from saafy.web.sync_manager import SyncManager


class FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


class SlowWebSocket(FakeWebSocket):
    """Takes `delays[i]` seconds to deliver the i-th message."""

    def __init__(self, delays: list[float]):
        super().__init__()
        self.delays = list(delays)

    async def send_json(self, message: dict) -> None:
        await asyncio.sleep(self.delays.pop(0))
        self.sent.append(message)


def offline(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503)


@pytest.fixture
def ctx(audio: FakeAudioBackend) -> AppContext:
    return AppContext.create(
        Config(), audio=audio, durable_store=MemoryStore(), transport=httpx.MockTransport(offline)
    )


async def drain(manager: SyncManager) -> None:
    while manager._tasks:
        await asyncio.gather(*list(manager._tasks))


class TestSyncManager:
    """Tests for SyncManager."""

    @pytest.mark.anyio
    async def test_broadcast_drops_dead_connections(self) -> None:
        manager = SyncManager()
        alive, dead = FakeWebSocket(), FakeWebSocket(fail=True)
        await manager.connect(alive)
        await manager.connect(dead)

        await manager.broadcast("player:state", {"x": 1})

        assert alive.accepted
        assert alive.sent[0]["type"] == "player:state"
        assert alive.sent[0]["data"] == {"x": 1}
        assert manager.connections == [alive]

    @pytest.mark.anyio
    async def test_events_arrive_in_emit_order(self) -> None:
        """A slow send does not let a later event overtake an earlier one."""
        manager = SyncManager()
        ws = SlowWebSocket(delays=[0.05, 0.0, 0.0])
        await manager.connect(ws)

        for n in range(3):
            manager._schedule("player:state", {"n": n})
        await drain(manager)

        assert [m["data"]["n"] for m in ws.sent] == [0, 1, 2]

    def test_state_without_context(self) -> None:
        assert SyncManager().get_current_state() == {"player": None, "toasts": [], "preferences": None}

    @pytest.mark.anyio
    async def test_forwards_engine_events(self, ctx: AppContext) -> None:
        manager = SyncManager()
        ws = FakeWebSocket()
        await manager.connect(ws)
        manager.bind(ctx)

        await ctx.player.play_song(make_song("s1"))
        ctx.toasts.info("hello")
        ctx.discovery.refresh_discovery()
        await drain(manager)

        types = [m["type"] for m in ws.sent]
        assert "player:state" in types
        assert "player:track" in types
        assert "toast:add" in types
        assert "discovery:refresh" in types
        track = next(m for m in ws.sent if m["type"] == "player:track")
        assert track["data"]["id"] == "s1"

    @pytest.mark.anyio
    async def test_progress_and_dismiss_payloads(self, ctx: AppContext) -> None:
        manager = SyncManager()
        ws = FakeWebSocket()
        await manager.connect(ws)
        manager.bind(ctx)
        await ctx.player.play_song(make_song("s1"))
        await drain(manager)
        ws.sent.clear()

        await ctx.player.seek_to(30)
        toast_id = ctx.toasts.info("bye")
        ctx.toasts.remove(toast_id)
        await drain(manager)

        progress = next(m for m in ws.sent if m["type"] == "player:progress")
        assert progress["data"] == {"progress": 30.0, "duration": 200.0}
        dismiss = next(m for m in ws.sent if m["type"] == "toast:dismiss")
        assert dismiss["data"] == {"id": toast_id}

    @pytest.mark.anyio
    async def test_unbind_stops_forwarding(self, ctx: AppContext) -> None:
        manager = SyncManager()
        ws = FakeWebSocket()
        await manager.connect(ws)
        manager.bind(ctx)
        manager.unbind()

        ctx.toasts.info("quiet")
        await drain(manager)

        assert ws.sent == []
        assert manager.get_current_state()["player"] is None

    @pytest.mark.anyio
    async def test_no_connections_schedules_nothing(self, ctx: AppContext) -> None:
        manager = SyncManager()
        manager.bind(ctx)

        ctx.toasts.info("nobody listening")

        assert manager._tasks == set()

    def test_current_state_with_context(self, ctx: AppContext) -> None:
        manager = SyncManager()
        manager.bind(ctx)
        ctx.toasts.info("visible")

        state = manager.get_current_state()

        assert state["player"]["status"] == "idle"
        assert [t["message"] for t in state["toasts"]] == ["visible"]
        assert state["preferences"] == {"theme": "light", "keyboard_hints_seen": False}
