import asyncio
import time
from typing import TYPE_CHECKING, Any, Callable, Optional

from fastapi import WebSocket
from loguru import logger

if TYPE_CHECKING:
    from saafy.context import AppContext


class SyncManager:
    """Manages WebSocket connections and broadcasts engine events.

    Engine events are synchronous; each one is turned into a broadcast task
    on the running loop. Broadcasts hold a lock, so clients receive events in
    the order they were emitted. Reconnecting clients get a full snapshot from
    get_current_state().
    """

    def __init__(self):
        self.connections: list[WebSocket] = []
        self._ctx: Optional["AppContext"] = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._tasks: set[asyncio.Task] = set()
        self._send_lock = asyncio.Lock()

    async def connect(self, ws: WebSocket) -> None:
        """Accept and store a new WebSocket connection."""
        await ws.accept()
        self.connections.append(ws)

    def disconnect(self, ws: WebSocket) -> None:
        """Remove a WebSocket connection."""
        if ws in self.connections:
            self.connections.remove(ws)

    async def broadcast(self, event_type: str, data: Any) -> None:
        """Send a message to all connected clients."""
        message = {
            "type": event_type,
            "data": data,
            "ts": time.time(),
        }
        dead_connections: list[WebSocket] = []

        async with self._send_lock:
            for conn in list(self.connections):
                try:
                    await conn.send_json(message)
                except Exception as e:
                    logger.debug(f"Dropping WebSocket after send failure: {e}")
                    dead_connections.append(conn)

            for conn in dead_connections:
                self.disconnect(conn)

    def _schedule(self, event_type: str, data: Any) -> None:
        if not self.connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.broadcast(event_type, data))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def bind(self, ctx: "AppContext") -> None:
        """Forward player, discovery and toast events of `ctx` to clients."""
        self.unbind()
        self._ctx = ctx
        player, discovery, toasts = ctx.player.events, ctx.discovery.events, ctx.toasts.events

        self._unsubscribers = [
            player.on("state", lambda snap: self._schedule("player:state", snap.to_dict())),
            player.on("track", lambda song: self._schedule("player:track", song.to_dict())),
            player.on(
                "queue",
                lambda queue: self._schedule("player:queue", [s.to_dict() for s in queue]),
            ),
            player.on(
                "progress",
                lambda progress, duration: self._schedule(
                    "player:progress", {"progress": progress, "duration": duration}
                ),
            ),
            player.on("error", lambda error: self._schedule("player:error", {"message": str(error)})),
            discovery.on("bucket", lambda bucket: self._schedule("discovery:bucket", bucket.to_dict())),
            discovery.on("refresh", lambda seed: self._schedule("discovery:refresh", {"seed": seed})),
            toasts.on("toast", lambda toast: self._schedule("toast:add", toast.to_dict())),
            toasts.on("dismiss", lambda toast: self._schedule("toast:dismiss", {"id": toast.id})),
        ]

    def unbind(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._ctx = None

    def get_current_state(self) -> dict:
        """Full state for new connections."""
        if self._ctx is None:
            return {"player": None, "toasts": [], "preferences": None}
        return {
            "player": self._ctx.player.snapshot().to_dict(),
            "toasts": [toast.to_dict() for toast in self._ctx.toasts.active()],
            "preferences": self._ctx.preferences.to_dict(),
        }
