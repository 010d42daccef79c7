"""
MPV audio backend using JSON IPC.

mpv runs as an idle subprocess; commands are sent over its unix socket.
A poll task reports position and end-of-file to the engine's listener.
"""

import asyncio
import json
import os
import shutil
import socket
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .audio import PlaybackListener
from .exceptions import AudioLoadError

# Consecutive equal duration reads before a stream's metadata counts as loaded
REQUIRED_STABLE_READS = 2


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    return shutil.which("mpv") is not None


def _ipc_request(socket_path: str, command: list[Any], timeout: float = 2.0) -> Optional[dict]:
    """Send one IPC command and return mpv's reply (None on socket failure)."""
    if not os.path.exists(socket_path):
        return None
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect(socket_path)
            sock.sendall((json.dumps({"command": command}) + "\n").encode("utf-8"))
            buffer = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    return None
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    try:
                        message = json.loads(line.decode("utf-8"))
                    except (json.JSONDecodeError, UnicodeDecodeError):
                        continue
                    # Skip asynchronous event lines interleaved with the reply
                    if "event" not in message:
                        return message
    except (socket.timeout, OSError) as e:
        logger.debug(f"mpv IPC failed for {command[0]}: {e}")
        return None


class MpvBackend:
    """AudioBackend backed by an mpv subprocess."""

    def __init__(
        self,
        socket_path: Optional[str] = None,
        poll_interval: float = 0.5,
        volume: float = 0.7,
    ):
        self.socket_path = socket_path or str(
            Path(tempfile.gettempdir()) / f"saafy-mpv-{os.getpid()}.sock"
        )
        self.poll_interval = poll_interval
        self.volume = volume
        self.process: Optional[subprocess.Popen] = None
        self.listener: Optional[PlaybackListener] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._eof_reported = False

    def set_listener(self, listener: Optional[PlaybackListener]) -> None:
        self.listener = listener

    def is_running(self) -> bool:
        return (
            self.process is not None
            and self.process.poll() is None
            and os.path.exists(self.socket_path)
        )

    def _start_process(self) -> None:
        if os.path.exists(self.socket_path):
            logger.debug(f"Removing existing socket: {self.socket_path}")
            os.unlink(self.socket_path)

        logger.info(f"Starting mpv with socket: {self.socket_path}")
        cmd = [
            "mpv",
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={self.socket_path}",
            f"--volume={round(self.volume * 100)}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]
        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            raise AudioLoadError(f"Failed to start mpv: {e}") from e

        deadline = time.monotonic() + 5.0
        while not os.path.exists(self.socket_path):
            if time.monotonic() > deadline or self.process.poll() is not None:
                self.process.kill()
                self.process = None
                raise AudioLoadError("mpv socket was not created")
            time.sleep(0.1)

    async def _ensure_started(self) -> None:
        if not self.is_running():
            await asyncio.to_thread(self._start_process)

    async def _command(self, *command: Any) -> Optional[dict]:
        return await asyncio.to_thread(_ipc_request, self.socket_path, list(command))

    async def _get_property(self, name: str) -> Any:
        reply = await self._command("get_property", name)
        if reply and reply.get("error") == "success":
            return reply.get("data")
        return None

    async def _set_property(self, name: str, value: Any) -> bool:
        reply = await self._command("set_property", name, value)
        return bool(reply and reply.get("error") == "success")

    async def load(self, url: str) -> float:
        await self._ensure_started()
        self._stop_polling()
        self._eof_reported = False

        await self._set_property("pause", True)
        reply = await self._command("loadfile", url, "replace")
        if not reply or reply.get("error") != "success":
            raise AudioLoadError(f"mpv rejected {url}: {reply and reply.get('error')}")

        # Network streams report a duration once their headers are parsed;
        # the caller bounds this wait with its own timeout.
        last_duration: Optional[float] = None
        stable_reads = 0
        saw_file = False
        while True:
            await asyncio.sleep(0.05)
            idle = await self._get_property("idle-active")
            if idle is False:
                saw_file = True
            elif idle is True and saw_file:
                raise AudioLoadError(f"mpv could not open {url}")

            duration = await self._get_property("duration")
            if isinstance(duration, (int, float)) and duration > 0:
                if last_duration is not None and abs(duration - last_duration) < 0.1:
                    stable_reads += 1
                    if stable_reads >= REQUIRED_STABLE_READS:
                        logger.debug(f"Metadata loaded: duration={duration:.2f}s")
                        return float(duration)
                else:
                    stable_reads = 0
                last_duration = float(duration)

    async def play(self) -> None:
        if await self._set_property("pause", False):
            self._start_polling()

    async def pause(self) -> None:
        await self._set_property("pause", True)

    async def seek(self, seconds: float) -> None:
        self._eof_reported = False
        await self._command("seek", seconds, "absolute")

    async def set_volume(self, volume: float) -> None:
        self.volume = volume
        if self.is_running():
            await self._set_property("volume", round(volume * 100))

    async def stop(self) -> None:
        self._stop_polling()
        if self.is_running():
            await self._command("stop")

    async def close(self) -> None:
        await self.stop()
        if self.process:
            try:
                self.process.kill()
                self.process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.warning(f"mpv did not exit cleanly: {e}")
            self.process = None
        if os.path.exists(self.socket_path):
            os.unlink(self.socket_path)

    def _start_polling(self) -> None:
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.get_running_loop().create_task(self._poll())

    def _stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll(self) -> None:
        while True:
            if not self.is_running():
                if self.listener:
                    self.listener.on_error("mpv exited unexpectedly")
                return

            position = await self._get_property("time-pos")
            if isinstance(position, (int, float)) and self.listener:
                self.listener.on_time_update(float(position))

            eof = await self._get_property("eof-reached")
            if eof is True and not self._eof_reported:
                self._eof_reported = True
                if self.listener:
                    self.listener.on_ended()

            await asyncio.sleep(self.poll_interval)
