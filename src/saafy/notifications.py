"""Transient user notifications (toasts) and desktop notification helpers."""

import asyncio
import functools
import itertools
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from loguru import logger

from saafy.core.events import EventEmitter

ToastType = Literal["info", "success", "error", "warning"]

_LOG_LEVELS = {"info": "info", "success": "success", "error": "warning", "warning": "warning"}


def notify(
    title: str, message: str, urgency: Literal["low", "normal", "critical"] = "normal"
) -> None:
    """
    Show a desktop notification using notify-send.

    Silently skips the notification if notify-send is not available.
    """
    if not shutil.which("notify-send"):
        return

    try:
        subprocess.run(
            ["notify-send", "--urgency", urgency, "--app-name", "Saafy", title, message],
            check=False,
            timeout=2.0,
            capture_output=True,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug(f"notify-send failed: {e}")


@dataclass(frozen=True)
class Toast:
    id: int
    message: str
    type: ToastType
    duration: float  # seconds
    created_at: float
    action_label: Optional[str] = None

    def expired(self, now: float) -> bool:
        return self.duration > 0 and now >= self.created_at + self.duration

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "type": self.type,
            "duration": self.duration,
            "action_label": self.action_label,
        }


class ToastCenter:
    """Holds active toasts and announces them on `events` ('toast', 'dismiss').

    Toasts expire after their duration; a duration of 0 keeps them until
    removed.
    """

    def __init__(
        self,
        default_duration: float = 3.0,
        desktop: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_duration = default_duration
        self.desktop = desktop
        self.events = EventEmitter()
        self._clock = clock
        self._ids = itertools.count(1)
        self._toasts: dict[int, Toast] = {}

    def add(
        self,
        message: str,
        type: ToastType = "info",
        duration: Optional[float] = None,
        action_label: Optional[str] = None,
    ) -> int:
        self._prune()
        toast = Toast(
            id=next(self._ids),
            message=message,
            type=type,
            duration=self.default_duration if duration is None else duration,
            created_at=self._clock(),
            action_label=action_label,
        )
        self._toasts[toast.id] = toast
        getattr(logger, _LOG_LEVELS[type])(f"[toast] {message}")

        if self.desktop:
            self._notify_desktop(message, "critical" if type == "error" else "normal")

        self.events.emit("toast", toast)
        return toast.id

    def success(self, message: str, duration: Optional[float] = None) -> int:
        return self.add(message, "success", duration)

    def error(self, message: str, duration: Optional[float] = None) -> int:
        return self.add(message, "error", duration)

    def info(self, message: str, duration: Optional[float] = None) -> int:
        return self.add(message, "info", duration)

    def warning(self, message: str, duration: Optional[float] = None) -> int:
        return self.add(message, "warning", duration)

    def remove(self, toast_id: int) -> bool:
        toast = self._toasts.pop(toast_id, None)
        if toast is None:
            return False
        self.events.emit("dismiss", toast)
        return True

    def _notify_desktop(self, message: str, urgency: str) -> None:
        # notify-send can block for up to its timeout
        send = functools.partial(notify, "Saafy", message, urgency=urgency)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            send()
            return
        loop.run_in_executor(None, send)

    def _prune(self) -> None:
        now = self._clock()
        for toast_id in [t.id for t in self._toasts.values() if t.expired(now)]:
            self.remove(toast_id)

    def active(self) -> list[Toast]:
        """Unexpired toasts, oldest first. Expired ones are dropped."""
        self._prune()
        return list(self._toasts.values())

    def clear(self) -> None:
        for toast_id in list(self._toasts):
            self.remove(toast_id)
