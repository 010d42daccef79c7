"""Minimal synchronous event emitter used by the engines and toast centre."""

from collections import defaultdict
from typing import Any, Callable

from loguru import logger

Handler = Callable[..., None]


class EventEmitter:
    """Subscribe with `on(event, handler)`; the return value unsubscribes.

    Handlers run in subscription order. A failing handler is logged and does
    not prevent the others from running.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> Callable[[], None]:
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            self.off(event, handler)

        return unsubscribe

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(*args, **kwargs)
            except Exception:
                logger.exception(f"Event handler for '{event}' failed")

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))
