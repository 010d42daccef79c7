"""In-memory TTL cache for successful API responses."""

import time
from collections import OrderedDict
from typing import Any, Callable, Optional

MISSING = object()


class ResponseCache:
    """TTL cache keyed by request path; evicts the oldest entry when full."""

    def __init__(
        self,
        max_size: int = 200,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._data: "OrderedDict[str, tuple[Any, float]]" = OrderedDict()

    def get(self, key: str, default: Any = MISSING) -> Any:
        entry = self._data.get(key)
        if entry is None:
            return default
        value, expires = entry
        if self._clock() > expires:
            del self._data[key]
            return default
        return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        if key in self._data:
            del self._data[key]
        while len(self._data) >= self.max_size:
            self._data.popitem(last=False)
        self._data[key] = (value, self._clock() + (ttl or self.default_ttl))

    def invalidate(self, pattern: str) -> int:
        """Drop every entry whose key contains `pattern`. Returns the count."""
        doomed = [key for key in self._data if pattern in key]
        for key in doomed:
            del self._data[key]
        return len(doomed)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def stats(self) -> dict[str, int]:
        return {"size": len(self._data), "max_size": self.max_size}
