"""Input sanitization and client-side rate limiting for API calls."""

import asyncio
import re
import time
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

MAX_SEARCH_LENGTH = 200
MAX_PAGE_LIMIT = 50
DEFAULT_PAGE_LIMIT = 10

TRUSTED_AUDIO_DOMAINS = (
    "jiosaavn.com",
    "saavn.com",
    "jiocdn.com",
    "saavncdn.com",
    "cdnjojaudio.azureedge.net",
)

_QUOTE_CHARS = re.compile(r"[\"';\\]")
_TEMPLATE_CHARS = re.compile(r"[${}]")
_WHITESPACE = re.compile(r"\s+")
_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_search_query(query: Any) -> str:
    """Strip injection-prone characters, collapse whitespace, cap length."""
    if not isinstance(query, str):
        return ""
    cleaned = _QUOTE_CHARS.sub("", query)
    cleaned = _TEMPLATE_CHARS.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned[:MAX_SEARCH_LENGTH]


def sanitize_id(value: Any) -> str:
    """Restrict an API identifier to [a-zA-Z0-9_-]."""
    if value is None:
        return ""
    return _ID_UNSAFE.sub("", str(value))


def _as_int(value: Any, default: int) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number or number in (float("inf"), float("-inf")):
        return default
    return int(number // 1)


def validate_pagination(page: Any, limit: Any) -> tuple[int, int]:
    """Clamp pagination to page >= 0 and 1 <= limit <= 50.

    Falsy or non-numeric limits fall back to the default page size.
    """
    safe_page = max(0, _as_int(page, 0))
    raw_limit = _as_int(limit, 0)
    if raw_limit == 0:
        raw_limit = DEFAULT_PAGE_LIMIT
    safe_limit = min(MAX_PAGE_LIMIT, max(1, raw_limit))
    return safe_page, safe_limit


def is_trusted_audio_source(url: Optional[str]) -> bool:
    """True if the URL points at one of the known song CDNs."""
    if not url or not isinstance(url, str):
        return False
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    host = parsed.hostname
    return any(host == d or host.endswith("." + d) for d in TRUSTED_AUDIO_DOMAINS)


class RateLimiter:
    """Token bucket limiter.

    Allows bursts of up to `max_tokens` requests and refills at
    `refill_rate` tokens per second. `acquire()` waits for a token.
    """

    def __init__(
        self,
        max_tokens: int = 15,
        refill_rate: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_tokens < 1 or refill_rate <= 0:
            raise ValueError("RateLimiter needs max_tokens >= 1 and refill_rate > 0")
        self.max_tokens = max_tokens
        self.refill_rate = refill_rate
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(max_tokens)
        self._last_refill = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(self.max_tokens, self._tokens + elapsed * self.refill_rate)
        self._last_refill = now

    async def acquire(self) -> None:
        while True:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return
            await self._sleep((1 - self._tokens) / self.refill_rate)

    @property
    def available_tokens(self) -> int:
        self._refill()
        return int(self._tokens)
