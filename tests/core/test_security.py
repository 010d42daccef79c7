"""Tests for input sanitization and rate limiting."""

import pytest

from saafy.core.security import (
    RateLimiter,
    is_trusted_audio_source,
    sanitize_id,
    sanitize_search_query,
    validate_pagination,
)


class TestSanitizeSearchQuery:
    """Tests for sanitize_search_query."""

    def test_strips_injection_characters(self) -> None:
        assert sanitize_search_query("Arijit' ; \"Singh\\") == "Arijit Singh"

    def test_strips_template_characters(self) -> None:
        assert sanitize_search_query("${tum hi ho}") == "tum hi ho"

    def test_collapses_whitespace(self) -> None:
        assert sanitize_search_query("  kesariya \n\t song ") == "kesariya song"

    def test_truncates_long_queries(self) -> None:
        assert len(sanitize_search_query("a" * 500)) == 200

    def test_non_string_is_empty(self) -> None:
        assert sanitize_search_query(None) == ""
        assert sanitize_search_query(42) == ""


class TestSanitizeId:
    def test_keeps_safe_characters(self) -> None:
        assert sanitize_id("aB3_-x") == "aB3_-x"

    def test_removes_everything_else(self) -> None:
        assert sanitize_id("../songs?id=1") == "songsid1"

    def test_none_is_empty(self) -> None:
        assert sanitize_id(None) == ""


class TestValidatePagination:
    """Tests for validate_pagination."""

    @pytest.mark.parametrize(
        "page, limit, expected",
        [
            (0, 10, (0, 10)),
            (-3, 10, (0, 10)),
            (2.7, 5, (2, 5)),
            ("1", "20", (1, 20)),
            (0, 500, (0, 50)),
            (0, -4, (0, 1)),
            (0, 0, (0, 10)),
            (0, None, (0, 10)),
            ("x", "y", (0, 10)),
            (float("nan"), float("inf"), (0, 10)),
        ],
    )
    def test_clamps(self, page, limit, expected) -> None:
        assert validate_pagination(page, limit) == expected


class TestTrustedAudioSource:
    def test_known_cdn(self) -> None:
        assert is_trusted_audio_source("https://aac.saavncdn.com/123/abc_320.mp4")

    def test_lookalike_host(self) -> None:
        assert not is_trusted_audio_source("https://saavncdn.com.evil.example/a.mp4")

    def test_bad_scheme_or_empty(self) -> None:
        assert not is_trusted_audio_source("file:///etc/passwd")
        assert not is_trusted_audio_source(None)


class FakeTime:
    """Clock and async sleep that advance together."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestRateLimiter:
    """Tests for the token bucket."""

    @pytest.mark.anyio
    async def test_burst_then_wait(self) -> None:
        """The bucket allows a burst, then waits for a refill."""
        fake = FakeTime()
        limiter = RateLimiter(max_tokens=3, refill_rate=2.0, clock=fake.clock, sleep=fake.sleep)

        for _ in range(3):
            await limiter.acquire()
        assert fake.sleeps == []

        await limiter.acquire()
        assert fake.sleeps == [0.5]

    def test_refill_is_capped(self) -> None:
        fake = FakeTime()
        limiter = RateLimiter(max_tokens=2, refill_rate=1.0, clock=fake.clock, sleep=fake.sleep)

        fake.now += 100

        assert limiter.available_tokens == 2

    def test_rejects_bad_arguments(self) -> None:
        with pytest.raises(ValueError):
            RateLimiter(max_tokens=0)
        with pytest.raises(ValueError):
            RateLimiter(refill_rate=0)
