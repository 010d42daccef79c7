"""Shared fixtures for saafy tests."""

import pytest

from fakes import FakeAudioBackend
from saafy.core.storage import MemoryStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def audio() -> FakeAudioBackend:
    return FakeAudioBackend()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
