"""Conversion of catalog models into JSON-ready payloads."""

from dataclasses import asdict, is_dataclass
from typing import Any, Optional

from fastapi import HTTPException

from saafy.domain.catalog.models import Song


def to_payload(value: Any) -> Any:
    """Dataclasses become dicts; songs use their storage shape."""
    if isinstance(value, Song):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return value


def song_from_payload(data: Optional[dict[str, Any]]) -> Song:
    """Parse a client-supplied song object or answer 422."""
    if not isinstance(data, dict):
        raise HTTPException(422, "song object required")
    try:
        return Song.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise HTTPException(422, f"Invalid song: {e}") from e
