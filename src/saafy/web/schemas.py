from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlayRequest(BaseModel):
    """Start a song, by full song object or by id."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    song: Optional[dict[str, Any]] = None
    song_id: Optional[str] = None
    context: Optional[list[dict[str, Any]]] = None


class SeekRequest(BaseModel):
    """Seek to a position in seconds."""
    position: float


class VolumeRequest(BaseModel):
    volume: float


class QueueAddRequest(BaseModel):
    song: dict[str, Any]
    announce: bool = True


class ProgressReport(BaseModel):
    """Position reported by a client that does the actual audio playback."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    position: float = Field(ge=0)
    duration: Optional[float] = None
    ended: bool = False


class MediaErrorReport(BaseModel):
    message: str


class ThemeRequest(BaseModel):
    theme: Literal["light", "dark"]


class HealthResponse(BaseModel):
    status: str
