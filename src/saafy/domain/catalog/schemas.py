"""Pydantic models for the song API's response envelope."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ApiEnvelope(BaseModel):
    """`{success, data, message}` wrapper returned by every endpoint."""

    model_config = ConfigDict(extra="allow")

    success: bool = False
    data: Any = None
    message: Optional[str] = None


class PagedData(BaseModel):
    """`data` payload of paginated search endpoints."""

    model_config = ConfigDict(extra="allow")

    total: int = 0
    start: int = 0
    results: list[Any] = []
