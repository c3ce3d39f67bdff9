"""Tag payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..models import DEFAULT_TAG_COLOR
from .common import HEX_COLOR_PATTERN, CleanStr


class TagCreate(BaseModel):
    model_config = ConfigDict(json_schema_extra={"example": {"name": "backend", "color": "#10B981"}})

    name: CleanStr = Field(min_length=1, max_length=50)
    color: str = Field(default=DEFAULT_TAG_COLOR, pattern=HEX_COLOR_PATTERN)


class TagRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


__all__ = ["TagCreate", "TagRead"]
