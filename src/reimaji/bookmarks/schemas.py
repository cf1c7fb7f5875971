"""Pydantic models for bookmark endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BookmarkKind = Literal["news", "research", "lesson"]


class BookmarkToggleRequest(BaseModel):
    kind: BookmarkKind
    entity_id: str = Field(min_length=1, max_length=64)


class BookmarkStateResponse(BaseModel):
    kind: BookmarkKind
    entity_id: str
    bookmarked: bool


class BookmarkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: BookmarkKind
    entity_id: str
    created_at: datetime
