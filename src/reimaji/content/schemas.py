"""Pydantic models for news and research endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NewsType = Literal["tool", "use_case", "regulation"]
ContentKind = Literal["news", "research"]
BulkAction = Literal["publish", "unpublish", "remove"]


# --- News ---


class NewsCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    summary: str
    content: str
    type: NewsType
    tags: list[str] = []
    source_url: str | None = None
    image_url: str | None = None
    is_premium: bool = False
    is_published: bool = False


class NewsUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    summary: str | None = None
    content: str | None = None
    type: NewsType | None = None
    tags: list[str] | None = None
    source_url: str | None = None
    image_url: str | None = None
    is_premium: bool | None = None
    is_published: bool | None = None


class NewsListItem(BaseModel):
    """Card view; bodies are only served by the detail endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    summary: str
    type: NewsType
    tags: list[str]
    image_url: str | None = None
    is_premium: bool
    published_at: datetime | None = None
    view_count: int
    like_count: int


class NewsDetail(NewsListItem):
    content: str | None = None
    source_url: str | None = None
    locked: bool = False
    updated_at: datetime


class NewsAdminResponse(NewsDetail):
    is_published: bool
    created_by: int
    created_at: datetime


# --- Research ---


class ResearchCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    summary: str
    implication: str
    content: str
    tags: list[str] = []
    paper_url: str | None = None
    image_url: str | None = None
    is_premium: bool = False
    is_published: bool = False


class ResearchUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    summary: str | None = None
    implication: str | None = None
    content: str | None = None
    tags: list[str] | None = None
    paper_url: str | None = None
    image_url: str | None = None
    is_premium: bool | None = None
    is_published: bool | None = None


class ResearchListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    summary: str
    implication: str
    tags: list[str]
    image_url: str | None = None
    is_premium: bool
    published_at: datetime | None = None
    view_count: int
    citation_count: int


class ResearchDetail(ResearchListItem):
    content: str | None = None
    paper_url: str | None = None
    locked: bool = False
    updated_at: datetime


class ResearchAdminResponse(ResearchDetail):
    is_published: bool
    created_by: int
    created_at: datetime


# --- Stats, bulk, sitemap ---


class TagCount(BaseModel):
    tag: str
    count: int


class TopByViews(BaseModel):
    id: int
    title: str
    view_count: int


class ContentStatsResponse(BaseModel):
    total_published: int
    total_draft: int
    top_tags: list[TagCount]
    top_by_views: list[TopByViews]


class BulkRequest(BaseModel):
    kind: ContentKind
    action: BulkAction
    ids: list[int] = Field(min_length=1, max_length=500)


class BulkResponse(BaseModel):
    kind: ContentKind
    action: BulkAction
    updated: list[int]
    missing: list[int]


class SitemapEntry(BaseModel):
    url: str
    last_modified: datetime | None = None


class SitemapResponse(BaseModel):
    urls: list[SitemapEntry]
