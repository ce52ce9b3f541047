# aggregator/schemas/feeds.py
"""
Schemas for aggregated feed endpoints.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ArticleOut(BaseModel):
    """A single article in an aggregated feed."""
    kind: Literal["article"] = Field("article", description="Item shape discriminator")
    id: str = Field(..., description="Dedupe key (link, else title, max 200 chars)")
    title: str = Field(..., description="Sanitized plain-text title")
    source_label: str = Field(..., description="Provenance label of the source")
    link: Optional[str] = Field(None, description="Article URL")
    published_at: Optional[datetime] = Field(None, description="Publish time (UTC)")
    snippet: Optional[str] = Field(None, description="Sanitized HTML-safe excerpt")
    thumbnail: Optional[str] = Field(None, description="Thumbnail image URL")
    is_external: bool = Field(True, description="False for internal blog posts")

    class Config:
        from_attributes = True


class EventOut(BaseModel):
    """A single upcoming event in an aggregated feed."""
    kind: Literal["event"] = Field("event", description="Item shape discriminator")
    id: str = Field(..., description="Dedupe key (link, else title, max 200 chars)")
    title: str = Field(..., description="Sanitized plain-text title")
    start_time: datetime = Field(..., description="Scheduled start (UTC)")
    source_label: str = Field(..., description="Provenance label of the source")
    link: Optional[str] = Field(None, description="Event URL")
    sport_type: Optional[str] = Field(None, description="Sport or league name")
    thumbnail: Optional[str] = Field(None, description="Thumbnail image URL")

    class Config:
        from_attributes = True


FeedItem = Annotated[Union[ArticleOut, EventOut], Field(discriminator="kind")]


class SourceReportOut(BaseModel):
    """How one source contributed to the response."""
    label: str = Field(..., description="Source label")
    kind: str = Field(..., description="Source kind: rss, scoreboard_json, internal_store")
    status: str = Field(..., description="ok, cached, stale, empty or failed")
    item_count: int = Field(0, description="Valid items the source produced")
    duration_ms: int = Field(0, description="Time spent on this source")
    error: Optional[str] = Field(None, description="Failure message, if any")


class FeedResponse(BaseModel):
    """
    Aggregated feed response.
    GET /v1/feeds/{profile}
    """
    profile: str = Field(..., description="Profile name (blog, news, events)")
    content_kind: str = Field(..., description="article or event")
    items: List[FeedItem] = Field(default_factory=list)
    total: int = Field(0, description="Number of items returned")
    used_fallback: bool = Field(False, description="Whether the static fallback dataset was served")
    sources: List[SourceReportOut] = Field(default_factory=list)
    generated_at: datetime = Field(..., description="When the aggregation ran")


class ProfileListResponse(BaseModel):
    """
    Available profiles.
    GET /v1/feeds
    """
    profiles: List[str] = Field(default_factory=list)
