"""
Pydantic schemas for API request/response validation.
"""

from aggregator.schemas.feeds import (
    ArticleOut,
    EventOut,
    FeedResponse,
    ProfileListResponse,
    SourceReportOut,
)

__all__ = [
    "ArticleOut",
    "EventOut",
    "FeedResponse",
    "ProfileListResponse",
    "SourceReportOut",
]
