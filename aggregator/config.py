# aggregator/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate environment variables at startup.
Nothing here is required: a missing content store simply removes the internal
sources from every profile instead of failing the process.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from aggregator.constants import CacheConfig, DisplayLimits, FreshnessDefaults


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Internal content store (PostgREST-style endpoint)
    STORE_URL: str | None = Field(
        default=None,
        description="Base URL of the internal content store, e.g. https://xyz.supabase.co",
    )
    STORE_ANON_KEY: str | None = Field(
        default=None,
        description="Anonymous access token for the internal content store",
    )

    # Freshness windows (seconds)
    FEED_FRESHNESS_SECONDS: int = Field(
        default=FreshnessDefaults.FEED_SECONDS,
        description="Cache lifetime for syndication feeds",
    )
    SCOREBOARD_FRESHNESS_SECONDS: int = Field(
        default=FreshnessDefaults.SCOREBOARD_SECONDS,
        description="Cache lifetime for scoreboard JSON",
    )
    STORE_BLOG_FRESHNESS_SECONDS: int = Field(
        default=FreshnessDefaults.STORE_BLOG_SECONDS,
        description="Cache lifetime for internal blog rows",
    )
    STORE_EVENT_FRESHNESS_SECONDS: int = Field(
        default=FreshnessDefaults.STORE_EVENT_SECONDS,
        description="Cache lifetime for internal event rows",
    )

    # Fetching
    FETCH_TIMEOUT_MS: int = Field(
        default=FreshnessDefaults.FETCH_TIMEOUT_MS,
        description="Hard timeout for a single upstream request in milliseconds",
    )
    SERVE_STALE_ON_ERROR: bool = Field(
        default=True,
        description="Serve an expired cached payload when the refetch fails",
    )
    CACHE_MAX_SOURCES: int = Field(
        default=CacheConfig.SOURCE_MAX_ENTRIES,
        description="Maximum number of per-source cache entries kept in memory",
    )

    # Display caps
    ARTICLE_DISPLAY_CAP: int = Field(
        default=DisplayLimits.BLOG_ARTICLES,
        description="Maximum articles returned for the blog profile",
    )
    NEWS_DISPLAY_CAP: int = Field(
        default=DisplayLimits.NEWS_ARTICLES,
        description="Maximum articles returned for the news profile",
    )
    EVENT_DISPLAY_CAP: int = Field(
        default=DisplayLimits.EVENTS,
        description="Maximum events returned for the events profile",
    )

    # HTTP boundary
    FEED_RESPONSE_TTL_SECONDS: int = Field(
        default=CacheConfig.FEED_RESPONSE_TTL_SECONDS,
        description="In-process cache lifetime for /v1/feeds responses",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs instead of human-readable lines",
    )

    @field_validator("STORE_URL", "STORE_ANON_KEY")
    @classmethod
    def blank_as_missing(cls, v: str | None) -> str | None:
        """Treat empty strings from .env files as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("STORE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v:
            return v.rstrip("/")
        return v

    @property
    def store_configured(self) -> bool:
        """Both store credentials are present."""
        return bool(self.STORE_URL and self.STORE_ANON_KEY)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
