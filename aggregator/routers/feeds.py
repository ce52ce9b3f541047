# aggregator/routers/feeds.py
"""
Aggregated feed endpoints.

GET /v1/feeds - List available profiles
GET /v1/feeds/{profile} - Aggregate a profile (blog, news, events)
"""

from datetime import UTC, datetime

from cachetools import TTLCache
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from aggregator.config import Settings, get_settings
from aggregator.constants import CacheConfig
from aggregator.models import AggregationProfile, Article
from aggregator.schemas.feeds import ArticleOut, EventOut, FeedResponse, ProfileListResponse, SourceReportOut
from aggregator.services.orchestrator import AggregationOrchestrator, AggregationResult
from aggregator.sources import build_profiles

router = APIRouter(prefix="/v1", tags=["feeds"])

# In-memory cache for aggregated responses (short TTL, one entry per profile)
_feed_cache: TTLCache = TTLCache(
    maxsize=CacheConfig.FEED_RESPONSE_MAX_ENTRIES,
    ttl=get_settings().FEED_RESPONSE_TTL_SECONDS,
)


def invalidate_feed_cache():
    """Clear the aggregated response cache."""
    _feed_cache.clear()


def get_orchestrator(request: Request) -> AggregationOrchestrator:
    """Orchestrator created at application startup."""
    return request.app.state.orchestrator


def get_profiles(settings: Settings = Depends(get_settings)) -> dict[str, AggregationProfile]:
    return build_profiles(settings)


def to_feed_response(result: AggregationResult, generated_at: datetime) -> FeedResponse:
    """Convert an aggregation result into the API response."""
    items = [
        ArticleOut.model_validate(item) if isinstance(item, Article) else EventOut.model_validate(item)
        for item in result.items
    ]
    sources = [
        SourceReportOut(
            label=report.label,
            kind=report.kind.value,
            status=report.status.value,
            item_count=report.item_count,
            duration_ms=report.duration_ms,
            error=report.error,
        )
        for report in result.sources
    ]
    return FeedResponse(
        profile=result.profile,
        content_kind=result.content_kind.value,
        items=items,
        total=len(items),
        used_fallback=result.used_fallback,
        sources=sources,
        generated_at=generated_at,
    )


@router.get("/feeds", response_model=ProfileListResponse)
def list_profiles(profiles: dict[str, AggregationProfile] = Depends(get_profiles)) -> ProfileListResponse:
    """List the aggregation profiles this deployment serves."""
    return ProfileListResponse(profiles=sorted(profiles))


@router.get("/feeds/{profile}", response_model=FeedResponse)
async def get_feed(
    profile: str,
    response: Response,
    profiles: dict[str, AggregationProfile] = Depends(get_profiles),
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> FeedResponse:
    """
    Aggregate one profile.

    Sources are fetched in parallel; a failing source only drops its own items.
    When every source comes back empty the static fallback dataset is served
    and `used_fallback` is true. Never fails because of upstream errors.
    """
    selected = profiles.get(profile)
    if selected is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown profile '{profile}'. Available: {', '.join(sorted(profiles))}",
        )

    cache_control = f"public, max-age={settings.FEED_RESPONSE_TTL_SECONDS}"

    # Check cache
    cache_key = f"feed:{profile}"
    cached = _feed_cache.get(cache_key)
    if cached is not None:
        response.headers["X-Cache"] = "HIT"
        response.headers["Cache-Control"] = cache_control
        return cached

    response.headers["X-Cache"] = "MISS"
    response.headers["Cache-Control"] = cache_control

    result = await orchestrator.aggregate(selected)
    feed = to_feed_response(result, datetime.now(UTC))

    _feed_cache[cache_key] = feed
    return feed
