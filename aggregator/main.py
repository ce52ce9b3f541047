# aggregator/main.py

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from aggregator.config import get_settings
from aggregator.logging_config import configure_logging
from aggregator.routers import feeds_router
from aggregator.services.fetcher import SourceCache, SourceFetcher
from aggregator.services.orchestrator import AggregationOrchestrator

logger = logging.getLogger(__name__)


def build_orchestrator() -> AggregationOrchestrator:
    """Orchestrator with a process-wide fetcher and source cache."""
    settings = get_settings()
    fetcher = SourceFetcher(
        cache=SourceCache(maxsize=settings.CACHE_MAX_SOURCES),
        serve_stale_on_error=settings.SERVE_STALE_ON_ERROR,
    )
    return AggregationOrchestrator(fetcher)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)

    app.state.orchestrator = build_orchestrator()
    logger.info(
        f"Aggregator started (environment={settings.ENVIRONMENT}, store_configured={settings.store_configured})",
        extra={"event": "startup"},
    )
    try:
        yield
    finally:
        await app.state.orchestrator.fetcher.close()


app = FastAPI(title="Inswinger Aggregator", lifespan=lifespan)

app.include_router(feeds_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "inswinger-aggregator"}
