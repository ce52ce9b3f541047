"""
Aggregation orchestrator.

Runs one aggregation per call:
- Fetching: one fetch -> parse -> normalize sub-pipeline per source, all concurrent
- Merging: internal sources first, then the rest in profile order
- Dedupe -> temporal filter/sort -> display cap
- Fallback: a static dataset when nothing survived

Every sub-pipeline contains its own failures, and the join waits for all of
them, so a slow or broken source only costs its own items.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from aggregator.logging_config import log_stage, profile_var, run_id_var
from aggregator.models import (
    AggregationProfile,
    Article,
    ContentKind,
    Event,
    NormalizedItem,
    SourceDescriptor,
    SourceKind,
)
from aggregator.services.deduper import Deduper
from aggregator.services.fallback import fallback_items
from aggregator.services.fetcher import SourceFetcher, utc_now
from aggregator.services.parsers import BaseParser, default_parsers
from aggregator.services.temporal import cap_events, filter_and_sort_events, sort_and_cap_articles

logger = logging.getLogger(__name__)


class AggregationState(str, Enum):
    """Lifecycle of a single aggregation call."""

    IDLE = "idle"
    FETCHING_ALL = "fetching_all"
    MERGING = "merging"
    DONE = "done"


_NEXT_STATE = {
    AggregationState.IDLE: AggregationState.FETCHING_ALL,
    AggregationState.FETCHING_ALL: AggregationState.MERGING,
    AggregationState.MERGING: AggregationState.DONE,
}


class SourceStatus(str, Enum):
    """How a single source contributed to an aggregation."""

    OK = "ok"  # Fetched from the network
    CACHED = "cached"  # Served from a fresh cache entry
    STALE = "stale"  # Refetch failed, expired cache entry used
    EMPTY = "empty"  # Reachable but produced no valid items
    FAILED = "failed"  # Fetch failed with nothing cached


@dataclass
class SourceReport:
    """Result from a single source sub-pipeline."""

    label: str
    kind: SourceKind
    status: SourceStatus
    item_count: int = 0
    duration_ms: int = 0
    error: str | None = None


@dataclass
class AggregationResult:
    """Final result of one aggregation call."""

    profile: str
    content_kind: ContentKind
    items: list[NormalizedItem]
    used_fallback: bool
    sources: list[SourceReport]
    state: AggregationState
    state_history: list[AggregationState]
    duration_ms: int


@dataclass
class AggregationRun:
    """Per-call state; the orchestrator itself keeps none between calls."""

    profile: AggregationProfile
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: AggregationState = AggregationState.IDLE
    history: list[AggregationState] = field(default_factory=lambda: [AggregationState.IDLE])

    def advance(self, target: AggregationState) -> None:
        expected = _NEXT_STATE.get(self.state)
        if target != expected:
            raise RuntimeError(f"Invalid aggregation transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)


def order_descriptors(descriptors: Sequence[SourceDescriptor]) -> list[SourceDescriptor]:
    """Internal-store sources first, others after; relative order preserved."""
    internal = [d for d in descriptors if d.is_internal]
    external = [d for d in descriptors if not d.is_internal]
    return internal + external


class AggregationOrchestrator:
    """
    Fan out over a profile's sources, fan in, merge, and fall back.

    The only state shared between calls is the fetcher's per-source cache.
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        parsers: Mapping[SourceKind, BaseParser] | None = None,
        deduper: Deduper | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the orchestrator.

        Args:
            fetcher: Fetcher owning the per-source cache
            parsers: Parser per source kind (defaults to the built-in three)
            deduper: Deduplication service
            clock: Source of "now" for the event filter and fallback
        """
        self.fetcher = fetcher
        self.parsers = dict(parsers) if parsers is not None else default_parsers()
        self.deduper = deduper or Deduper()
        self.clock = clock

    async def aggregate(self, profile: AggregationProfile) -> AggregationResult:
        """
        Aggregate a profile.

        Never raises for upstream problems; the result is always renderable.
        """
        run = AggregationRun(profile=profile)
        run_token = run_id_var.set(run.run_id)
        profile_token = profile_var.set(profile.name)
        started = time.time()

        try:
            descriptors = order_descriptors(profile.descriptors)

            run.advance(AggregationState.FETCHING_ALL)
            with log_stage(AggregationState.FETCHING_ALL.value):
                outcomes = await asyncio.gather(*(self._run_source(d, profile.content_kind) for d in descriptors))

            run.advance(AggregationState.MERGING)
            with log_stage(AggregationState.MERGING.value):
                now = self.clock()
                items = self._merge(profile, [items for items, _ in outcomes], now)
                used_fallback = not items
                if used_fallback:
                    items = self._merge(profile, [fallback_items(profile.content_kind, now)], now)
                    logger.warning(
                        f"All sources empty for profile {profile.name}, serving fallback dataset",
                        extra={"event": "fallback_used", "used_fallback": True, "items": len(items)},
                    )

            run.advance(AggregationState.DONE)
            duration_ms = int((time.time() - started) * 1000)
            reports = [report for _, report in outcomes]

            logger.info(
                f"Aggregated {len(items)} {profile.content_kind.value}s for {profile.name} "
                f"from {len(descriptors)} sources in {duration_ms}ms",
                extra={
                    "event": "aggregation_complete",
                    "items": len(items),
                    "used_fallback": used_fallback,
                    "duration_ms": duration_ms,
                },
            )

            return AggregationResult(
                profile=profile.name,
                content_kind=profile.content_kind,
                items=items,
                used_fallback=used_fallback,
                sources=reports,
                state=run.state,
                state_history=list(run.history),
                duration_ms=duration_ms,
            )
        finally:
            profile_var.reset(profile_token)
            run_id_var.reset(run_token)

    async def aggregate_items(self, profile: AggregationProfile) -> list[NormalizedItem]:
        """Aggregate a profile and return only the items."""
        result = await self.aggregate(profile)
        return result.items

    async def _run_source(
        self,
        descriptor: SourceDescriptor,
        content_kind: ContentKind,
    ) -> tuple[list[NormalizedItem], SourceReport]:
        """Fetch -> parse -> normalize for one source. Never raises."""
        started = time.time()
        try:
            fetched = await self.fetcher.fetch(descriptor)
            error = str(fetched.error) if fetched.error else None

            if fetched.payload is None:
                return [], self._report(descriptor, SourceStatus.FAILED, 0, started, error)

            parser = self.parsers.get(descriptor.kind)
            if parser is None:
                return [], self._report(
                    descriptor, SourceStatus.FAILED, 0, started, f"no parser for {descriptor.kind.value}"
                )

            expected = Event if content_kind == ContentKind.EVENT else Article
            parsed = parser.parse_source(fetched.payload, descriptor)
            items = [item for item in parsed if isinstance(item, expected)]
            if len(items) != len(parsed):
                logger.warning(
                    f"{descriptor.label} produced {len(parsed) - len(items)} items of the wrong kind",
                    extra={"source": descriptor.label, "items_dropped": len(parsed) - len(items)},
                )

            if fetched.stale:
                status = SourceStatus.STALE
            elif not items:
                status = SourceStatus.EMPTY
            elif fetched.from_cache:
                status = SourceStatus.CACHED
            else:
                status = SourceStatus.OK

            return items, self._report(descriptor, status, len(items), started, error)

        except Exception as e:
            logger.warning(
                f"Source pipeline failed for {descriptor.label}: {e}",
                extra={"source": descriptor.label, "error": str(e)},
            )
            return [], self._report(descriptor, SourceStatus.FAILED, 0, started, str(e))

    def _merge(
        self,
        profile: AggregationProfile,
        per_source: Sequence[Sequence[NormalizedItem]],
        now: datetime,
    ) -> list[NormalizedItem]:
        merged = [item for items in per_source for item in items]
        unique = self.deduper.dedupe(merged)

        near_duplicates = self.deduper.find_near_duplicates(unique)
        if near_duplicates:
            logger.info(
                f"{len(near_duplicates)} near-duplicate titles kept for {profile.name}",
                extra={"event": "near_duplicates", "items": len(near_duplicates)},
            )

        if profile.content_kind == ContentKind.EVENT:
            return cap_events(filter_and_sort_events(unique, now), profile.display_cap)
        return sort_and_cap_articles(unique, profile.display_cap)

    @staticmethod
    def _report(
        descriptor: SourceDescriptor,
        status: SourceStatus,
        item_count: int,
        started: float,
        error: str | None = None,
    ) -> SourceReport:
        report = SourceReport(
            label=descriptor.label,
            kind=descriptor.kind,
            status=status,
            item_count=item_count,
            duration_ms=int((time.time() - started) * 1000),
            error=error,
        )
        logger.debug(
            f"{descriptor.label}: {status.value} ({item_count} items)",
            extra={
                "event": "source_complete",
                "source": descriptor.label,
                "source_kind": descriptor.kind.value,
                "status": status.value,
                "items": item_count,
                "duration_ms": report.duration_ms,
            },
        )
        return report
