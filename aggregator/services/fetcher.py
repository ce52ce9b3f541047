"""
Source fetcher with a per-source payload cache.

One GET per upstream, bounded by the upstream's own timeout. A fresh cache
entry short-circuits the network call; a successful fetch replaces the entry
wholesale; a failed fetch never evicts it. Failures are returned as values,
never raised, so one broken upstream cannot abort an aggregation.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx
from cachetools import LRUCache

from aggregator.constants import CacheConfig
from aggregator.errors import TransportError
from aggregator.models import CacheEntry, SourceDescriptor

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class FetchResult:
    """Outcome of one fetch. `payload` may be set even on error (stale data)."""

    descriptor: SourceDescriptor
    payload: bytes | None = None
    error: TransportError | None = None
    from_cache: bool = False
    stale: bool = False
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceCache:
    """
    Payload cache keyed by source.

    Expired entries are kept (bounded by LRU size) so they can be served when
    a refetch fails; freshness is decided by the caller via CacheEntry.is_fresh.
    Each write replaces the whole entry for its key, so concurrent writers
    race benignly (last writer wins).
    """

    def __init__(self, maxsize: int = CacheConfig.SOURCE_MAX_ENTRIES):
        self._entries: LRUCache = LRUCache(maxsize=maxsize)

    def get(self, source_key: str) -> CacheEntry | None:
        return self._entries.get(source_key)

    def put(self, entry: CacheEntry) -> None:
        self._entries[entry.source_key] = entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, source_key: str) -> bool:
        return source_key in self._entries


class SourceFetcher:
    """
    Fetch upstream payloads over HTTP.

    Usage:
        async with SourceFetcher() as fetcher:
            result = await fetcher.fetch(descriptor)
            if result.payload is not None:
                ...
    """

    DEFAULT_HEADERS = {
        "User-Agent": "Inswinger-Aggregator/1.0 (+https://inswinger.live)",
        "Accept": "application/json, application/rss+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.1",
    }

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        cache: SourceCache | None = None,
        serve_stale_on_error: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the fetcher.

        Args:
            client: Shared HTTP client (one is created if omitted)
            cache: Per-source payload cache (a private one if omitted)
            serve_stale_on_error: Return an expired payload when the refetch fails
            clock: Source of "now", injectable for tests
        """
        self.client = client or httpx.AsyncClient(headers=self.DEFAULT_HEADERS, follow_redirects=True)
        self.cache = cache if cache is not None else SourceCache()
        self.serve_stale_on_error = serve_stale_on_error
        self.clock = clock

    async def fetch(self, descriptor: SourceDescriptor) -> FetchResult:
        """
        Fetch one upstream, honoring its freshness window and timeout.

        Returns:
            FetchResult; `error` is set for non-2xx, timeouts and transport errors
        """
        entry = self.cache.get(descriptor.key)
        if entry is not None and entry.is_fresh(self.clock()):
            logger.debug(
                f"Cache hit for {descriptor.label}",
                extra={"source": descriptor.label, "from_cache": True},
            )
            return FetchResult(descriptor=descriptor, payload=entry.payload, from_cache=True)

        start_time = time.time()
        try:
            payload = await self._request(descriptor)
        except TransportError as error:
            duration_ms = int((time.time() - start_time) * 1000)
            return self._failed(descriptor, error, entry, duration_ms)

        duration_ms = int((time.time() - start_time) * 1000)
        self.cache.put(
            CacheEntry(
                source_key=descriptor.key,
                fetched_at=self.clock(),
                payload=payload,
                ttl_seconds=descriptor.freshness_window_seconds,
            )
        )
        logger.info(
            f"Fetched {descriptor.label} ({len(payload)} bytes in {duration_ms}ms)",
            extra={"source": descriptor.label, "duration_ms": duration_ms},
        )
        return FetchResult(descriptor=descriptor, payload=payload, duration_ms=duration_ms)

    async def _request(self, descriptor: SourceDescriptor) -> bytes:
        """
        Issue the GET.

        Raises:
            TransportError: On timeout, transport failure or non-2xx status
        """
        timeout_seconds = descriptor.fetch_timeout_ms / 1000
        try:
            response = await asyncio.wait_for(
                self.client.get(
                    descriptor.endpoint,
                    headers=dict(descriptor.headers),
                    timeout=timeout_seconds,
                ),
                timeout=timeout_seconds,
            )
            response.raise_for_status()
            return response.content
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code} from {descriptor.endpoint}",
                source=descriptor.label,
                status_code=e.response.status_code,
            ) from e
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TransportError(
                f"Timed out after {descriptor.fetch_timeout_ms}ms fetching {descriptor.endpoint}",
                source=descriptor.label,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Transport error fetching {descriptor.endpoint}: {e}", source=descriptor.label) from e
        except Exception as e:
            raise TransportError(f"Unexpected error fetching {descriptor.endpoint}: {e}", source=descriptor.label) from e

    def _failed(
        self,
        descriptor: SourceDescriptor,
        error: TransportError,
        entry: CacheEntry | None,
        duration_ms: int,
    ) -> FetchResult:
        if entry is not None and self.serve_stale_on_error:
            logger.warning(
                f"Fetch failed for {descriptor.label}, serving stale payload: {error}",
                extra={"source": descriptor.label, "error": str(error), "from_cache": True},
            )
            return FetchResult(
                descriptor=descriptor,
                payload=entry.payload,
                error=error,
                from_cache=True,
                stale=True,
                duration_ms=duration_ms,
            )

        logger.warning(
            f"Fetch failed for {descriptor.label}: {error}",
            extra={"source": descriptor.label, "error": str(error)},
        )
        return FetchResult(descriptor=descriptor, error=error, duration_ms=duration_ms)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "SourceFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
