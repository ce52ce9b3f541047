"""
CLI for running an aggregation from the shell.

Usage:
    python -m aggregator.cli.aggregate blog
    python -m aggregator.cli.aggregate events --limit 10
    python -m aggregator.cli.aggregate news --json
"""

import argparse
import asyncio
import sys
from datetime import UTC, datetime

from dotenv import load_dotenv

load_dotenv()


async def run_aggregation(profile_name: str):
    """Aggregate one profile with a throwaway fetcher."""
    from aggregator.config import get_settings
    from aggregator.services.fetcher import SourceFetcher
    from aggregator.services.orchestrator import AggregationOrchestrator
    from aggregator.sources import build_profiles

    settings = get_settings()
    profile = build_profiles(settings)[profile_name]

    async with SourceFetcher(serve_stale_on_error=settings.SERVE_STALE_ON_ERROR) as fetcher:
        return await AggregationOrchestrator(fetcher).aggregate(profile)


def format_item(position: int, item) -> str:
    when = getattr(item, "start_time", None) or getattr(item, "published_at", None)
    stamp = when.strftime("%Y-%m-%d %H:%M") if when else "----------------"
    return f"{position:>3}. {stamp}  [{item.source_label}] {item.title}"


def cmd_aggregate(args):
    """Aggregate a profile and print the result."""
    from aggregator.config import get_settings
    from aggregator.logging_config import configure_logging
    from aggregator.routers.feeds import to_feed_response
    from aggregator.sources import build_profiles

    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON, level=args.log_level or settings.LOG_LEVEL)

    profiles = build_profiles(settings)
    if args.profile not in profiles:
        print(f"Error: Unknown profile '{args.profile}'")
        print(f"Available profiles: {', '.join(sorted(profiles))}")
        sys.exit(1)

    result = asyncio.run(run_aggregation(args.profile))
    if args.limit is not None:
        result.items = result.items[: max(args.limit, 0)]

    if args.json:
        print(to_feed_response(result, datetime.now(UTC)).model_dump_json(indent=2))
        return

    print(f"\n=== {result.profile} ({len(result.items)} {result.content_kind.value}s) ===\n")
    for position, item in enumerate(result.items, start=1):
        print(format_item(position, item))

    print("\nSources:")
    for report in result.sources:
        line = f"  {report.label}: {report.status.value} ({report.item_count} items, {report.duration_ms}ms)"
        if report.error:
            line += f" - {report.error}"
        print(line)

    if result.used_fallback:
        print("\nAll sources were empty; fallback dataset shown.")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Inswinger aggregation CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Blog page articles (internal posts + news feeds)
  python -m aggregator.cli.aggregate blog

  # Next ten upcoming events
  python -m aggregator.cli.aggregate events --limit 10

  # Machine-readable output
  python -m aggregator.cli.aggregate news --json
        """,
    )
    parser.add_argument("profile", help="Profile to aggregate (blog, news, events)")
    parser.add_argument("--json", action="store_true", help="Print the API response as JSON")
    parser.add_argument("--limit", type=int, default=None, help="Show at most N items")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.set_defaults(func=cmd_aggregate)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
