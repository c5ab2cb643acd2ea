"""CLI entry point for the feed aggregator."""

import asyncio
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import typer

from feed_aggregator.adapters.extractors import HTMLContentExtractor
from feed_aggregator.adapters.sources import HTTPFeedFetcher
from feed_aggregator.config import Settings, get_settings
from feed_aggregator.core import ExtractedItem, FeedAggregatorError, PartialFetchError
from feed_aggregator.use_cases import Aggregator, run_periodically


def main(
    config: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to YAML config"),
    watch: bool = typer.Option(False, "--watch", help="Keep polling on the update interval"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the snapshot as JSON"),
    no_extract: bool = typer.Option(False, "--no-extract", help="Disable content extraction"),
) -> None:
    """Fetch all configured feeds and extract article content."""
    try:
        settings = get_settings(config)
    except FeedAggregatorError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(code=2)

    if no_extract:
        settings.extraction.enabled = False

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        exit_code = asyncio.run(async_run(settings, watch, output))
    except KeyboardInterrupt:
        exit_code = 0
    raise typer.Exit(code=exit_code)


def app() -> None:
    """CLI entry point."""
    typer.run(main)


def build_aggregator(settings: Settings) -> Aggregator:
    """Wire fetcher, extractor and aggregator from settings."""
    fetcher = HTTPFeedFetcher(
        timeout=settings.fetch.timeout,
        user_agent=settings.fetch.user_agent,
    )

    extractor = None
    if settings.extraction.enabled:
        extractor = HTMLContentExtractor(
            timeout=settings.extraction.timeout,
            user_agent=settings.extraction.user_agent,
            min_text_length=settings.extraction.min_text_length,
        )

    return Aggregator(settings, fetcher, extractor)


async def async_run(settings: Settings, watch: bool, output: Optional[Path]) -> int:
    """Async implementation of the main command."""
    aggregator = build_aggregator(settings)

    print("\n" + "=" * 70)
    print("FEED AGGREGATOR")
    print("=" * 70)
    print(f"  • Feeds: {len(settings.feeds)}")
    print(f"  • Extraction: {'on' if settings.extraction.enabled else 'off'}")
    if settings.extraction.enabled:
        print(f"  • Max concurrent extractions: {settings.extraction.max_concurrent}")
        print(f"  • Rate limit: {settings.extraction.rate_limit}s")

    if watch:
        print(f"  • Polling every {settings.update_interval:.0f}s (Ctrl+C to stop)")
        await run_periodically(aggregator, settings.update_interval)
        return 0

    exit_code = 0
    try:
        await aggregator.fetch_all()
    except PartialFetchError as e:
        exit_code = 1
        print(f"\n⚠️  {len(e.errors)} source(s) failed:")
        for url, error in e.errors.items():
            print(f"  ✗ {url}: {error}")

    items = aggregator.get_items()
    print_summary(items)

    if output is not None:
        save_snapshot(items, output)
        print(f"\n📁 Snapshot saved to {output}")

    return exit_code


def print_summary(items: list[ExtractedItem]) -> None:
    """Print item counts per source."""
    print(f"\n✓ Total items: {len(items)}")
    by_source = Counter(item.source_name for item in items)
    for name, count in sorted(by_source.items()):
        print(f"  • {name}: {count}")

    extracted = sum(1 for item in items if item.content_extracted)
    if extracted:
        print(f"✓ Content extracted: {extracted}/{len(items)}")


def snapshot_to_dict(item: ExtractedItem) -> dict:
    """Convert an extracted item to a JSON-friendly dict."""
    return {
        "source": item.item.source_name,
        "guid": item.item.guid,
        "title": item.item.title,
        "link": item.item.link,
        "description": item.item.description,
        "content": item.item.content,
        "author": item.item.author,
        "published": item.item.published.isoformat() if item.item.published else None,
        "full_content": item.full_content,
        "content_extracted": item.content_extracted,
        "extracted_at": item.extracted_at.isoformat() if item.extracted_at else None,
        "extraction_error": item.extraction_error,
    }


def save_snapshot(items: list[ExtractedItem], output_path: Path) -> None:
    """Write the snapshot to a JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps([snapshot_to_dict(item) for item in items], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


if __name__ == "__main__":
    app()
