"""Aggregation use cases: fetch all sources, extract content, publish."""

import asyncio
import logging
import threading
from enum import Enum
from typing import Optional

from feed_aggregator.core import (
    AggregatorBusyError,
    ConfigProvider,
    ContentExtractor,
    ExtractedItem,
    ExtractionGate,
    FeedFetcher,
    Item,
    PartialFetchError,
    Source,
)

logger = logging.getLogger(__name__)


class AggregatorState(str, Enum):
    """Stage of the current aggregation run."""

    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"


class Aggregator:
    """Coordinates concurrent feed fetching and content extraction.

    A run fetches every configured source concurrently, merges the items of
    the sources that succeeded, optionally passes them through an
    ``ExtractionGate``, and replaces the published snapshot in one step.
    Readers get a copy of the snapshot via ``get_items``.

    Only one run may be in progress at a time; an overlapping call to
    ``fetch_all`` raises ``AggregatorBusyError``.
    """

    def __init__(
        self,
        config: ConfigProvider,
        fetcher: FeedFetcher,
        extractor: Optional[ContentExtractor] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.extractor = extractor
        self.state = AggregatorState.IDLE
        self._items: list[ExtractedItem] = []
        self._errors: dict[str, Exception] = {}
        self._lock = threading.Lock()
        self._running = False

    async def fetch_all(self) -> None:
        """Run one full aggregation cycle.

        The snapshot is always replaced with whatever succeeded. If any
        source failed, ``PartialFetchError`` is raised afterwards with the
        first failure in completion order.

        Raises:
            AggregatorBusyError: another run is in progress
            PartialFetchError: one or more sources failed
        """
        if self._running:
            raise AggregatorBusyError("aggregation run already in progress")

        self._running = True
        try:
            self.state = AggregatorState.FETCHING
            items, errors, first_error = await self._fetch_sources(self.config.list_sources())

            extracted = await self._extract_content(items)

            with self._lock:
                self._items = extracted
                self._errors = errors
        finally:
            self.state = AggregatorState.IDLE
            self._running = False

        logger.info("total items processed: %d", len(extracted))

        if errors:
            raise PartialFetchError(errors, first_error) from first_error

    def get_items(self) -> list[ExtractedItem]:
        """Return a copy of the published snapshot."""
        with self._lock:
            return list(self._items)

    @property
    def last_errors(self) -> dict[str, Exception]:
        """Per-source errors of the last completed run."""
        with self._lock:
            return dict(self._errors)

    @property
    def is_running(self) -> bool:
        return self._running

    async def _fetch_sources(
        self, sources: list[Source]
    ) -> tuple[list[Item], dict[str, Exception], Optional[Exception]]:
        """Fetch all sources concurrently, collecting results in completion order."""
        all_items: list[Item] = []
        errors: dict[str, Exception] = {}
        first_error: Optional[Exception] = None

        tasks = [asyncio.create_task(self._fetch_source(source)) for source in sources]
        try:
            for next_done in asyncio.as_completed(tasks):
                source, items, error = await next_done
                if error is not None:
                    errors[source.url] = error
                    if first_error is None:
                        first_error = error
                    continue
                all_items.extend(items)
        finally:
            # cancellation: let every fetch unwind before returning control
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        if errors:
            logger.warning("%d of %d sources failed", len(errors), len(sources))

        return all_items, errors, first_error

    async def _fetch_source(self, source: Source) -> tuple[Source, list[Item], Optional[Exception]]:
        logger.info("fetching feed: %s", source.name)
        try:
            items = await self.fetcher.fetch(source.url, source.name)
        except Exception as e:
            logger.error("failed to fetch %s: %s", source.name, e)
            return source, [], e

        logger.info("fetched %d items from %s", len(items), source.name)
        return source, items, None

    async def _extract_content(self, items: list[Item]) -> list[ExtractedItem]:
        """Extract full content for every item when extraction is enabled."""
        extraction = self.config.get_extraction_config()

        if not extraction.enabled or self.extractor is None:
            logger.info("content extraction disabled")
            return [ExtractedItem(item=item) for item in items]

        self.state = AggregatorState.EXTRACTING
        logger.info("extracting content from %d items", len(items))

        gate = ExtractionGate(self.extractor, extraction.max_concurrent, extraction.rate_limit)
        extracted = await gate.extract_all(items)

        success_count = sum(1 for item in extracted if item.content_extracted)
        logger.info("content extracted from %d/%d items", success_count, len(items))
        return extracted


async def run_periodically(
    aggregator: Aggregator,
    interval: float,
    max_cycles: Optional[int] = None,
) -> int:
    """Trigger aggregation runs one after another, ``interval`` seconds apart.

    Partial failures are logged and do not stop the loop.

    Returns:
        Number of completed cycles
    """
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        try:
            await aggregator.fetch_all()
        except PartialFetchError as e:
            logger.warning("aggregation run finished with errors: %s", e)
        cycles += 1

        if max_cycles is not None and cycles >= max_cycles:
            break
        await asyncio.sleep(interval)

    return cycles
