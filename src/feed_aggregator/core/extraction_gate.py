"""Concurrency and rate limit envelope around content extraction."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from feed_aggregator.core.entities import ExtractedItem, Item
from feed_aggregator.core.interfaces import ContentExtractor

logger = logging.getLogger(__name__)


class Ticker:
    """Shared tick source releasing one waiter per interval.

    The first tick fires one interval after the first call to ``wait``. A
    waiter that arrives after its tick was due is released immediately, and
    the following tick is scheduled one interval after that release, so two
    releases are never closer than ``interval`` seconds.
    """

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self._lock = asyncio.Lock()
        self._next_tick: Optional[float] = None

    async def wait(self) -> None:
        """Block until the next tick."""
        if self.interval <= 0:
            return

        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._next_tick is None:
                self._next_tick = loop.time() + self.interval

            delay = self._next_tick - loop.time()
            while delay > 0:
                await asyncio.sleep(delay)
                delay = self._next_tick - loop.time()

            self._next_tick = max(self._next_tick, loop.time()) + self.interval


class ExtractionGate:
    """Bounds extraction calls by concurrency and a global rate limit.

    Every attempt acquires one of ``max_concurrent`` slots, then waits for the
    next tick of a single ticker shared by all attempts, then calls the
    extractor. The cadence is global across sources, not per host.

    Extraction failures never propagate: they end up as an ``ExtractedItem``
    with ``content_extracted=False`` and are not retried.
    """

    def __init__(self, extractor: ContentExtractor, max_concurrent: int, rate_limit: float) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.extractor = extractor
        self.max_concurrent = max_concurrent
        self.rate_limit = rate_limit
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._ticker = Ticker(rate_limit)

    async def extract(self, item: Item) -> ExtractedItem:
        """Extract full content for one item within the gate limits."""
        async with self._semaphore:
            await self._ticker.wait()

            extracted_at = datetime.now(timezone.utc)
            try:
                content = await self.extractor.extract(item.link)
            except Exception as e:
                logger.warning("failed to extract content from %s: %s", item.link, e)
                return ExtractedItem(
                    item=item,
                    content_extracted=False,
                    extracted_at=extracted_at,
                    extraction_error=str(e) or e.__class__.__name__,
                )

        return ExtractedItem(
            item=item,
            full_content=content,
            content_extracted=True,
            extracted_at=extracted_at,
        )

    async def extract_all(self, items: list[Item]) -> list[ExtractedItem]:
        """Run one extraction task per item and wait for all of them."""
        return list(await asyncio.gather(*(self.extract(item) for item in items)))
