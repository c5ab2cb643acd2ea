"""RSS/Atom feed fetcher."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import feedparser
import httpx

from feed_aggregator.adapters.browser_headers import feed_headers
from feed_aggregator.core import (
    FeedFetcher,
    FeedParseError,
    FetchError,
    FetchTimeoutError,
    HTTPStatusError,
    Item,
    assign_guid,
    filter_duplicates,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "feed-aggregator/1.0"


class HTTPFeedFetcher(FeedFetcher):
    """Fetch RSS/Atom feeds over HTTP and normalize their entries."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    async def fetch(self, source_url: str, source_name: str) -> list[Item]:
        """Fetch a feed and return its entries.

        The timeout covers the whole operation, request and parsing included.

        Raises:
            FetchTimeoutError: the timeout expired
            HTTPStatusError: the response status was not 2xx
            FeedParseError: the body is not an RSS/Atom document
            FetchError: any other transport failure
        """
        try:
            return await asyncio.wait_for(self._fetch(source_url, source_name), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(
                f"timed out after {self.timeout}s fetching {source_url}", source_url
            ) from e

    async def _fetch(self, source_url: str, source_name: str) -> list[Item]:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(source_url, headers=feed_headers(self.user_agent))
            except httpx.TimeoutException as e:
                raise FetchTimeoutError(f"timed out fetching {source_url}: {e}", source_url) from e
            except httpx.HTTPError as e:
                raise FetchError(f"fetch {source_url}: {e}", source_url) from e

        if not response.is_success:
            raise HTTPStatusError(response.status_code, source_url)

        # feedparser is sync; run in a thread to keep the loop responsive
        items = await asyncio.to_thread(self.parse, response.content, source_name, source_url)
        unique, duplicate_count = filter_duplicates(items)
        if duplicate_count:
            logger.debug("dropped %d duplicate entries from %s", duplicate_count, source_name)

        return unique

    def parse(self, body: bytes, source_name: str, source_url: str = "") -> list[Item]:
        """Parse a feed document into items."""
        parsed = feedparser.parse(body)

        if not parsed.get("version") and not parsed.entries:
            reason = parsed.get("bozo_exception") or "unrecognized feed format"
            raise FeedParseError(f"parse feed {source_url}: {reason}", source_url)

        if parsed.get("bozo"):
            logger.debug("feed %s parsed with warnings: %s", source_url, parsed.get("bozo_exception"))

        source_title = parsed.feed.get("title", "")
        return [self._build_item(entry, source_name, source_title) for entry in parsed.entries]

    def _build_item(self, entry: feedparser.FeedParserDict, source_name: str, source_title: str) -> Item:
        title = entry.get("title", "")
        link = entry.get("link", "")

        return Item(
            source_name=source_name,
            guid=assign_guid(entry.get("id", ""), link, source_title, title),
            title=title,
            link=link,
            description=entry.get("description", "") or entry.get("summary", ""),
            content=self._content(entry),
            author=self._author(entry),
            published=self._published(entry),
        )

    def _content(self, entry: feedparser.FeedParserDict) -> str:
        for block in entry.get("content", []):
            value = block.get("value", "")
            if value:
                return value
        return ""

    def _author(self, entry: feedparser.FeedParserDict) -> str:
        detail = entry.get("author_detail") or {}
        return detail.get("name") or entry.get("author", "")

    def _published(self, entry: feedparser.FeedParserDict) -> Optional[datetime]:
        """Published time, falling back to updated time."""
        for date_field in ["published_parsed", "updated_parsed"]:
            date_tuple = entry.get(date_field)
            if date_tuple:
                try:
                    return datetime(*date_tuple[:6], tzinfo=timezone.utc)
                except (ValueError, TypeError):
                    continue

        return None
