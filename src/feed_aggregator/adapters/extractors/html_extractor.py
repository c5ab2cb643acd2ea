"""Article text extractor built on trafilatura."""

import asyncio
import logging
from typing import Optional
from urllib.parse import urlparse

import httpx
import trafilatura

from feed_aggregator.adapters.browser_headers import page_headers
from feed_aggregator.core import ContentExtractor, ExtractionError

logger = logging.getLogger(__name__)

SUPPORTED_CONTENT_TYPES = ("text/html", "application/xhtml", "text/plain")


class HTMLContentExtractor(ContentExtractor):
    """Download an article page and extract its main text."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "feed-aggregator/1.0",
        min_text_length: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.min_text_length = min_text_length
        self.transport = transport

    async def extract(self, url: str) -> str:
        """Fetch a page and return its article text.

        Raises:
            ExtractionError: invalid URL, failed request, unsupported content
                or too little text
        """
        if not url:
            raise ExtractionError("empty URL")

        parsed_url = urlparse(url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise ExtractionError(f"invalid URL: {url}")

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(url, headers=page_headers(self.user_agent))
            except httpx.HTTPError as e:
                raise ExtractionError(f"fetch URL {url}: {e}") from e

        if response.status_code != 200:
            raise ExtractionError(f"unexpected status code {response.status_code} for {url}")

        content_type = response.headers.get("content-type", "").lower()
        if content_type and not any(t in content_type for t in SUPPORTED_CONTENT_TYPES):
            raise ExtractionError(f"unsupported content type: {content_type}")

        if content_type.startswith("text/plain"):
            text = response.text.strip()
        else:
            text = await asyncio.to_thread(self.extract_text, response.text, url)

        if not text:
            raise ExtractionError(f"no content extracted from {url}")

        if len(text) < self.min_text_length:
            raise ExtractionError(f"content too short: {len(text)} chars")

        logger.debug("extracted %d chars from %s", len(text), url)
        return text

    def extract_text(self, html: str, url: Optional[str] = None) -> str:
        """Return the main article text of an HTML document, or "" if none is found."""
        text = trafilatura.extract(
            html,
            url=url,
            include_comments=False,
            include_tables=True,
            include_images=False,
            include_links=False,
            deduplicate=True,
        )
        return (text or "").strip()
