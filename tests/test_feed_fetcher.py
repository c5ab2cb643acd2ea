"""Tests for the RSS/Atom feed fetcher."""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from feed_aggregator.adapters.browser_headers import FEED_ACCEPT_LANGUAGES
from feed_aggregator.adapters.sources import HTTPFeedFetcher
from feed_aggregator.core import FeedParseError, FetchError, FetchTimeoutError, HTTPStatusError

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Example Feed</title>
    <link>https://example.com/</link>
    <description>Example updates</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/first</link>
      <guid isPermaLink="false">example-guid-1</guid>
      <description>Short summary</description>
      <content:encoded><![CDATA[<p>Full body</p>]]></content:encoded>
      <pubDate>Mon, 15 Jan 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/second</link>
      <description>Another summary</description>
    </item>
    <item>
      <title>No Link Article</title>
      <description>Orphan entry</description>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Feed</title>
  <id>urn:uuid:feed</id>
  <updated>2024-02-01T12:00:00Z</updated>
  <entry>
    <title>Atom Entry</title>
    <id>urn:uuid:entry-1</id>
    <link href="https://example.com/atom/1"/>
    <updated>2024-02-01T12:00:00Z</updated>
    <author><name>Jane Doe</name></author>
    <summary>Atom summary</summary>
  </entry>
</feed>
"""

DUPLICATE_FEED = """<?xml version="1.0"?>
<rss version="2.0">
  <channel>
    <title>Dup Feed</title>
    <item><title>One</title><guid>same</guid></item>
    <item><title>Two</title><guid>same</guid></item>
    <item><title>Three</title><guid>other</guid></item>
  </channel>
</rss>
"""


def make_fetcher(handler, timeout: float = 5.0, user_agent: str = "test-agent/1.0") -> HTTPFeedFetcher:
    """Create a fetcher that talks to a mock transport."""
    return HTTPFeedFetcher(timeout=timeout, user_agent=user_agent, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_rss_items() -> None:
    """Test fetching and normalizing an RSS 2.0 feed."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, text=RSS_FEED))

    items = await fetcher.fetch("https://example.com/feed.xml", "Example")

    assert len(items) == 3
    assert all(item.source_name == "Example" for item in items)

    first, second, third = items
    assert first.guid == "example-guid-1"
    assert first.title == "First Article"
    assert first.link == "https://example.com/first"
    assert first.description == "Short summary"
    assert "Full body" in first.content
    assert first.published == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    # no guid: link is the identity
    assert second.guid == "https://example.com/second"
    assert second.published is None

    # neither guid nor link: source title and entry title
    assert third.guid == "Example Feed-No Link Article"
    assert third.link == ""


@pytest.mark.asyncio
async def test_fetch_is_deterministic() -> None:
    """Test that repeated fetches of the same feed give the same identities."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, text=RSS_FEED))

    first_run = await fetcher.fetch("https://example.com/feed.xml", "Example")
    second_run = await fetcher.fetch("https://example.com/feed.xml", "Example")

    assert [item.guid for item in first_run] == [item.guid for item in second_run]


@pytest.mark.asyncio
async def test_fetch_atom_items() -> None:
    """Test fetching an Atom feed with updated time and author."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, text=ATOM_FEED))

    items = await fetcher.fetch("https://example.com/atom.xml", "Atom")

    assert len(items) == 1
    item = items[0]
    assert item.guid == "urn:uuid:entry-1"
    assert item.title == "Atom Entry"
    assert item.link == "https://example.com/atom/1"
    assert item.author == "Jane Doe"
    assert item.description == "Atom summary"
    # updated time is used when there is no published time
    assert item.published == datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_fetch_drops_duplicate_guids() -> None:
    """Test that entries repeated within one feed are collapsed."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, text=DUPLICATE_FEED))

    items = await fetcher.fetch("https://example.com/dup.xml", "Dup")

    assert [item.guid for item in items] == ["same", "other"]
    assert items[0].title == "One"


@pytest.mark.asyncio
async def test_fetch_sends_browser_headers() -> None:
    """Test that requests carry the user agent and randomized headers."""
    seen_requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_requests.append(request)
        return httpx.Response(200, text=RSS_FEED)

    fetcher = make_fetcher(handler, user_agent="custom-agent/2.0")
    await fetcher.fetch("https://example.com/feed.xml", "Example")

    assert len(seen_requests) == 1
    headers = seen_requests[0].headers
    assert headers["User-Agent"] == "custom-agent/2.0"
    assert headers["Accept-Language"] in FEED_ACCEPT_LANGUAGES
    assert "application/rss+xml" in headers["Accept"]
    assert headers.get("DNT", "1") == "1"


@pytest.mark.asyncio
async def test_fetch_http_status_error() -> None:
    """Test that a non-success status raises HTTPStatusError."""
    fetcher = make_fetcher(lambda request: httpx.Response(404, text="not found"))

    with pytest.raises(HTTPStatusError) as exc_info:
        await fetcher.fetch("https://example.com/missing.xml", "Missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.source_url == "https://example.com/missing.xml"


@pytest.mark.asyncio
async def test_fetch_parse_error() -> None:
    """Test that a body that is not a feed raises FeedParseError."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, text="this is not a feed"))

    with pytest.raises(FeedParseError):
        await fetcher.fetch("https://example.com/plain.txt", "Plain")


@pytest.mark.asyncio
async def test_fetch_timeout() -> None:
    """Test that the timeout covers the whole fetch."""

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, text=RSS_FEED)

    fetcher = make_fetcher(slow_handler, timeout=0.05)

    with pytest.raises(FetchTimeoutError):
        await fetcher.fetch("https://example.com/slow.xml", "Slow")


@pytest.mark.asyncio
async def test_fetch_transport_error() -> None:
    """Test that connection failures raise FetchError."""

    def failing_handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = make_fetcher(failing_handler)

    with pytest.raises(FetchError, match="connection refused"):
        await fetcher.fetch("https://example.com/down.xml", "Down")


@pytest.mark.asyncio
async def test_fetch_cancellation() -> None:
    """Test that cancelling the caller stops the fetch promptly."""

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(10)
        return httpx.Response(200, text=RSS_FEED)

    fetcher = make_fetcher(slow_handler, timeout=30)
    task = asyncio.create_task(fetcher.fetch("https://example.com/slow.xml", "Slow"))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=1)


def test_parse_feed_malformed() -> None:
    """Test parsing bodies that are not feeds."""
    fetcher = HTTPFeedFetcher()

    with pytest.raises(FeedParseError):
        fetcher.parse(b"", "Empty")

    with pytest.raises(FeedParseError):
        fetcher.parse(b"not xml", "Invalid")

    # valid feed without items
    items = fetcher.parse(
        b'<?xml version="1.0"?><rss version="2.0"><channel><title>T</title></channel></rss>',
        "Empty Channel",
    )
    assert items == []
