"""Source adapters for fetching feeds."""

from feed_aggregator.adapters.sources.feed_fetcher import HTTPFeedFetcher

__all__ = ["HTTPFeedFetcher"]
