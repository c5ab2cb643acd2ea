"""Core domain layer."""

from feed_aggregator.core.dedup import assign_guid, filter_duplicates
from feed_aggregator.core.entities import ExtractedItem, ExtractionSettings, Item, Source
from feed_aggregator.core.errors import (
    AggregatorBusyError,
    ConfigError,
    ExtractionError,
    FeedAggregatorError,
    FeedError,
    FeedParseError,
    FetchError,
    FetchTimeoutError,
    HTTPStatusError,
    PartialFetchError,
)
from feed_aggregator.core.extraction_gate import ExtractionGate, Ticker
from feed_aggregator.core.interfaces import ConfigProvider, ContentExtractor, FeedFetcher

__all__ = [
    "Source",
    "Item",
    "ExtractedItem",
    "ExtractionSettings",
    "assign_guid",
    "filter_duplicates",
    "ExtractionGate",
    "Ticker",
    "ConfigProvider",
    "ContentExtractor",
    "FeedFetcher",
    "FeedAggregatorError",
    "ConfigError",
    "FeedError",
    "FetchError",
    "FetchTimeoutError",
    "HTTPStatusError",
    "FeedParseError",
    "ExtractionError",
    "AggregatorBusyError",
    "PartialFetchError",
]
