"""Exception hierarchy for the aggregation pipeline."""

from typing import Optional


class FeedAggregatorError(Exception):
    """Base class for all feed aggregator errors."""


class ConfigError(FeedAggregatorError):
    """Invalid configuration value."""


class FeedError(FeedAggregatorError):
    """Fetching or parsing a single source failed."""

    def __init__(self, message: str, source_url: str = "") -> None:
        super().__init__(message)
        self.source_url = source_url


class FetchError(FeedError):
    """Transport-level failure while fetching a source."""


class FetchTimeoutError(FeedError):
    """Source did not respond within the fetch timeout."""


class HTTPStatusError(FeedError):
    """Source answered with a non-success status code."""

    def __init__(self, status_code: int, source_url: str = "") -> None:
        super().__init__(f"unexpected status code: {status_code}", source_url)
        self.status_code = status_code


class FeedParseError(FeedError):
    """Response body is not a supported feed format."""


class ExtractionError(FeedAggregatorError):
    """Full-text extraction failed for one article."""


class AggregatorBusyError(FeedAggregatorError):
    """An aggregation run is already in progress."""


class PartialFetchError(FeedAggregatorError):
    """One or more sources failed during an aggregation run.

    The snapshot has already been published with the items of every source
    that succeeded. ``first_error`` is the first failure in completion order;
    ``errors`` holds every failure keyed by source URL.
    """

    def __init__(self, errors: dict[str, Exception], first_error: Optional[Exception] = None) -> None:
        self.errors = dict(errors)
        self.first_error = first_error or next(iter(self.errors.values()), None)
        failed = ", ".join(self.errors) or "unknown"
        super().__init__(f"{len(self.errors)} source(s) failed ({failed}): {self.first_error}")
