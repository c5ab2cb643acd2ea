"""Core interfaces for adapters."""

from abc import ABC, abstractmethod

from feed_aggregator.core.entities import ExtractionSettings, Item, Source


class FeedFetcher(ABC):
    """Interface for fetching and normalizing one feed."""

    @abstractmethod
    async def fetch(self, source_url: str, source_name: str) -> list[Item]:
        """Fetch a feed and return its entries as items."""
        pass


class ContentExtractor(ABC):
    """Interface for full-text article extraction."""

    @abstractmethod
    async def extract(self, url: str) -> str:
        """Return the extracted article text for a URL."""
        pass


class ConfigProvider(ABC):
    """Interface for the configuration consumed by the aggregator."""

    @abstractmethod
    def list_sources(self) -> list[Source]:
        """Return all configured sources."""
        pass

    @abstractmethod
    def get_extraction_config(self) -> ExtractionSettings:
        """Return extraction stage settings."""
        pass
