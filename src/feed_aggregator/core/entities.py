"""Core domain entities."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class Source:
    """One configured feed."""

    url: str
    name: str = ""
    interval: timedelta = timedelta(minutes=30)

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("URL cannot be empty")
        if not self.name:
            object.__setattr__(self, "name", self.url)


@dataclass(frozen=True)
class Item:
    """One normalized feed entry before extraction."""

    source_name: str
    guid: str
    title: str = ""
    link: str = ""
    description: str = ""
    content: str = ""
    author: str = ""
    published: Optional[datetime] = None


@dataclass(frozen=True)
class ExtractedItem:
    """Feed item together with the result of full-text extraction."""

    item: Item
    full_content: str = ""
    content_extracted: bool = False
    extracted_at: Optional[datetime] = None
    extraction_error: Optional[str] = None

    @property
    def guid(self) -> str:
        return self.item.guid

    @property
    def source_name(self) -> str:
        return self.item.source_name


@dataclass
class ExtractionSettings:
    """Extraction stage settings."""

    enabled: bool = True
    max_concurrent: int = 5
    rate_limit: float = 1.0
    timeout: float = 30.0
    user_agent: str = "feed-aggregator/1.0"
    min_text_length: int = 100
