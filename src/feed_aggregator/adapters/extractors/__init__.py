"""Content extractor adapters."""

from feed_aggregator.adapters.extractors.html_extractor import HTMLContentExtractor

__all__ = ["HTMLContentExtractor"]
