"""Configuration management."""

import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from feed_aggregator.core import ConfigError, ConfigProvider, ExtractionSettings, Source

DEFAULT_USER_AGENT = "feed-aggregator/1.0"

_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


def parse_duration(value: Union[str, int, float, None], default: float = 0.0) -> float:
    """Convert a duration like ``30s``, ``1m30s`` or ``500ms`` to seconds.

    Plain numbers are taken as seconds.
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip().lower()
    try:
        return float(text)
    except ValueError:
        pass

    parts = _DURATION_PART.findall(text)
    if not parts or "".join(number + unit for number, unit in parts) != text:
        raise ConfigError(f"invalid duration: {value!r}")

    return sum(float(number) * _DURATION_UNITS[unit] for number, unit in parts)


@dataclass
class FeedConfig:
    """One feed entry from the ``feeds`` section."""
    url: str
    name: str = ""
    interval: float = 1800.0


@dataclass
class FetchConfig:
    """Feed fetch settings."""
    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class ExtractionConfig:
    """Content extraction settings."""
    enabled: bool = True
    timeout: float = 30.0
    max_concurrent: int = 5
    rate_limit: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    min_text_length: int = 100


@dataclass
class ScheduleConfig:
    """Polling settings."""
    update_interval: float = 1800.0


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"


@dataclass
class Settings(ConfigProvider):
    """Application settings."""

    feeds: list[FeedConfig] = field(default_factory=list)

    # Config sections
    fetch: FetchConfig = field(default_factory=FetchConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def list_sources(self) -> list[Source]:
        """Return all configured sources."""
        return [
            Source(url=feed.url, name=feed.name, interval=timedelta(seconds=feed.interval))
            for feed in self.feeds
        ]

    def get_extraction_config(self) -> ExtractionSettings:
        """Return extraction stage settings."""
        return ExtractionSettings(
            enabled=self.extraction.enabled,
            max_concurrent=self.extraction.max_concurrent,
            rate_limit=self.extraction.rate_limit,
            timeout=self.extraction.timeout,
            user_agent=self.extraction.user_agent,
            min_text_length=self.extraction.min_text_length,
        )

    @property
    def log_level(self) -> str:
        return self.logging.level.upper()

    @property
    def update_interval(self) -> float:
        return self.schedule.update_interval

    def verify(self) -> None:
        """Check settings for values the pipeline cannot run with."""
        if self.fetch.timeout <= 0:
            raise ConfigError("fetch.timeout must be positive")
        if self.extraction.timeout <= 0:
            raise ConfigError("extraction.timeout must be positive")
        if self.extraction.max_concurrent < 1:
            raise ConfigError("extraction.max_concurrent must be at least 1")
        if self.extraction.rate_limit < 0:
            raise ConfigError("extraction.rate_limit cannot be negative")
        if self.schedule.update_interval <= 0:
            raise ConfigError("schedule.update_interval must be positive")
        seen_urls: set[str] = set()
        for i, feed in enumerate(self.feeds):
            if not feed.url:
                raise ConfigError(f"feeds[{i}]: url is required")
            if feed.url in seen_urls:
                raise ConfigError(f"feeds[{i}]: duplicate url {feed.url}")
            seen_urls.add(feed.url)
            if feed.interval <= 0:
                raise ConfigError(f"feeds[{i}]: interval must be positive")


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"parse config {config_path}: {e}") from e


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _feed_from_dict(data: Any, index: int) -> FeedConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"feeds[{index}]: expected a mapping, got {type(data).__name__}")

    url = str(data.get("url") or "")
    name = str(data.get("name") or "") or url
    return FeedConfig(
        url=url,
        name=name,
        interval=parse_duration(data.get("interval"), default=1800.0),
    )


def get_settings(config_path: Path = Path("config.yaml"), env: Optional[dict] = None) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)
    env = os.environ if env is None else env

    settings = Settings()

    # Apply YAML config
    if "feeds" in config:
        settings.feeds = [_feed_from_dict(feed, i) for i, feed in enumerate(config["feeds"] or [])]

    if "fetch" in config:
        for key, value in (config["fetch"] or {}).items():
            if key == "timeout":
                value = parse_duration(value)
            setattr(settings.fetch, key, value)

    if "extraction" in config:
        for key, value in (config["extraction"] or {}).items():
            if key in ("timeout", "rate_limit"):
                value = parse_duration(value)
            setattr(settings.extraction, key, value)

    if "schedule" in config:
        for key, value in (config["schedule"] or {}).items():
            if key == "update_interval":
                value = parse_duration(value)
            setattr(settings.schedule, key, value)

    if "logging" in config:
        for key, value in (config["logging"] or {}).items():
            setattr(settings.logging, key, value)

    # Environment overrides
    if env.get("FEED_AGGREGATOR_LOG_LEVEL"):
        settings.logging.level = env["FEED_AGGREGATOR_LOG_LEVEL"]

    if env.get("FEED_AGGREGATOR_EXTRACTION_ENABLED"):
        settings.extraction.enabled = _parse_bool(env["FEED_AGGREGATOR_EXTRACTION_ENABLED"])

    settings.verify()
    return settings
