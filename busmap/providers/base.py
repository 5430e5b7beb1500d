"""
Base classes for data providers.

Providers query the loaded feed and return renderer-agnostic DisplayData
objects.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from ..config import Config, get_config
from ..gtfs import FeedManager, get_feed_manager


@dataclass
class DisplayData:
    """
    Structured data from a provider - renderer-agnostic.

    Attributes:
        timestamp: When the data was fetched
        content: Provider-specific structured data (dict)
        metadata: Optional hints for renderers (e.g., title)
    """
    timestamp: datetime
    content: dict[str, Any]
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Ensure metadata is never None"""
        if self.metadata is None:
            self.metadata = {}


def get_configured_feed_manager(config: Config = None) -> FeedManager:
    """
    Shared FeedManager for the feed described in the configuration.

    Args:
        config: Config instance (default: global config)

    Returns:
        FeedManager shared by every provider using the same feed settings
    """
    config = config or get_config()
    feed_config = config.get_feed_config()
    display_config = config.get_display_config()

    return get_feed_manager(
        sources=feed_config.get("sources", []),
        metadata_url=feed_config.get("metadata_url"),
        route_type=feed_config.get("route_type", 3),
        timeout=feed_config.get("timeout", 30),
        url_keys=feed_config.get("metadata_url_keys", ["file_url"]),
        default_color=display_config.get("default_route_color", "#3388ff"),
        default_headsign=display_config.get("default_headsign", "(no headsign)"),
    )


class DataProvider(ABC):
    """
    Base class for data providers.

    Providers fetch data from the feed and return structured DisplayData objects.
    Includes built-in caching to avoid redundant queries.
    """

    def __init__(self):
        """Initialize provider with empty cache"""
        self._cache: Optional[DisplayData] = None
        self._cache_expires: Optional[datetime] = None

    @abstractmethod
    def fetch_data(self) -> DisplayData:
        """
        Fetch and structure data from the source.

        Returns:
            DisplayData object with structured content
        """
        pass

    def get_cache_duration(self) -> timedelta:
        """
        How long to cache data before fetching again.

        Returns:
            timedelta for cache duration (default: 0 seconds, no caching)
        """
        return timedelta(seconds=0)

    def get_data(self, force_refresh: bool = False) -> DisplayData:
        """
        Get data, using cache if available and not expired.

        Args:
            force_refresh: If True, ignore cache and fetch fresh data

        Returns:
            DisplayData object (from cache or freshly fetched)
        """
        now = datetime.now()

        if not force_refresh and self._cache and self._cache_expires:
            if now < self._cache_expires:
                return self._cache

        data = self.fetch_data()

        cache_duration = self.get_cache_duration()
        if cache_duration.total_seconds() > 0:
            self._cache = data
            self._cache_expires = now + cache_duration

        return data

    def clear_cache(self):
        """Clear the cache, forcing next get_data() to fetch fresh data"""
        self._cache = None
        self._cache_expires = None
