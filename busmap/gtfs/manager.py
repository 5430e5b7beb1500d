"""
Feed manager.

Owns the currently loaded feed for one set of sources. Loading is lazy;
reloading builds a complete new LoadedFeed and swaps it in, so queries that
already hold the old feed keep working against it.
"""

import threading
import time
from datetime import datetime
from typing import Callable, Optional, Sequence

from .feed import LoadedFeed, load_feed
from .models import DEFAULT_HEADSIGN, DEFAULT_ROUTE_COLOR
from .sources import fetch_feed_bytes, resolve_feed_sources
from .subnet import BUS_ROUTE_TYPE

# Singleton registry for FeedManager instances
# Key: (metadata_url, sources tuple, route_type, sorted manager options)
_manager_instances = {}


def _registry_key(sources, metadata_url, route_type, options):
    frozen = tuple(sorted(
        (name, tuple(value) if isinstance(value, list) else value)
        for name, value in options.items()
    ))
    return (metadata_url, tuple(sources), route_type, frozen)


def get_feed_manager(sources: Sequence[str], metadata_url: str = None,
                     route_type=BUS_ROUTE_TYPE, **kwargs) -> "FeedManager":
    """
    Get or create a shared FeedManager.

    Callers asking for the same sources, mode and options share one manager,
    and therefore one loaded feed. Different options (timeout, default
    color, ...) get a separate manager.

    Args:
        sources: Static candidate feed URLs or paths
        metadata_url: Dataset-metadata endpoint listing feed URLs (optional)
        route_type: Mode to keep (None keeps every route)
        **kwargs: Passed to FeedManager

    Returns:
        Shared FeedManager instance
    """
    key = _registry_key(sources, metadata_url, route_type, kwargs)

    if key not in _manager_instances:
        print(f"[FeedManager] Creating new shared instance for {', '.join(sources) or metadata_url}")
        _manager_instances[key] = FeedManager(
            sources=sources,
            metadata_url=metadata_url,
            route_type=route_type,
            **kwargs
        )

    return _manager_instances[key]


class FeedManager:
    """
    Holds the current LoadedFeed for a set of candidate sources.

    Handles:
    - Resolving candidate sources (metadata endpoint, then static fallbacks)
    - Loading the feed on first use
    - Replacing the feed wholesale on reload
    """

    def __init__(self, sources: Sequence[str], metadata_url: str = None,
                 route_type=BUS_ROUTE_TYPE, timeout: float = 30,
                 url_keys: Sequence[str] = ("file_url",),
                 default_color: str = DEFAULT_ROUTE_COLOR,
                 default_headsign: str = DEFAULT_HEADSIGN,
                 fetch: Callable[[str, float], bytes] = fetch_feed_bytes):
        """
        Initialize feed manager.

        Args:
            sources: Static candidate feed URLs or paths, tried in order
            metadata_url: Dataset-metadata endpoint listing feed URLs (optional)
            route_type: Mode to keep (default: 3, bus; None keeps every route)
            timeout: Seconds allowed per source retrieval (default: 30)
            url_keys: JSON keys in the metadata response holding feed URLs
            default_color: Color for routes without one
            default_headsign: Shown for trips without a headsign
            fetch: Byte-source provider, (source, timeout) -> bytes
        """
        self.sources = list(sources)
        self.metadata_url = metadata_url
        self.route_type = route_type
        self.timeout = timeout
        self.url_keys = tuple(url_keys)
        self.default_color = default_color
        self.default_headsign = default_headsign
        self.fetch = fetch

        self._feed: Optional[LoadedFeed] = None
        self._reload_lock = threading.Lock()
        self.last_loaded: Optional[datetime] = None

    @property
    def loaded(self) -> bool:
        return self._feed is not None

    def candidate_sources(self):
        return resolve_feed_sources(
            metadata_url=self.metadata_url,
            fallbacks=self.sources,
            timeout=self.timeout,
            url_keys=self.url_keys,
        )

    def get_feed(self) -> LoadedFeed:
        """
        Current feed, loading it on first use.

        Raises:
            FeedLoadError: If the first load fails on every source
        """
        feed = self._feed
        if feed is not None:
            return feed

        with self._reload_lock:
            if self._feed is None:
                self._feed = self._load()
            return self._feed

    def reload(self) -> LoadedFeed:
        """
        Load the feed again from scratch and swap it in.

        The previous feed stays current if the reload fails.

        Raises:
            FeedLoadError: If every source fails
        """
        with self._reload_lock:
            self._feed = self._load()
            return self._feed

    def _load(self) -> LoadedFeed:
        start_time = time.time()
        feed = load_feed(
            self.candidate_sources(),
            timeout=self.timeout,
            route_type=self.route_type,
            fetch=self.fetch,
            default_color=self.default_color,
            default_headsign=self.default_headsign,
        )
        elapsed = time.time() - start_time
        self.last_loaded = datetime.now()
        print(f"[FeedManager] Loaded feed from {feed.source} in {elapsed:.2f}s: {feed.summary()}")
        return feed
