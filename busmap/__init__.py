"""
busmap: GTFS bus stop and departure queries.

Loads a GTFS feed, keeps the bus network, and answers "which stops are near
here" and "what leaves this stop next" for a map front end.
"""

__version__ = "0.1.0"

# Import main classes for convenience
from busmap.errors import FeedError, FeedLoadError, InvalidDate
from busmap.gtfs import FeedManager, LoadedFeed, load_feed
from busmap.providers.base import DisplayData, DataProvider
from busmap.renderers.base import Renderer

__all__ = [
    "DataProvider",
    "DisplayData",
    "FeedError",
    "FeedLoadError",
    "FeedManager",
    "InvalidDate",
    "LoadedFeed",
    "Renderer",
    "load_feed",
]
