"""
Data providers for busmap.

Providers query the loaded feed and structure the results for display.
"""

from busmap.providers.base import DisplayData, DataProvider, get_configured_feed_manager
from busmap.providers.departure_provider import DepartureBoardProvider
from busmap.providers.nearby_stops_provider import NearbyStopsProvider

__all__ = [
    "DisplayData",
    "DataProvider",
    "DepartureBoardProvider",
    "NearbyStopsProvider",
    "get_configured_feed_manager",
]
