"""
Nearby stops provider.

Lists the stops within a radius of a point, nearest first.
"""

from datetime import datetime
from typing import Tuple

from ..config import get_config
from ..errors import FeedError
from ..gtfs import FeedManager
from ..gtfs.geo import stop_distance
from .base import DataProvider, DisplayData, get_configured_feed_manager


class NearbyStopsProvider(DataProvider):
    """
    Provider for stops around a point.

    Defaults to the configured map center and search radius.
    """

    def __init__(self, center: Tuple[float, float] = None, radius_meters: float = None,
                 max_stops: int = None, feed_manager: FeedManager = None):
        """
        Initialize nearby stops provider.

        Args:
            center: (latitude, longitude) (if None, uses map center from config)
            radius_meters: Search radius (if None, uses config)
            max_stops: Maximum number of stops listed (if None, uses config)
            feed_manager: FeedManager to query (if None, the shared one from config)
        """
        super().__init__()
        config = get_config()
        map_config = config.get_map_config()
        provider_config = config.get_provider_config("nearby_stops")

        if center is None:
            map_center = map_config.get("center", {})
            center = (map_center.get("latitude", 34.9896), map_center.get("longitude", 137.0025))
        self.center = (float(center[0]), float(center[1]))
        self.radius_meters = radius_meters if radius_meters is not None else map_config.get("radius_meters", 500)
        self.max_stops = max_stops or provider_config.get("max_stops", 10)
        self.feed_manager = feed_manager or get_configured_feed_manager()

    def fetch_data(self) -> DisplayData:
        """
        Query stops around the center.

        Returns:
            DisplayData with stops sorted by distance
        """
        try:
            feed = self.feed_manager.get_feed()
            stops = feed.stops_near(self.center, self.radius_meters)
            ranked = sorted(
                ((stop_distance(stop, self.center), stop) for stop in stops),
                key=lambda item: item[0],
            )

            return DisplayData(
                timestamp=datetime.now(),
                content={
                    "type": "nearby_stops",
                    "center": list(self.center),
                    "radius_meters": self.radius_meters,
                    "total": len(ranked),
                    "stops": [
                        {
                            "stop_id": stop.stop_id,
                            "name": stop.name,
                            "lat": stop.lat,
                            "lon": stop.lon,
                            "distance_meters": round(distance),
                        }
                        for distance, stop in ranked[:self.max_stops]
                    ],
                },
                metadata={
                    "title": f"Stops within {self.radius_meters:g} m",
                }
            )

        except FeedError as e:
            print(f"[NearbyStopsProvider] Error fetching stops: {e}")
            return DisplayData(
                timestamp=datetime.now(),
                content={
                    "type": "nearby_stops",
                    "error": True,
                    "error_message": "Stop data unavailable",
                    "error_details": str(e),
                    "stops": []
                },
                metadata={
                    "title": "Nearby stops",
                }
            )
