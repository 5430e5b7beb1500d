"""
Departure board provider.

Shows the next scheduled departures at a stop, or the whole timetable for
a given service date.
"""

from datetime import datetime, timedelta
from typing import List

from ..config import get_config
from ..errors import FeedError
from ..gtfs import Departure, FeedManager, parse_query_date
from .base import DataProvider, DisplayData, get_configured_feed_manager


class DepartureBoardProvider(DataProvider):
    """
    Provider for scheduled departures at one stop.

    Two views:
    - "next": the next N departures remaining today (default)
    - "all": every departure on service_date, regardless of the clock
    """

    def __init__(self, stop_id: str = None, service_date=None,
                 max_departures: int = None, feed_manager: FeedManager = None,
                 config_key: str = None, clock=datetime.now):
        """
        Initialize departure board provider.

        Args:
            stop_id: Stop to show (if None, uses config)
            service_date: If given, show all departures on this date instead of the next few today
            max_departures: Number of departures in the "next" view (if None, uses config)
            feed_manager: FeedManager to query (if None, the shared one from config)
            config_key: Config key to use (if None, uses "departures")
            clock: Returns the current local datetime
        """
        super().__init__()

        config_key = config_key or "departures"
        config = get_config().get_provider_config(config_key)

        self.stop_id = stop_id or config.get("stop_id")
        if not self.stop_id:
            raise ValueError("stop_id is required for DepartureBoardProvider")

        self.service_date = parse_query_date(service_date) if service_date is not None else None
        self.max_departures = max_departures or config.get("max_departures", 5)
        self.cache_seconds = config.get("cache_duration", 30)
        self.feed_manager = feed_manager or get_configured_feed_manager()
        self.clock = clock

    @property
    def view(self) -> str:
        return "all" if self.service_date is not None else "next"

    def fetch_data(self) -> DisplayData:
        """
        Query departures from the loaded feed.

        Returns:
            DisplayData with the departures, or error content if the feed is unavailable
        """
        now = self.clock()
        try:
            feed = self.feed_manager.get_feed()
            stop = feed.stop(self.stop_id)
            if self.service_date is not None:
                departures = feed.departures(self.stop_id, self.service_date)
            else:
                departures = feed.upcoming_departures(self.stop_id, self.max_departures, now=now)

            print(f"[DepartureBoardProvider] Stop {self.stop_id} - {len(departures)} departures")

            return DisplayData(
                timestamp=now,
                content={
                    "type": "departures",
                    "view": self.view,
                    "stop_id": self.stop_id,
                    "stop_name": stop.name if stop else None,
                    "known_stop": stop is not None,
                    "service_date": (self.service_date or now.date()).isoformat(),
                    "departures": self._serialize(departures),
                },
                metadata={
                    "title": stop.name if stop and stop.name else self.stop_id,
                }
            )

        except FeedError as e:
            print(f"[DepartureBoardProvider] Error fetching departures: {e}")
            return DisplayData(
                timestamp=now,
                content={
                    "type": "departures",
                    "view": self.view,
                    "stop_id": self.stop_id,
                    "error": True,
                    "error_message": "Timetable unavailable",
                    "error_details": str(e),
                    "departures": []
                },
                metadata={
                    "title": self.stop_id,
                }
            )

    def _serialize(self, departures: List[Departure]) -> List[dict]:
        return [
            {
                "time": departure.time_label,
                "departure_seconds": departure.departure_seconds,
                "route": departure.route_label,
                "headsign": departure.headsign,
                "color": departure.route_color,
                "trip_id": departure.trip_id,
            }
            for departure in departures
        ]

    def get_cache_duration(self) -> timedelta:
        """
        Cache the "next" view briefly so the board follows the clock.

        The "all" view does not depend on the clock and is kept for a day.
        """
        if self.service_date is not None:
            return timedelta(days=1)
        return timedelta(seconds=self.cache_seconds)
