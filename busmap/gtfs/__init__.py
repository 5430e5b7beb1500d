"""
GTFS feed handling.

Loads static GTFS archives into read-only indices and answers stop and
departure queries against them.
"""

from .calendar import ServiceCalendar
from .feed import LoadedFeed, build_loaded_feed, load_feed, parse_query_date
from .geo import haversine_meters, stops_within_radius
from .loader import FEED_TABLES, TableSpec, load_feed_tables
from .manager import FeedManager, get_feed_manager
from .models import Departure, Route, RouteShape, Stop, Trip
from .subnet import BUS_ROUTE_TYPE, filter_to_route_type

__all__ = [
    "BUS_ROUTE_TYPE",
    "Departure",
    "FEED_TABLES",
    "FeedManager",
    "LoadedFeed",
    "Route",
    "RouteShape",
    "ServiceCalendar",
    "Stop",
    "TableSpec",
    "Trip",
    "build_loaded_feed",
    "filter_to_route_type",
    "get_feed_manager",
    "haversine_meters",
    "load_feed",
    "load_feed_tables",
    "parse_query_date",
    "stops_within_radius",
]
