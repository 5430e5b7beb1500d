"""
Loaded feed and the queries the map UI asks of it.

A LoadedFeed is built once from a feed archive and never changes. Queries
against it need no locking; reloading produces a new LoadedFeed.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from ..errors import FeedError, FeedLoadError, InvalidDate
from .geo import stops_within_radius
from .indexes import FeedIndex, build_feed_index
from .loader import load_feed_tables
from .models import (
    DEFAULT_HEADSIGN,
    DEFAULT_ROUTE_COLOR,
    Departure,
    RouteShape,
    Stop,
    date_key,
    format_time_label,
    gtfs_weekday,
    normalize_date_key,
    route_label,
)
from .shapes import assemble_route_shapes
from .sources import dedupe_sources, fetch_feed_bytes
from .subnet import BUS_ROUTE_TYPE, filter_to_route_type


def parse_query_date(value) -> date:
    """
    Turn a caller-supplied date into a calendar date.

    Accepts date/datetime objects, (year, month, day) tuples and strings
    such as "2024-06-15", "2024/06/15" or "20240615".

    Raises:
        InvalidDate: If the value is not a real calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        if isinstance(value, (tuple, list)) and len(value) == 3:
            return date(*(int(part) for part in value))
        key = normalize_date_key(value) if isinstance(value, str) else ""
        if key:
            return datetime.strptime(key, "%Y%m%d").date()
    except (TypeError, ValueError) as e:
        raise InvalidDate(value) from e
    raise InvalidDate(value)


def seconds_since_midnight(moment: datetime) -> int:
    return moment.hour * 3600 + moment.minute * 60 + moment.second


@dataclass(frozen=True)
class LoadedFeed:
    """
    A fully indexed feed.

    Attributes:
        index: Lookup structures
        shapes: Drawable route polylines
        source: Where the feed was loaded from
        default_headsign: Shown for trips without a headsign
    """
    index: FeedIndex
    shapes: Tuple[RouteShape, ...] = ()
    source: Optional[str] = None
    default_headsign: str = DEFAULT_HEADSIGN

    def stop(self, stop_id: str) -> Optional[Stop]:
        return self.index.stop_by_id.get(stop_id)

    def departures(self, stop_id: str, service_date, now_seconds: int = None,
                   today: date = None) -> List[Departure]:
        """
        All departures from a stop on a service date, earliest first.

        Args:
            stop_id: Stop to query
            service_date: Calendar date (date, datetime, (y, m, d) or date string)
            now_seconds: Current time as seconds since midnight. When given and
                service_date is today, departures before it are left out.
            today: Today's date (default: date.today())

        Returns:
            Departures sorted by departure time. Unknown stops and invalid
            dates give an empty list.
        """
        try:
            day = parse_query_date(service_date)
        except InvalidDate as e:
            print(f"[LoadedFeed] Rejected departures query for stop {stop_id}: {e}")
            return []

        timetable = self.index.timetable_by_stop.get(stop_id)
        if not timetable:
            return []

        key = date_key(day)
        weekday = gtfs_weekday(day)
        drop_departed = now_seconds is not None and day == (today or date.today())
        active_by_service: Dict[str, bool] = {}
        departures = []

        for entry in timetable:
            trip = self.index.trip_by_id.get(entry.trip_id)
            if trip is None:
                continue

            if trip.service_id not in active_by_service:
                active_by_service[trip.service_id] = self.index.calendar.is_active(
                    trip.service_id, key, weekday
                )
            if not active_by_service[trip.service_id]:
                continue

            if drop_departed and entry.departure_seconds < now_seconds:
                continue

            route = self.index.route_by_id.get(trip.route_id)
            departures.append(Departure(
                departure_seconds=entry.departure_seconds,
                time_label=format_time_label(entry.departure_seconds),
                route_label=route_label(route) if route else trip.route_id,
                headsign=trip.headsign or self.default_headsign,
                trip_id=trip.trip_id,
                route_id=trip.route_id,
                route_color=route.color if route else DEFAULT_ROUTE_COLOR,
            ))

        departures.sort(key=lambda departure: departure.departure_seconds)
        return departures

    def upcoming_departures(self, stop_id: str, limit: int = None,
                            now: datetime = None) -> List[Departure]:
        """
        The next departures from a stop today.

        Args:
            stop_id: Stop to query
            limit: Maximum number of departures (default: all remaining)
            now: Current local time (default: datetime.now())

        Returns:
            Remaining departures for today, earliest first
        """
        now = now or datetime.now()
        remaining = self.departures(stop_id, now.date(), seconds_since_midnight(now), today=now.date())
        return remaining if limit is None else remaining[:limit]

    def stops_near(self, center: Tuple[float, float], radius_meters: float) -> List[Stop]:
        """Stops within radius_meters of center (lat, lon), in stops.txt order."""
        return stops_within_radius(self.index.stop_by_id.values(), center, radius_meters)

    def route_shapes(self) -> List[RouteShape]:
        return list(self.shapes)

    def summary(self) -> Dict[str, int]:
        """Counts of the main entities."""
        return {
            "stops": len(self.index.stop_by_id),
            "routes": len(self.index.route_by_id),
            "trips": len(self.index.trip_by_id),
            "services": len(self.index.calendar.services),
            "shapes": len(self.shapes),
        }


def build_loaded_feed(tables: Dict[str, pd.DataFrame], route_type=BUS_ROUTE_TYPE,
                      source: str = None, default_color: str = DEFAULT_ROUTE_COLOR,
                      default_headsign: str = DEFAULT_HEADSIGN) -> LoadedFeed:
    """
    Filter, index and assemble a feed from parsed tables.

    Args:
        tables: Tables as returned by load_feed_tables()
        route_type: Mode to keep (None keeps every route)
        source: Where the tables came from
        default_color: Color for routes without one
        default_headsign: Shown for trips without a headsign

    Returns:
        LoadedFeed
    """
    if route_type is not None:
        tables = filter_to_route_type(tables, route_type)

    index = build_feed_index(tables, default_color=default_color)
    shapes = assemble_route_shapes(
        tables.get("shapes", pd.DataFrame()),
        index.shape_to_route,
        index.route_by_id,
        default_color=default_color,
    )
    return LoadedFeed(
        index=index,
        shapes=tuple(shapes),
        source=source,
        default_headsign=default_headsign,
    )


def load_feed(sources: Sequence[str], timeout: float = 30, route_type=BUS_ROUTE_TYPE,
              fetch: Callable[[str, float], bytes] = fetch_feed_bytes,
              default_color: str = DEFAULT_ROUTE_COLOR,
              default_headsign: str = DEFAULT_HEADSIGN) -> LoadedFeed:
    """
    Load a feed from the first candidate source that works.

    Sources are tried strictly in order, each with its own timeout. The
    first success wins; if every source fails, all the reasons are raised
    together.

    Args:
        sources: Candidate URLs or paths, in preference order
        timeout: Seconds allowed per source retrieval
        route_type: Mode to keep (None keeps every route)
        fetch: Byte-source provider, (source, timeout) -> bytes
        default_color: Color for routes without one
        default_headsign: Shown for trips without a headsign

    Returns:
        LoadedFeed

    Raises:
        FeedLoadError: If no source produced a usable feed
    """
    failures = []
    for source in dedupe_sources(sources):
        print(f"[FeedLoader] Trying feed source {source}")
        try:
            data = fetch(source, timeout)
            tables = load_feed_tables(data, source=source)
        except FeedError as e:
            print(f"[FeedLoader] Feed source failed: {e}")
            failures.append((source, e))
            continue

        return build_loaded_feed(
            tables,
            route_type=route_type,
            source=source,
            default_color=default_color,
            default_headsign=default_headsign,
        )

    raise FeedLoadError(failures)
