"""
Lookup structures built once per feed load.

Every mapping here is read-only. A reload builds a fresh FeedIndex rather
than updating an existing one.
"""

from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

import pandas as pd

from .calendar import ServiceCalendar
from .loader import iter_records
from .models import (
    DEFAULT_ROUTE_COLOR,
    Route,
    Stop,
    TimetableEntry,
    Trip,
    normalize_color,
    parse_coordinate,
    parse_gtfs_time,
    parse_route_type,
)


@dataclass(frozen=True)
class FeedIndex:
    """
    Indexed view of one loaded feed.

    Attributes:
        stop_by_id: stop_id -> Stop (last row wins)
        route_by_id: route_id -> Route (last row wins)
        trip_by_id: trip_id -> Trip (last row wins)
        timetable_by_stop: stop_id -> entries sorted by departure_seconds
        shape_to_route: shape_id -> route_id of the first trip using it
        calendar: Service calendar
    """
    stop_by_id: Mapping[str, Stop]
    route_by_id: Mapping[str, Route]
    trip_by_id: Mapping[str, Trip]
    timetable_by_stop: Mapping[str, Tuple[TimetableEntry, ...]]
    shape_to_route: Mapping[str, str]
    calendar: ServiceCalendar


def index_stops(stops: pd.DataFrame) -> Mapping[str, Stop]:
    stop_by_id: Dict[str, Stop] = {}
    for row in iter_records(stops):
        stop_id = row.get("stop_id", "")
        if not stop_id:
            continue
        lat = parse_coordinate(row.get("stop_lat"))
        lon = parse_coordinate(row.get("stop_lon"))
        stop_by_id[stop_id] = Stop(
            stop_id=stop_id,
            name=row.get("stop_name", ""),
            lat=lat if lon is not None else None,
            lon=lon if lat is not None else None,
        )
    return MappingProxyType(stop_by_id)


def index_routes(routes: pd.DataFrame, default_color: str) -> Mapping[str, Route]:
    route_by_id: Dict[str, Route] = {}
    for row in iter_records(routes):
        route_id = row.get("route_id", "")
        if not route_id:
            continue
        route_by_id[route_id] = Route(
            route_id=route_id,
            short_name=row.get("route_short_name", ""),
            long_name=row.get("route_long_name", ""),
            description=row.get("route_desc", ""),
            color=normalize_color(row.get("route_color"), default_color),
            route_type=parse_route_type(row.get("route_type")),
        )
    return MappingProxyType(route_by_id)


def index_trips(trips: pd.DataFrame) -> Tuple[Mapping[str, Trip], Mapping[str, str]]:
    """
    Index trips and derive shape ownership.

    Returns:
        (trip_by_id, shape_to_route). A shape shared by several routes is
        attributed to the route of the first trip that uses it.
    """
    trip_by_id: Dict[str, Trip] = {}
    shape_to_route: Dict[str, str] = {}
    for row in iter_records(trips):
        trip_id = row.get("trip_id", "")
        if not trip_id:
            continue
        route_id = row.get("route_id", "")
        shape_id = row.get("shape_id", "") or None
        trip_by_id[trip_id] = Trip(
            trip_id=trip_id,
            route_id=route_id,
            service_id=row.get("service_id", ""),
            headsign=row.get("trip_headsign", ""),
            shape_id=shape_id,
        )
        if shape_id and shape_id not in shape_to_route:
            shape_to_route[shape_id] = route_id
    return MappingProxyType(trip_by_id), MappingProxyType(shape_to_route)


def index_timetables(stop_times: pd.DataFrame,
                     trip_by_id: Mapping[str, Trip]) -> Mapping[str, Tuple[TimetableEntry, ...]]:
    """
    Build the per-stop departure lists.

    Uses departure_time, falling back to arrival_time when it is blank.
    Rows with no parsable time or an unknown trip are dropped. Each list is
    stable-sorted by departure seconds, so ties keep table order.
    """
    grouped: Dict[str, List[TimetableEntry]] = defaultdict(list)
    untimed = 0
    orphaned = 0

    for row in iter_records(stop_times):
        trip_id = row.get("trip_id", "")
        raw_time = row.get("departure_time", "") or row.get("arrival_time", "")
        seconds = parse_gtfs_time(raw_time)
        if seconds is None:
            untimed += 1
            continue
        if trip_id not in trip_by_id:
            orphaned += 1
            continue
        grouped[row.get("stop_id", "")].append(TimetableEntry(trip_id, seconds))

    if untimed or orphaned:
        print(f"[FeedIndex] Skipped {untimed} stop times without a valid time, "
              f"{orphaned} referencing unknown trips")

    return MappingProxyType({
        stop_id: tuple(sorted(entries, key=lambda entry: entry.departure_seconds))
        for stop_id, entries in grouped.items()
    })


def build_feed_index(tables: Dict[str, pd.DataFrame], default_color: str = DEFAULT_ROUTE_COLOR) -> FeedIndex:
    """
    Build every lookup structure from (already filtered) feed tables.

    Args:
        tables: Tables keyed by name, as returned by load_feed_tables()
        default_color: Color for routes without a valid route_color

    Returns:
        FeedIndex
    """
    empty = pd.DataFrame()
    trip_by_id, shape_to_route = index_trips(tables.get("trips", empty))

    index = FeedIndex(
        stop_by_id=index_stops(tables.get("stops", empty)),
        route_by_id=index_routes(tables.get("routes", empty), default_color),
        trip_by_id=trip_by_id,
        timetable_by_stop=index_timetables(tables.get("stop_times", empty), trip_by_id),
        shape_to_route=shape_to_route,
        calendar=ServiceCalendar.from_tables(
            tables.get("calendar", empty), tables.get("calendar_dates", empty)
        ),
    )
    print(f"[FeedIndex] Indexed {len(index.stop_by_id)} stops, {len(index.route_by_id)} routes, "
          f"{len(index.trip_by_id)} trips, {len(index.calendar.services)} services")
    return index
