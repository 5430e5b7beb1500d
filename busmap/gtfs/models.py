"""
Feed entities and the small parsers shared by the index builder and queries.

All entities are frozen: a loaded feed is never mutated, only replaced.
"""

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

DEFAULT_ROUTE_COLOR = "#3388ff"
DEFAULT_HEADSIGN = "(no headsign)"

_GTFS_TIME = re.compile(r"^(\d+):(\d{2}):(\d{2})$")
_HEX_COLOR = re.compile(r"^[0-9a-fA-F]{6}$")


@dataclass(frozen=True)
class Stop:
    """A boarding location. Stops without coordinates cannot be plotted or searched."""
    stop_id: str
    name: str
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass(frozen=True)
class Route:
    route_id: str
    short_name: str = ""
    long_name: str = ""
    description: str = ""
    color: str = DEFAULT_ROUTE_COLOR
    route_type: Optional[int] = None

    @property
    def display_name(self) -> str:
        """First non-empty of long name, short name, description, route id."""
        return self.long_name or self.short_name or self.description or self.route_id


@dataclass(frozen=True)
class Trip:
    trip_id: str
    route_id: str
    service_id: str
    headsign: str = ""
    shape_id: Optional[str] = None


@dataclass(frozen=True)
class TimetableEntry:
    """One scheduled stop event, as kept in the per-stop timetable."""
    trip_id: str
    departure_seconds: int


@dataclass(frozen=True)
class Departure:
    """
    A departure returned by a query. Built per query, never stored.

    Attributes:
        departure_seconds: Seconds since midnight of the service day (may exceed 86399)
        time_label: "HH:MM", hours not wrapped at 24
        route_label: Route label as shown to riders
        headsign: Trip headsign or the placeholder
        trip_id: Trip the departure belongs to
        route_id: Route the trip belongs to
        route_color: Route color, "#rrggbb"
    """
    departure_seconds: int
    time_label: str
    route_label: str
    headsign: str
    trip_id: str
    route_id: str
    route_color: str = DEFAULT_ROUTE_COLOR


@dataclass(frozen=True)
class RouteShape:
    """A drawable polyline with the display metadata of the route it belongs to."""
    shape_id: str
    route_id: Optional[str]
    color: str
    label: str
    points: Tuple[Tuple[float, float], ...]


def parse_gtfs_time(value) -> Optional[int]:
    """
    Parse a GTFS time string (H+:MM:SS) to seconds since midnight.

    GTFS times can exceed 24:00:00 for trips running past midnight, so the
    hour is not capped.

    Args:
        value: Time string from stop_times.txt

    Returns:
        Seconds since midnight, or None if the value does not match the pattern
    """
    if not isinstance(value, str):
        return None
    match = _GTFS_TIME.match(value.strip())
    if not match:
        return None
    hours, minutes, seconds = (int(part) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_time_label(seconds: int) -> str:
    """Format seconds since midnight as HH:MM. 91800 -> "25:30"."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours:02d}:{minutes:02d}"


def normalize_date_key(value) -> str:
    """
    Normalize a GTFS date to an 8-digit YYYYMMDD key.

    Non-digit characters are stripped first, so "2024-06-15" works too.
    Anything that does not leave exactly 8 digits becomes "", which never
    matches a calendar exception.
    """
    if value is None:
        return ""
    digits = re.sub(r"\D", "", str(value))
    return digits if len(digits) == 8 else ""


def date_key(day: date) -> str:
    return day.strftime("%Y%m%d")


def gtfs_weekday(day: date) -> int:
    """
    Weekday index in calendar flag order: 0=Sunday ... 6=Saturday.

    Python's date.weekday() is 0=Monday, 6=Sunday.
    """
    return (day.weekday() + 1) % 7


def parse_coordinate(value) -> Optional[float]:
    """Parse a latitude/longitude cell; blanks, junk, NaN and inf give None."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_route_type(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def normalize_color(value, default: str = DEFAULT_ROUTE_COLOR) -> str:
    """Normalize a GTFS route_color ("FF0000", "#ff0000") to "#ff0000"."""
    raw = (value or "").strip().lstrip("#")
    if not _HEX_COLOR.match(raw):
        return default
    return f"#{raw.lower()}"


def route_label(route: Route) -> str:
    """
    Label a route the way riders see it.

    Short and long names are combined when both exist and differ, collapsed
    when equal, otherwise whichever exists is used. Falls back to the route's
    display name. Map popups and departure rows both go through this.
    """
    short_name = route.short_name
    long_name = route.long_name
    if short_name and long_name:
        if short_name == long_name:
            return short_name
        return f"{short_name} {long_name}"
    if short_name or long_name:
        return short_name or long_name
    return route.display_name
