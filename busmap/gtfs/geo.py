"""
Great-circle distance and radius filtering for stops.
"""

from math import asin, cos, radians, sin, sqrt
from typing import Iterable, List, Tuple

from .models import Stop

EARTH_RADIUS_METERS = 6371000


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two lat/lon points on a spherical Earth."""
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(min(1.0, sqrt(a)))
    return EARTH_RADIUS_METERS * c


def stop_distance(stop: Stop, center: Tuple[float, float]) -> float:
    return haversine_meters(center[0], center[1], stop.lat, stop.lon)


def stops_within_radius(stops: Iterable[Stop], center: Tuple[float, float],
                        radius_meters: float) -> List[Stop]:
    """
    Stops within radius_meters of center, in input order.

    Args:
        stops: Stops to filter
        center: (latitude, longitude) in degrees
        radius_meters: Inclusive search radius

    Returns:
        Matching stops. Stops without usable coordinates are never included.
    """
    return [
        stop for stop in stops
        if stop.has_coordinates and stop_distance(stop, center) <= radius_meters
    ]
