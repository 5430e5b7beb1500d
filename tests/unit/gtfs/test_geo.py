"""Unit tests for distance and radius search."""

import math

import pytest

from busmap.gtfs.geo import EARTH_RADIUS_METERS, haversine_meters, stop_distance, stops_within_radius
from busmap.gtfs.models import Stop

CENTER = (34.9896, 137.0025)


def stop_north_of(center, meters, stop_id="N"):
    """A stop due north of center at the given great-circle distance."""
    lat = center[0] + math.degrees(meters / EARTH_RADIUS_METERS)
    return Stop(stop_id, stop_id, lat, center[1])


class TestHaversine:

    def test_same_point_is_zero(self):
        assert haversine_meters(*CENTER, *CENTER) == 0

    def test_one_degree_of_latitude(self):
        expected = EARTH_RADIUS_METERS * math.pi / 180
        assert haversine_meters(0, 0, 1, 0) == pytest.approx(expected)

    def test_symmetric(self):
        a = haversine_meters(34.98, 137.00, 35.17, 136.88)
        b = haversine_meters(35.17, 136.88, 34.98, 137.00)
        assert a == pytest.approx(b)

    def test_kariya_to_nagoya(self):
        """Kariya to Nagoya Station is roughly 25 km."""
        distance = haversine_meters(34.9896, 137.0025, 35.1709, 136.8815)
        assert 20000 < distance < 25000

    def test_antipodes_do_not_fail(self):
        assert haversine_meters(0, 0, 0, 180) == pytest.approx(EARTH_RADIUS_METERS * math.pi)


class TestStopsWithinRadius:
    """Tests for the inclusive radius filter."""

    def test_boundary(self):
        inside = stop_north_of(CENTER, 4990, "IN")
        outside = stop_north_of(CENTER, 5001, "OUT")
        found = stops_within_radius([inside, outside], CENTER, 5000)
        assert [stop.stop_id for stop in found] == ["IN"]

    def test_radius_is_inclusive(self):
        stop = stop_north_of(CENTER, 300)
        assert stops_within_radius([stop], CENTER, stop_distance(stop, CENTER)) == [stop]

    def test_zero_radius_matches_exact_location(self):
        stop = Stop("HERE", "Here", *CENTER)
        assert stops_within_radius([stop], CENTER, 0) == [stop]

    def test_growing_radius_never_loses_stops(self):
        stops = [stop_north_of(CENTER, meters, f"S{meters}") for meters in (50, 400, 900, 2500)]
        previous = set()
        for radius in (0, 100, 500, 1000, 3000):
            found = {stop.stop_id for stop in stops_within_radius(stops, CENTER, radius)}
            assert previous <= found
            previous = found

    def test_stops_without_coordinates_excluded(self):
        stops = [Stop("NOWHERE", "Nowhere"), Stop("HALF", "Half", lat=CENTER[0])]
        assert stops_within_radius(stops, CENTER, 1e9) == []

    def test_keeps_input_order(self):
        far = stop_north_of(CENTER, 400, "FAR")
        near = stop_north_of(CENTER, 10, "NEAR")
        found = stops_within_radius([far, near], CENTER, 500)
        assert [stop.stop_id for stop in found] == ["FAR", "NEAR"]
