"""Pytest configuration and fixtures."""

import io
import zipfile

import pytest

from busmap.gtfs.loader import load_feed_tables

STOPS = """stop_id,stop_name,stop_lat,stop_lon
S1,Kariya Station,34.9896,137.0025
S2,City Hall,34.9890,137.0040
S3,No Coordinates,,
S_RAIL,Rail Platform,34.9900,137.0030
"""

ROUTES = """route_id,route_short_name,route_long_name,route_desc,route_type,route_color
R1,1,Kariya Station Line,,3,FF0000
R2,2,,,3,
RAIL,,Meitetsu,,2,00FF00
"""

TRIPS = """route_id,service_id,trip_id,trip_headsign,shape_id
R1,WD1,T1,Station,SH1
R1,WD1,T2,,SH1
R2,WE1,T3,Hospital,SH2
RAIL,RAILSVC,T4,Nagoya,SH_RAIL
"""

STOP_TIMES = """trip_id,arrival_time,departure_time,stop_id,stop_sequence
T1,08:00:00,08:00:00,S1,1
T1,08:10:00,08:10:00,S2,2
T2,07:30:00,,S1,1
T2,8am,8am,S2,2
T3,25:30:00,25:30:00,S1,1
T4,09:00:00,09:00:00,S_RAIL,1
"""

CALENDAR = """service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,start_date,end_date
WD1,1,1,1,1,1,0,0,20240101,20241231
WE1,0,0,0,0,0,1,1,20240101,20241231
RAILSVC,1,1,1,1,1,1,1,20240101,20241231
"""

CALENDAR_DATES = """service_id,date,exception_type
WD1,20240615,1
WE1,20240616,2
"""

SHAPES = """shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence
SH1,34.9890,137.0040,2
SH1,34.9896,137.0025,1
SH1,34.9880,137.0050,3
SH2,34.9896,137.0025,1
SH_RAIL,34.9900,137.0030,1
SH_RAIL,34.9950,137.0100,2
"""

SAMPLE_TABLES = {
    "stops.txt": STOPS,
    "routes.txt": ROUTES,
    "trips.txt": TRIPS,
    "stop_times.txt": STOP_TIMES,
    "calendar.txt": CALENDAR,
    "calendar_dates.txt": CALENDAR_DATES,
    "shapes.txt": SHAPES,
}


def build_zip(files, encoding="utf-8", prefix=""):
    """Zip {name: text} into archive bytes, each table encoded with `encoding`."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, text in files.items():
            data = text if isinstance(text, bytes) else text.encode(encoding)
            archive.writestr(prefix + name, data)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def isolated_feed_managers(monkeypatch):
    """Every test starts with an empty shared FeedManager registry."""
    monkeypatch.setattr("busmap.gtfs.manager._manager_instances", {})


@pytest.fixture
def make_feed_zip():
    """Factory building a GTFS zip; starts from the sample feed unless told otherwise."""
    def _make(overrides=None, omit=(), encoding="utf-8", prefix=""):
        files = dict(SAMPLE_TABLES)
        files.update(overrides or {})
        for name in omit:
            files.pop(name, None)
        return build_zip(files, encoding=encoding, prefix=prefix)
    return _make


@pytest.fixture
def sample_zip(make_feed_zip):
    return make_feed_zip()


@pytest.fixture
def sample_tables(sample_zip):
    return load_feed_tables(sample_zip, source="sample")


@pytest.fixture(autouse=True)
def default_config(monkeypatch, tmp_path):
    """Every test sees the built-in defaults, never a config.json from the working directory."""
    from busmap.config import Config
    config = Config(str(tmp_path / "absent-config.json"))
    monkeypatch.setattr("busmap.config._config", config)
    return config
