"""Unit tests for reading tables out of GTFS archives."""

import pytest

from busmap.errors import ArchiveError, MissingTable, TableParseError
from busmap.gtfs.loader import (
    FEED_TABLES,
    TableSpec,
    find_table_entry,
    load_feed_tables,
    parse_table,
    table_column,
)


class TestFindTableEntry:
    """Tests for locating a table inside the archive."""

    def test_exact_match_wins(self):
        entries = ["gtfs/stops.txt", "stops.txt"]
        assert find_table_entry(entries, "stops.txt") == "stops.txt"

    def test_nested_entry_found_by_basename(self):
        assert find_table_entry(["feed/2024/stops.txt"], "stops.txt") == "feed/2024/stops.txt"

    def test_basename_match_is_case_insensitive(self):
        assert find_table_entry(["GTFS/Stops.TXT"], "stops.txt") == "GTFS/Stops.TXT"

    def test_similar_names_do_not_match(self):
        assert find_table_entry(["bus_stops.txt", "stops.txt.bak"], "stops.txt") is None


class TestParseTable:
    """Tests for CSV parsing of a single table."""

    def test_cells_are_stripped_strings(self):
        frame = parse_table("stops.txt", b"stop_id , stop_name\n 001 , Station \n")
        assert list(frame.columns) == ["stop_id", "stop_name"]
        assert frame.loc[0, "stop_id"] == "001"
        assert frame.loc[0, "stop_name"] == "Station"

    def test_blank_cells_stay_empty_strings(self):
        frame = parse_table("stops.txt", b"stop_id,stop_lat\nS1,\n")
        assert frame.loc[0, "stop_lat"] == ""

    def test_empty_file_gives_empty_table(self):
        assert parse_table("calendar_dates.txt", b"").empty

    def test_header_only(self):
        frame = parse_table("calendar_dates.txt", b"service_id,date,exception_type\n")
        assert frame.empty
        assert "service_id" in frame.columns

    def test_malformed_csv_raises(self):
        with pytest.raises(TableParseError) as excinfo:
            parse_table("stops.txt", b'stop_id,stop_name\n"S1,unterminated\n')
        assert excinfo.value.name == "stops.txt"


class TestLoadFeedTables:
    """Tests for loading the whole table set."""

    def test_loads_every_table(self, sample_zip):
        tables = load_feed_tables(sample_zip)
        assert set(tables) == {spec.key for spec in FEED_TABLES}
        assert len(tables["stops"]) == 4
        assert len(tables["stop_times"]) == 6

    def test_missing_optional_table_is_empty(self, make_feed_zip):
        tables = load_feed_tables(make_feed_zip(omit=["shapes.txt", "calendar_dates.txt"]))
        assert tables["shapes"].empty
        assert tables["calendar_dates"].empty
        assert len(tables["calendar"]) == 3

    def test_missing_required_table_lists_entries(self, make_feed_zip):
        with pytest.raises(MissingTable) as excinfo:
            load_feed_tables(make_feed_zip(omit=["trips.txt"]))
        assert excinfo.value.name == "trips.txt"
        assert "stops.txt" in excinfo.value.available_entries

    def test_tables_in_subdirectory(self, make_feed_zip):
        tables = load_feed_tables(make_feed_zip(prefix="kariya_gtfs/"))
        assert len(tables["routes"]) == 3

    def test_shift_jis_tables(self, make_feed_zip):
        stops = "stop_id,stop_name,stop_lat,stop_lon\nS1,刈谷駅,34.9896,137.0025\n"
        tables = load_feed_tables(make_feed_zip({"stops.txt": stops}, encoding="shift_jis"))
        assert tables["stops"].loc[0, "stop_name"] == "刈谷駅"

    def test_not_a_zip(self):
        with pytest.raises(ArchiveError) as excinfo:
            load_feed_tables(b"<html>Not Found</html>", source="https://example.com/feed.zip")
        assert excinfo.value.source == "https://example.com/feed.zip"

    def test_parse_failure_names_table(self, make_feed_zip):
        data = make_feed_zip({"routes.txt": 'route_id,route_type\n"R1,3\n'})
        with pytest.raises(TableParseError) as excinfo:
            load_feed_tables(data)
        assert excinfo.value.name == "routes.txt"

    def test_custom_table_set(self, sample_zip):
        tables = load_feed_tables(sample_zip, specs=[TableSpec("stops.txt"), TableSpec("agency.txt", required=False)])
        assert set(tables) == {"stops", "agency"}
        assert tables["agency"].empty


class TestTableColumn:

    def test_missing_column_is_blank(self, sample_tables):
        column = table_column(sample_tables["stops"], "wheelchair_boarding")
        assert list(column) == ["", "", "", ""]
