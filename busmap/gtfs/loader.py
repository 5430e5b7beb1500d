"""
GTFS archive loader.

Opens a feed zip held in memory, locates the requested tables (tolerating
feeds that nest them in a subdirectory or use odd capitalisation), and parses
each table into a string-typed pandas DataFrame.
"""

import io
import posixpath
import zipfile
import zlib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..errors import ArchiveError, MissingTable, TableParseError
from .decoder import decode_table


@dataclass(frozen=True)
class TableSpec:
    """A table to read from the archive and whether the feed is unusable without it."""
    name: str
    required: bool = True

    @property
    def key(self) -> str:
        """Table name without the .txt suffix (e.g. "stop_times")."""
        return self.name[:-4] if self.name.endswith(".txt") else self.name


FEED_TABLES = (
    TableSpec("stops.txt"),
    TableSpec("routes.txt"),
    TableSpec("trips.txt"),
    TableSpec("stop_times.txt"),
    TableSpec("calendar.txt", required=False),
    TableSpec("calendar_dates.txt", required=False),
    TableSpec("shapes.txt", required=False),
)


def find_table_entry(entry_names: Sequence[str], table_name: str) -> Optional[str]:
    """
    Find the archive entry holding a table.

    An exact path match wins; otherwise the first entry whose final path
    segment matches case-insensitively is used.

    Args:
        entry_names: File entries in the archive
        table_name: Table file name, e.g. "stops.txt"

    Returns:
        Matching entry name, or None if the table is not in the archive
    """
    if table_name in entry_names:
        return table_name

    wanted = table_name.lower()
    for entry in entry_names:
        basename = posixpath.basename(entry.replace("\\", "/"))
        if basename.lower() == wanted:
            return entry
    return None


def parse_table(name: str, data: bytes) -> pd.DataFrame:
    """
    Decode and parse one table.

    Every cell is kept as a stripped string; blank cells stay "" rather than NaN.

    Args:
        name: Table name (used in error messages)
        data: Raw table bytes

    Returns:
        DataFrame with one row per record, columns named by the header row

    Raises:
        TableParseError: If the CSV is malformed
    """
    text = decode_table(data)
    if not text.strip():
        return pd.DataFrame()

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            na_values=[],
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise TableParseError(name, e) from e

    frame.columns = [str(column).strip() for column in frame.columns]
    if not frame.empty:
        frame = frame.apply(lambda column: column.str.strip())
    return frame


def load_feed_tables(data: bytes, specs: Sequence[TableSpec] = FEED_TABLES,
                     source: str = None, max_workers: int = 4) -> Dict[str, pd.DataFrame]:
    """
    Read the requested tables out of a GTFS zip archive.

    Table bytes are read from the archive first, then decoded and parsed
    concurrently; all tables are joined before returning.

    Args:
        data: Archive bytes
        specs: Tables to read
        source: Where the bytes came from (for error messages)
        max_workers: Parser thread count

    Returns:
        Dict keyed by table key ("stops", "stop_times", ...). Optional tables
        missing from the archive map to an empty DataFrame.

    Raises:
        ArchiveError: If the bytes are not a readable zip archive
        MissingTable: If a required table is absent
        TableParseError: If a table cannot be parsed
    """
    source = source or "<bytes>"
    raw_tables: Dict[str, Optional[bytes]] = {}

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            entry_names: List[str] = [
                info.filename for info in archive.infolist() if not info.is_dir()
            ]
            for spec in specs:
                entry = find_table_entry(entry_names, spec.name)
                if entry is None:
                    if spec.required:
                        raise MissingTable(spec.name, entry_names)
                    print(f"[FeedLoader] Optional table {spec.name} not in archive")
                    raw_tables[spec.key] = None
                    continue
                if entry != spec.name:
                    print(f"[FeedLoader] Using {entry} for {spec.name}")
                raw_tables[spec.key] = archive.read(entry)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError, NotImplementedError) as e:
        raise ArchiveError(source, str(e)) from e

    names = {spec.key: spec.name for spec in specs}
    tables: Dict[str, pd.DataFrame] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            key: executor.submit(parse_table, names[key], raw)
            for key, raw in raw_tables.items()
            if raw is not None
        }
        for key, raw in raw_tables.items():
            tables[key] = futures[key].result() if raw is not None else pd.DataFrame()

    print(f"[FeedLoader] Loaded {len(tables)} tables from {source}: "
          + ", ".join(f"{key}={len(frame)}" for key, frame in tables.items()))
    return tables


def table_column(frame: pd.DataFrame, name: str) -> pd.Series:
    """Column by name, or a column of blanks if the table does not have it."""
    if name in frame.columns:
        return frame[name]
    return pd.Series([""] * len(frame), index=frame.index, dtype=object)


def iter_records(frame: pd.DataFrame):
    """Iterate table rows as field-keyed dicts, in table order."""
    return iter(frame.to_dict("records"))
