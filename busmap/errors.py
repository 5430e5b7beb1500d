"""
Error types for feed loading.

Every failure that aborts an attempt to load a feed from one source derives
from FeedError. Failures of individual sources are collected and reported
together as a FeedLoadError once every candidate has been tried.
"""

from typing import List, Sequence, Tuple


class FeedError(Exception):
    """Base class for errors raised while loading a GTFS feed."""


class RetrievalError(FeedError):
    """
    Feed bytes could not be retrieved (network error, timeout, bad status).

    Retryable by moving on to the next candidate source.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not retrieve {source}: {reason}")


class ArchiveError(FeedError):
    """The retrieved bytes are not a readable zip archive."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Unreadable archive from {source}: {reason}")


class MissingTable(FeedError):
    """A mandatory table is absent from the archive."""

    def __init__(self, name: str, available_entries: Sequence[str]):
        self.name = name
        self.available_entries = list(available_entries)
        entries = ", ".join(self.available_entries) or "(empty archive)"
        super().__init__(f"Missing required table {name} (archive has: {entries})")


class TableParseError(FeedError):
    """A table was found but could not be parsed as CSV."""

    def __init__(self, name: str, cause: Exception):
        self.name = name
        self.cause = cause
        super().__init__(f"Could not parse {name}: {cause}")


class FeedLoadError(FeedError):
    """
    Every candidate source failed.

    Attributes:
        failures: (source, error) pairs in the order the sources were tried
    """

    def __init__(self, failures: List[Tuple[str, Exception]]):
        self.failures = list(failures)
        if not self.failures:
            message = "No feed sources configured"
        else:
            reasons = "; ".join(f"{source}: {error}" for source, error in self.failures)
            message = f"All {len(self.failures)} feed source(s) failed: {reasons}"
        super().__init__(message)


class InvalidDate(ValueError):
    """A caller supplied a date that cannot be parsed."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid date: {value!r} (expected YYYY-MM-DD or YYYYMMDD)")
