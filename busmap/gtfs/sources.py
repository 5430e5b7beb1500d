"""
Feed source resolution and retrieval.

A feed source is either an HTTP(S) URL or a local path to a GTFS zip.
Candidate sources come from an optional dataset-metadata endpoint followed
by a static fallback list.
"""

import os
import time
from typing import Any, Iterable, List, Sequence

import requests
import urllib3

from ..errors import RetrievalError

CHUNK_SIZE = 64 * 1024


def dedupe_sources(sources: Iterable[str]) -> List[str]:
    """Drop blanks and repeats, keeping first-seen order."""
    seen = set()
    unique = []
    for source in sources:
        source = (source or "").strip()
        if not source or source in seen:
            continue
        seen.add(source)
        unique.append(source)
    return unique


def _find_urls(payload: Any, keys: Sequence[str]) -> List[str]:
    """Collect string values stored under any of keys, anywhere in a JSON document."""
    found = []
    if isinstance(payload, dict):
        for key, value in payload.items():
            if key in keys and isinstance(value, str):
                found.append(value)
            else:
                found.extend(_find_urls(value, keys))
    elif isinstance(payload, list):
        for item in payload:
            found.extend(_find_urls(item, keys))
    return found


def resolve_feed_sources(metadata_url: str = None, fallbacks: Sequence[str] = (),
                         timeout: float = 10, url_keys: Sequence[str] = ("file_url",)) -> List[str]:
    """
    Build the ordered candidate list.

    Feed URLs published by the metadata endpoint come first, then the static
    fallbacks. A failing metadata endpoint is reported and skipped.

    Args:
        metadata_url: Dataset-metadata endpoint returning JSON (optional)
        fallbacks: Static feed URLs or paths
        timeout: Metadata request timeout in seconds
        url_keys: JSON keys whose values are feed URLs

    Returns:
        Deduplicated candidate sources
    """
    discovered: List[str] = []
    if metadata_url:
        try:
            response = requests.get(metadata_url, timeout=timeout)
            response.raise_for_status()
            discovered = _find_urls(response.json(), tuple(url_keys))
            print(f"[FeedSources] Metadata endpoint listed {len(discovered)} feed URL(s)")
        except (requests.RequestException, ValueError) as e:
            print(f"[FeedSources] Metadata endpoint unavailable, using fallbacks: {e}")

    return dedupe_sources(list(discovered) + list(fallbacks))


def is_remote(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_feed_bytes(source: str, timeout: float = 30) -> bytes:
    """
    Retrieve the raw bytes of a feed archive.

    Remote sources are streamed under an overall deadline of `timeout`
    seconds; the connection is closed whether the download finishes or not.

    Args:
        source: URL or local file path
        timeout: Seconds allowed for the whole retrieval

    Returns:
        Archive bytes

    Raises:
        RetrievalError: On network errors, non-success status, deadline overrun
            or an unreadable local file
    """
    if not is_remote(source):
        path = source[len("file://"):] if source.startswith("file://") else source
        try:
            with open(os.path.expanduser(path), "rb") as f:
                return f.read()
        except OSError as e:
            raise RetrievalError(source, str(e)) from e

    print(f"[FeedSources] Downloading GTFS feed from {source}")
    deadline = time.monotonic() + timeout
    chunks = []
    try:
        with requests.get(source, timeout=(timeout, timeout), stream=True) as response:
            response.raise_for_status()
            # read1 returns after one socket read; the deadline is checked between reads
            while True:
                if time.monotonic() > deadline:
                    raise RetrievalError(source, f"timed out after {timeout}s")
                chunk = response.raw.read1(CHUNK_SIZE, decode_content=True)
                if not chunk:
                    break
                chunks.append(chunk)
    except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
        raise RetrievalError(source, str(e)) from e

    data = b"".join(chunks)
    print(f"[FeedSources] Downloaded GTFS feed ({len(data)} bytes)")
    return data
