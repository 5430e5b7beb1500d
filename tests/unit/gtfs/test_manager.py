"""Unit tests for the feed manager."""

import threading

import pytest

from busmap.errors import FeedLoadError, RetrievalError
from busmap.gtfs.manager import FeedManager, get_feed_manager

UPDATED_STOPS = """stop_id,stop_name,stop_lat,stop_lon
S1,Kariya Station (North Exit),34.9896,137.0025
S2,City Hall,34.9890,137.0040
"""


class SwitchableFetch:
    """Fetch function whose payload (or failure) the test controls."""

    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    def __call__(self, source, timeout):
        self.calls += 1
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class TestFeedManager:
    """Tests for lazy loading and reload."""

    def test_lazy_load(self, sample_zip):
        fetch = SwitchableFetch(sample_zip)
        manager = FeedManager(["feed.zip"], fetch=fetch)
        assert not manager.loaded
        assert fetch.calls == 0

        feed = manager.get_feed()
        assert manager.loaded
        assert manager.last_loaded is not None
        assert feed.source == "feed.zip"
        assert manager.get_feed() is feed
        assert fetch.calls == 1

    def test_first_load_failure_raises(self):
        manager = FeedManager(["feed.zip"], fetch=SwitchableFetch(RetrievalError("feed.zip", "down")))
        with pytest.raises(FeedLoadError):
            manager.get_feed()
        assert not manager.loaded

    def test_reload_swaps_feed(self, sample_zip, make_feed_zip):
        fetch = SwitchableFetch(sample_zip)
        manager = FeedManager(["feed.zip"], fetch=fetch)
        old = manager.get_feed()

        fetch.payload = make_feed_zip({"stops.txt": UPDATED_STOPS})
        new = manager.reload()

        assert new is not old
        assert manager.get_feed() is new
        assert new.stop("S1").name == "Kariya Station (North Exit)"
        assert old.stop("S1").name == "Kariya Station"

    def test_failed_reload_keeps_current_feed(self, sample_zip):
        fetch = SwitchableFetch(sample_zip)
        manager = FeedManager(["feed.zip"], fetch=fetch)
        old = manager.get_feed()
        loaded_at = manager.last_loaded

        fetch.payload = RetrievalError("feed.zip", "503 Server Error")
        with pytest.raises(FeedLoadError):
            manager.reload()

        assert manager.get_feed() is old
        assert manager.last_loaded == loaded_at

    def test_concurrent_first_use_loads_once(self, sample_zip):
        fetch = SwitchableFetch(sample_zip)
        manager = FeedManager(["feed.zip"], fetch=fetch)
        feeds = []

        threads = [threading.Thread(target=lambda: feeds.append(manager.get_feed())) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert fetch.calls == 1
        assert all(feed is feeds[0] for feed in feeds)

    def test_route_type_none_keeps_all_modes(self, sample_zip):
        manager = FeedManager(["feed.zip"], route_type=None, fetch=SwitchableFetch(sample_zip))
        assert manager.get_feed().stop("S_RAIL") is not None

    def test_candidate_sources_without_metadata(self):
        manager = FeedManager(["a.zip", "b.zip", "a.zip"])
        assert manager.candidate_sources() == ["a.zip", "b.zip"]


class TestGetFeedManager:

    def test_shared_per_sources_and_mode(self):
        a = get_feed_manager(["feed.zip"])
        assert get_feed_manager(["feed.zip"]) is a
        assert get_feed_manager(["feed.zip"], route_type=None) is not a
        assert get_feed_manager(["other.zip"]) is not a

    def test_options_used_on_creation(self):
        manager = get_feed_manager(["feed.zip"], timeout=5, default_headsign="-")
        assert manager.timeout == 5
        assert manager.default_headsign == "-"

    def test_different_options_get_separate_managers(self):
        slow = get_feed_manager(["feed.zip"], timeout=30)
        fast = get_feed_manager(["feed.zip"], timeout=5)
        assert fast is not slow
        assert (slow.timeout, fast.timeout) == (30, 5)
        assert get_feed_manager(["feed.zip"], timeout=30, default_color="#000000") is not slow

    def test_list_options_are_shared(self):
        a = get_feed_manager(["feed.zip"], url_keys=["file_url"], timeout=30)
        assert get_feed_manager(["feed.zip"], timeout=30, url_keys=["file_url"]) is a
