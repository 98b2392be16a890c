"""
Unit tests for the cache-or-fetch response cache.
"""

import threading
import time
from unittest.mock import Mock

import pytest

from posada_api.cache import CacheStatus, ResponseCache
from posada_api.persistence import JsonStore, MemoryBlobStore
from posada_api.upstream import UpstreamError


class FakeClock:
    """Settable clock for TTL tests."""

    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now


class TestResponseCache:
    """Test ResponseCache class."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return ResponseCache(JsonStore(MemoryBlobStore()), clock=clock)

    def test_miss_fetches_and_stores(self, cache, clock):
        """Test that an empty cache calls fetch and persists the result."""
        fetch = Mock(return_value={"a": 1})

        result = cache.get_or_fetch("k", 300, fetch)

        assert result.status == CacheStatus.REFRESHED
        assert result.data == {"a": 1}
        assert result.cached_at == clock.now
        assert cache.read("k").data == {"a": 1}
        fetch.assert_called_once()

    def test_fresh_entry_never_calls_upstream(self, cache, clock):
        """Test that a fresh entry is served without fetching."""
        cache.write("k", [1, 2])
        clock.now += 299
        fetch = Mock()

        result = cache.get_or_fetch("k", 300, fetch)

        assert result.status == CacheStatus.FRESH
        assert result.data == [1, 2]
        fetch.assert_not_called()

    def test_entry_expires_at_ttl(self, cache, clock):
        """Test that an entry exactly ttl seconds old is refreshed."""
        cache.write("k", "old")
        clock.now += 300

        result = cache.get_or_fetch("k", 300, Mock(return_value="new"))

        assert result.status == CacheStatus.REFRESHED
        assert result.data == "new"

    def test_upstream_error_serves_stale(self, cache, clock):
        """Test that a failing upstream falls back to the stale entry."""
        cache.write("k", "old")
        written_at = clock.now
        clock.now += 1000

        result = cache.get_or_fetch("k", 300, Mock(side_effect=UpstreamError("boom", 500)))

        assert result.status == CacheStatus.STALE
        assert result.data == "old"
        assert result.cached_at == written_at
        assert cache.get_stats()["stale_served"] == 1

    def test_none_result_serves_stale(self, cache, clock):
        """Test that a fetch returning None counts as unavailable."""
        cache.write("k", "old")
        clock.now += 1000

        result = cache.get_or_fetch("k", 300, Mock(return_value=None))

        assert result.status == CacheStatus.STALE
        assert result.data == "old"

    def test_failure_without_cache_is_miss(self, cache):
        """Test that nothing is available when upstream fails on a cold cache."""
        result = cache.get_or_fetch("k", 300, Mock(side_effect=UpstreamError("down")))

        assert result.status == CacheStatus.MISS
        assert not result.available

    def test_other_exceptions_propagate(self, cache):
        """Test that programming errors are not mistaken for outages."""
        with pytest.raises(KeyError):
            cache.get_or_fetch("k", 300, Mock(side_effect=KeyError("bug")))

    def test_malformed_entry_is_ignored(self, cache):
        """Test that an entry without a timestamp is treated as absent."""
        cache._store.save("k", {"data": "no ts"})

        assert cache.read("k") is None
        assert cache.get_or_fetch("k", 300, Mock(return_value=1)).data == 1

    def test_clear(self, cache):
        """Test clearing a cached key."""
        cache.write("tokens_cache", 1)

        assert cache.clear("tokens_cache") == ["tokens_cache"]
        assert cache.read("tokens_cache") is None
        assert cache.clear("tokens_cache") == []

    def test_clear_refuses_history_and_ledger(self, cache):
        """Test that an explicit key outside the response caches is left alone."""
        cache._store.save("price_history", {"snapshots": []})
        cache._store.save("trades", [])

        assert cache.clear("price_history") == []
        assert cache.clear("trades") == []
        assert cache._store.blobs.keys() == ["price_history", "trades"]

    def test_clear_all_response_caches(self, cache):
        """Test that clearing without a key removes only cached responses."""
        cache.write("movers_cache", 1)
        cache.write("ohlcv_SNEK_1h", 2)
        cache._store.save("price_history", {})

        assert cache.clear() == ["movers_cache", "ohlcv_SNEK_1h"]
        assert cache._store.blobs.keys() == ["price_history"]

    def test_concurrent_refreshes_call_upstream_once(self, cache):
        """Test that concurrent requests for a stale key share one fetch."""
        calls = []

        def slow_fetch():
            calls.append(1)
            time.sleep(0.05)
            return "fresh"

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(cache.get_or_fetch("k", 300, slow_fetch)))
            for _ in range(5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert [r.data for r in results] == ["fresh"] * 5
