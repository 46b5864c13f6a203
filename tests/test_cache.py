"""
Tests for the lookup cache
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from maxmind_geoip.services.cache import LookupCache


class CountingLoader:
    def __init__(self, results=None, default="value"):
        self.results = results or {}
        self.default = default
        self.calls = []

    def __call__(self, key):
        self.calls.append(key)
        result = self.results.get(key, self.default)
        if isinstance(result, Exception):
            raise result
        return result


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        time.sleep(0.001)


class TestLookupCacheBasics:

    def test_first_get_loads_once_then_hits(self, clock):
        """Second get within TTL is served from the cache"""
        loader = CountingLoader({"a": {"country": "IE"}})
        cache = LookupCache("test", loader, ttl_seconds=300, max_entries=10, timer=clock)

        first = cache.get("a")
        second = cache.get("a")

        assert loader.calls == ["a"]
        assert first is second

    def test_not_found_is_not_cached(self, clock):
        """A None result re-queries the loader on every call"""
        loader = CountingLoader(default=None)
        cache = LookupCache("test", loader, ttl_seconds=300, max_entries=10, timer=clock)

        assert cache.get("a") is None
        assert cache.get("a") is None
        assert loader.calls == ["a", "a"]
        assert len(cache) == 0

    def test_loader_error_propagates_and_is_not_cached(self, clock):
        loader = CountingLoader({"a": IOError("database unreachable")})
        cache = LookupCache("test", loader, ttl_seconds=300, max_entries=10, timer=clock)

        with pytest.raises(IOError):
            cache.get("a")

        loader.results["a"] = "recovered"
        assert cache.get("a") == "recovered"
        assert loader.calls == ["a", "a"]

    @pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0}, {"max_entries": 0}])
    def test_invalid_bounds_rejected(self, kwargs):
        with pytest.raises(ValueError):
            LookupCache("test", CountingLoader(), **kwargs)


class TestLookupCacheEviction:

    def test_least_recently_used_evicted(self, clock):
        """Inserting max_entries + 1 keys evicts the oldest one"""
        loader = CountingLoader()
        cache = LookupCache("test", loader, ttl_seconds=300, max_entries=3, timer=clock)

        for key in ["a", "b", "c", "d"]:
            cache.get(key)

        assert len(cache) == 3
        assert "a" not in cache
        cache.get("a")
        assert loader.calls.count("a") == 2
        assert cache.stats()["evictions"] >= 1

    def test_access_refreshes_recency(self, clock):
        loader = CountingLoader()
        cache = LookupCache("test", loader, ttl_seconds=300, max_entries=2, timer=clock)

        cache.get("a")
        cache.get("b")
        cache.get("a")
        cache.get("c")

        assert "a" in cache
        assert "b" not in cache


class TestLookupCacheExpiry:

    def test_continuous_access_never_expires(self, clock):
        """Sliding TTL: every hit resets the idle timer"""
        loader = CountingLoader()
        cache = LookupCache("test", loader, ttl_seconds=10, max_entries=10, timer=clock)

        cache.get("a")
        for _ in range(20):
            clock.advance(9)
            cache.get("a")

        assert loader.calls == ["a"]

    def test_idle_entry_expires(self, clock):
        loader = CountingLoader()
        cache = LookupCache("test", loader, ttl_seconds=10, max_entries=10, timer=clock)

        cache.get("a")
        clock.advance(11)

        assert "a" not in cache
        cache.get("a")
        assert loader.calls == ["a", "a"]

    def test_expired_entries_do_not_count_toward_capacity(self, clock):
        loader = CountingLoader()
        cache = LookupCache("test", loader, ttl_seconds=10, max_entries=2, timer=clock)

        cache.get("a")
        cache.get("b")
        clock.advance(11)
        cache.get("c")

        assert len(cache) == 1
        assert cache.stats()["evictions"] == 0


class TestLookupCacheConcurrency:

    def test_concurrent_misses_share_one_load(self):
        """N concurrent gets on a missing key trigger a single loader call"""
        release = threading.Event()
        calls = []

        def loader(key):
            calls.append(key)
            release.wait(5)
            return {"key": key}

        cache = LookupCache("test", loader, ttl_seconds=300, max_entries=10)
        workers = 8
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(cache.get, "a") for _ in range(workers)]
            wait_for(lambda: cache.stats()["misses"] == workers)
            release.set()
            results = [f.result(timeout=5) for f in futures]

        assert calls == ["a"]
        assert all(r is results[0] for r in results)

    def test_concurrent_waiters_receive_same_failure(self):
        release = threading.Event()
        calls = []
        error = RuntimeError("corrupt record")

        def loader(key):
            calls.append(key)
            release.wait(5)
            raise error

        cache = LookupCache("test", loader, ttl_seconds=300, max_entries=10)
        workers = 4
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(cache.get, "a") for _ in range(workers)]
            wait_for(lambda: cache.stats()["misses"] == workers)
            release.set()
            raised = [f.exception(timeout=5) for f in futures]

        assert calls == ["a"]
        assert all(e is error for e in raised)
        assert cache.stats()["load_failure"] == 1


class TestLookupCacheStats:

    def test_stats_counts(self, clock):
        loader = CountingLoader({"missing": None})
        cache = LookupCache("country", loader, ttl_seconds=300, max_entries=10, timer=clock)

        cache.get("a")
        cache.get("a")
        cache.get("missing")

        stats = cache.stats()
        assert stats["name"] == "country"
        assert stats["hits"] == 1
        assert stats["misses"] == 2
        assert stats["load_success"] == 1
        assert stats["load_not_found"] == 1
        assert stats["size"] == 1
        assert stats["hit_rate"] == pytest.approx(1 / 3)

    def test_clear(self, clock):
        cache = LookupCache("test", CountingLoader(), ttl_seconds=300, max_entries=10, timer=clock)
        cache.get("a")
        cache.clear()
        assert len(cache) == 0
