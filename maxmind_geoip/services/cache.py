"""
Bounded, sliding-TTL lookup cache with single-flight loading
"""

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger("maxmind.cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    inserted_at: float
    last_accessed_at: float


class LookupCache(Generic[K, V]):
    """
    Memoizes a blocking loader per key.

    Entries expire once idle for ``ttl_seconds`` (every hit resets the timer)
    and the least recently used entry is evicted when ``max_entries`` would be
    exceeded. Concurrent misses for the same key share a single loader call;
    every waiter receives that call's value or its exception.

    A loader returning ``None`` means "not found": nothing is cached and the
    next call asks the loader again. Loader exceptions are never cached either.
    """

    def __init__(self, name: str, loader: Callable[[K], Optional[V]],
                 ttl_seconds: float = 300, max_entries: int = 10000,
                 timer: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._loader = loader
        self._timer = timer
        self._entries: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._inflight: Dict[K, Future] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._load_success = 0
        self._load_not_found = 0
        self._load_failure = 0
        self._evictions = 0

    def get(self, key: K) -> Optional[V]:
        """Return the cached value for key, loading it on a miss"""
        with self._lock:
            now = self._timer()
            entry = self._entries.get(key)
            if entry is not None:
                if self._expired(entry, now):
                    del self._entries[key]
                else:
                    entry.last_accessed_at = now
                    self._entries.move_to_end(key)
                    self._hits += 1
                    prometheus_metrics.increment_cache_hit(self.name)
                    return entry.value

            self._misses += 1
            prometheus_metrics.increment_cache_miss(self.name)
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        if not owner:
            # Another caller is already loading this key
            return future.result()
        return self._load(key, future)

    def _load(self, key: K, future: Future) -> Optional[V]:
        try:
            value = self._loader(key)
        except BaseException as e:
            with self._lock:
                self._inflight.pop(key, None)
                self._load_failure += 1
            prometheus_metrics.increment_cache_load(self.name, "error")
            future.set_exception(e)
            raise

        with self._lock:
            self._inflight.pop(key, None)
            if value is None:
                self._load_not_found += 1
            else:
                self._load_success += 1
                self._put(key, value, self._timer())
        prometheus_metrics.increment_cache_load(self.name, "success" if value is not None else "not_found")
        future.set_result(value)
        return value

    def _put(self, key: K, value: V, now: float):
        # Caller holds the lock
        self._entries.pop(key, None)
        self._purge_expired(now)
        evicted = 0
        while len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
            evicted += 1
        self._entries[key] = CacheEntry(value=value, inserted_at=now, last_accessed_at=now)
        if evicted:
            self._evictions += evicted
            prometheus_metrics.increment_cache_evictions(self.name, evicted)
            logger.debug(f"Evicted {evicted} entries from {self.name} cache")

    def _purge_expired(self, now: float):
        # Entries are ordered by last access, so expired ones sit at the front
        while self._entries:
            key, entry = next(iter(self._entries.items()))
            if not self._expired(entry, now):
                break
            del self._entries[key]

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.last_accessed_at >= self.ttl_seconds

    def __contains__(self, key: K) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._expired(entry, self._timer())

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._timer())
            return len(self._entries)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        """Cache statistics"""
        with self._lock:
            self._purge_expired(self._timer())
            requests = self._hits + self._misses
            return {
                "name": self.name,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / requests if requests else 0.0,
                "load_success": self._load_success,
                "load_not_found": self._load_not_found,
                "load_failure": self._load_failure,
                "evictions": self._evictions,
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
            }
