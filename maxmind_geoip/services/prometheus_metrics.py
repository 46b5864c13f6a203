"""
Prometheus metrics for the GeoIP lookup layer
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

# Cache hits and misses
CACHE_REQUESTS_TOTAL = Counter(
    'maxmind_cache_requests_total',
    'Total number of cache lookups',
    ['cache', 'result']
)

# Resolver loads triggered by cache misses
CACHE_LOADS_TOTAL = Counter(
    'maxmind_cache_loads_total',
    'Total number of resolver loads by outcome',
    ['cache', 'outcome']
)

CACHE_EVICTIONS_TOTAL = Counter(
    'maxmind_cache_evictions_total',
    'Entries evicted to stay within capacity',
    ['cache']
)

# Per-request enrichment outcomes
ENRICHMENT_TOTAL = Counter(
    'maxmind_enrichment_total',
    'Total number of enrichment passes by outcome',
    ['mode', 'outcome']
)

# Live entries per cache, refreshed when metrics are scraped
CACHE_ENTRIES = Gauge(
    'maxmind_cache_entries',
    'Entries currently held by a lookup cache',
    ['cache']
)

# Resolver latency
LOOKUP_SECONDS = Histogram(
    'maxmind_lookup_seconds',
    'GeoIP database lookup latency in seconds',
    ['kind'],
    buckets=[0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.05, 0.1]
)


class PrometheusMetrics:
    """Service for managing Prometheus metrics."""

    def increment_cache_hit(self, cache: str):
        CACHE_REQUESTS_TOTAL.labels(cache=cache, result="hit").inc()

    def increment_cache_miss(self, cache: str):
        CACHE_REQUESTS_TOTAL.labels(cache=cache, result="miss").inc()

    def increment_cache_load(self, cache: str, outcome: str):
        """Record a resolver load: success, not_found or error."""
        CACHE_LOADS_TOTAL.labels(cache=cache, outcome=outcome).inc()

    def increment_cache_evictions(self, cache: str, count: int = 1):
        CACHE_EVICTIONS_TOTAL.labels(cache=cache).inc(count)

    def increment_enrichment(self, mode: str, outcome: str):
        """Record an enrichment pass: enriched, skipped, error or unknown_mode."""
        ENRICHMENT_TOTAL.labels(mode=mode or "none", outcome=outcome).inc()

    def set_cache_entries(self, cache: str, size: int):
        CACHE_ENTRIES.labels(cache=cache).set(size)

    def observe_lookup_seconds(self, kind: str, seconds: float):
        LOOKUP_SECONDS.labels(kind=kind).observe(seconds)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get the content type for Prometheus metrics."""
        return CONTENT_TYPE_LATEST


# Global instance
prometheus_metrics = PrometheusMetrics()
