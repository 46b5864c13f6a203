"""
GeoIP request enrichment
Resolves the client address through per-kind lookup caches and flattens the
results into the request header vocabulary
"""

import asyncio
import logging
from functools import partial
from typing import Callable, Dict, Optional, Tuple

from starlette.concurrency import run_in_threadpool

from .. import headers as h
from ..characters import to_ascii
from ..config import MaxMindConfig
from ..errors import DatabaseTypeMismatch
from ..models import IPAddress, LookupKind
from ..services.cache import LookupCache
from ..services.prometheus_metrics import prometheus_metrics
from .address import extract_client_ip
from .normalize import (
    HeaderSet,
    add_anonymous_info,
    add_city_info,
    add_connection_type_info,
    add_country_info,
    add_enterprise_info,
)

logger = logging.getLogger("maxmind.enrich")

# Lookups performed per mode, each paired with the function writing its headers
MODE_LOOKUPS: Dict[str, Tuple[Tuple[LookupKind, Callable], ...]] = {
    "country": ((LookupKind.COUNTRY, add_country_info),),
    "city": ((LookupKind.CITY, add_city_info),),
    "anonymous": ((LookupKind.ANONYMOUS_IP, add_anonymous_info),),
    "connection-type": ((LookupKind.CONNECTION_TYPE, add_connection_type_info),),
    "enterprise": (
        (LookupKind.ENTERPRISE, add_enterprise_info),
        (LookupKind.ANONYMOUS_IP, add_anonymous_info),
    ),
}


class GeoEnricher:
    """
    Owns one LookupCache per lookup kind the configured mode needs.

    ``resolver`` is anything with ``lookup(kind, ip)``; it is only called on
    cache misses and must tolerate concurrent calls. In enterprise mode an
    ``anonymous_resolver`` may serve the anonymous-IP lookups, since enterprise
    databases do not carry that data.
    """

    def __init__(self, config: MaxMindConfig, resolver, timer: Optional[Callable[[], float]] = None,
                 anonymous_resolver=None):
        self.mode = config.lookup_mode
        self.remote_ip_header = config.remote_ip_header
        self.caches: Dict[LookupKind, LookupCache] = {}
        self._mismatch_logged = set()
        lookups = MODE_LOOKUPS.get(self.mode)
        if lookups is None:
            logger.warning(f"Unknown GeoIP lookup type: {self.mode!r}; requests will carry {h.X_ERROR}")
            return
        cache_kwargs = {"ttl_seconds": config.cache_ttl, "max_entries": config.cache_max_entries}
        if timer is not None:
            cache_kwargs["timer"] = timer
        for kind, _ in lookups:
            source = resolver
            if kind is LookupKind.ANONYMOUS_IP and self.mode == "enterprise" and anonymous_resolver is not None:
                source = anonymous_resolver
            self.caches[kind] = LookupCache(kind.value, partial(source.lookup, kind), **cache_kwargs)

    @property
    def known_mode(self) -> bool:
        return self.mode in MODE_LOOKUPS

    async def enrich(self, header_value: Optional[str]) -> HeaderSet:
        """Build the header set for one request; never raises for lookup failures"""
        if not self.known_mode:
            prometheus_metrics.increment_enrichment(self.mode, "unknown_mode")
            return {h.X_ERROR: to_ascii(f"unknown lookup type: {self.mode}")}

        ip = extract_client_ip(header_value)
        if ip is None:
            prometheus_metrics.increment_enrichment(self.mode, "skipped")
            return {}
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Header: {self.remote_ip_header} | Value: {header_value}")

        lookups = MODE_LOOKUPS[self.mode]
        # Independent lookups run side by side; one failing keeps the others
        results = await asyncio.gather(
            *(self._lookup(kind, ip) for kind, _ in lookups),
            return_exceptions=True,
        )

        out: HeaderSet = {}
        failed = False
        for (kind, apply), result in zip(lookups, results):
            if isinstance(result, BaseException):
                failed = True
                self._log_failure(kind, ip, result)
                continue
            if result is not None:
                apply(out, result)

        if failed:
            outcome = "error"
        elif out:
            outcome = "enriched"
        else:
            outcome = "not_found"
        prometheus_metrics.increment_enrichment(self.mode, outcome)
        return out

    def _log_failure(self, kind: LookupKind, ip: IPAddress, error: BaseException):
        extra = {"component": "enrich", "client_ip": str(ip), "lookup_kind": kind.value}
        # A wrong database type fails identically on every request
        if isinstance(error, DatabaseTypeMismatch):
            if kind in self._mismatch_logged:
                logger.debug(f"GeoIP Error: {error}", extra=extra)
                return
            self._mismatch_logged.add(kind)
            logger.warning(f"GeoIP database does not serve {kind.value} lookups: {error}", extra=extra)
            return
        logger.warning(f"GeoIP Error: {error}", extra=extra)

    async def _lookup(self, kind: LookupKind, ip: IPAddress):
        return await run_in_threadpool(self.caches[kind].get, ip)

    def stats(self) -> Dict[str, Dict]:
        """Statistics for every owned cache"""
        return {kind.value: cache.stats() for kind, cache in self.caches.items()}
