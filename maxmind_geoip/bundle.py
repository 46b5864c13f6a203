"""
Wiring of the GeoIP middleware and typed context into a FastAPI application
"""

import logging
from typing import Callable, Optional

from fastapi import FastAPI

from .config import MaxMindConfig
from .context import PROVIDER_STATE_KEY, maxmind_info_provider
from .enrich.geo import GeoEnricher
from .enrich.resolver import GeoResolver
from .middleware import GeoIpMiddleware

logger = logging.getLogger("maxmind.bundle")


def install_maxmind(app: FastAPI, config: MaxMindConfig, resolver=None,
                    timer: Optional[Callable[[], float]] = None,
                    anonymous_resolver=None) -> GeoEnricher:
    """
    Register GeoIP enrichment on ``app``.

    The database is opened here unless a resolver is supplied, so a missing or
    unreadable database raises ResolverUnavailable at startup. In enterprise
    mode the anonymous-IP database is opened the same way when
    ``config.anonymous_database_file_path`` is set. The typed MaxMindInfo
    dependency is only served when ``config.maxmind_context`` is set.
    """
    if resolver is None:
        resolver = GeoResolver.open(config.database_file_path)
    if anonymous_resolver is None and config.enterprise and config.anonymous_database_file_path:
        anonymous_resolver = GeoResolver.open(config.anonymous_database_file_path)
    enricher = GeoEnricher(config, resolver, timer=timer, anonymous_resolver=anonymous_resolver)
    app.add_middleware(GeoIpMiddleware, enricher=enricher)
    app.state.maxmind_resolver = resolver
    app.state.maxmind_anonymous_resolver = anonymous_resolver
    app.state.maxmind_enricher = enricher
    if config.maxmind_context:
        setattr(app.state, PROVIDER_STATE_KEY, maxmind_info_provider)
    logger.info("GeoIP enrichment installed", extra={
        "component": "bundle",
        "mode": enricher.mode,
        "remote_ip_header": config.remote_ip_header,
        "maxmind_context": config.maxmind_context,
        "anonymous_database": anonymous_resolver is not None,
    })
    return enricher
