"""
Prometheus exposition for the GeoIP service
"""

import logging

from fastapi import APIRouter, Request, Response

from ..services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("maxmind.api")

router = APIRouter(tags=["Metrics"])


@router.get("/metrics/prometheus", summary="Prometheus metrics")
async def get_prometheus_metrics(request: Request) -> Response:
    """
    Cache, lookup and enrichment metrics in Prometheus text format.

    Cache sizes are sampled from the installed enricher on each scrape.
    """
    enricher = getattr(request.app.state, "maxmind_enricher", None)
    if enricher is not None:
        for name, stats in enricher.stats().items():
            prometheus_metrics.set_cache_entries(name, stats["size"])
        logger.debug("Sampled GeoIP cache sizes", extra={"component": "api", "caches": len(enricher.caches)})
    return Response(content=prometheus_metrics.get_metrics(), media_type=prometheus_metrics.get_content_type())
