import logging
from typing import Dict, Iterable, List, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp, Scope

from .enrich.geo import GeoEnricher
from .headers import RESERVED_HEADERS

logger = logging.getLogger("maxmind.middleware")

_RESERVED = frozenset(name.lower().encode("latin-1") for name in RESERVED_HEADERS)


class GeoIpMiddleware(BaseHTTPMiddleware):
    """ASGI middleware attaching GeoIP attributes to inbound request headers"""

    def __init__(self, app: ASGIApp, enricher: GeoEnricher):
        super().__init__(app)
        self.enricher = enricher

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_address = request.headers.get(self.enricher.remote_ip_header)
        try:
            values = await self.enricher.enrich(client_address)
        except Exception as e:
            # Enrichment is best effort and must not fail the request
            logger.error(f"GeoIP enrichment failed: {e}", exc_info=True, extra={"component": "middleware"})
            values = {}
        replace_headers(request.scope, values)
        return await call_next(request)


def replace_headers(scope: Scope, values: Dict[str, str]):
    """
    Swap the enrichment headers on the request scope for ``values``.

    Inbound copies of any enrichment header are dropped first so clients
    cannot supply their own.
    """
    scope["headers"] = _without_reserved(scope.get("headers", [])) + [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in values.items()
    ]


def _without_reserved(raw: Iterable[Tuple[bytes, bytes]]) -> List[Tuple[bytes, bytes]]:
    return [(key, value) for key, value in raw if key.lower() not in _RESERVED]
