"""
GeoIP request enrichment for FastAPI / Starlette services
"""

from .bundle import install_maxmind
from .config import MaxMindConfig
from .context import MaxMindContext, MaxMindInfo, get_maxmind_info
from .enrich.geo import GeoEnricher
from .enrich.resolver import GeoResolver
from .errors import MaxMindError, ResolverError, ResolverUnavailable
from .middleware import GeoIpMiddleware
from .models import LookupKind
from .services.cache import LookupCache

__all__ = [
    "GeoEnricher",
    "GeoIpMiddleware",
    "GeoResolver",
    "LookupCache",
    "LookupKind",
    "MaxMindConfig",
    "MaxMindContext",
    "MaxMindError",
    "MaxMindInfo",
    "ResolverError",
    "ResolverUnavailable",
    "get_maxmind_info",
    "install_maxmind",
]
