from typing import Any, Dict

from fastapi import APIRouter, Request

from ..context import MaxMindContext, MaxMindInfo

router = APIRouter(prefix="/geo", tags=["geo"])


@router.get("/me", response_model=MaxMindInfo)
async def whoami(info: MaxMindContext):
    """GeoIP attributes resolved for the calling client"""
    return info


@router.get("/status")
async def status(request: Request) -> Dict[str, Any]:
    """Lookup mode, cache statistics and database metadata"""
    enricher = getattr(request.app.state, "maxmind_enricher", None)
    if enricher is None:
        return {"enabled": False}
    resolver = request.app.state.maxmind_resolver
    metadata = resolver.metadata() if hasattr(resolver, "metadata") else None
    return {
        "enabled": True,
        "mode": enricher.mode,
        "caches": enricher.stats(),
        "database": metadata,
    }
