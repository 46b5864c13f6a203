import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.geo import router as geo_router
from .api.health import router as health_router
from .api.prometheus import router as prometheus_router
from .bundle import install_maxmind
from .config import MaxMindConfig
from .logging_config import setup_logging

API_PREFIX = "/v1"

logger = logging.getLogger("maxmind")


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("GeoIP service starting up", extra={"component": "api"})
    yield
    for key in ("maxmind_resolver", "maxmind_anonymous_resolver"):
        resolver = getattr(application.state, key, None)
        if resolver is not None and hasattr(resolver, "close"):
            resolver.close()
    logger.info("GeoIP service stopped", extra={"component": "api"})


def create_app(config: Optional[MaxMindConfig] = None, resolver=None, anonymous_resolver=None) -> FastAPI:
    """Build the service; GeoIP enrichment is installed when a config is given"""
    application = FastAPI(title="MaxMind GeoIP", lifespan=lifespan)
    application.include_router(health_router, prefix=API_PREFIX)
    application.include_router(geo_router, prefix=API_PREFIX)
    application.include_router(prometheus_router, prefix=API_PREFIX)
    if config is not None:
        install_maxmind(application, config, resolver=resolver, anonymous_resolver=anonymous_resolver)
    return application


def _app_from_env() -> FastAPI:
    setup_logging()
    if os.getenv("MAXMIND_DATABASE_FILE_PATH"):
        return create_app(MaxMindConfig.from_env())
    logger.warning("MAXMIND_DATABASE_FILE_PATH is not set; GeoIP enrichment disabled")
    return create_app()


app = _app_from_env()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("APP_PORT", "8080")))
