"""
Typed GeoIP context for request handlers
"""

import logging
from typing import Annotated, Callable, Mapping, Optional

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel, Field

from . import headers as h

logger = logging.getLogger("maxmind.context")

UNKNOWN = "UNKNOWN"

# app.state attribute holding the provider while the typed context is enabled
PROVIDER_STATE_KEY = "maxmind_info_provider"


class MaxMindInfo(BaseModel):
    """GeoIP attributes of the current request"""
    anonymous_ip: bool = False
    anonymous_vpn: bool = False
    tor: bool = False
    city: str = UNKNOWN
    state: str = UNKNOWN
    state_iso: str = UNKNOWN
    country: str = UNKNOWN
    country_iso: str = UNKNOWN
    postal: str = UNKNOWN
    connection_type: str = UNKNOWN
    user_type: str = UNKNOWN
    isp: str = UNKNOWN
    legal_proxy: bool = False
    latitude: float = Field(0, description="Decimal degrees")
    longitude: float = Field(0, description="Decimal degrees")
    accuracy: int = Field(0, description="Location accuracy radius in kilometers")

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "MaxMindInfo":
        """Assemble the typed context from enrichment headers"""
        return cls(
            anonymous_ip=_flag(headers.get(h.X_ANONYMOUS_IP)),
            anonymous_vpn=_flag(headers.get(h.X_ANONYMOUS_VPN)),
            tor=_flag(headers.get(h.X_TOR)),
            city=_text(headers.get(h.X_CITY)),
            state=_text(headers.get(h.X_STATE)),
            state_iso=_text(headers.get(h.X_STATE_ISO)),
            country=_text(headers.get(h.X_COUNTRY)),
            country_iso=_text(headers.get(h.X_COUNTRY_ISO)),
            postal=_text(headers.get(h.X_POSTAL)),
            connection_type=_text(headers.get(h.X_CONNECTION_TYPE)),
            user_type=_text(headers.get(h.X_USER_TYPE)),
            isp=_text(headers.get(h.X_ISP)),
            legal_proxy=_flag(headers.get(h.X_PROXY_LEGAL)),
            latitude=_number(h.X_LATITUDE, headers.get(h.X_LATITUDE), float),
            longitude=_number(h.X_LONGITUDE, headers.get(h.X_LONGITUDE), float),
            accuracy=_number(h.X_LOCATION_ACCURACY, headers.get(h.X_LOCATION_ACCURACY), int),
        )


def _text(value: Optional[str]) -> str:
    return value if value else UNKNOWN


def _flag(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() == "true"


def _number(name: str, value: Optional[str], parse: Callable):
    if not value:
        return 0
    try:
        return parse(value)
    except ValueError:
        logger.warning(f"Ignoring malformed {name} header: {value!r}")
        return 0


def get_maxmind_info(request: Request) -> MaxMindInfo:
    """Dependency supplying the current request's MaxMindInfo"""
    provider = getattr(request.app.state, PROVIDER_STATE_KEY, None)
    if provider is None:
        raise HTTPException(status_code=500, detail="MaxMind context is not enabled")
    return provider(request)


def maxmind_info_provider(request: Request) -> MaxMindInfo:
    return MaxMindInfo.from_headers(request.headers)


# Handler parameter marker: ``async def handler(info: MaxMindContext)``
MaxMindContext = Annotated[MaxMindInfo, Depends(get_maxmind_info)]
