"""
Client address extraction from forwarding headers
"""

import ipaddress
import logging
from typing import Optional

from ..models import IPAddress

logger = logging.getLogger("maxmind.address")


def strip_port(token: str) -> str:
    """Remove a trailing :port from an address token"""
    if token.startswith("["):
        # [2001:db8::1]:443
        end = token.find("]")
        return token[1:end] if end > 0 else token
    if token.count(":") == 1:
        return token.split(":", 1)[0]
    return token


def extract_client_ip(header_value: Optional[str]) -> Optional[IPAddress]:
    """
    Pick the client address out of a forwarding header.

    Multiple addresses are sent when several proxies stamp the request; the
    first one is the client. Returns None for an empty or unparseable value.
    """
    if not header_value:
        return None
    candidate = strip_port(header_value.split(",")[0].strip()).strip()
    if not candidate:
        return None
    try:
        return ipaddress.ip_address(candidate)
    except ValueError:
        logger.warning(f"Cannot resolve address: {candidate}")
        return None
