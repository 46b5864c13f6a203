"""
Lookup kinds and per-kind attribute bundles
"""

import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class LookupKind(str, Enum):
    """Category of attributes resolvable from an address"""
    COUNTRY = "country"
    CITY = "city"
    ANONYMOUS_IP = "anonymous"
    CONNECTION_TYPE = "connection-type"
    ENTERPRISE = "enterprise"


@dataclass(frozen=True)
class CountryBundle:
    name: Optional[str] = None
    iso_code: Optional[str] = None


@dataclass(frozen=True)
class SubdivisionBundle:
    name: Optional[str] = None
    iso_code: Optional[str] = None


@dataclass(frozen=True)
class LocationBundle:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy_radius: Optional[int] = None


@dataclass(frozen=True)
class CityBundle:
    """Country, most specific subdivision, city, postal code and location"""
    country: Optional[CountryBundle] = None
    subdivision: Optional[SubdivisionBundle] = None
    city: Optional[str] = None
    postal: Optional[str] = None
    location: Optional[LocationBundle] = None


@dataclass(frozen=True)
class TraitsBundle:
    user_type: Optional[str] = None
    isp: Optional[str] = None
    connection_type: Optional[str] = None
    is_legitimate_proxy: bool = False


@dataclass(frozen=True)
class EnterpriseBundle(CityBundle):
    """City-level attributes plus network traits"""
    traits: Optional[TraitsBundle] = None


@dataclass(frozen=True)
class AnonymousIpBundle:
    is_anonymous: bool = False
    is_anonymous_vpn: bool = False
    is_tor_exit_node: bool = False


@dataclass(frozen=True)
class ConnectionTypeBundle:
    connection_type: Optional[str] = None
