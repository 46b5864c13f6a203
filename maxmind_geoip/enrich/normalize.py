"""
Flatten attribute bundles into ASCII-only request headers
"""

from decimal import Decimal
from typing import Dict, Optional

from .. import headers as h
from ..characters import to_ascii
from ..models import (
    AnonymousIpBundle,
    CityBundle,
    ConnectionTypeBundle,
    CountryBundle,
    EnterpriseBundle,
    LocationBundle,
    SubdivisionBundle,
    TraitsBundle,
)

HeaderSet = Dict[str, str]


def _put_text(out: HeaderSet, name: str, value: Optional[str]):
    value = to_ascii(value)
    if value:
        out[name] = value


def _put_number(out: HeaderSet, name: str, value):
    if value is not None:
        out[name] = _decimal(value) if isinstance(value, float) else str(value)


def _decimal(value: float) -> str:
    """Shortest round-trip digits, never in exponent notation"""
    return format(Decimal(repr(value)), "f")


def _put_flag(out: HeaderSet, name: str, value: bool):
    out[name] = "true" if value else "false"


def add_country_info(out: HeaderSet, country: Optional[CountryBundle]):
    if country is None:
        return
    _put_text(out, h.X_COUNTRY, country.name)
    _put_text(out, h.X_COUNTRY_ISO, country.iso_code)


def add_state_info(out: HeaderSet, subdivision: Optional[SubdivisionBundle]):
    if subdivision is None:
        return
    _put_text(out, h.X_STATE, subdivision.name)
    _put_text(out, h.X_STATE_ISO, subdivision.iso_code)


def add_location_info(out: HeaderSet, location: Optional[LocationBundle]):
    if location is None:
        return
    _put_number(out, h.X_LATITUDE, location.latitude)
    _put_number(out, h.X_LONGITUDE, location.longitude)
    _put_number(out, h.X_LOCATION_ACCURACY, location.accuracy_radius)


def add_traits_info(out: HeaderSet, traits: Optional[TraitsBundle]):
    if traits is None:
        return
    _put_text(out, h.X_USER_TYPE, traits.user_type)
    _put_text(out, h.X_ISP, traits.isp)
    _put_text(out, h.X_CONNECTION_TYPE, traits.connection_type)
    _put_flag(out, h.X_PROXY_LEGAL, traits.is_legitimate_proxy)


def add_city_info(out: HeaderSet, bundle: CityBundle):
    """Country, state, city, postal code and location"""
    add_country_info(out, bundle.country)
    add_state_info(out, bundle.subdivision)
    _put_text(out, h.X_CITY, bundle.city)
    _put_text(out, h.X_POSTAL, bundle.postal)
    add_location_info(out, bundle.location)


def add_enterprise_info(out: HeaderSet, bundle: EnterpriseBundle):
    add_city_info(out, bundle)
    add_traits_info(out, bundle.traits)


def add_anonymous_info(out: HeaderSet, bundle: AnonymousIpBundle):
    _put_flag(out, h.X_ANONYMOUS_IP, bundle.is_anonymous)
    _put_flag(out, h.X_ANONYMOUS_VPN, bundle.is_anonymous_vpn)
    _put_flag(out, h.X_TOR, bundle.is_tor_exit_node)


def add_connection_type_info(out: HeaderSet, bundle: ConnectionTypeBundle):
    _put_text(out, h.X_CONNECTION_TYPE, bundle.connection_type)
