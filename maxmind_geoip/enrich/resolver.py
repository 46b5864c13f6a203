"""
GeoIP database resolver
Uses MaxMind GeoIP2 / GeoLite2 databases through geoip2
"""

import logging
import os
import time
from typing import Any, Dict, Optional

import geoip2.database
import geoip2.errors
from maxminddb import InvalidDatabaseError

from ..errors import DatabaseTypeMismatch, ResolverError, ResolverUnavailable
from ..models import (
    AnonymousIpBundle,
    CityBundle,
    ConnectionTypeBundle,
    CountryBundle,
    EnterpriseBundle,
    IPAddress,
    LocationBundle,
    LookupKind,
    SubdivisionBundle,
    TraitsBundle,
)
from ..services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("maxmind.resolver")


class GeoResolver:
    """Resolves lookup kinds against an opened geoip2 database reader"""

    def __init__(self, reader, db_path: Optional[str] = None):
        self._reader = reader
        self.db_path = db_path

    @classmethod
    def open(cls, db_path: str) -> "GeoResolver":
        """Open the database file; failure here is fatal for the caller"""
        if not db_path or not os.path.exists(db_path):
            raise ResolverUnavailable(f"GeoIP database not found at {db_path!r}")
        try:
            reader = geoip2.database.Reader(db_path)
        except (OSError, ValueError, InvalidDatabaseError) as e:
            raise ResolverUnavailable(f"Error initializing GeoIP database {db_path!r}: {e}") from e
        logger.info("GeoIP database loaded", extra={
            "component": "resolver",
            "event": "loaded",
            "db_path": db_path,
        })
        return cls(reader, db_path=db_path)

    def lookup(self, kind: LookupKind, ip: IPAddress):
        """
        Resolve one lookup kind for an address.

        Returns the kind's bundle, or None when the database has no record for
        the address. Any other failure is raised as ResolverError.
        """
        method_name, convert = _LOOKUPS[kind]
        start = time.perf_counter()
        try:
            return convert(getattr(self._reader, method_name)(str(ip)))
        except geoip2.errors.AddressNotFoundError:
            logger.debug(f"No {kind.value} record for {ip}")
            return None
        except TypeError as e:
            # geoip2 rejects a method the database type does not support
            raise DatabaseTypeMismatch(kind, ip, e) from e
        except Exception as e:
            raise ResolverError(kind, ip, e) from e
        finally:
            prometheus_metrics.observe_lookup_seconds(kind.value, time.perf_counter() - start)

    def metadata(self) -> Dict[str, Any]:
        """Database type and build information"""
        meta = self._reader.metadata()
        return {
            "database_type": meta.database_type,
            "build_epoch": meta.build_epoch,
            "ip_version": meta.ip_version,
            "db_path": self.db_path,
        }

    def close(self):
        """Close the database reader."""
        self._reader.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _country(record) -> CountryBundle:
    return CountryBundle(name=record.name, iso_code=record.iso_code)


def _country_bundle(response) -> CountryBundle:
    return _country(response.country)


def _city_fields(response) -> Dict[str, Any]:
    subdivision = response.subdivisions.most_specific
    location = response.location
    return {
        "country": _country(response.country),
        "subdivision": SubdivisionBundle(name=subdivision.name, iso_code=subdivision.iso_code),
        "city": response.city.name,
        "postal": response.postal.code,
        "location": LocationBundle(
            latitude=location.latitude,
            longitude=location.longitude,
            accuracy_radius=location.accuracy_radius,
        ),
    }


def _city_bundle(response) -> CityBundle:
    return CityBundle(**_city_fields(response))


def _enterprise_bundle(response) -> EnterpriseBundle:
    traits = response.traits
    return EnterpriseBundle(
        traits=TraitsBundle(
            user_type=traits.user_type,
            isp=traits.isp,
            connection_type=traits.connection_type,
            is_legitimate_proxy=bool(traits.is_legitimate_proxy),
        ),
        **_city_fields(response),
    )


def _anonymous_bundle(response) -> AnonymousIpBundle:
    return AnonymousIpBundle(
        is_anonymous=bool(response.is_anonymous),
        is_anonymous_vpn=bool(response.is_anonymous_vpn),
        is_tor_exit_node=bool(response.is_tor_exit_node),
    )


def _connection_type_bundle(response) -> ConnectionTypeBundle:
    return ConnectionTypeBundle(connection_type=response.connection_type)


# Reader method and response converter per lookup kind
_LOOKUPS = {
    LookupKind.COUNTRY: ("country", _country_bundle),
    LookupKind.CITY: ("city", _city_bundle),
    LookupKind.ANONYMOUS_IP: ("anonymous_ip", _anonymous_bundle),
    LookupKind.CONNECTION_TYPE: ("connection_type", _connection_type_bundle),
    LookupKind.ENTERPRISE: ("enterprise", _enterprise_bundle),
}
