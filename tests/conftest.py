# tests/conftest.py
import threading

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from maxmind_geoip.config import MaxMindConfig
from maxmind_geoip.main import create_app
from maxmind_geoip.models import (
    AnonymousIpBundle,
    CityBundle,
    CountryBundle,
    EnterpriseBundle,
    LocationBundle,
    LookupKind,
    SubdivisionBundle,
    TraitsBundle,
)


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeResolver:
    """
    Stand-in for GeoResolver.

    ``results`` maps (kind, ip string) to a bundle or an exception to raise;
    unknown keys resolve to None (address not found).
    """

    def __init__(self, results=None):
        self.results = dict(results or {})
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def lookup(self, kind, ip):
        with self._lock:
            self.calls.append((kind, str(ip)))
        result = self.results.get((kind, str(ip)))
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True

    def count(self, kind=None) -> int:
        with self._lock:
            return sum(1 for k, _ in self.calls if kind is None or k == kind)


DUBLIN = CityBundle(
    country=CountryBundle(name="Ireland", iso_code="IE"),
    subdivision=SubdivisionBundle(name="Leinster", iso_code="L"),
    city="Dublin",
    postal="D02",
    location=LocationBundle(latitude=53.3331, longitude=-6.2489, accuracy_radius=50),
)

ENTERPRISE_DUBLIN = EnterpriseBundle(
    country=DUBLIN.country,
    subdivision=DUBLIN.subdivision,
    city=DUBLIN.city,
    postal=DUBLIN.postal,
    location=DUBLIN.location,
    traits=TraitsBundle(user_type="business", isp="Eircom", connection_type="Cable/DSL",
                        is_legitimate_proxy=False),
)

TOR_EXIT = AnonymousIpBundle(is_anonymous=True, is_anonymous_vpn=False, is_tor_exit_node=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver():
    return FakeResolver({
        (LookupKind.COUNTRY, "203.0.113.5"): DUBLIN.country,
        (LookupKind.CITY, "203.0.113.5"): DUBLIN,
        (LookupKind.ENTERPRISE, "203.0.113.5"): ENTERPRISE_DUBLIN,
        (LookupKind.ANONYMOUS_IP, "203.0.113.5"): TOR_EXIT,
    })


def make_config(**overrides) -> MaxMindConfig:
    values = {"database_file_path": "/data/geo/GeoIP2-City.mmdb", "type": "city"}
    values.update(overrides)
    return MaxMindConfig(**values)


@pytest.fixture
def make_client(resolver):
    """Build a TestClient for an app with GeoIP enrichment installed"""

    def _make(resolver=resolver, **overrides):
        app = create_app(make_config(**overrides), resolver=resolver)

        @app.get("/echo")
        async def echo(request: Request):
            return {k: v for k, v in request.headers.items() if k.startswith("x-maxmind-")}

        return TestClient(app)

    return _make
