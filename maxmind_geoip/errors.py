"""
Exceptions raised by the GeoIP lookup layer
"""


class MaxMindError(Exception):
    """Base class for GeoIP enrichment errors"""


class ResolverUnavailable(MaxMindError):
    """The GeoIP database could not be opened"""


class ResolverError(MaxMindError):
    """A single lookup failed for a reason other than a missing address"""

    def __init__(self, kind, ip, cause: Exception):
        super().__init__(f"{kind.value} lookup failed for {ip}: {cause}")
        self.kind = kind
        self.ip = ip
        self.cause = cause


class DatabaseTypeMismatch(ResolverError):
    """The opened database does not serve the requested lookup kind"""
