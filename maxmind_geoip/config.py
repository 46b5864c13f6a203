"""
Configuration module for the MaxMind GeoIP middleware
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator

DEFAULT_REMOTE_IP_HEADER = "X-Forwarded-For"
DEFAULT_CACHE_TTL = 300
DEFAULT_CACHE_MAX_ENTRIES = 10000

ENV_PREFIX = "MAXMIND_"


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


class MaxMindConfig(BaseModel):
    database_file_path: str = Field(..., min_length=1, description="Path to the .mmdb database")
    remote_ip_header: str = Field(DEFAULT_REMOTE_IP_HEADER, min_length=1, description="Header carrying the client address")
    cache_ttl: int = Field(DEFAULT_CACHE_TTL, gt=0, description="Idle seconds before a cached lookup expires")
    cache_max_entries: int = Field(DEFAULT_CACHE_MAX_ENTRIES, gt=0, description="Cached lookups kept per lookup kind")
    enterprise: bool = Field(False, description="Use the enterprise database plus an anonymous-IP lookup")
    # country, city, anonymous, connection-type
    type: Optional[str] = Field(None, description="Lookup type when enterprise is off")
    maxmind_context: bool = Field(False, description="Expose MaxMindInfo to request handlers")
    # Enterprise databases carry no anonymizer data; a second .mmdb serves those lookups
    anonymous_database_file_path: Optional[str] = Field(None, description="Anonymous-IP database used in enterprise mode")

    @model_validator(mode='after')
    def _check_type(self):
        if self.type is not None:
            self.type = self.type.strip().lower() or None
        if not self.enterprise and self.type is None:
            raise ValueError("type is required when enterprise is false")
        return self

    @property
    def lookup_mode(self) -> str:
        """Effective lookup mode; enterprise overrides the configured type"""
        if self.enterprise:
            return "enterprise"
        return self.type

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "MaxMindConfig":
        """Build configuration from MAXMIND_* environment variables"""
        return cls(
            database_file_path=os.getenv(f"{prefix}DATABASE_FILE_PATH", ""),
            remote_ip_header=os.getenv(f"{prefix}REMOTE_IP_HEADER", DEFAULT_REMOTE_IP_HEADER),
            cache_ttl=int(os.getenv(f"{prefix}CACHE_TTL", str(DEFAULT_CACHE_TTL))),
            cache_max_entries=int(os.getenv(f"{prefix}CACHE_MAX_ENTRIES", str(DEFAULT_CACHE_MAX_ENTRIES))),
            enterprise=env_bool(f"{prefix}ENTERPRISE", False),
            type=os.getenv(f"{prefix}TYPE") or None,
            maxmind_context=env_bool(f"{prefix}CONTEXT", False),
            anonymous_database_file_path=os.getenv(f"{prefix}ANONYMOUS_DATABASE_FILE_PATH") or None,
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path], section: Optional[str] = "maxmind") -> "MaxMindConfig":
        """
        Load configuration from a YAML file.

        Keys may be snake_case or camelCase (databaseFilePath, cacheTTL, ...).
        When ``section`` is set and present, only that mapping is read.
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if section and isinstance(data.get(section), dict):
            data = data[section]
        return cls(**_normalize_keys(data))


_CAMEL_KEYS = {
    "databaseFilePath": "database_file_path",
    "remoteIpHeader": "remote_ip_header",
    "cacheTTL": "cache_ttl",
    "cacheTtl": "cache_ttl",
    "cacheMaxEntries": "cache_max_entries",
    "maxMindContext": "maxmind_context",
    "anonymousDatabaseFilePath": "anonymous_database_file_path",
}


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_CAMEL_KEYS.get(key, key): value for key, value in data.items()}
