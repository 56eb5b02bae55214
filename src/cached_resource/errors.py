"""Error types raised around the caching layer."""

from __future__ import annotations

from typing import Optional


class CachedResourceError(Exception):
    """Base class for every error defined by this package."""


class TransportError(CachedResourceError):
    """The remote source could not be reached."""


class RemoteServerError(CachedResourceError):
    """The remote source answered with a failure status."""

    def __init__(self, message: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class CacheStoreError(CachedResourceError):
    """A cache backend failed to read or write an entry."""


class ConfigError(CachedResourceError):
    """Invalid caching configuration."""
