"""
Cached Resource
Read-through caching in front of remote finders, with TTL-managed stores.
"""

from .caching import CachedFinder, CachedResource, cached_finder
from .call import CallArguments
from .config import DEFAULT_CONFIG, CachingConfig, configure, load_config
from .errors import (
    CachedResourceError, CacheStoreError, ConfigError,
    RemoteServerError, TransportError,
)
from .key_generator import build_key
from .observability import CacheEvent, EventLogger
from .store import CacheStore, MemoryStore, SQLiteStore

__all__ = [
    'CachedFinder', 'CachedResource', 'cached_finder',
    'CallArguments',
    'CachingConfig', 'DEFAULT_CONFIG', 'configure', 'load_config',
    'CachedResourceError', 'CacheStoreError', 'ConfigError',
    'RemoteServerError', 'TransportError',
    'build_key',
    'CacheEvent', 'EventLogger',
    'CacheStore', 'MemoryStore', 'SQLiteStore',
]
