#!/usr/bin/env python3
"""
Cached Resource — read-through caching for remote finders

Wraps a fetch callable so repeated lookups are served from a cache store:

  find(*args)                     → cache hit returns a copy, miss fetches + stores
  find(*args, {"reload": True})   → always fetches, then repopulates the entry
  cache_enabled = False           → always fetches, still writes the result back

Errors raised by the fetch reach the caller untouched and are never cached.
Store failures degrade to a miss (read) or an unpopulated entry (write).
"""

import copy
import dataclasses
import functools
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from .call import CallArguments
from .config import DEFAULT_CONFIG, CachingConfig
from .key_generator import build_key, identity_for
from .observability import EventLogger

logger = logging.getLogger(__name__)


class CachedFinder:
    """
    Read-through cache in front of one fetch callable.

    Holds no cached data itself; every call works only against the
    configured store. Concurrent misses for one key may each fetch (last
    write wins) unless ``single_flight`` is set.
    """

    def __init__(
        self,
        resource_identity: str,
        fetch: Callable[..., Any],
        config: Optional[CachingConfig] = None,
        event_logger: Optional[EventLogger] = None,
        single_flight: bool = False,
    ) -> None:
        self.resource_identity = resource_identity
        self._fetch = fetch
        self._config = config
        self._event_logger = event_logger
        self._single_flight = single_flight
        # key → [lock, callers holding or waiting]; dropped when the count hits zero
        self._key_locks: Dict[str, List[Any]] = {}
        self._key_locks_guard = threading.Lock()

    @property
    def config(self) -> CachingConfig:
        return self._config if self._config is not None else DEFAULT_CONFIG

    def cache_key(self, *arguments: Any) -> str:
        return build_key(self.resource_identity, CallArguments.parse(arguments).positional)

    def find(self, *arguments: Any) -> Any:
        """
        Find a resource using the cache, or refetch it if ``reload`` is set
        or caching is disabled.

        Settings are read once here; a config update during the call
        applies from the next call on.
        """
        settings = dataclasses.replace(self.config)
        call = CallArguments.parse(arguments)
        should_reload = call.reload or not settings.cache_enabled
        key = build_key(self.resource_identity, call.positional)
        events = self._event_logger or EventLogger(settings.logger)

        if should_reload:
            logger.debug(f"Bypassing cache for {key} (reload={call.reload}, enabled={settings.cache_enabled})")
            return self._find_via_reload(key, call, settings, events)

        if self._single_flight:
            with self._lock_for(key):
                return self._find_via_cache(key, call, settings, events)
        return self._find_via_cache(key, call, settings, events)

    __call__ = find

    @contextmanager
    def _lock_for(self, key: str) -> Iterator[None]:
        with self._key_locks_guard:
            entry = self._key_locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._key_locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[key]

    def _find_via_cache(self, key: str, call: CallArguments, settings: CachingConfig,
                        events: EventLogger) -> Any:
        try:
            cached = settings.store.read(key)
        except Exception as exc:  # noqa: BLE001
            events.log("read_failed", f"{key} for {list(call.positional)!r}: {exc}", key=key)
            cached = None

        if cached is not None:
            events.log("read", f"{key} for {list(call.positional)!r}", key=key)
            return copy.deepcopy(cached)

        return self._find_via_reload(key, call, settings, events)

    def _find_via_reload(self, key: str, call: CallArguments, settings: CachingConfig,
                         events: EventLogger) -> Any:
        result = self._fetch(*call.positional)

        try:
            settings.store.write(key, copy.deepcopy(result), settings.cache_time_to_live)
        except Exception as exc:  # noqa: BLE001
            events.log("write_failed", f"{key} for {list(call.positional)!r}: {exc}", key=key)
            return result

        events.log("write", f"{key} for {list(call.positional)!r}", key=key)
        return result


def cached_finder(
    resource_identity: Optional[str] = None,
    config: Optional[CachingConfig] = None,
    **kwargs: Any,
) -> Callable[[Callable[..., Any]], CachedFinder]:
    """
    Decorate a fetch function with a read-through cache.

        @cached_finder("Widget")
        def find_widget(widget_id, options=None): ...

    The identity defaults to the function's qualified name.
    """

    def decorator(fetch: Callable[..., Any]) -> CachedFinder:
        finder = CachedFinder(resource_identity or identity_for(fetch), fetch, config=config, **kwargs)
        functools.update_wrapper(finder, fetch)
        return finder

    return decorator


class CachedResource:
    """
    Base class for remote resources with a cached ``find``.

    Subclasses implement ``find_without_cache`` (the real lookup) and may set
    ``caching_config``; ``find`` goes through the cache.
    """

    caching_config: Optional[CachingConfig] = None
    resource_identity: Optional[str] = None

    @classmethod
    def find_without_cache(cls, *arguments: Any) -> Any:
        raise NotImplementedError(f"{cls.__name__} must implement find_without_cache")

    @classmethod
    def finder(cls) -> CachedFinder:
        return CachedFinder(
            cls.resource_identity or identity_for(cls),
            cls.find_without_cache,
            config=cls.caching_config,
        )

    @classmethod
    def find(cls, *arguments: Any) -> Any:
        return cls.finder().find(*arguments)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    calls = {"count": 0}

    @cached_finder("Widget")
    def find_widget(widget_id):
        calls["count"] += 1
        return {"id": widget_id, "name": "sprocket"}

    find_widget(42)
    find_widget(42)
    find_widget(42, {"reload": True})
    print(f"underlying fetches: {calls['count']}")
