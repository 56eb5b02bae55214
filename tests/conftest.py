import pytest

from cached_resource.config import CachingConfig
from cached_resource.store import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def config(store):
    return CachingConfig(cache_enabled=True, cache_time_to_live=60, store=store)


@pytest.fixture
def fetch_calls():
    return []


@pytest.fixture
def fetch(fetch_calls):
    def _fetch(*arguments):
        fetch_calls.append(arguments)
        return {"id": arguments[0] if arguments else None, "tags": ["a"], "version": len(fetch_calls)}
    return _fetch
