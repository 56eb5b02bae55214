"""Configuration loader for the caching layer."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError
from .store import CacheStore, MemoryStore, SQLiteStore

DEFAULT_TTL_SEC = 3600.0

STORE_BACKENDS = {"memory", "sqlite"}


@dataclass
class CachingConfig:
    cache_enabled: bool = True
    cache_time_to_live: Optional[float] = DEFAULT_TTL_SEC
    store: CacheStore = field(default_factory=MemoryStore)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("cached_resource"))

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        if self.cache_time_to_live is not None and self.cache_time_to_live < 0:
            raise ConfigError(f"cache_time_to_live must be >= 0, got {self.cache_time_to_live}")
        if not isinstance(self.store, CacheStore):
            raise ConfigError(f"store must be a CacheStore, got {type(self.store).__name__}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachingConfig":
        backend = str(data.get("store", "memory")).lower()
        if backend not in STORE_BACKENDS:
            raise ConfigError(f"unknown store {backend!r}, expected one of {sorted(STORE_BACKENDS)}")

        if backend == "sqlite":
            store: CacheStore = SQLiteStore(data.get("db_path"))
        else:
            store = MemoryStore()

        return cls(
            cache_enabled=_as_bool(data.get("cache_enabled", True)),
            cache_time_to_live=_as_ttl(data.get("cache_time_to_live", DEFAULT_TTL_SEC)),
            store=store,
        )

    def update(self, **changes: Any) -> "CachingConfig":
        """Change settings in place; later calls see the new values."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigError(f"unknown config fields: {sorted(unknown)}")

        previous = {name: getattr(self, name) for name in changes}
        for name, value in changes.items():
            setattr(self, name, value)
        try:
            self._validate()
        except ConfigError:
            for name, value in previous.items():
                setattr(self, name, value)
            raise
        return self


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _as_ttl(value: Any) -> Optional[float]:
    """Seconds as float; None (YAML null, env "none") means entries never expire."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in {"", "none", "null"}:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"cache_time_to_live must be a number of seconds, got {value!r}") from exc


ENV_MAP = {
    "cache_enabled": "CACHED_RESOURCE_ENABLED",
    "cache_time_to_live": "CACHED_RESOURCE_TTL_SEC",
    "store": "CACHED_RESOURCE_STORE",
    "db_path": "CACHED_RESOURCE_DB_PATH",
}


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def merge_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
    merged = json.loads(json.dumps(config_data))  # deep copy via json

    for key, env_name in ENV_MAP.items():
        if env_name not in os.environ:
            continue
        value: Any = os.environ[env_name]
        if key == "cache_enabled":
            value = _as_bool(value)
        elif key == "cache_time_to_live":
            value = _as_ttl(value)
        merged[key] = value

    return merged


def load_config(config_path: str | Path = "config/cached_resource.yml") -> CachingConfig:
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = load_yaml(path)
    data = merge_env_overrides(data)
    return CachingConfig.from_dict(data)


# Process-wide default used by finders built without an explicit config
DEFAULT_CONFIG = CachingConfig()


def configure(**changes: Any) -> CachingConfig:
    """Update the process-wide default config (e.g. ``configure(cache_enabled=False)``)."""
    return DEFAULT_CONFIG.update(**changes)
