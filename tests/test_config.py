import logging

import pytest

from cached_resource import config as config_module
from cached_resource.config import CachingConfig, configure, load_config
from cached_resource.errors import ConfigError
from cached_resource.store import MemoryStore, SQLiteStore


def test_defaults():
    cfg = CachingConfig()

    assert cfg.cache_enabled is True
    assert cfg.cache_time_to_live == 3600
    assert isinstance(cfg.store, MemoryStore)
    assert isinstance(cfg.logger, logging.Logger)


def test_load_config_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("cache_time_to_live: 90", encoding="utf-8")

    cfg = load_config(path)

    assert isinstance(cfg, CachingConfig)
    assert cfg.cache_time_to_live == 90
    assert cfg.cache_enabled is True
    assert isinstance(cfg.store, MemoryStore)


def test_load_sqlite_store(tmp_path):
    db_path = tmp_path / "entries.db"
    path = tmp_path / "config.yml"
    path.write_text(f"store: sqlite\ndb_path: {db_path}\n", encoding="utf-8")

    cfg = load_config(path)

    assert isinstance(cfg.store, SQLiteStore)
    assert db_path.exists()
    cfg.store.close()


def test_env_overrides(monkeypatch, tmp_path):
    source = tmp_path / "config.yml"
    source.write_text("cache_enabled: true", encoding="utf-8")

    monkeypatch.setenv("CACHED_RESOURCE_ENABLED", "false")
    monkeypatch.setenv("CACHED_RESOURCE_TTL_SEC", "12.5")

    cfg = load_config(source)

    assert cfg.cache_enabled is False
    assert cfg.cache_time_to_live == 12.5


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yml")


def test_unknown_store():
    with pytest.raises(ConfigError):
        CachingConfig.from_dict({"store": "redis"})


def test_negative_ttl_rejected():
    with pytest.raises(ConfigError):
        CachingConfig(cache_time_to_live=-1)


def test_update_in_place():
    cfg = CachingConfig()
    store = MemoryStore()

    cfg.update(cache_enabled=False, store=store)

    assert cfg.cache_enabled is False
    assert cfg.store is store


def test_update_rejects_unknown_field():
    with pytest.raises(ConfigError):
        CachingConfig().update(expires_in=10)


def test_invalid_update_rolls_back():
    cfg = CachingConfig(cache_time_to_live=30)

    with pytest.raises(ConfigError):
        cfg.update(cache_enabled=False, cache_time_to_live=-5)

    assert cfg.cache_enabled is True
    assert cfg.cache_time_to_live == 30


def test_configure_updates_default(monkeypatch):
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG", CachingConfig())

    configure(cache_enabled=False)

    assert config_module.DEFAULT_CONFIG.cache_enabled is False


def test_null_ttl_means_no_expiry(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("cache_time_to_live: null", encoding="utf-8")

    cfg = load_config(path)

    assert cfg.cache_time_to_live is None


def test_non_numeric_ttl_rejected(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("cache_time_to_live: [1, 2]", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_bad_env_ttl_rejected(monkeypatch, tmp_path):
    source = tmp_path / "config.yml"
    source.write_text("cache_enabled: true", encoding="utf-8")
    monkeypatch.setenv("CACHED_RESOURCE_TTL_SEC", "abc")

    with pytest.raises(ConfigError):
        load_config(source)


def test_env_ttl_none(monkeypatch, tmp_path):
    source = tmp_path / "config.yml"
    source.write_text("cache_time_to_live: 60", encoding="utf-8")
    monkeypatch.setenv("CACHED_RESOURCE_TTL_SEC", "none")

    assert load_config(source).cache_time_to_live is None
