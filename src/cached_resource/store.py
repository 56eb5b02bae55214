#!/usr/bin/env python3
"""
Cache Stores — key/value backends with expiration

Implements:
- CacheStore: read(key) → value | None, write(key, value, ttl)
- MemoryStore: in-process dict, the default backend
- SQLiteStore: persistent backend with TTL columns and hit counters

Stores own entry lifetime. Callers only read and write.
"""

import abc
import json
import logging
import os
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .errors import CacheStoreError

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.path.expanduser("~/.cache/cached_resource/entries.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    id INTEGER PRIMARY KEY,
    cache_key TEXT UNIQUE NOT NULL,
    value TEXT NOT NULL,
    created_at REAL NOT NULL,
    expires_at REAL,               -- NULL = never expires
    hit_count INTEGER DEFAULT 0,
    last_hit_at REAL
);

CREATE INDEX IF NOT EXISTS idx_cache_key ON cache_entries(cache_key);
CREATE INDEX IF NOT EXISTS idx_cache_expires ON cache_entries(expires_at);
"""


class CacheStore(abc.ABC):
    """Minimal key/value store with per-entry expiration."""

    @abc.abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """Return the live value for ``key``, or None when absent or expired."""

    @abc.abstractmethod
    def write(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key``. ``ttl`` is in seconds; None keeps it forever."""


class MemoryStore(CacheStore):
    """
    Thread-safe in-process store.

    Expired entries are evicted lazily, when a read finds them.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()
        self.stats = {
            "hits": 0,
            "misses": 0,
            "writes": 0,
            "evictions": 0,
        }

    def read(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats["misses"] += 1
                return None

            value, expires_at = entry
            if expires_at is not None and time.time() >= expires_at:
                del self._entries[key]
                self.stats["evictions"] += 1
                self.stats["misses"] += 1
                return None

            self.stats["hits"] += 1
            return value

    def write(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = time.time() + ttl if ttl is not None else None
        with self._lock:
            self._entries[key] = (value, expires_at)
            self.stats["writes"] += 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return {**self.stats, "entries": len(self._entries)}


class SQLiteStore(CacheStore):
    """
    SQLite-backed store with TTL and hit counters.

    Values are stored as JSON text, so every read hands back a fresh object.
    Values JSON cannot reproduce exactly are refused on write.
    Driver and encoding failures surface as CacheStoreError.
    """

    def __init__(self, db_path: str = None):
        if db_path is None:
            db_path = DEFAULT_DB_PATH

        self.db_path = os.path.expanduser(str(db_path))
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        # Shared across caller threads; sqlite3 serializes access internally
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False, timeout=10.0)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()

        self.conn.executescript(SCHEMA)
        self.conn.commit()

        self.stats = {
            "hits": 0,
            "misses": 0,
            "writes": 0,
            "evictions": 0,
            "start_time": time.time(),
        }

        logger.info(f"SQLiteStore initialized at {self.db_path}")

    def read(self, key: str) -> Optional[Any]:
        now = time.time()

        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute("""
                    SELECT id, value FROM cache_entries
                    WHERE cache_key = ? AND (expires_at IS NULL OR expires_at > ?)
                    LIMIT 1
                """, (key, now))
                row = cursor.fetchone()

                if row is None:
                    self.stats["misses"] += 1
                    return None

                cursor.execute("""
                    UPDATE cache_entries
                    SET hit_count = hit_count + 1, last_hit_at = ?
                    WHERE id = ?
                """, (now, row["id"]))
                self.conn.commit()
                self.stats["hits"] += 1

            return json.loads(row["value"])

        except (sqlite3.Error, ValueError) as exc:
            logger.error(f"Cache read error for {key}: {exc}")
            raise CacheStoreError(f"read failed for {key}") from exc

    def write(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        now = time.time()
        expires_at = now + ttl if ttl is not None else None

        try:
            payload = json.dumps(value)
            # tuples, non-str keys etc. would come back as a different value
            if json.loads(payload) != value:
                raise ValueError(f"value does not survive JSON encoding: {value!r}")
            with self._lock:
                self.conn.execute("""
                    INSERT OR REPLACE INTO cache_entries
                    (cache_key, value, created_at, expires_at, hit_count)
                    VALUES (?, ?, ?, ?, 0)
                """, (key, payload, now, expires_at))
                self.conn.commit()
                self.stats["writes"] += 1

            logger.debug(f"Stored {key} (ttl={ttl}s)")

        except (sqlite3.Error, TypeError, ValueError) as exc:
            logger.error(f"Cache write error for {key}: {exc}")
            raise CacheStoreError(f"write failed for {key}") from exc

    def clear_expired(self) -> int:
        """Remove all expired entries. Returns the number removed."""
        now = time.time()

        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute(
                    "DELETE FROM cache_entries WHERE expires_at IS NOT NULL AND expires_at <= ?",
                    (now,),
                )
                cleared = cursor.rowcount
                self.conn.commit()
                self.stats["evictions"] += cleared
        except sqlite3.Error as exc:
            logger.error(f"Clear expired error: {exc}")
            raise CacheStoreError("clear_expired failed") from exc

        if cleared > 0:
            logger.info(f"Cleared {cleared} expired cache entries")
        return cleared

    def get_stats(self) -> Dict[str, Any]:
        total_reads = self.stats["hits"] + self.stats["misses"]
        hit_rate = (self.stats["hits"] / total_reads * 100) if total_reads > 0 else 0

        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM cache_entries")
            entries = cursor.fetchone()["count"]
            cursor.execute(
                "SELECT COUNT(*) AS count FROM cache_entries "
                "WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (time.time(),),
            )
            expired = cursor.fetchone()["count"]

        return {
            "hits": self.stats["hits"],
            "misses": self.stats["misses"],
            "hit_rate_percent": round(hit_rate, 1),
            "writes": self.stats["writes"],
            "evictions": self.stats["evictions"],
            "entries": entries,
            "expired_entries": expired,
            "uptime_seconds": int(time.time() - self.stats["start_time"]),
        }

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("SQLiteStore closed")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    store = SQLiteStore("/tmp/cached_resource_demo.db")
    store.write("widget/42", {"id": 42, "name": "sprocket"}, ttl=60)
    print(f"read: {store.read('widget/42')}")
    print(f"stats: {store.get_stats()}")
    store.close()
