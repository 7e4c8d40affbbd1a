"""
Detail Cache - Persistent key/value store for resolved item details.

Entries are grouped in namespaces (one per plugin) and never expire;
a fresher value for the same key simply overwrites the old one.

Storage is a single SQLite table:
  cache_entries(namespace, key, value, updated_at)
"""

import sqlite3
import time
from pathlib import Path
from typing import Optional

from loguru import logger

from dext import constants


def cache_namespace(plugin_path: str) -> str:
    """
    Derive the item-details namespace for a plugin.

    Example:
        cache_namespace("dext.plugins.core.calculator") -> "calculator-item-details"
        cache_namespace("my_plugins.notes:NotesPlugin") -> "NotesPlugin-item-details"
        cache_namespace("/home/me/plugins/notes") -> "notes-item-details"
    """
    tail = plugin_path.rstrip("/").rsplit(":", 1)[-1]
    if "/" in tail:
        base = Path(tail).name
    else:
        base = tail.rsplit(".", 1)[-1]
    return f"{base}{constants.ITEM_DETAILS_SUFFIX}"


class CacheNamespace:
    """has/get/set view of one namespace."""

    def __init__(self, cache: "DetailCache", name: str):
        self.cache = cache
        self.name = name

    def has(self, key: str) -> bool:
        return self.cache.has(self.name, key)

    def get(self, key: str) -> Optional[str]:
        return self.cache.get(self.name, key)

    def set(self, key: str, value: str) -> None:
        self.cache.set(self.name, key, value)


class DetailCache:
    """
    SQLite-backed namespaced cache.

    Methods:
        namespace(name): Get a has/get/set view of one namespace
        clear(namespace): Drop one namespace, or everything
        close(): Close the connection
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else constants.CACHE_PATH
        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Persistent connection with WAL mode for better concurrency
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_database()
        logger.debug(f"DetailCache initialized with db at {self.db_path}")

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS cache_entries (
                namespace TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                updated_at INTEGER,
                PRIMARY KEY (namespace, key)
            )
        """)
        self._conn.commit()

    def namespace(self, name: str) -> CacheNamespace:
        return CacheNamespace(self, name)

    def has(self, namespace: str, key: str) -> bool:
        row = self._execute(
            "SELECT 1 FROM cache_entries WHERE namespace = ? AND key = ?",
            (namespace, key),
        ).fetchone()
        return row is not None

    def get(self, namespace: str, key: str) -> Optional[str]:
        row = self._execute(
            "SELECT value FROM cache_entries WHERE namespace = ? AND key = ?",
            (namespace, key),
        ).fetchone()
        return row[0] if row else None

    def set(self, namespace: str, key: str, value: str) -> None:
        """Insert or overwrite one entry."""
        self._execute("""
            INSERT INTO cache_entries (namespace, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(namespace, key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (namespace, key, value, int(time.time())))
        self._conn.commit()

    def clear(self, namespace: Optional[str] = None) -> None:
        """
        Clear cached entries.

        Args:
            namespace: If provided, clear only this namespace.
                       If None, clear everything.
        """
        if namespace:
            self._execute("DELETE FROM cache_entries WHERE namespace = ?", (namespace,))
        else:
            self._execute("DELETE FROM cache_entries")
        self._conn.commit()

    def count(self, namespace: Optional[str] = None) -> int:
        if namespace:
            row = self._execute(
                "SELECT COUNT(*) FROM cache_entries WHERE namespace = ?", (namespace,)
            ).fetchone()
        else:
            row = self._execute("SELECT COUNT(*) FROM cache_entries").fetchone()
        return row[0]

    def close(self) -> None:
        self._conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error:
            logger.exception(f"Detail cache query failed on {self.db_path}")
            raise
