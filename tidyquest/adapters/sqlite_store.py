"""
TidyQuest — SQLite key-value store, implements KeyValueStore.

Local-first persistence: the profile, completion map, history and
checkpoints all live as JSON values in one table, surviving app restarts.
sqlite3 is synchronous, so calls are wrapped with asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

_MEMORY = ":memory:"


class SQLiteKeyValueStore:
    """SQLite implementation of KeyValueStore."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from tidyquest.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        self._shared: sqlite3.Connection | None = None
        if db_path == _MEMORY:
            # An in-memory database only lives as long as its connection
            self._shared = sqlite3.connect(_MEMORY, check_same_thread=False)
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self._shared is not None:
            return self._shared
        return sqlite3.connect(self._db_path)

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key        TEXT PRIMARY KEY,
                    value      TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
                )
            """)
        logger.debug("Key-value table initialized at %s", self._db_path)

    # ------------------------------------------------------------------
    # Sync implementations
    # ------------------------------------------------------------------

    def _get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return None if row is None else row[0]

    def _set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )

    def _multi_remove(self, keys: list[str]) -> None:
        if not keys:
            return
        placeholders = ", ".join("?" for _ in keys)
        with self._connect() as conn:
            conn.execute(f"DELETE FROM kv_store WHERE key IN ({placeholders})", keys)
        logger.info("Removed keys: %s", ", ".join(keys))

    def _keys(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [r[0] for r in rows]

    # ------------------------------------------------------------------
    # KeyValueStore
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._multi_remove, [key])

    async def multi_remove(self, keys: list[str]) -> None:
        await asyncio.to_thread(self._multi_remove, list(keys))

    async def keys(self) -> list[str]:
        """All stored keys, sorted. Not part of the port; handy for debugging."""
        return await asyncio.to_thread(self._keys)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    async def _demo() -> None:
        store = SQLiteKeyValueStore(db_path="data/test_kv.db")
        await store.set("greeting", '"hello"')
        print(f"greeting = {await store.get('greeting')}")
        print(f"keys = {await store.keys()}")
        await store.remove("greeting")
        print(f"after remove = {await store.get('greeting')}")

    asyncio.run(_demo())
