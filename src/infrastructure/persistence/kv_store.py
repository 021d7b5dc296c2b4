"""
infrastructure.persistence.kv_store - SQLite-backed local key/value store.

Implements KeyValueStorePort for device-local state (meal plans,
planner navigation).
"""

from __future__ import annotations

from datetime import datetime, timezone

from infrastructure.persistence.connection import AsyncSQLiteConnection


class SQLiteKeyValueStore:
    """Async SQLite implementation of KeyValueStorePort."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get(self, key: str) -> str | None:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT value FROM kv_store WHERE key = ?", (key,),
            )
            return rows[0][0] if rows else None

    async def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                (key, value, now),
            )

    async def delete(self, key: str) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
