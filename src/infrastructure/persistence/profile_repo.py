"""
infrastructure.persistence.profile_repo - SQLite profile repository.

Implements ProfileRepository port. The profile id is the session user id.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from domain.entities import Profile
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


class SQLiteProfileRepository:
    """Async SQLite implementation of ProfileRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_id(self, profile_id: str) -> Profile | None:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, full_name, weight, height, age, updated_at
                   FROM profiles WHERE id = ?""",
                (profile_id,),
            )
            return self._row_to_profile(rows[0]) if rows else None

    async def upsert(self, profile: Profile) -> Profile:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO profiles (id, full_name, weight, height, age, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       full_name = excluded.full_name,
                       weight = excluded.weight,
                       height = excluded.height,
                       age = excluded.age,
                       updated_at = excluded.updated_at""",
                (profile.id, profile.full_name, profile.weight, profile.height,
                 profile.age, now),
            )
        logger.debug("Upserted profile %s", profile.id)
        return Profile(
            id=profile.id, full_name=profile.full_name, weight=profile.weight,
            height=profile.height, age=profile.age, updated_at=now,
        )

    @staticmethod
    def _row_to_profile(row) -> Profile:
        return Profile(
            id=row[0], full_name=row[1] or "", weight=row[2] or "",
            height=row[3] or "", age=row[4] or "", updated_at=row[5] or "",
        )
