"""
infrastructure.persistence.saved_recipe_repo - SQLite saved-recipe repository.

Implements SavedRecipeRepository port. (profile_id, recipe_id) is unique,
so saving twice updates the existing row instead of adding a duplicate.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from domain.entities import SavedRecipe
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_COLUMNS = "id, profile_id, recipe_id, saved_at, notes, is_favorite"


class SQLiteSavedRecipeRepository:
    """Async SQLite implementation of SavedRecipeRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_profile(
        self, profile_id: str, favorites_only: bool = False,
    ) -> list[SavedRecipe]:
        query = f"SELECT {_COLUMNS} FROM saved_recipes WHERE profile_id = ?"
        if favorites_only:
            query += " AND is_favorite = 1"
        query += " ORDER BY saved_at DESC, id DESC"
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(query, (profile_id,))
            return [self._row_to_saved(r) for r in rows]

    async def get_one(self, profile_id: str, recipe_id: str) -> SavedRecipe | None:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"SELECT {_COLUMNS} FROM saved_recipes WHERE profile_id = ? AND recipe_id = ?",
                (profile_id, recipe_id),
            )
            return self._row_to_saved(rows[0]) if rows else None

    async def upsert(
        self,
        profile_id: str,
        recipe_id: str,
        is_favorite: bool,
        notes: Optional[str] = None,
    ) -> SavedRecipe:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO saved_recipes (profile_id, recipe_id, saved_at, notes, is_favorite)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(profile_id, recipe_id) DO UPDATE SET
                       is_favorite = excluded.is_favorite,
                       notes = COALESCE(excluded.notes, saved_recipes.notes)""",
                (profile_id, recipe_id, now, notes, int(bool(is_favorite))),
            )
            rows = await conn.execute_fetchall(
                f"SELECT {_COLUMNS} FROM saved_recipes WHERE profile_id = ? AND recipe_id = ?",
                (profile_id, recipe_id),
            )
        logger.debug("Upserted saved recipe %s for %s (favorite=%s)",
                     recipe_id, profile_id, is_favorite)
        return self._row_to_saved(rows[0])

    async def update_notes(
        self, profile_id: str, recipe_id: str, notes: str,
    ) -> SavedRecipe | None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "UPDATE saved_recipes SET notes = ? WHERE profile_id = ? AND recipe_id = ?",
                (notes, profile_id, recipe_id),
            )
            rows = await conn.execute_fetchall(
                f"SELECT {_COLUMNS} FROM saved_recipes WHERE profile_id = ? AND recipe_id = ?",
                (profile_id, recipe_id),
            )
            return self._row_to_saved(rows[0]) if rows else None

    async def delete(self, profile_id: str, recipe_id: str) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "DELETE FROM saved_recipes WHERE profile_id = ? AND recipe_id = ?",
                (profile_id, recipe_id),
            )

    @staticmethod
    def _row_to_saved(row) -> SavedRecipe:
        return SavedRecipe(
            id=row[0],
            profile_id=row[1],
            recipe_id=row[2],
            saved_at=row[3] or "",
            notes=row[4],
            is_favorite=bool(row[5]),
        )
