"""
infrastructure.persistence.preference_repo - SQLite preference repository.

Implements PreferenceRepository port. Collections are replaced wholesale
inside a single transaction; budget and portions are one row per profile.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from domain.entities import (
    DietaryRequirement,
    Allergy,
    AllergySeverity,
    FoodPreference,
    BudgetSetting,
    BudgetPeriod,
    PortionSetting,
)
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

CUISINE_PREFERENCE = "cuisine_preference"


class SQLitePreferenceRepository:
    """Async SQLite implementation of PreferenceRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    # -- dietary requirements ------------------------------------------

    async def get_dietary_requirements(self, profile_id: str) -> list[DietaryRequirement]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, requirement_type
                   FROM dietary_requirements WHERE profile_id = ? ORDER BY id""",
                (profile_id,),
            )
            return [self._row_to_requirement(r) for r in rows]

    async def replace_dietary_requirements(
        self, profile_id: str, requirement_types: list[str],
    ) -> list[DietaryRequirement]:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                "DELETE FROM dietary_requirements WHERE profile_id = ?", (profile_id,),
            )
            await conn.executemany(
                """INSERT INTO dietary_requirements (profile_id, requirement_type, created_at)
                   VALUES (?, ?, ?)""",
                [(profile_id, t, now) for t in requirement_types],
            )
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, requirement_type
                   FROM dietary_requirements WHERE profile_id = ? ORDER BY id""",
                (profile_id,),
            )
        logger.debug("Replaced %d dietary requirements for %s", len(rows), profile_id)
        return [self._row_to_requirement(r) for r in rows]

    # -- allergies -----------------------------------------------------

    async def get_allergies(self, profile_id: str) -> list[Allergy]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, allergy_name, severity
                   FROM allergies WHERE profile_id = ? ORDER BY id""",
                (profile_id,),
            )
            return [self._row_to_allergy(r) for r in rows]

    async def replace_allergies(
        self, profile_id: str, allergies: list[tuple[str, Optional[AllergySeverity]]],
    ) -> list[Allergy]:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute("DELETE FROM allergies WHERE profile_id = ?", (profile_id,))
            await conn.executemany(
                """INSERT INTO allergies (profile_id, allergy_name, severity, created_at)
                   VALUES (?, ?, ?, ?)""",
                [
                    (profile_id, name, severity.value if severity else None, now)
                    for name, severity in allergies
                ],
            )
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, allergy_name, severity
                   FROM allergies WHERE profile_id = ? ORDER BY id""",
                (profile_id,),
            )
        logger.debug("Replaced %d allergies for %s", len(rows), profile_id)
        return [self._row_to_allergy(r) for r in rows]

    # -- food preferences ----------------------------------------------

    async def get_food_preferences(self, profile_id: str) -> list[FoodPreference]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, preference_type, preference_value
                   FROM food_preferences
                   WHERE profile_id = ? AND preference_type = ? ORDER BY id""",
                (profile_id, CUISINE_PREFERENCE),
            )
            return [self._row_to_preference(r) for r in rows]

    async def replace_food_preferences(
        self, profile_id: str, cuisines: list[str],
    ) -> list[FoodPreference]:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                "DELETE FROM food_preferences WHERE profile_id = ? AND preference_type = ?",
                (profile_id, CUISINE_PREFERENCE),
            )
            await conn.executemany(
                """INSERT INTO food_preferences
                   (profile_id, preference_type, preference_value, created_at)
                   VALUES (?, ?, ?, ?)""",
                [(profile_id, CUISINE_PREFERENCE, c, now) for c in cuisines],
            )
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, preference_type, preference_value
                   FROM food_preferences
                   WHERE profile_id = ? AND preference_type = ? ORDER BY id""",
                (profile_id, CUISINE_PREFERENCE),
            )
        return [self._row_to_preference(r) for r in rows]

    # -- budget --------------------------------------------------------

    async def get_budget(self, profile_id: str) -> BudgetSetting | None:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, amount, period
                   FROM budget_settings WHERE profile_id = ?""",
                (profile_id,),
            )
            return self._row_to_budget(rows[0]) if rows else None

    async def upsert_budget(
        self, profile_id: str, amount: float, period: BudgetPeriod,
    ) -> BudgetSetting:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO budget_settings (profile_id, amount, period, updated_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(profile_id) DO UPDATE SET
                       amount = excluded.amount,
                       period = excluded.period,
                       updated_at = excluded.updated_at""",
                (profile_id, amount, BudgetPeriod(period).value, now),
            )
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, amount, period
                   FROM budget_settings WHERE profile_id = ?""",
                (profile_id,),
            )
            return self._row_to_budget(rows[0])

    # -- portions ------------------------------------------------------

    async def get_portions(self, profile_id: str) -> PortionSetting | None:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, number_of_people
                   FROM portion_settings WHERE profile_id = ?""",
                (profile_id,),
            )
            return self._row_to_portions(rows[0]) if rows else None

    async def upsert_portions(self, profile_id: str, number_of_people: int) -> PortionSetting:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO portion_settings (profile_id, number_of_people, updated_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(profile_id) DO UPDATE SET
                       number_of_people = excluded.number_of_people,
                       updated_at = excluded.updated_at""",
                (profile_id, number_of_people, now),
            )
            rows = await conn.execute_fetchall(
                """SELECT id, profile_id, number_of_people
                   FROM portion_settings WHERE profile_id = ?""",
                (profile_id,),
            )
            return self._row_to_portions(rows[0])

    # -- row mapping ---------------------------------------------------

    @staticmethod
    def _row_to_requirement(row) -> DietaryRequirement:
        return DietaryRequirement(id=row[0], profile_id=row[1], requirement_type=row[2])

    @staticmethod
    def _row_to_allergy(row) -> Allergy:
        return Allergy(
            id=row[0],
            profile_id=row[1],
            allergy_name=row[2],
            severity=AllergySeverity(row[3]) if row[3] else None,
        )

    @staticmethod
    def _row_to_preference(row) -> FoodPreference:
        return FoodPreference(
            id=row[0], profile_id=row[1], preference_type=row[2], preference_value=row[3],
        )

    @staticmethod
    def _row_to_budget(row) -> BudgetSetting:
        return BudgetSetting(
            id=row[0], profile_id=row[1], amount=float(row[2]), period=BudgetPeriod(row[3]),
        )

    @staticmethod
    def _row_to_portions(row) -> PortionSetting:
        return PortionSetting(id=row[0], profile_id=row[1], number_of_people=int(row[2]))
