"""
infrastructure.persistence.migrations - Database schema creation.

Called once at startup by the factory (or the CLI adapter).
"""

from __future__ import annotations

import logging

from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_TABLES = [
    """CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        full_name TEXT,
        weight TEXT,
        height TEXT,
        age TEXT,
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS dietary_requirements (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_id TEXT NOT NULL,
        requirement_type TEXT NOT NULL,
        created_at TEXT,
        UNIQUE (profile_id, requirement_type)
    )""",
    """CREATE TABLE IF NOT EXISTS allergies (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_id TEXT NOT NULL,
        allergy_name TEXT NOT NULL,
        severity TEXT,
        created_at TEXT,
        UNIQUE (profile_id, allergy_name)
    )""",
    """CREATE TABLE IF NOT EXISTS food_preferences (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_id TEXT NOT NULL,
        preference_type TEXT NOT NULL,
        preference_value TEXT NOT NULL,
        created_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS budget_settings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_id TEXT NOT NULL UNIQUE,
        amount REAL NOT NULL,
        period TEXT NOT NULL CHECK (period IN ('weekly', 'monthly')),
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS portion_settings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_id TEXT NOT NULL UNIQUE,
        number_of_people INTEGER NOT NULL,
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS saved_recipes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_id TEXT NOT NULL,
        recipe_id TEXT NOT NULL,
        saved_at TEXT,
        notes TEXT,
        is_favorite INTEGER NOT NULL DEFAULT 0,
        UNIQUE (profile_id, recipe_id)
    )""",
    """CREATE TABLE IF NOT EXISTS kv_store (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT
    )""",
]


async def run_migrations(connection: AsyncSQLiteConnection) -> None:
    """Create all tables if they don't exist.

    Safe to call multiple times (uses IF NOT EXISTS).
    """
    async with connection.acquire() as conn:
        for ddl in _TABLES:
            await conn.execute(ddl)
    logger.info("All tables created (or already exist).")
