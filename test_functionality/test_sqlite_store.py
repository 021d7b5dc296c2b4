"""SQLite adapters against a temporary database file."""

import asyncio

import pytest

from domain.entities import AllergySeverity, BudgetPeriod, Profile
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.kv_store import SQLiteKeyValueStore
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.preference_repo import SQLitePreferenceRepository
from infrastructure.persistence.profile_repo import SQLiteProfileRepository
from infrastructure.persistence.saved_recipe_repo import SQLiteSavedRecipeRepository


@pytest.fixture
def connection(tmp_path):
    conn = AsyncSQLiteConnection(str(tmp_path / "test.db"))
    asyncio.run(run_migrations(conn))
    return conn


def test_migrations_are_idempotent(connection):
    asyncio.run(run_migrations(connection))


def test_profile_upsert_and_get(connection):
    repo = SQLiteProfileRepository(connection)

    async def run():
        assert await repo.get_by_id("alice") is None
        await repo.upsert(Profile(id="alice", full_name="Alice"))
        await repo.upsert(Profile(id="alice", full_name="Alice Smith", age="30"))
        return await repo.get_by_id("alice")

    profile = asyncio.run(run())
    assert profile.full_name == "Alice Smith"
    assert profile.age == "30"
    assert profile.updated_at


def test_collections_are_replaced_not_merged(connection):
    repo = SQLitePreferenceRepository(connection)

    async def run():
        await repo.replace_dietary_requirements("alice", ["vegetarian", "glutenfree"])
        await repo.replace_dietary_requirements("alice", ["keto"])
        await repo.replace_dietary_requirements("bob", ["vegan"])
        await repo.replace_allergies("alice", [("Peanuts", AllergySeverity.SEVERE), ("Milk", None)])
        await repo.replace_food_preferences("alice", ["Italian"])
        await repo.replace_food_preferences("alice", [])
        return (
            await repo.get_dietary_requirements("alice"),
            await repo.get_allergies("alice"),
            await repo.get_food_preferences("alice"),
            await repo.get_dietary_requirements("bob"),
        )

    dietary, allergies, cuisines, bob = asyncio.run(run())
    assert [d.requirement_type for d in dietary] == ["keto"]
    assert [(a.allergy_name, a.severity) for a in allergies] == [
        ("Peanuts", AllergySeverity.SEVERE), ("Milk", None),
    ]
    assert cuisines == []
    assert [d.requirement_type for d in bob] == ["vegan"]


def test_budget_and_portions_are_single_rows(connection):
    repo = SQLitePreferenceRepository(connection)

    async def run():
        first = await repo.upsert_budget("alice", 500, BudgetPeriod.WEEKLY)
        second = await repo.upsert_budget("alice", 2000, BudgetPeriod.MONTHLY)
        await repo.upsert_portions("alice", 2)
        portions = await repo.upsert_portions("alice", 5)
        return first, second, await repo.get_budget("alice"), portions, await repo.get_portions("bob")

    first, second, budget, portions, missing = asyncio.run(run())
    assert first.id == second.id
    assert budget.amount == 2000
    assert budget.period is BudgetPeriod.MONTHLY
    assert portions.number_of_people == 5
    assert missing is None


def test_saving_a_recipe_twice_keeps_one_row(connection):
    repo = SQLiteSavedRecipeRepository(connection)

    async def run():
        first = await repo.upsert("alice", "r1", False, notes="less salt")
        second = await repo.upsert("alice", "r1", True)
        return first, second, await repo.get_by_profile("alice")

    first, second, rows = asyncio.run(run())
    assert len(rows) == 1
    assert second.id == first.id
    assert second.is_favorite
    assert second.notes == "less salt"
    assert second.saved_at == first.saved_at


def test_saved_recipe_queries(connection):
    repo = SQLiteSavedRecipeRepository(connection)

    async def run():
        await repo.upsert("alice", "r1", False)
        await repo.upsert("alice", "r2", True)
        await repo.upsert("bob", "r3", True)
        favorites = await repo.get_by_profile("alice", favorites_only=True)
        updated = await repo.update_notes("alice", "r1", "good")
        missing = await repo.update_notes("alice", "r9", "nope")
        await repo.delete("alice", "r2")
        return favorites, updated, missing, await repo.get_by_profile("alice")

    favorites, updated, missing, remaining = asyncio.run(run())
    assert [f.recipe_id for f in favorites] == ["r2"]
    assert updated.notes == "good"
    assert missing is None
    assert [r.recipe_id for r in remaining] == ["r1"]


def test_key_value_store(connection):
    kv = SQLiteKeyValueStore(connection)

    async def run():
        assert await kv.get("k") is None
        await kv.set("k", "one")
        await kv.set("k", "two")
        value = await kv.get("k")
        await kv.delete("k")
        return value, await kv.get("k")

    assert asyncio.run(run()) == ("two", None)
