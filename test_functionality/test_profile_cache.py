"""ProfileCache: session scoping, coalesced refresh, authoritative saves."""

import asyncio

import pytest

from application.dto import CacheStatus
from application.services.profile import ProfileCache
from domain.entities import AllergySeverity, BudgetPeriod, Profile
from domain.exceptions import SessionInvalidError
from fakes import FakePreferenceRepository


@pytest.fixture
def cache(profile_repo, preference_repo, sessions, clock):
    return ProfileCache(profile_repo, preference_repo, sessions, clock=clock)


def test_signed_out_refresh_reads_nothing(cache, sessions, profile_repo):
    sessions.user_id = None
    asyncio.run(cache.refresh())

    assert cache.status is CacheStatus.SIGNED_OUT
    assert cache.snapshot is None
    assert profile_repo.reads == 0


def test_expired_session_counts_as_signed_out(cache, sessions):
    sessions.expired = True
    asyncio.run(cache.refresh())
    assert cache.status is CacheStatus.SIGNED_OUT


def test_missing_rows_are_not_an_error(cache):
    asyncio.run(cache.refresh())

    snap = cache.snapshot
    assert cache.status is CacheStatus.READY
    assert snap.user_id == "alice"
    assert snap.profile is None
    assert snap.dietary_requirements == ()
    assert snap.budget is None
    assert snap.portions is None


def test_refresh_loads_everything(cache, profile_repo, preference_repo):
    profile_repo.profiles["alice"] = Profile(id="alice", full_name="Alice A")

    async def run():
        await preference_repo.replace_dietary_requirements("alice", ["vegetarian"])
        await preference_repo.upsert_portions("alice", 3)
        await cache.refresh()

    asyncio.run(run())
    snap = cache.snapshot
    assert snap.profile.full_name == "Alice A"
    assert [d.requirement_type for d in snap.dietary_requirements] == ["vegetarian"]
    assert snap.portions.number_of_people == 3


def test_concurrent_refreshes_coalesce(cache, profile_repo):
    async def run():
        await asyncio.gather(cache.refresh(), cache.refresh(), cache.refresh())

    asyncio.run(run())
    assert profile_repo.reads == 1


def test_failed_refresh_keeps_previous_snapshot(cache, profile_repo, clock):
    asyncio.run(cache.refresh())
    before = cache.snapshot

    profile_repo.fail = True
    clock.advance(600)
    asyncio.run(cache.refresh())

    assert cache.status is CacheStatus.ERROR
    assert cache.error
    assert cache.snapshot is before


class SlowPortionsRepository(FakePreferenceRepository):
    def __init__(self):
        super().__init__()
        self.portions_finished = False

    async def get_portions(self, profile_id):
        await asyncio.sleep(0.02)
        self.portions_finished = True
        return await super().get_portions(profile_id)


def test_failed_read_waits_for_sibling_reads(profile_repo, sessions, clock):
    preference_repo = SlowPortionsRepository()
    cache = ProfileCache(profile_repo, preference_repo, sessions, clock=clock)
    profile_repo.fail = True

    asyncio.run(cache.refresh())

    assert cache.status is CacheStatus.ERROR
    assert "store down" in cache.error
    assert preference_repo.portions_finished


def test_user_switch_never_shows_previous_users_data(cache, sessions, profile_repo):
    profile_repo.profiles["alice"] = Profile(id="alice", full_name="Alice A")
    profile_repo.profiles["bob"] = Profile(id="bob", full_name="Bob B")
    asyncio.run(cache.refresh())

    sessions.user_id = "bob"
    assert asyncio.run(cache.current()) is None

    asyncio.run(cache.refresh())
    snap = asyncio.run(cache.current())
    assert snap.user_id == "bob"
    assert snap.profile.full_name == "Bob B"


def test_sign_out_clears_snapshot(cache, sessions):
    asyncio.run(cache.refresh())
    sessions.user_id = None

    assert asyncio.run(cache.current()) is None
    assert cache.snapshot is None
    assert cache.status is CacheStatus.SIGNED_OUT


def test_save_replaces_whole_collection(cache, preference_repo):
    async def run():
        await cache.refresh()
        await cache.save_dietary_requirements("alice", ["vegetarian", "vegetarian", "glutenfree"])
        await cache.save_dietary_requirements("alice", ["keto"])

    asyncio.run(run())
    assert [d.requirement_type for d in preference_repo.dietary["alice"]] == ["keto"]
    assert [d.requirement_type for d in cache.snapshot.dietary_requirements] == ["keto"]


def test_save_allergies_dedupes_by_name(cache, preference_repo):
    asyncio.run(cache.save_allergies("alice", [
        ("Peanuts", AllergySeverity.MILD),
        ("Peanuts", AllergySeverity.SEVERE),
        ("Shellfish", None),
    ]))

    rows = preference_repo.allergies["alice"]
    assert [(a.allergy_name, a.severity) for a in rows] == [
        ("Peanuts", AllergySeverity.SEVERE), ("Shellfish", None),
    ]


def test_update_profile_and_settings_update_snapshot(cache):
    async def run():
        await cache.refresh()
        await cache.update_profile("alice", "Alice Smith", weight="60", age="30")
        await cache.save_budget("alice", 1200, BudgetPeriod.MONTHLY)
        await cache.save_portions("alice", 2)
        await cache.save_food_preferences("alice", ["Italian", "", "Thai"])

    asyncio.run(run())
    snap = cache.snapshot
    assert snap.profile.full_name == "Alice Smith"
    assert snap.budget.amount == 1200
    assert snap.budget.period is BudgetPeriod.MONTHLY
    assert snap.portions.number_of_people == 2
    assert [f.preference_value for f in snap.food_preferences] == ["Italian", "Thai"]


def test_mutation_for_other_user_is_rejected(cache, preference_repo, profile_repo):
    async def run():
        with pytest.raises(SessionInvalidError, match="mismatch"):
            await cache.save_dietary_requirements("bob", ["vegetarian"])
        with pytest.raises(SessionInvalidError):
            await cache.update_profile("bob", "Bob")

    asyncio.run(run())
    assert preference_repo.writes == 0
    assert profile_repo.writes == 0


def test_mutation_without_session_is_rejected(cache, sessions, preference_repo):
    sessions.user_id = None

    with pytest.raises(SessionInvalidError, match="No active session"):
        asyncio.run(cache.save_portions("alice", 2))
    assert preference_repo.writes == 0


def test_invalid_settings_are_rejected(cache, preference_repo):
    with pytest.raises(ValueError):
        asyncio.run(cache.save_portions("alice", 0))
    with pytest.raises(ValueError):
        asyncio.run(cache.save_budget("alice", -5, BudgetPeriod.WEEKLY))
    assert preference_repo.writes == 0
