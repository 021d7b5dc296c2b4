"""ServiceFactory wiring and Settings parsing."""

import asyncio
from datetime import date

from factory import ServiceFactory
from infrastructure.config import Settings

WED = date(2025, 3, 12)


def _settings(tmp_path, **overrides):
    return Settings(project_root=tmp_path, db_path=str(tmp_path / "app.db"), **overrides)


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SANITY_PROJECT_ID", "abc123")
    monkeypatch.setenv("SANITY_USE_CDN", "false")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("DEFAULT_MEAL_SLOTS", "3")
    settings = Settings.from_env(project_root=tmp_path)

    assert settings.sanity_base_url == "https://abc123.api.sanity.io/v2024-01-01"
    assert settings.cache_ttl_seconds == 60
    assert settings.default_meal_slots == 3


def test_caches_are_singletons(tmp_path):
    factory = ServiceFactory(_settings(tmp_path))

    assert factory.get_content_cache() is factory.get_content_cache()
    assert factory.get_saved_recipe_cache() is factory.get_saved_recipe_cache()
    assert factory.get_profile_cache() is factory.get_profile_cache()
    assert factory.get_preference_catalog() is factory.get_preference_catalog()


def test_initialize_hydrates_meal_plans(tmp_path):
    settings = _settings(tmp_path, default_meal_slots=2)

    async def run():
        first = ServiceFactory(settings)
        await first.initialize()
        await first.get_meal_plan_store().add_meal_slot_to_day(WED, "Monday")

        second = ServiceFactory(settings)
        await second.initialize()
        return second.get_meal_plan_store()

    store = asyncio.run(run())
    assert store.count_slots_for_day(WED, "Monday") == 3
    assert store.count_slots_for_day(WED, "Tuesday") == 2


def test_token_passed_to_factory_is_the_session(tmp_path):
    settings = _settings(tmp_path)
    token = ServiceFactory(settings).get_session_provider().issue_token("alice")
    factory = ServiceFactory(settings, token=token)

    session = asyncio.run(factory.get_session_provider().current_session())
    assert session.user_id == "alice"