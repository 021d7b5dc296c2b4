"""WeeklyMealPlanStore: week keying, slot lifecycle, persistence."""

import asyncio
import json
from datetime import date, datetime

import pytest

from application.services.meal_plan import (
    DAYS,
    NAVIGATION_KEY,
    PLANS_KEY,
    WeeklyMealPlanStore,
    week_start,
)
from domain.exceptions import MealPlanError
from fakes import make_recipe

# Wednesday; its week starts Monday 2025-03-10
WED = date(2025, 3, 12)
MON = date(2025, 3, 10)
SUN = date(2025, 3, 16)


@pytest.fixture
def store(kv_store):
    return WeeklyMealPlanStore(kv_store, color_for=lambda _id: "cyan", today=lambda: WED)


def test_week_start_is_monday():
    assert week_start(WED) == MON
    assert week_start(MON) == MON
    assert week_start(SUN) == MON
    assert week_start(datetime(2025, 3, 16, 23, 59)) == MON


def test_new_week_is_seven_days_of_empty_slots(store):
    plan = store.get_meal_plan_for_week(WED)

    assert list(plan) == list(DAYS)
    for day in DAYS:
        assert plan[day] == {"meal1": None, "meal2": None, "meal3": None, "meal4": None}


def test_any_date_in_the_week_returns_the_same_plan(store):
    plan = store.get_meal_plan_for_week(WED)

    assert store.get_meal_plan_for_week(MON) is plan
    assert store.get_meal_plan_for_week(SUN) is plan
    assert store.get_meal_plan_for_week(date(2025, 3, 17)) is not plan
    assert store.weeks == [MON, date(2025, 3, 17)]


def test_custom_slot_count(kv_store):
    store = WeeklyMealPlanStore(kv_store, default_slot_count=2, today=lambda: WED)
    assert list(store.get_meal_plan_for_week(WED)["Friday"]) == ["meal1", "meal2"]


def test_add_meal_fills_slot_with_resolved_color(store):
    recipe = make_recipe("r1", "Pasta")
    meal = asyncio.run(store.add_meal_to_day(WED, "Monday", "meal2", recipe))

    assert meal.color == "cyan"
    assert store.get_meal_plan_for_week(MON)["Monday"]["meal2"] is meal
    assert store.count_meals_for_day(WED, "Monday") == 1
    assert store.count_slots_for_day(WED, "Monday") == 4


def test_unusable_color_falls_back_to_default(kv_store):
    store = WeeklyMealPlanStore(kv_store, color_for=lambda _id: "light", today=lambda: WED)
    meal = asyncio.run(store.add_meal_to_day(WED, "Tuesday", "meal1", make_recipe("r1")))
    assert meal.color == "green"


def test_add_meal_overwrites_filled_slot(store):
    async def run():
        await store.add_meal_to_day(WED, "Monday", "meal1", make_recipe("r1", "Pasta"))
        await store.add_meal_to_day(WED, "Monday", "meal1", make_recipe("r2", "Soup"))

    asyncio.run(run())
    assert store.get_meal_plan_for_week(WED)["Monday"]["meal1"].recipe.title == "Soup"
    assert store.count_meals_for_day(WED, "Monday") == 1


def test_remove_deletes_slot_and_display_renumbers(store):
    async def run():
        await store.add_meal_to_day(WED, "Monday", "meal3", make_recipe("r1"))
        await store.remove_meal_from_day(WED, "Monday", "meal2")
        await store.remove_meal_from_day(WED, "Monday", "meal4")

    asyncio.run(run())
    assert list(store.get_meal_plan_for_week(WED)["Monday"]) == ["meal1", "meal3"]

    slots = store.display_slots(WED, "Monday")
    assert [s.number for s in slots] == [1, 2]
    assert [s.label for s in slots] == ["Meal 1", "Meal 2"]
    assert [s.slot_id for s in slots] == ["meal1", "meal3"]
    assert slots[1].meal.recipe.id == "r1"


def test_remove_missing_slot_is_a_no_op(store, kv_store):
    asyncio.run(store.remove_meal_from_day(WED, "Monday", "meal9"))
    assert store.count_slots_for_day(WED, "Monday") == 4
    assert PLANS_KEY not in kv_store.data


def test_clear_keeps_the_slot(store):
    async def run():
        await store.add_meal_to_day(WED, "Friday", "meal1", make_recipe("r1"))
        await store.clear_meal(WED, "Friday", "meal1")

    asyncio.run(run())
    assert store.get_meal_plan_for_week(WED)["Friday"]["meal1"] is None
    assert store.count_slots_for_day(WED, "Friday") == 4

    with pytest.raises(MealPlanError):
        asyncio.run(store.clear_meal(WED, "Friday", "meal7"))


def test_new_slot_id_is_one_past_the_highest(store):
    async def run():
        await store.remove_meal_from_day(WED, "Monday", "meal2")
        await store.remove_meal_from_day(WED, "Monday", "meal4")
        return await store.add_meal_slot_to_day(WED, "Monday")

    assert asyncio.run(run()) == "meal4"
    assert list(store.get_meal_plan_for_week(WED)["Monday"]) == ["meal1", "meal3", "meal4"]


def test_new_slot_on_emptied_day_starts_at_one(store):
    async def run():
        for slot_id in ("meal1", "meal2", "meal3", "meal4"):
            await store.remove_meal_from_day(WED, "Sunday", slot_id)
        return await store.add_meal_slot_to_day(WED, "Sunday")

    assert asyncio.run(run()) == "meal1"


def test_bad_day_or_slot_id_is_rejected(store):
    with pytest.raises(MealPlanError):
        store.display_slots(WED, "Funday")
    with pytest.raises(MealPlanError):
        asyncio.run(store.add_meal_to_day(WED, "Monday", "breakfast", make_recipe("r1")))


def test_add_meal_to_absent_slot_is_rejected(store, kv_store):
    with pytest.raises(MealPlanError):
        asyncio.run(store.add_meal_to_day(WED, "Monday", "meal9", make_recipe("r1")))

    assert list(store.get_meal_plan_for_week(WED)["Monday"]) == [
        "meal1", "meal2", "meal3", "meal4",
    ]
    assert PLANS_KEY not in kv_store.data
    assert asyncio.run(store.add_meal_slot_to_day(WED, "Monday")) == "meal5"


def test_plans_survive_a_restart(kv_store, store):
    async def run():
        await store.add_meal_to_day(WED, "Thursday", "meal2", make_recipe("r3", "Salad"))
        await store.add_meal_slot_to_day(WED, "Thursday")
        await store.go_to_next_week()

        reloaded = WeeklyMealPlanStore(kv_store, today=lambda: date(2030, 1, 1))
        await reloaded.load()
        return reloaded

    reloaded = asyncio.run(run())
    thursday = reloaded.get_meal_plan_for_week(MON)["Thursday"]
    assert list(thursday) == ["meal1", "meal2", "meal3", "meal4", "meal5"]
    assert thursday["meal2"].recipe.title == "Salad"
    assert thursday["meal2"].recipe.total_macros.protein == 32.4
    assert thursday["meal2"].color == "cyan"
    assert reloaded.current_week == date(2025, 3, 17)

    stored = json.loads(kv_store.data[PLANS_KEY])
    assert list(stored) == ["2025-03-10"]


def test_navigation_state(store, kv_store):
    async def run():
        assert store.current_week == MON
        assert await store.go_to_previous_week() == date(2025, 3, 3)
        await store.set_expanded_day("Saturday")
        await store.save_current_state("recipe", SUN, "Sunday")

    asyncio.run(run())
    assert store.current_week == MON
    assert store.expanded_day == "Sunday"
    assert store.previous_screen == "recipe"
    nav = json.loads(kv_store.data[NAVIGATION_KEY])
    assert nav == {"current_week": "2025-03-10", "expanded_day": "Sunday", "previous_screen": "recipe"}
