"""
application.services.meal_plan - Weekly meal plans, persisted on the device.

Unlike the caches, this store is the source of truth: plans have no
remote counterpart, never expire and are never reconciled.

Each week is keyed by its Monday. A week maps the seven day labels to an
ordered slot map ("meal1", "meal2", ...) whose values are either a
PlannedMeal or None (an empty slot that still shows its "add" button).

Slot lifecycle:
    absent  --add_meal_slot_to_day-->  empty   (id = max existing + 1)
    empty   --add_meal_to_day------->  filled
    filled  --add_meal_to_day------->  filled  (overwrite)
    filled  --clear_meal------------>  empty
    any     --remove_meal_from_day-->  absent  (key deleted)

Reads are synchronous and served from memory; every mutation writes the
whole plan map through the key-value store before returning.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

from domain.models import DisplaySlot, MealPlan, PlannedMeal, Recipe
from domain.ports import KeyValueStorePort
from domain.colors import recipe_color, resolve_color
from domain.exceptions import MealPlanError

logger = logging.getLogger(__name__)

DAYS: tuple[str, ...] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)
DEFAULT_SLOT_COUNT = 4

PLANS_KEY = "meal_planner:plans"
NAVIGATION_KEY = "meal_planner:navigation"

_SLOT_ID = re.compile(r"^meal(\d+)$")

DateLike = Union[date, datetime]


def week_start(anchor: DateLike) -> date:
    """Monday of the calendar week containing anchor."""
    if isinstance(anchor, datetime):
        anchor = anchor.date()
    return anchor - timedelta(days=anchor.weekday())


def slot_number(slot_id: str) -> int:
    match = _SLOT_ID.match(slot_id)
    if not match:
        raise MealPlanError(f"Invalid meal slot id '{slot_id}'.")
    return int(match.group(1))


def empty_week(slot_count: int = DEFAULT_SLOT_COUNT) -> MealPlan:
    return {day: {f"meal{n}": None for n in range(1, slot_count + 1)} for day in DAYS}


class WeeklyMealPlanStore:
    """Keyed, mutable meal plans plus the planner's navigation state."""

    def __init__(
        self,
        store: KeyValueStorePort,
        color_for: Callable[[str], str] = recipe_color,
        default_slot_count: int = DEFAULT_SLOT_COUNT,
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._color_for = color_for
        self._slot_count = default_slot_count
        self._plans: dict[date, MealPlan] = {}
        self._write_lock = asyncio.Lock()

        self._current_week = week_start(today())
        self._expanded_day = DAYS[0]
        self._previous_screen = "mealplanner"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Hydrate plans and navigation state from the key-value store."""
        raw_plans = await self._store.get(PLANS_KEY)
        if raw_plans:
            self._plans = {
                date.fromisoformat(week): _plan_from_json(plan)
                for week, plan in json.loads(raw_plans).items()
            }
        raw_nav = await self._store.get(NAVIGATION_KEY)
        if raw_nav:
            nav = json.loads(raw_nav)
            if nav.get("current_week"):
                self._current_week = date.fromisoformat(nav["current_week"])
            self._expanded_day = nav.get("expanded_day") or self._expanded_day
            self._previous_screen = nav.get("previous_screen") or self._previous_screen
        logger.info("Loaded %d stored meal plan week(s)", len(self._plans))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def weeks(self) -> list[date]:
        return sorted(self._plans)

    def get_meal_plan_for_week(self, anchor: DateLike) -> MealPlan:
        """The stored plan for anchor's week, creating an empty one if needed.

        Any date in the week returns the same object. Treat it as
        read-only; change it through the mutation methods.
        """
        week = week_start(anchor)
        plan = self._plans.get(week)
        if plan is None:
            plan = empty_week(self._slot_count)
            self._plans[week] = plan
            logger.debug("Created empty meal plan for week of %s", week)
        return plan

    def display_slots(self, anchor: DateLike, day: str) -> list[DisplaySlot]:
        """Slots numbered by position, not by stored id.

        {meal1, meal3} displays as Meal 1 / Meal 2.
        """
        meals = self._day(anchor, day)
        return [
            DisplaySlot(number=i, slot_id=slot_id, meal=meal)
            for i, (slot_id, meal) in enumerate(meals.items(), start=1)
        ]

    def count_meals_for_day(self, anchor: DateLike, day: str) -> int:
        return sum(1 for meal in self._day(anchor, day).values() if meal is not None)

    def count_slots_for_day(self, anchor: DateLike, day: str) -> int:
        return len(self._day(anchor, day))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_meal_to_day(
        self, anchor: DateLike, day: str, slot_id: str, recipe: Recipe,
    ) -> PlannedMeal:
        """Place recipe in a slot (filling an empty slot or overwriting)."""
        slot_number(slot_id)
        meals = self._day(anchor, day)
        if slot_id not in meals:
            raise MealPlanError(f"No slot '{slot_id}' on {day}. Add a slot first.")
        meal = PlannedMeal(recipe=recipe, color=resolve_color(self._color_for(recipe.id)))
        meals[slot_id] = meal
        await self._persist_plans()
        logger.info(
            "Planned '%s' for %s %s (week of %s)",
            recipe.title, day, slot_id, week_start(anchor),
        )
        return meal

    async def remove_meal_from_day(self, anchor: DateLike, day: str, slot_id: str) -> None:
        """Delete the slot entirely; later slots keep their ids."""
        meals = self._day(anchor, day)
        if slot_id not in meals:
            logger.debug("No slot %s on %s; nothing to remove", slot_id, day)
            return
        del meals[slot_id]
        await self._persist_plans()
        logger.info("Removed %s from %s (week of %s)", slot_id, day, week_start(anchor))

    async def clear_meal(self, anchor: DateLike, day: str, slot_id: str) -> None:
        """Empty a slot but keep it, so its add button stays visible."""
        meals = self._day(anchor, day)
        if slot_id not in meals:
            raise MealPlanError(f"No slot '{slot_id}' on {day}.")
        meals[slot_id] = None
        await self._persist_plans()

    async def add_meal_slot_to_day(self, anchor: DateLike, day: str) -> str:
        """Append an empty slot numbered one past the highest existing id."""
        meals = self._day(anchor, day)
        numbers = [n for n in (_slot_number_or_zero(s) for s in meals) if n > 0]
        slot_id = f"meal{max(numbers) + 1 if numbers else 1}"
        meals[slot_id] = None
        await self._persist_plans()
        logger.info("Added slot %s to %s (week of %s)", slot_id, day, week_start(anchor))
        return slot_id

    # ------------------------------------------------------------------
    # Navigation state
    # ------------------------------------------------------------------

    @property
    def current_week(self) -> date:
        return self._current_week

    @property
    def expanded_day(self) -> str:
        return self._expanded_day

    @property
    def previous_screen(self) -> str:
        return self._previous_screen

    async def set_current_week(self, anchor: DateLike) -> None:
        self._current_week = week_start(anchor)
        await self._persist_navigation()

    async def set_expanded_day(self, day: str) -> None:
        _check_day(day)
        self._expanded_day = day
        await self._persist_navigation()

    async def save_current_state(self, screen: str, anchor: DateLike, day: str) -> None:
        """Remember where the planner was before navigating away."""
        _check_day(day)
        self._previous_screen = screen
        self._current_week = week_start(anchor)
        self._expanded_day = day
        await self._persist_navigation()

    async def go_to_previous_week(self) -> date:
        await self.set_current_week(self._current_week - timedelta(days=7))
        return self._current_week

    async def go_to_next_week(self) -> date:
        await self.set_current_week(self._current_week + timedelta(days=7))
        return self._current_week

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _day(self, anchor: DateLike, day: str) -> dict[str, Optional[PlannedMeal]]:
        _check_day(day)
        plan = self.get_meal_plan_for_week(anchor)
        return plan.setdefault(day, {})

    async def _persist_plans(self) -> None:
        payload = json.dumps({
            week.isoformat(): _plan_to_json(plan)
            for week, plan in sorted(self._plans.items())
        })
        async with self._write_lock:
            await self._store.set(PLANS_KEY, payload)

    async def _persist_navigation(self) -> None:
        payload = json.dumps({
            "current_week": self._current_week.isoformat(),
            "expanded_day": self._expanded_day,
            "previous_screen": self._previous_screen,
        })
        async with self._write_lock:
            await self._store.set(NAVIGATION_KEY, payload)


def _check_day(day: str) -> None:
    if day not in DAYS:
        raise MealPlanError(f"Unknown day '{day}'. Expected one of: {', '.join(DAYS)}.")


def _slot_number_or_zero(slot_id: str) -> int:
    match = _SLOT_ID.match(slot_id)
    return int(match.group(1)) if match else 0


def _plan_to_json(plan: MealPlan) -> dict:
    return {
        day: {slot: (meal.to_dict() if meal else None) for slot, meal in meals.items()}
        for day, meals in plan.items()
    }


def _plan_from_json(data: dict) -> MealPlan:
    return {
        day: {
            slot: (PlannedMeal.from_dict(meal) if meal else None)
            for slot, meal in meals.items()
        }
        for day, meals in data.items()
    }
