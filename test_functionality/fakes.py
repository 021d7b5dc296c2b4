"""In-memory implementations of the domain ports, for tests."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import replace
from typing import Optional

from domain.models import (
    AuthSession,
    Category,
    CategoryRef,
    Ingredient,
    Macros,
    Measurement,
    Recipe,
    DietaryOption,
    AllergyOption,
    CuisineOption,
)
from domain.entities import (
    Allergy,
    BudgetSetting,
    DietaryRequirement,
    FoodPreference,
    PortionSetting,
    Profile,
    SavedRecipe,
)
from domain.exceptions import ContentSourceError, RepositoryError, SessionInvalidError


def make_recipe(recipe_id: str, title: str = "", categories=(), servings: int = 4) -> Recipe:
    return Recipe(
        id=recipe_id,
        title=title or recipe_id,
        categories=[CategoryRef(id=c, name=c.upper()) for c in categories],
        servings=servings,
        ingredients=[
            Ingredient(
                name="flour",
                measurement=Measurement(unit="gram", quantity=400),
                kcal=480,
                macros=Macros(protein=12.4, carbs=61.2, fat=4.8),
            ),
            Ingredient(name="salt", quantity_text="a pinch"),
        ],
        instructions=["Mix.", "Bake."],
        total_kcal=640,
        total_macros=Macros(protein=32.4, carbs=71.2, fat=24.8),
    )


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeContentSource:
    """Scriptable ContentSourcePort with call counters."""

    def __init__(self, recipes=(), categories=None, delay: float = 0.0):
        self.recipes = list(recipes)
        self.categories = categories if categories is not None else [
            Category(id="c1", name="Dinner"), Category(id="c2", name="Lunch"),
        ]
        self.delay = delay
        self.fail = False
        self.fail_categories = False
        self.fail_next_recipe = 0
        self.calls: dict[str, int] = {}

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def fetch_recipes(self) -> list[Recipe]:
        self._count("recipes")
        await asyncio.sleep(self.delay)
        if self.fail:
            raise ContentSourceError("CMS down")
        return list(self.recipes)

    async def fetch_categories(self) -> list[Category]:
        self._count("categories")
        await asyncio.sleep(self.delay)
        if self.fail or self.fail_categories:
            raise ContentSourceError("CMS down")
        return list(self.categories)

    async def fetch_recipe(self, recipe_id: str) -> Optional[Recipe]:
        self._count("recipe")
        await asyncio.sleep(self.delay)
        if self.fail_next_recipe > 0:
            self.fail_next_recipe -= 1
            raise ContentSourceError("CMS down")
        for recipe in self.recipes:
            if recipe.id == recipe_id:
                return recipe
        return None

    async def fetch_dietary_options(self) -> list[DietaryOption]:
        self._count("dietary")
        await asyncio.sleep(self.delay)
        if self.fail:
            raise ContentSourceError("CMS down")
        return [
            DietaryOption(name="Vegetarian", value="vegetarian"),
            DietaryOption(name="Gluten free", value="glutenfree"),
        ]

    async def fetch_allergy_options(self) -> list[AllergyOption]:
        self._count("allergies")
        return [AllergyOption(name="Peanuts")]

    async def fetch_cuisine_options(self) -> list[CuisineOption]:
        self._count("cuisines")
        return [CuisineOption(id="k1", name="Italian")]


class FakeSessionProvider:
    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id
        self.expired = False

    async def current_session(self) -> AuthSession | None:
        if self.user_id is None:
            return None
        if self.expired:
            raise SessionInvalidError("Session expired. Please sign in again.")
        return AuthSession(user_id=self.user_id, access_token="token")


class FakeProfileRepository:
    def __init__(self):
        self.profiles: dict[str, Profile] = {}
        self.fail = False
        self.reads = 0
        self.writes = 0

    async def get_by_id(self, profile_id: str) -> Profile | None:
        self.reads += 1
        await asyncio.sleep(0)
        if self.fail:
            raise RepositoryError("store down")
        return self.profiles.get(profile_id)

    async def upsert(self, profile: Profile) -> Profile:
        self.writes += 1
        saved = replace(profile, updated_at="2025-01-01T00:00:00+00:00")
        self.profiles[profile.id] = saved
        return saved


class FakePreferenceRepository:
    def __init__(self):
        self._ids = itertools.count(1)
        self.dietary: dict[str, list[DietaryRequirement]] = {}
        self.allergies: dict[str, list[Allergy]] = {}
        self.cuisines: dict[str, list[FoodPreference]] = {}
        self.budgets: dict[str, BudgetSetting] = {}
        self.portions: dict[str, PortionSetting] = {}
        self.writes = 0

    async def get_dietary_requirements(self, profile_id):
        return list(self.dietary.get(profile_id, []))

    async def replace_dietary_requirements(self, profile_id, requirement_types):
        self.writes += 1
        self.dietary[profile_id] = [
            DietaryRequirement(id=next(self._ids), profile_id=profile_id, requirement_type=t)
            for t in requirement_types
        ]
        return list(self.dietary[profile_id])

    async def get_allergies(self, profile_id):
        return list(self.allergies.get(profile_id, []))

    async def replace_allergies(self, profile_id, allergies):
        self.writes += 1
        self.allergies[profile_id] = [
            Allergy(id=next(self._ids), profile_id=profile_id, allergy_name=n, severity=s)
            for n, s in allergies
        ]
        return list(self.allergies[profile_id])

    async def get_food_preferences(self, profile_id):
        return list(self.cuisines.get(profile_id, []))

    async def replace_food_preferences(self, profile_id, cuisines):
        self.writes += 1
        self.cuisines[profile_id] = [
            FoodPreference(id=next(self._ids), profile_id=profile_id, preference_value=c)
            for c in cuisines
        ]
        return list(self.cuisines[profile_id])

    async def get_budget(self, profile_id):
        return self.budgets.get(profile_id)

    async def upsert_budget(self, profile_id, amount, period):
        self.writes += 1
        existing = self.budgets.get(profile_id)
        row = BudgetSetting(
            id=existing.id if existing else next(self._ids),
            profile_id=profile_id, amount=amount, period=period,
        )
        self.budgets[profile_id] = row
        return row

    async def get_portions(self, profile_id):
        return self.portions.get(profile_id)

    async def upsert_portions(self, profile_id, number_of_people):
        self.writes += 1
        existing = self.portions.get(profile_id)
        row = PortionSetting(
            id=existing.id if existing else next(self._ids),
            profile_id=profile_id, number_of_people=number_of_people,
        )
        self.portions[profile_id] = row
        return row


class FakeSavedRecipeRepository:
    """Keyed by (profile_id, recipe_id); newest first, like the SQL ordering."""

    def __init__(self, delay: float = 0.0):
        self._ids = itertools.count(1)
        self._stamp = itertools.count(1)
        self.rows: dict[tuple[str, str], SavedRecipe] = {}
        self.delay = delay
        self.fail = False
        self.reads = 0
        self.writes = 0

    async def get_by_profile(self, profile_id, favorites_only=False):
        self.reads += 1
        await asyncio.sleep(self.delay)
        if self.fail:
            raise RepositoryError("store down")
        rows = [
            r for (pid, _), r in self.rows.items()
            if pid == profile_id and (r.is_favorite or not favorites_only)
        ]
        return sorted(rows, key=lambda r: r.saved_at, reverse=True)

    async def get_one(self, profile_id, recipe_id):
        return self.rows.get((profile_id, recipe_id))

    async def upsert(self, profile_id, recipe_id, is_favorite, notes=None):
        self.writes += 1
        existing = self.rows.get((profile_id, recipe_id))
        if existing:
            row = replace(
                existing,
                is_favorite=is_favorite,
                notes=notes if notes is not None else existing.notes,
            )
        else:
            row = SavedRecipe(
                id=next(self._ids), profile_id=profile_id, recipe_id=recipe_id,
                saved_at=f"2025-01-01T00:00:{next(self._stamp):02d}",
                notes=notes, is_favorite=is_favorite,
            )
        self.rows[(profile_id, recipe_id)] = row
        return row

    async def update_notes(self, profile_id, recipe_id, notes):
        self.writes += 1
        existing = self.rows.get((profile_id, recipe_id))
        if existing is None:
            return None
        row = replace(existing, notes=notes)
        self.rows[(profile_id, recipe_id)] = row
        return row

    async def delete(self, profile_id, recipe_id):
        self.writes += 1
        self.rows.pop((profile_id, recipe_id), None)


class MemoryKeyValueStore:
    def __init__(self):
        self.data: dict[str, str] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)
