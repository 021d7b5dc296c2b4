"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the data layer needs without specifying HOW.
Infrastructure modules provide concrete implementations. Application
services depend only on these protocols, never on concrete classes.

Ports are typing.Protocol classes, so any adapter that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from domain.models import (
    Recipe,
    Category,
    DietaryOption,
    AllergyOption,
    CuisineOption,
    AuthSession,
)
from domain.entities import (
    Profile,
    DietaryRequirement,
    Allergy,
    AllergySeverity,
    FoodPreference,
    BudgetSetting,
    BudgetPeriod,
    PortionSetting,
    SavedRecipe,
)


# ---------------------------------------------------------------------------
# Content Source (read-only CMS)
# ---------------------------------------------------------------------------

@runtime_checkable
class ContentSourcePort(Protocol):
    """Read-only access to CMS content and picker reference data."""

    async def fetch_recipes(self) -> list[Recipe]: ...
    async def fetch_categories(self) -> list[Category]: ...
    async def fetch_recipe(self, recipe_id: str) -> Optional[Recipe]: ...
    async def fetch_dietary_options(self) -> list[DietaryOption]: ...
    async def fetch_allergy_options(self) -> list[AllergyOption]: ...
    async def fetch_cuisine_options(self) -> list[CuisineOption]: ...


# ---------------------------------------------------------------------------
# Relation Store (user-owned rows)
# ---------------------------------------------------------------------------

@runtime_checkable
class ProfileRepository(Protocol):
    """Read/upsert the profile row whose id is the session user id."""

    async def get_by_id(self, profile_id: str) -> Profile | None: ...
    async def upsert(self, profile: Profile) -> Profile: ...


@runtime_checkable
class PreferenceRepository(Protocol):
    """Preference collections, each wholly owned by one profile.

    replace_* calls are authoritative replaces (delete-all-then-insert in
    one transaction); budget and portions are single-row upserts.
    """

    async def get_dietary_requirements(self, profile_id: str) -> list[DietaryRequirement]: ...
    async def replace_dietary_requirements(
        self, profile_id: str, requirement_types: list[str],
    ) -> list[DietaryRequirement]: ...

    async def get_allergies(self, profile_id: str) -> list[Allergy]: ...
    async def replace_allergies(
        self, profile_id: str, allergies: list[tuple[str, Optional[AllergySeverity]]],
    ) -> list[Allergy]: ...

    async def get_food_preferences(self, profile_id: str) -> list[FoodPreference]: ...
    async def replace_food_preferences(
        self, profile_id: str, cuisines: list[str],
    ) -> list[FoodPreference]: ...

    async def get_budget(self, profile_id: str) -> BudgetSetting | None: ...
    async def upsert_budget(
        self, profile_id: str, amount: float, period: BudgetPeriod,
    ) -> BudgetSetting: ...

    async def get_portions(self, profile_id: str) -> PortionSetting | None: ...
    async def upsert_portions(self, profile_id: str, number_of_people: int) -> PortionSetting: ...


@runtime_checkable
class SavedRecipeRepository(Protocol):
    """Saved-recipe links keyed by (profile_id, recipe_id)."""

    async def get_by_profile(
        self, profile_id: str, favorites_only: bool = False,
    ) -> list[SavedRecipe]: ...
    async def get_one(self, profile_id: str, recipe_id: str) -> SavedRecipe | None: ...
    async def upsert(
        self,
        profile_id: str,
        recipe_id: str,
        is_favorite: bool,
        notes: Optional[str] = None,
    ) -> SavedRecipe: ...
    async def update_notes(self, profile_id: str, recipe_id: str, notes: str) -> SavedRecipe | None: ...
    async def delete(self, profile_id: str, recipe_id: str) -> None: ...


# ---------------------------------------------------------------------------
# Local persistence and session
# ---------------------------------------------------------------------------

@runtime_checkable
class KeyValueStorePort(Protocol):
    """Device-local string store. Writes survive restarts."""

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...
    async def delete(self, key: str) -> None: ...


@runtime_checkable
class SessionProviderPort(Protocol):
    """Current authenticated session, or None when signed out.

    Raises SessionInvalidError when a session exists but has expired.
    """

    async def current_session(self) -> AuthSession | None: ...
