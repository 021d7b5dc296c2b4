"""
application.dto - Immutable state snapshots exposed by the caches.

Each cache swaps its whole snapshot in one assignment, so a reader that
holds a snapshot never sees half of one refresh and half of another
(e.g. new recipes with old categories).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from domain.models import Recipe, Category
from domain.entities import (
    Profile,
    DietaryRequirement,
    Allergy,
    FoodPreference,
    BudgetSetting,
    PortionSetting,
    SavedRecipe,
)


class CacheStatus(str, Enum):
    """Tagged state of a cache.

    SIGNED_OUT only applies to user-scoped caches: there is no session,
    so there is nothing to show and nothing cached.
    """
    EMPTY = "empty"
    SIGNED_OUT = "signed_out"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class ContentSnapshot:
    """Recipes and categories from one successful refresh."""
    recipes: tuple[Recipe, ...] = ()
    categories: tuple[Category, ...] = ()
    refreshed_at: Optional[float] = None


@dataclass(frozen=True)
class ProfileSnapshot:
    """Profile data for exactly one user (user_id)."""
    user_id: str
    profile: Optional[Profile] = None
    dietary_requirements: tuple[DietaryRequirement, ...] = ()
    allergies: tuple[Allergy, ...] = ()
    food_preferences: tuple[FoodPreference, ...] = ()
    budget: Optional[BudgetSetting] = None
    portions: Optional[PortionSetting] = None
    refreshed_at: Optional[float] = None


@dataclass(frozen=True)
class SavedRecipesSnapshot:
    """Enriched saved and favorite links for exactly one user."""
    user_id: str
    saved: tuple[SavedRecipe, ...] = ()
    favorites: tuple[SavedRecipe, ...] = ()
    saved_refreshed_at: Optional[float] = None
    favorites_refreshed_at: Optional[float] = None

    @property
    def refreshed_at(self) -> Optional[float]:
        stamps = [t for t in (self.saved_refreshed_at, self.favorites_refreshed_at) if t is not None]
        return max(stamps) if stamps else None

