"""
domain.entities - Persistence-aware types owned by the Relation Store.

These carry row ids and timestamps. Timestamps are set by the repository
implementations, not by the entities themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from domain.models import Recipe


class AllergySeverity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass
class Profile:
    """User profile, one-to-one with the authenticated session (id = user id)."""
    id: str
    full_name: str = ""
    weight: str = ""
    height: str = ""
    age: str = ""
    updated_at: str = ""


@dataclass
class DietaryRequirement:
    id: Optional[int] = None
    profile_id: str = ""
    requirement_type: str = ""


@dataclass
class Allergy:
    id: Optional[int] = None
    profile_id: str = ""
    allergy_name: str = ""
    severity: Optional[AllergySeverity] = None


@dataclass
class FoodPreference:
    """A cuisine preference (preference_type is always "cuisine_preference")."""
    id: Optional[int] = None
    profile_id: str = ""
    preference_type: str = "cuisine_preference"
    preference_value: str = ""


@dataclass
class BudgetSetting:
    id: Optional[int] = None
    profile_id: str = ""
    amount: float = 0.0
    period: BudgetPeriod = BudgetPeriod.WEEKLY


@dataclass
class PortionSetting:
    id: Optional[int] = None
    profile_id: str = ""
    number_of_people: int = 1


@dataclass
class SavedRecipe:
    """A saved/favorited recipe link, identified by (profile_id, recipe_id).

    recipe is filled in client-side by enrichment; the Relation Store
    never returns it.
    """
    id: Optional[int] = None
    profile_id: str = ""
    recipe_id: str = ""
    saved_at: str = ""
    notes: Optional[str] = None
    is_favorite: bool = False
    recipe: Optional[Recipe] = None
