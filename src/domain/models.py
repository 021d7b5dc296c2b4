"""
domain.models - Value objects for CMS content and the weekly meal plan.

These are immutable data containers with no dependencies on
infrastructure (no HTTP, no SQLite). Content is sourced read-only from
the CMS; the client only ever produces new (scaled or snapshotted)
copies of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Recipe
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Macros:
    """Macro-nutrient triple in grams."""
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def to_dict(self) -> dict:
        return {"protein": self.protein, "carbs": self.carbs, "fat": self.fat}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional[Macros]:
        if not data:
            return None
        return cls(
            protein=float(data.get("protein") or 0.0),
            carbs=float(data.get("carbs") or 0.0),
            fat=float(data.get("fat") or 0.0),
        )


@dataclass(frozen=True)
class Measurement:
    """Structured, numerically scalable ingredient amount (e.g. 200 g)."""
    unit: str = ""
    quantity: float = 0.0


@dataclass(frozen=True)
class Ingredient:
    """One line of a recipe's ingredient list.

    quantity_text is the free-text amount ("a pinch") and is never scaled.
    """
    name: str = ""
    measurement: Optional[Measurement] = None
    quantity_text: str = ""
    kcal: float = 0.0
    macros: Optional[Macros] = None
    comment: str = ""


@dataclass(frozen=True)
class CategoryRef:
    """Lightweight (id, name) reference from a recipe to a category."""
    id: str
    name: str = ""


@dataclass(frozen=True)
class Recipe:
    """A recipe as delivered by the CMS.

    List items from the "all recipes" query carry only the summary fields
    (no ingredients or instructions); the "recipe by id" query fills in
    the rest. total_kcal / total_macros are the sums over ingredients for
    `servings` portions.
    """
    id: str
    title: str = ""
    image: str = ""
    categories: list[CategoryRef] = field(default_factory=list)
    servings: int = 0
    ingredients: list[Ingredient] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    notes: str = ""
    description: str = ""
    prep_time: str = ""
    total_kcal: float = 0.0
    total_macros: Optional[Macros] = None

    @property
    def category_ids(self) -> set[str]:
        return {c.id for c in self.categories}

    def to_dict(self) -> dict[str, Any]:
        """Plain-JSON form used for local persistence (meal plan snapshots)."""
        return {
            "id": self.id,
            "title": self.title,
            "image": self.image,
            "categories": [{"id": c.id, "name": c.name} for c in self.categories],
            "servings": self.servings,
            "ingredients": [
                {
                    "name": i.name,
                    "measurement": (
                        {"unit": i.measurement.unit, "quantity": i.measurement.quantity}
                        if i.measurement else None
                    ),
                    "quantity_text": i.quantity_text,
                    "kcal": i.kcal,
                    "macros": i.macros.to_dict() if i.macros else None,
                    "comment": i.comment,
                }
                for i in self.ingredients
            ],
            "instructions": list(self.instructions),
            "notes": self.notes,
            "description": self.description,
            "prep_time": self.prep_time,
            "total_kcal": self.total_kcal,
            "total_macros": self.total_macros.to_dict() if self.total_macros else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Recipe:
        ingredients = []
        for item in data.get("ingredients") or []:
            m = item.get("measurement")
            ingredients.append(Ingredient(
                name=item.get("name", ""),
                measurement=(
                    Measurement(unit=m.get("unit", ""), quantity=float(m.get("quantity") or 0.0))
                    if m else None
                ),
                quantity_text=item.get("quantity_text", ""),
                kcal=float(item.get("kcal") or 0.0),
                macros=Macros.from_dict(item.get("macros")),
                comment=item.get("comment", ""),
            ))
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            image=data.get("image", ""),
            categories=[
                CategoryRef(id=c["id"], name=c.get("name", ""))
                for c in data.get("categories") or []
            ],
            servings=int(data.get("servings") or 0),
            ingredients=ingredients,
            instructions=list(data.get("instructions") or []),
            notes=data.get("notes", ""),
            description=data.get("description", ""),
            prep_time=data.get("prep_time", ""),
            total_kcal=float(data.get("total_kcal") or 0.0),
            total_macros=Macros.from_dict(data.get("total_macros")),
        )


@dataclass(frozen=True)
class Category:
    """A recipe category. Read-only."""
    id: str
    name: str = ""
    description: str = ""
    image: str = ""


# ---------------------------------------------------------------------------
# Reference data for preference pickers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DietaryOption:
    """An allowed dietary-requirement value (e.g. "vegetarian")."""
    name: str
    value: str
    description: str = ""


@dataclass(frozen=True)
class AllergyOption:
    """A common allergy offered in the allergy picker."""
    name: str
    description: str = ""


@dataclass(frozen=True)
class CuisineOption:
    """A cuisine type offered in the food-preference picker."""
    id: str
    name: str
    description: str = ""
    image_url: str = ""


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AuthSession:
    """The authenticated session as reported by the session provider."""
    user_id: str
    access_token: str = ""
    expires_at: Optional[float] = None    # epoch seconds


# ---------------------------------------------------------------------------
# Weekly meal plan
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlannedMeal:
    """A recipe snapshot placed in a meal-plan slot.

    color is resolved once when the meal is placed, so the plan renders
    correctly even after the recipe leaves the CMS list.
    """
    recipe: Recipe
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"recipe": self.recipe.to_dict(), "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlannedMeal:
        return cls(recipe=Recipe.from_dict(data["recipe"]), color=data["color"])


# day label -> slot id -> filled slot, or None for an empty slot
MealPlan = dict[str, dict[str, Optional[PlannedMeal]]]


@dataclass(frozen=True)
class DisplaySlot:
    """A slot as presented to the UI: position-based number plus stored id."""
    number: int
    slot_id: str
    meal: Optional[PlannedMeal] = None

    @property
    def label(self) -> str:
        return f"Meal {self.number}"
