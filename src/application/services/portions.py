"""
application.services.portions - Recipe portion scaling.

Pure functions, no I/O. scale_recipe() produces an ephemeral copy of a
recipe for a different number of servings; the CMS recipe is never
modified.
"""

from __future__ import annotations

import copy
import math
import sys
from dataclasses import replace
from typing import Optional

from domain.models import Ingredient, Macros, Measurement, Recipe


def round2(value: float) -> float:
    """Round half-up to 2 decimals after an epsilon nudge (2.9999999 -> 3.0)."""
    return math.floor((value + sys.float_info.epsilon) * 100 + 0.5) / 100


def _scale_macros(macros: Optional[Macros], ratio: float) -> Optional[Macros]:
    if macros is None:
        return None
    return Macros(
        protein=round2(macros.protein * ratio),
        carbs=round2(macros.carbs * ratio),
        fat=round2(macros.fat * ratio),
    )


def _scale_ingredient(ingredient: Ingredient, ratio: float) -> Ingredient:
    measurement = ingredient.measurement
    if measurement is not None and measurement.quantity:
        measurement = Measurement(
            unit=measurement.unit,
            quantity=round2(measurement.quantity * ratio),
        )
    return replace(
        ingredient,
        measurement=measurement,
        kcal=round2(ingredient.kcal * ratio),
        macros=_scale_macros(ingredient.macros, ratio),
    )


def scale_recipe(recipe: Recipe, target_servings: int) -> Recipe:
    """Return a deep copy of recipe rescaled to target_servings.

    Structured measurement quantities, ingredient calories and macros, and
    the recipe totals are multiplied by target / recipe.servings and
    rounded to 2 decimals. Free-text quantities and instructions are left
    as they are.

    The input is returned unchanged when the recipe has no base serving
    count or the target is not positive. Asking for the recipe's own
    serving count returns an equal copy without re-rounding.
    """
    if not recipe.servings or recipe.servings <= 0 or target_servings <= 0:
        return recipe
    if target_servings == recipe.servings:
        return copy.deepcopy(recipe)

    ratio = target_servings / recipe.servings
    return replace(
        recipe,
        categories=list(recipe.categories),
        ingredients=[_scale_ingredient(i, ratio) for i in recipe.ingredients],
        instructions=list(recipe.instructions),
        total_kcal=round2(recipe.total_kcal * ratio),
        total_macros=_scale_macros(recipe.total_macros, ratio),
        servings=target_servings,
    )


_UNIT_FORMATS = {
    "gram": "{q}g",
    "g": "{q}g",
    "kg": "{q}kg",
    "liter": "{q}L",
    "l": "{q}L",
    "dl": "{q}dl",
    "ss": "{q} ss",
    "ts": "{q} ts",
    "stk": "{q} stk",
}


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def format_ingredient_quantity(ingredient: Ingredient) -> str:
    """Human-readable amount: structured measurement, else the free text."""
    measurement = ingredient.measurement
    if measurement is None or not measurement.quantity:
        return ingredient.quantity_text or ""
    q = _format_number(measurement.quantity)
    template = _UNIT_FORMATS.get(measurement.unit.lower())
    if template is None:
        return f"{q} {measurement.unit}".rstrip()
    return template.format(q=q)
