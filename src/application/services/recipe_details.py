"""
application.services.recipe_details - Process-lifetime memo of full recipes.

Meal plan, favorites and recipe drawers all look up the same recipes by
id. Recipe content is treated as immutable within a session, so entries
never expire.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.models import Recipe
from domain.ports import ContentSourcePort
from domain.exceptions import RecipeNotFoundError
from application.inflight import KeyedSingleFlight

logger = logging.getLogger(__name__)


class RecipeDetailCache:
    """Memoizes single-recipe lookups by id (no TTL)."""

    def __init__(self, content_source: ContentSourcePort):
        self._source = content_source
        self._recipes: dict[str, Recipe] = {}
        self._inflight: KeyedSingleFlight[str, Recipe] = KeyedSingleFlight("recipe fetch")

    async def get(self, recipe_id: str) -> Recipe:
        """Return the full recipe, fetching it on first request.

        Concurrent requests for the same uncached id share one fetch.

        Raises:
            RecipeNotFoundError: The CMS has no such recipe.
            ContentSourceError:  The fetch failed. Nothing is cached, so
                                 the next call retries.
        """
        cached = self._recipes.get(recipe_id)
        if cached is not None:
            logger.debug("Recipe %s served from cache", recipe_id)
            return cached
        return await self._inflight.run(recipe_id, lambda: self._fetch(recipe_id))

    def peek(self, recipe_id: str) -> Optional[Recipe]:
        """Return the cached recipe without fetching."""
        return self._recipes.get(recipe_id)

    def invalidate(self, recipe_id: str) -> None:
        self._recipes.pop(recipe_id, None)

    def __len__(self) -> int:
        return len(self._recipes)

    async def _fetch(self, recipe_id: str) -> Recipe:
        recipe = await self._source.fetch_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(f"Recipe '{recipe_id}' not found.")
        self._recipes[recipe_id] = recipe
        logger.debug("Cached recipe %s (%s)", recipe_id, recipe.title)
        return recipe
