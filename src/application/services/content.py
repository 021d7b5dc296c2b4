"""
application.services.content - TTL-gated cache of the recipe and category lists.

Readers call is_stale() and then refresh() themselves (typically when a
screen mounts); the cache never schedules background refreshes. A failed
refresh keeps the previous lists: stale-but-available beats empty.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from domain.models import Recipe, Category
from domain.ports import ContentSourcePort
from domain.colors import recipe_color
from application.dto import CacheStatus, ContentSnapshot
from application.inflight import SingleFlight

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class ContentCache:
    """Shared, process-wide cache of all recipes and categories."""

    def __init__(
        self,
        content_source: ContentSourcePort,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._source = content_source
        self._ttl = ttl_seconds
        self._clock = clock
        self._snapshot = ContentSnapshot()
        self._status = CacheStatus.EMPTY
        self._error: Optional[str] = None
        self._inflight: SingleFlight[None] = SingleFlight("content refresh")

    # ------------------------------------------------------------------
    # Exposed state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> ContentSnapshot:
        """Recipes and categories from the same refresh, read together."""
        return self._snapshot

    @property
    def recipes(self) -> tuple[Recipe, ...]:
        return self._snapshot.recipes

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._snapshot.categories

    @property
    def last_refreshed(self) -> Optional[float]:
        return self._snapshot.refreshed_at

    @property
    def status(self) -> CacheStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._status == CacheStatus.LOADING

    @property
    def error(self) -> Optional[str]:
        return self._error

    def is_stale(self) -> bool:
        refreshed_at = self._snapshot.refreshed_at
        if refreshed_at is None:
            return True
        return self._clock() - refreshed_at > self._ttl

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Re-fetch recipes and categories concurrently.

        Concurrent callers share one round trip. Never raises on fetch
        failure; check `error` / `status` afterwards.
        """
        await self._inflight.run(self._refresh)

    async def refresh_if_stale(self) -> None:
        if self.is_stale():
            await self.refresh()

    async def _refresh(self) -> None:
        self._status = CacheStatus.LOADING
        self._error = None
        try:
            results = await asyncio.gather(
                self._source.fetch_recipes(),
                self._source.fetch_categories(),
                return_exceptions=True,
            )
            failures = [r for r in results if isinstance(r, BaseException)]
            if failures:
                raise failures[0]
            recipes, categories = results
        except Exception as e:
            logger.warning("Content refresh failed: %s", e)
            self._error = f"Failed to refresh content: {e}"
            self._status = CacheStatus.ERROR
            return

        self._snapshot = ContentSnapshot(
            recipes=tuple(recipes),
            categories=tuple(categories),
            refreshed_at=self._clock(),
        )
        self._status = CacheStatus.READY
        logger.info(
            "Content refreshed: %d recipes, %d categories",
            len(recipes), len(categories),
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def color_for(self, recipe_id: str) -> str:
        """Accent color for a recipe; a pure function of the id."""
        return recipe_color(recipe_id)

    def find_recipe(self, recipe_id: str) -> Optional[Recipe]:
        for recipe in self._snapshot.recipes:
            if recipe.id == recipe_id:
                return recipe
        return None

    def recipes_in_category(self, category_id: str) -> list[Recipe]:
        return [r for r in self._snapshot.recipes if category_id in r.category_ids]
