"""
application.services.saved_recipes - Cache of the user's saved and favorite recipes.

The Relation Store only holds lightweight links (profile, recipe, notes,
favorite flag). Each link is enriched with the full recipe through the
RecipeDetailCache; a link whose recipe cannot be loaded is dropped rather
than shown as a broken item.

Mutations reconfirm the session first (SessionInvalidError on a missing
or mismatched session, before any write), then write through to the
Relation Store and update the local mirror immediately. The store stays
the source of truth: toggle_favorite() re-fetches afterwards to reconcile.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from typing import Callable, Optional

from domain.entities import SavedRecipe
from domain.ports import SavedRecipeRepository, SessionProviderPort
from application.context import optional_session, require_session
from application.dto import CacheStatus, SavedRecipesSnapshot
from application.inflight import SingleFlight
from application.services.recipe_details import RecipeDetailCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_LOAD_TIMEOUT = 5.0


class SavedRecipeCache:
    """Session-scoped cache of enriched saved-recipe links."""

    def __init__(
        self,
        saved_repo: SavedRecipeRepository,
        recipe_details: RecipeDetailCache,
        sessions: SessionProviderPort,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        load_timeout: float = DEFAULT_LOAD_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        self._repo = saved_repo
        self._details = recipe_details
        self._sessions = sessions
        self._ttl = ttl_seconds
        self._timeout = load_timeout
        self._clock = clock
        self._snapshot: Optional[SavedRecipesSnapshot] = None
        self._status = CacheStatus.SIGNED_OUT
        self._error: Optional[str] = None
        self._saved_flight: SingleFlight[None] = SingleFlight("saved recipes refresh")
        self._favorites_flight: SingleFlight[None] = SingleFlight("favorites refresh")
        # bumped by every local write; a refresh that read before it is discarded
        self._generation = 0

    # ------------------------------------------------------------------
    # Exposed state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Optional[SavedRecipesSnapshot]:
        return self._snapshot

    @property
    def saved(self) -> tuple[SavedRecipe, ...]:
        return self._snapshot.saved if self._snapshot else ()

    @property
    def favorites(self) -> tuple[SavedRecipe, ...]:
        return self._snapshot.favorites if self._snapshot else ()

    @property
    def status(self) -> CacheStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._status == CacheStatus.LOADING

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def last_refreshed(self) -> Optional[float]:
        return self._snapshot.refreshed_at if self._snapshot else None

    def is_stale(self) -> bool:
        refreshed_at = self._snapshot.saved_refreshed_at if self._snapshot else None
        if refreshed_at is None:
            return True
        return self._clock() - refreshed_at > self._ttl

    def is_saved(self, recipe_id: str) -> bool:
        return self._find(recipe_id) is not None

    def is_favorite(self, recipe_id: str) -> bool:
        link = self._find(recipe_id)
        return link is not None and link.is_favorite

    async def current(self) -> Optional[SavedRecipesSnapshot]:
        """The snapshot, but only if it belongs to the live session's user."""
        session = await optional_session(self._sessions)
        if session is None:
            self._reset(CacheStatus.SIGNED_OUT)
            return None
        if self._snapshot is None or self._snapshot.user_id != session.user_id:
            return None
        return self._snapshot

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Reload all saved links (and the favorites derived from them)."""
        await self._saved_flight.run(lambda: self._refresh(favorites_only=False))

    async def refresh_favorites(self) -> None:
        """Reload only the favorite links."""
        await self._favorites_flight.run(lambda: self._refresh(favorites_only=True))

    async def _refresh(self, favorites_only: bool) -> None:
        generation = self._generation
        session = await optional_session(self._sessions)
        if session is None:
            self._reset(CacheStatus.SIGNED_OUT)
            return
        user_id = session.user_id
        if self._snapshot is not None and self._snapshot.user_id != user_id:
            logger.info("Session user changed; dropping cached saved recipes")
            self._reset(CacheStatus.EMPTY)

        self._status = CacheStatus.LOADING
        self._error = None
        try:
            links = await asyncio.wait_for(
                self._load(user_id, favorites_only), timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Loading %s for user %s timed out after %.1fs",
                "favorites" if favorites_only else "saved recipes", user_id, self._timeout,
            )
            self._error = "Loading saved recipes timed out"
            self._status = CacheStatus.ERROR
            return
        except Exception as e:
            logger.warning("Loading saved recipes for user %s failed: %s", user_id, e)
            self._error = f"Failed to load saved recipes: {e}"
            self._status = CacheStatus.ERROR
            return

        if generation != self._generation:
            logger.debug("Discarding saved recipes read that predates a local write")
            self._status = CacheStatus.READY
            return

        now = self._clock()
        base = self._snapshot or SavedRecipesSnapshot(user_id=user_id)
        if favorites_only:
            self._snapshot = replace(
                base, favorites=tuple(links), favorites_refreshed_at=now,
            )
        else:
            self._snapshot = replace(
                base,
                saved=tuple(links),
                favorites=tuple(link for link in links if link.is_favorite),
                saved_refreshed_at=now,
                favorites_refreshed_at=now,
            )
        self._status = CacheStatus.READY
        logger.info(
            "Loaded %d %s for user %s",
            len(links), "favorites" if favorites_only else "saved recipes", user_id,
        )

    async def _load(self, user_id: str, favorites_only: bool) -> list[SavedRecipe]:
        links = await self._repo.get_by_profile(user_id, favorites_only=favorites_only)
        return await self._enrich(links)

    async def _enrich(self, links: list[SavedRecipe]) -> list[SavedRecipe]:
        results = await asyncio.gather(
            *(self._details.get(link.recipe_id) for link in links),
            return_exceptions=True,
        )
        enriched = []
        for link, result in zip(links, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Dropping saved recipe %s: recipe lookup failed (%s)",
                    link.recipe_id, result,
                )
                continue
            enriched.append(replace(link, recipe=result))
        return enriched

    def _reset(self, status: CacheStatus) -> None:
        self._snapshot = None
        self._error = None
        self._status = status

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def save_recipe(
        self,
        user_id: str,
        recipe_id: str,
        is_favorite: bool = False,
        notes: Optional[str] = None,
    ) -> SavedRecipe:
        """Save (or re-save) a recipe. Existing notes survive unless notes is given."""
        await require_session(self._sessions, user_id)
        link = await self._repo.upsert(user_id, recipe_id, is_favorite, notes)
        logger.info(
            "Saved recipe %s for user %s (favorite=%s)", recipe_id, user_id, is_favorite,
        )
        return await self._mirror_upsert(user_id, link)

    async def remove_recipe(self, user_id: str, recipe_id: str) -> None:
        await require_session(self._sessions, user_id)
        await self._repo.delete(user_id, recipe_id)
        logger.info("Removed saved recipe %s for user %s", recipe_id, user_id)
        self._generation += 1
        if self._owned_by(user_id):
            snapshot = self._snapshot
            self._snapshot = replace(
                snapshot,
                saved=tuple(link for link in snapshot.saved if link.recipe_id != recipe_id),
                favorites=tuple(
                    link for link in snapshot.favorites if link.recipe_id != recipe_id
                ),
            )

    async def update_notes(self, user_id: str, recipe_id: str, notes: str) -> Optional[SavedRecipe]:
        await require_session(self._sessions, user_id)
        link = await self._repo.update_notes(user_id, recipe_id, notes)
        if link is None:
            return None
        return await self._mirror_upsert(user_id, link)

    async def toggle_favorite(self, user_id: str, recipe_id: str) -> bool:
        """Flip the favorite flag and return the new value.

        An unsaved recipe becomes a saved favorite. The local mirror is
        updated straight away; both lists are then re-fetched from the
        Relation Store, after any refresh that was already running.
        """
        await require_session(self._sessions, user_id)
        current = self._find(recipe_id) if self._owned_by(user_id) else None
        new_flag = not (current.is_favorite if current else False)

        link = await self._repo.upsert(user_id, recipe_id, new_flag)
        if current is not None and current.recipe is not None:
            link = replace(link, recipe=current.recipe)
        await self._mirror_upsert(user_id, link)
        logger.info("Recipe %s favorite=%s for user %s", recipe_id, new_flag, user_id)

        # a refresh already running read the store before this write
        await self._saved_flight.run(lambda: self._refresh(favorites_only=False), fresh=True)
        return new_flag

    async def _mirror_upsert(self, user_id: str, link: SavedRecipe) -> SavedRecipe:
        self._generation += 1
        if link.recipe is None:
            try:
                link = replace(link, recipe=await self._details.get(link.recipe_id))
            except Exception as e:
                # Saved in the store; the next refresh decides whether it shows.
                logger.warning("Could not enrich saved recipe %s: %s", link.recipe_id, e)
                return link

        if not self._owned_by(user_id):
            self._snapshot = SavedRecipesSnapshot(user_id=user_id)
        snapshot = self._snapshot
        saved = (link,) + tuple(
            existing for existing in snapshot.saved if existing.recipe_id != link.recipe_id
        )
        favorites = tuple(
            existing for existing in snapshot.favorites
            if existing.recipe_id != link.recipe_id
        )
        if link.is_favorite:
            favorites = (link,) + favorites
        self._snapshot = replace(snapshot, saved=saved, favorites=favorites)
        return link

    def _owned_by(self, user_id: str) -> bool:
        return self._snapshot is not None and self._snapshot.user_id == user_id

    def _find(self, recipe_id: str) -> Optional[SavedRecipe]:
        for link in self.saved + self.favorites:
            if link.recipe_id == recipe_id:
                return link
        return None
