"""
factory - Composition root for the recipe/meal-plan data layer.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (the CLI, a future UI shell) call this factory to
get fully configured caches and stores.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    content = factory.get_content_cache()
    await content.refresh()

Caches and stores are process-wide singletons: every caller of
get_saved_recipe_cache() sees the same snapshot.
"""

from __future__ import annotations

import logging
from typing import Optional

from infrastructure.config import Settings
from infrastructure.auth.session_provider import TokenSessionProvider
from infrastructure.content.sanity_client import SanityClient
from infrastructure.content.sanity_source import SanityContentSource
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.profile_repo import SQLiteProfileRepository
from infrastructure.persistence.preference_repo import SQLitePreferenceRepository
from infrastructure.persistence.saved_recipe_repo import SQLiteSavedRecipeRepository
from infrastructure.persistence.kv_store import SQLiteKeyValueStore
from application.services.content import ContentCache
from application.services.recipe_details import RecipeDetailCache
from application.services.profile import ProfileCache
from application.services.saved_recipes import SavedRecipeCache
from application.services.meal_plan import WeeklyMealPlanStore
from application.services.catalog import PreferenceCatalog

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root: wires all dependencies together.

    Call initialize() once at startup, then fetch caches as needed.
    """

    def __init__(self, config: Settings, token: Optional[str] = None):
        self._config = config
        self._connection = AsyncSQLiteConnection(config.db_path)
        self._content_source = SanityContentSource(SanityClient(
            base_url=config.sanity_base_url,
            dataset=config.sanity_dataset,
            token=config.sanity_token,
            timeout=config.content_timeout,
        ))
        self._sessions = TokenSessionProvider(
            jwt_secret=config.jwt_secret,
            jwt_algorithm=config.jwt_algorithm,
            jwt_expiry_hours=config.jwt_expiry_hours,
            token=token,
        )

        # Lazy singletons
        self._content_cache: Optional[ContentCache] = None
        self._recipe_details: Optional[RecipeDetailCache] = None
        self._profile_cache: Optional[ProfileCache] = None
        self._saved_cache: Optional[SavedRecipeCache] = None
        self._meal_plans: Optional[WeeklyMealPlanStore] = None
        self._catalog: Optional[PreferenceCatalog] = None
        self._initialized = False

    @property
    def connection(self) -> AsyncSQLiteConnection:
        return self._connection

    async def initialize(self) -> None:
        """One-time startup: run migrations, hydrate the meal plan store.

        Must be called before using the meal plan store.
        """
        if self._initialized:
            return
        logger.info("Initializing ServiceFactory...")

        await run_migrations(self._connection)
        logger.info("Database migrations complete")

        await self.get_meal_plan_store().load()
        logger.info("Meal plans loaded")

        self._initialized = True
        logger.info("ServiceFactory ready")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_session_provider(self) -> TokenSessionProvider:
        return self._sessions

    def get_content_cache(self) -> ContentCache:
        if self._content_cache is None:
            self._content_cache = ContentCache(
                self._content_source, ttl_seconds=self._config.cache_ttl_seconds,
            )
        return self._content_cache

    def get_recipe_detail_cache(self) -> RecipeDetailCache:
        if self._recipe_details is None:
            self._recipe_details = RecipeDetailCache(self._content_source)
        return self._recipe_details

    def get_profile_cache(self) -> ProfileCache:
        if self._profile_cache is None:
            self._profile_cache = ProfileCache(
                profile_repo=SQLiteProfileRepository(self._connection),
                preference_repo=SQLitePreferenceRepository(self._connection),
                sessions=self._sessions,
                ttl_seconds=self._config.cache_ttl_seconds,
            )
        return self._profile_cache

    def get_saved_recipe_cache(self) -> SavedRecipeCache:
        if self._saved_cache is None:
            self._saved_cache = SavedRecipeCache(
                saved_repo=SQLiteSavedRecipeRepository(self._connection),
                recipe_details=self.get_recipe_detail_cache(),
                sessions=self._sessions,
                ttl_seconds=self._config.cache_ttl_seconds,
                load_timeout=self._config.saved_recipes_timeout,
            )
        return self._saved_cache

    def get_meal_plan_store(self) -> WeeklyMealPlanStore:
        if self._meal_plans is None:
            self._meal_plans = WeeklyMealPlanStore(
                store=SQLiteKeyValueStore(self._connection),
                color_for=self.get_content_cache().color_for,
                default_slot_count=self._config.default_meal_slots,
            )
        return self._meal_plans

    def get_preference_catalog(self) -> PreferenceCatalog:
        if self._catalog is None:
            self._catalog = PreferenceCatalog(self._content_source)
        return self._catalog
