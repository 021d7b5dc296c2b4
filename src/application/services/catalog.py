"""
application.services.catalog - Reference data for the preference pickers.

Allowed dietary requirements, common allergies and cuisine types come
from the CMS. They change rarely, so each list is fetched once per
process. Unlike the TTL caches, a failure here is raised: the picker
screen shows its own error and retries.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from domain.models import DietaryOption, AllergyOption, CuisineOption
from domain.ports import ContentSourcePort
from application.inflight import KeyedSingleFlight

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PreferenceCatalog:
    """Memoized picker options from the Content Source."""

    def __init__(self, content_source: ContentSourcePort):
        self._source = content_source
        self._lists: dict[str, list] = {}
        self._inflight: KeyedSingleFlight[str, list] = KeyedSingleFlight("catalog fetch")

    async def dietary_options(self) -> list[DietaryOption]:
        return await self._get("dietary", self._source.fetch_dietary_options)

    async def allergy_options(self) -> list[AllergyOption]:
        return await self._get("allergies", self._source.fetch_allergy_options)

    async def cuisine_options(self) -> list[CuisineOption]:
        return await self._get("cuisines", self._source.fetch_cuisine_options)

    def dietary_value(self, name_or_value: str) -> Optional[str]:
        """Map a picker label to its stored requirement value, if loaded."""
        for option in self._lists.get("dietary", []):
            if name_or_value in (option.name, option.value):
                return option.value
        return None

    async def _get(self, key: str, fetch: Callable[[], Awaitable[list[T]]]) -> list[T]:
        cached = self._lists.get(key)
        if cached is not None:
            return list(cached)

        async def load() -> list[T]:
            items = await fetch()
            self._lists[key] = list(items)
            logger.info("Loaded %d %s option(s)", len(items), key)
            return items

        return list(await self._inflight.run(key, load))
