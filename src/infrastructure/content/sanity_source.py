"""
infrastructure.content.sanity_source - Sanity implementation of ContentSourcePort.

Runs the GROQ queries through SanityClient and maps CMS documents onto
domain models. Missing optional fields map to empty values; a null
result for "recipe by id" maps to None.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from domain.models import (
    Recipe,
    Category,
    CategoryRef,
    Ingredient,
    Measurement,
    Macros,
    DietaryOption,
    AllergyOption,
    CuisineOption,
)
from domain.exceptions import ContentSourceError
from infrastructure.content import queries
from infrastructure.content.sanity_client import SanityClient

logger = logging.getLogger(__name__)


class SanityContentSource:
    """Async Sanity implementation of ContentSourcePort."""

    def __init__(self, client: SanityClient):
        self._client = client

    async def fetch_recipes(self) -> list[Recipe]:
        docs = await self._fetch_list(queries.ALL_RECIPES)
        return [self._doc_to_recipe(d) for d in docs]

    async def fetch_categories(self) -> list[Category]:
        docs = await self._fetch_list(queries.ALL_CATEGORIES)
        return [self._doc_to_category(d) for d in docs]

    async def fetch_recipe(self, recipe_id: str) -> Optional[Recipe]:
        doc = await self._client.fetch(queries.RECIPE_BY_ID, {"id": recipe_id})
        if doc is None:
            return None
        if not isinstance(doc, dict):
            raise ContentSourceError(f"Unexpected recipe payload for '{recipe_id}'")
        return self._doc_to_recipe(doc)

    async def fetch_dietary_options(self) -> list[DietaryOption]:
        docs = await self._fetch_list(queries.DIETARY_OPTIONS)
        return [
            DietaryOption(
                name=d.get("navn") or "",
                value=d.get("verdi") or d.get("navn") or "",
                description=d.get("beskrivelse") or "",
            )
            for d in docs
        ]

    async def fetch_allergy_options(self) -> list[AllergyOption]:
        docs = await self._fetch_list(queries.ALLERGY_OPTIONS)
        return [
            AllergyOption(name=d.get("navn") or "", description=d.get("beskrivelse") or "")
            for d in docs
        ]

    async def fetch_cuisine_options(self) -> list[CuisineOption]:
        docs = await self._fetch_list(queries.CUISINE_OPTIONS)
        return [
            CuisineOption(
                id=d.get("_id") or "",
                name=d.get("name") or "",
                description=d.get("description") or "",
                image_url=d.get("imageUrl") or "",
            )
            for d in docs
        ]

    async def _fetch_list(self, query: str) -> list[dict[str, Any]]:
        result = await self._client.fetch(query)
        if result is None:
            return []
        if not isinstance(result, list):
            raise ContentSourceError("Expected a list from the content API")
        return [d for d in result if isinstance(d, dict)]

    # ------------------------------------------------------------------
    # Document mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _macros(data: Optional[dict]) -> Optional[Macros]:
        if not data:
            return None
        return Macros(
            protein=float(data.get("protein") or 0.0),
            carbs=float(data.get("karbs") or 0.0),
            fat=float(data.get("fett") or 0.0),
        )

    @classmethod
    def _doc_to_ingredient(cls, doc: dict) -> Ingredient:
        m = doc.get("measurement")
        measurement = None
        if m and m.get("unitQuantity") is not None:
            measurement = Measurement(unit=m.get("unit") or "", quantity=float(m["unitQuantity"]))
        return Ingredient(
            name=doc.get("name") or "",
            measurement=measurement,
            quantity_text=doc.get("mengde") or "",
            kcal=float(doc.get("kcal") or 0.0),
            macros=cls._macros(doc.get("makros")),
            comment=doc.get("kommentar") or "",
        )

    @classmethod
    def _doc_to_recipe(cls, doc: dict) -> Recipe:
        image = doc.get("image")
        return Recipe(
            id=doc["_id"],
            title=doc.get("tittel") or "",
            image=image if isinstance(image, str) else "",
            categories=[
                CategoryRef(id=c["_id"], name=c.get("name") or "")
                for c in doc.get("kategorier") or []
                if c and c.get("_id")
            ],
            servings=int(doc.get("porsjoner") or 0),
            ingredients=[cls._doc_to_ingredient(i) for i in doc.get("ingrediens") or []],
            instructions=[str(s) for s in doc.get("instruksjoner") or []],
            notes=doc.get("notater") or "",
            description=doc.get("beskrivelse") or "",
            prep_time=str(doc.get("tilberedningstid") or ""),
            total_kcal=float(doc.get("totalKcal") or 0.0),
            total_macros=cls._macros(doc.get("totalMakros")),
        )

    @staticmethod
    def _doc_to_category(doc: dict) -> Category:
        image = doc.get("image")
        return Category(
            id=doc["_id"],
            name=doc.get("name") or "",
            description=doc.get("description") or "",
            image=image if isinstance(image, str) else "",
        )
