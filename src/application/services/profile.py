"""
application.services.profile - Cache of the signed-in user's profile and preferences.

Holds the profile row plus the five preference collections (dietary
requirements, allergies, cuisine preferences, budget, portions). The
snapshot records which user it belongs to; current() hands it out only
while that user is still the signed-in one.

Preference saves are authoritative replaces: the whole collection is
written (delete-all-then-insert, or a single-row upsert) and the cached
copy is swapped only after the write succeeds. Nothing is merged field
by field.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from typing import Callable, Iterable, Optional

from domain.entities import (
    Profile,
    DietaryRequirement,
    Allergy,
    AllergySeverity,
    FoodPreference,
    BudgetSetting,
    BudgetPeriod,
    PortionSetting,
)
from domain.ports import ProfileRepository, PreferenceRepository, SessionProviderPort
from application.context import optional_session, require_session
from application.dto import CacheStatus, ProfileSnapshot
from application.inflight import SingleFlight

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class ProfileCache:
    """Session-scoped cache of profile data with TTL-gated refresh."""

    def __init__(
        self,
        profile_repo: ProfileRepository,
        preference_repo: PreferenceRepository,
        sessions: SessionProviderPort,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._profile_repo = profile_repo
        self._preference_repo = preference_repo
        self._sessions = sessions
        self._ttl = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[ProfileSnapshot] = None
        self._status = CacheStatus.SIGNED_OUT
        self._error: Optional[str] = None
        self._inflight: SingleFlight[None] = SingleFlight("profile refresh")

    # ------------------------------------------------------------------
    # Exposed state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Optional[ProfileSnapshot]:
        """Last loaded snapshot. Check snapshot.user_id, or use current()."""
        return self._snapshot

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
        refreshed_at = self.last_refreshed
        if refreshed_at is None:
            return True
        return self._clock() - refreshed_at > self._ttl

    async def current(self) -> Optional[ProfileSnapshot]:
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
        """Reload profile and preferences for the signed-in user.

        A second call while one is running joins it instead of issuing
        another round trip. Never raises on read failure.
        """
        await self._inflight.run(self._refresh)

    async def _refresh(self) -> None:
        session = await optional_session(self._sessions)
        if session is None:
            self._reset(CacheStatus.SIGNED_OUT)
            return
        user_id = session.user_id
        if self._snapshot is not None and self._snapshot.user_id != user_id:
            logger.info("Session user changed; dropping cached profile data")
            self._reset(CacheStatus.EMPTY)

        self._status = CacheStatus.LOADING
        self._error = None
        try:
            results = await asyncio.gather(
                self._profile_repo.get_by_id(user_id),
                self._preference_repo.get_dietary_requirements(user_id),
                self._preference_repo.get_allergies(user_id),
                self._preference_repo.get_food_preferences(user_id),
                self._preference_repo.get_budget(user_id),
                self._preference_repo.get_portions(user_id),
                return_exceptions=True,
            )
            failures = [r for r in results if isinstance(r, BaseException)]
            if failures:
                raise failures[0]
            (profile, dietary, allergies, preferences, budget, portions) = results
        except Exception as e:
            logger.warning("Profile refresh failed for user %s: %s", user_id, e)
            self._error = f"Failed to load profile data: {e}"
            self._status = CacheStatus.ERROR
            return

        self._snapshot = ProfileSnapshot(
            user_id=user_id,
            profile=profile,
            dietary_requirements=tuple(dietary),
            allergies=tuple(allergies),
            food_preferences=tuple(preferences),
            budget=budget,
            portions=portions,
            refreshed_at=self._clock(),
        )
        self._status = CacheStatus.READY
        logger.info(
            "Profile refreshed for user %s (profile=%s, %d dietary, %d allergies, %d cuisines)",
            user_id, "yes" if profile else "none",
            len(dietary), len(allergies), len(preferences),
        )

    def _reset(self, status: CacheStatus) -> None:
        self._snapshot = None
        self._error = None
        self._status = status

    # ------------------------------------------------------------------
    # Saves (authoritative replace)
    # ------------------------------------------------------------------

    async def update_profile(
        self,
        user_id: str,
        full_name: str,
        weight: str = "",
        height: str = "",
        age: str = "",
    ) -> Profile:
        await require_session(self._sessions, user_id)
        saved = await self._profile_repo.upsert(Profile(
            id=user_id, full_name=full_name, weight=weight, height=height, age=age,
        ))
        self._apply(user_id, profile=saved)
        logger.info("Profile updated for user %s", user_id)
        return saved

    async def save_dietary_requirements(
        self, user_id: str, requirement_types: Iterable[str],
    ) -> list[DietaryRequirement]:
        await require_session(self._sessions, user_id)
        rows = await self._preference_repo.replace_dietary_requirements(
            user_id, _unique(requirement_types),
        )
        self._apply(user_id, dietary_requirements=tuple(rows))
        return rows

    async def save_allergies(
        self,
        user_id: str,
        allergies: Iterable[tuple[str, Optional[AllergySeverity]]],
    ) -> list[Allergy]:
        await require_session(self._sessions, user_id)
        seen: dict[str, Optional[AllergySeverity]] = {}
        for name, severity in allergies:
            seen[name] = severity
        rows = await self._preference_repo.replace_allergies(user_id, list(seen.items()))
        self._apply(user_id, allergies=tuple(rows))
        return rows

    async def save_food_preferences(
        self, user_id: str, cuisines: Iterable[str],
    ) -> list[FoodPreference]:
        await require_session(self._sessions, user_id)
        rows = await self._preference_repo.replace_food_preferences(user_id, _unique(cuisines))
        self._apply(user_id, food_preferences=tuple(rows))
        return rows

    async def save_budget(
        self, user_id: str, amount: float, period: BudgetPeriod,
    ) -> BudgetSetting:
        if amount < 0:
            raise ValueError("Budget amount cannot be negative.")
        await require_session(self._sessions, user_id)
        row = await self._preference_repo.upsert_budget(user_id, amount, BudgetPeriod(period))
        self._apply(user_id, budget=row)
        return row

    async def save_portions(self, user_id: str, number_of_people: int) -> PortionSetting:
        if number_of_people < 1:
            raise ValueError("Number of people must be at least 1.")
        await require_session(self._sessions, user_id)
        row = await self._preference_repo.upsert_portions(user_id, number_of_people)
        self._apply(user_id, portions=row)
        return row

    def _apply(self, user_id: str, **changes) -> None:
        """Swap one field of the snapshot after a successful save."""
        if self._snapshot is None or self._snapshot.user_id != user_id:
            # Not loaded yet for this user; the next refresh picks it up.
            return
        self._snapshot = replace(self._snapshot, **changes)


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))
