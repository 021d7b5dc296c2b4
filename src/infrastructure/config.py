"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment (and a
.env file) or passed explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the recipe/meal-plan data layer.

    No module-level globals: construct via from_env() or pass explicitly
    in tests.
    """
    project_root: Path

    # ── Content Source (Sanity CMS) ─────────────────────────────
    sanity_project_id: str = ""
    sanity_dataset: str = "production"
    sanity_api_version: str = "2024-01-01"
    sanity_token: str = ""
    sanity_use_cdn: bool = True
    content_timeout: float = 10.0

    # ── Relation Store + local persistence ──────────────────────
    db_path: str = "mealplanner.db"

    # ── Caches ──────────────────────────────────────────────────
    cache_ttl_seconds: float = 5 * 60
    saved_recipes_timeout: float = 5.0
    default_meal_slots: int = 4

    # ── Session tokens ──────────────────────────────────────────
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24

    log_level: str = "WARNING"

    @property
    def sanity_base_url(self) -> str:
        host = "apicdn.sanity.io" if self.sanity_use_cdn else "api.sanity.io"
        return f"https://{self.sanity_project_id}.{host}/v{self.sanity_api_version}"

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None) -> Settings:
        """Build Settings from environment variables (and .env if present)."""
        from dotenv import load_dotenv
        load_dotenv()

        root = project_root or Path(__file__).resolve().parent.parent.parent

        return cls(
            project_root=root,
            sanity_project_id=os.getenv("SANITY_PROJECT_ID", ""),
            sanity_dataset=os.getenv("SANITY_DATASET", "production"),
            sanity_api_version=os.getenv("SANITY_API_VERSION", "2024-01-01"),
            sanity_token=os.getenv("SANITY_TOKEN", ""),
            sanity_use_cdn=_env_bool("SANITY_USE_CDN", True),
            content_timeout=float(os.getenv("CONTENT_TIMEOUT", "10")),
            db_path=os.getenv("DB_PATH", "mealplanner.db"),
            cache_ttl_seconds=float(os.getenv("CACHE_TTL_SECONDS", "300")),
            saved_recipes_timeout=float(os.getenv("SAVED_RECIPES_TIMEOUT", "5")),
            default_meal_slots=int(os.getenv("DEFAULT_MEAL_SLOTS", "4")),
            jwt_secret=os.getenv("JWT_SECRET", "change-me-in-production"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expiry_hours=int(os.getenv("JWT_EXPIRY_HOURS", "24")),
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
        )
