"""
domain.colors - Deterministic accent colors for recipes.

The color is a pure function of the recipe id, so the same recipe gets
the same accent on every screen and across restarts without any color
being stored server-side.
"""

from __future__ import annotations

PALETTE: tuple[str, ...] = ("green", "cyan", "purple", "pink", "blue")
DEFAULT_COLOR = "green"

# Theme names that exist but must never be used as a recipe accent.
RESERVED_COLORS = frozenset({"light"})


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def _utf16_units(text: str):
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield int.from_bytes(data[i:i + 2], "little")


def recipe_color(recipe_id: str) -> str:
    """Map a recipe id to a palette entry.

    Uses the classic `hash * 31 + code_unit` string hash over UTF-16 code
    units, with the shift wrapped to 32 bits, so the mapping matches the
    mobile clients that share the same ids.
    """
    h = 0
    for unit in _utf16_units(recipe_id):
        h = unit + (_to_int32(_to_int32(h) << 5) - h)
    return PALETTE[abs(h) % len(PALETTE)]


def is_valid_color(color: str | None) -> bool:
    return bool(color) and color in PALETTE and color not in RESERVED_COLORS


def resolve_color(color: str | None) -> str:
    """Return color if it is a usable accent, else the default."""
    return color if is_valid_color(color) else DEFAULT_COLOR
