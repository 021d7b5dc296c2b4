"""Recipe accent colors are a pure function of the recipe id."""

import pytest

from domain.colors import DEFAULT_COLOR, PALETTE, recipe_color, resolve_color


def test_color_is_deterministic_and_from_palette():
    ids = ["r1", "abc-123", "drafts.6f1e", "Blåbærpai", ""]
    for recipe_id in ids:
        assert recipe_color(recipe_id) == recipe_color(recipe_id)
        assert recipe_color(recipe_id) in PALETTE


def test_known_hash_values():
    # "a" hashes to 97, "ab" to 3105
    assert recipe_color("a") == PALETTE[97 % 5]
    assert recipe_color("ab") == PALETTE[3105 % 5]
    assert recipe_color("") == PALETTE[0]


def test_long_ids_wrap_to_32_bits():
    color = recipe_color("x" * 500)
    assert color in PALETTE


@pytest.mark.parametrize("color, expected", [
    ("cyan", "cyan"),
    ("light", DEFAULT_COLOR),
    ("mauve", DEFAULT_COLOR),
    (None, DEFAULT_COLOR),
    ("", DEFAULT_COLOR),
])
def test_resolve_color_falls_back(color, expected):
    assert resolve_color(color) == expected
