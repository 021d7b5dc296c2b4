"""PreferenceCatalog: memoized picker reference lists."""

import asyncio

import pytest

from application.services.catalog import PreferenceCatalog
from domain.exceptions import ContentSourceError


def test_options_are_fetched_once(source):
    catalog = PreferenceCatalog(source)

    async def run():
        await asyncio.gather(catalog.dietary_options(), catalog.dietary_options())
        return await catalog.dietary_options()

    options = asyncio.run(run())
    assert [o.value for o in options] == ["vegetarian", "glutenfree"]
    assert source.calls["dietary"] == 1


def test_dietary_value_maps_names_and_values(source):
    catalog = PreferenceCatalog(source)
    assert catalog.dietary_value("Vegetarian") is None  # not loaded yet

    asyncio.run(catalog.dietary_options())
    assert catalog.dietary_value("Vegetarian") == "vegetarian"
    assert catalog.dietary_value("glutenfree") == "glutenfree"
    assert catalog.dietary_value("Carnivore") is None


def test_failure_is_raised_and_not_memoized(source):
    catalog = PreferenceCatalog(source)
    source.fail = True

    async def run():
        with pytest.raises(ContentSourceError):
            await catalog.dietary_options()
        source.fail = False
        return await catalog.dietary_options()

    assert len(asyncio.run(run())) == 2
    assert source.calls["dietary"] == 2


def test_allergy_and_cuisine_options(source):
    catalog = PreferenceCatalog(source)

    async def run():
        return await catalog.allergy_options(), await catalog.cuisine_options()

    allergies, cuisines = asyncio.run(run())
    assert allergies[0].name == "Peanuts"
    assert cuisines[0].name == "Italian"
