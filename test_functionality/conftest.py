"""Shared fixtures: puts src/ on the path and provides in-memory port fakes."""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import pytest

from fakes import (
    FakeClock,
    FakeContentSource,
    FakeSessionProvider,
    FakeProfileRepository,
    FakePreferenceRepository,
    FakeSavedRecipeRepository,
    MemoryKeyValueStore,
    make_recipe,
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source():
    return FakeContentSource(
        recipes=[
            make_recipe("r1", "Pasta", categories=["c1"]),
            make_recipe("r2", "Soup", categories=["c2"]),
            make_recipe("r3", "Salad", categories=["c1", "c2"]),
        ],
    )


@pytest.fixture
def sessions():
    return FakeSessionProvider(user_id="alice")


@pytest.fixture
def profile_repo():
    return FakeProfileRepository()


@pytest.fixture
def preference_repo():
    return FakePreferenceRepository()


@pytest.fixture
def saved_repo():
    return FakeSavedRecipeRepository()


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()
