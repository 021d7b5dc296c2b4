"""SanityContentSource / SanityClient against a stubbed HTTP session."""

import asyncio
import json

import pytest
import requests

from domain.exceptions import ContentSourceError
from infrastructure.content.sanity_client import SanityClient
from infrastructure.content.sanity_source import SanityContentSource

RECIPE_DOC = {
    "_id": "r1",
    "tittel": "Fiskesuppe",
    "image": "https://cdn.example/r1.jpg",
    "beskrivelse": "Creamy fish soup",
    "kategorier": [{"_id": "c1", "name": "Dinner"}, None],
    "porsjoner": 4,
    "ingrediens": [
        {
            "name": "Torsk",
            "measurement": {"unit": "gram", "unitQuantity": 400},
            "kcal": 320,
            "makros": {"protein": 70, "karbs": 0, "fett": 3.2},
            "kommentar": "in cubes",
        },
        {"name": "Salt", "mengde": "a pinch"},
    ],
    "instruksjoner": ["Boil.", "Serve."],
    "notater": None,
    "totalKcal": 640,
    "totalMakros": {"protein": 32.4, "karbs": 71.2, "fett": 24.8},
    "tilberedningstid": 30,
}


class FakeResponse:
    def __init__(self, body=None, status_code=200, text=""):
        self._body = body
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeHTTP:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append({"url": url, "params": params, "headers": headers})
        if self.error:
            raise self.error
        return self.response


def _source(http, token=""):
    client = SanityClient("https://proj.apicdn.sanity.io/v2024-01-01", "production",
                          token=token, http=http)
    return SanityContentSource(client)


def test_recipe_document_is_mapped():
    http = FakeHTTP(FakeResponse({"result": RECIPE_DOC, "ms": 3}))
    recipe = asyncio.run(_source(http).fetch_recipe("r1"))

    assert recipe.id == "r1"
    assert recipe.title == "Fiskesuppe"
    assert [c.id for c in recipe.categories] == ["c1"]
    assert recipe.servings == 4
    cod, salt = recipe.ingredients
    assert cod.measurement.quantity == 400
    assert cod.macros.carbs == 0
    assert cod.macros.fat == 3.2
    assert cod.comment == "in cubes"
    assert salt.measurement is None
    assert salt.quantity_text == "a pinch"
    assert recipe.notes == ""
    assert recipe.prep_time == "30"
    assert recipe.total_macros.carbs == 71.2


def test_query_parameters_are_json_encoded():
    http = FakeHTTP(FakeResponse({"result": RECIPE_DOC}))
    asyncio.run(_source(http, token="secret").fetch_recipe("r1"))

    sent = http.requests[0]
    assert sent["url"] == "https://proj.apicdn.sanity.io/v2024-01-01/data/query/production"
    assert sent["params"]["$id"] == json.dumps("r1")
    assert sent["headers"] == {"Authorization": "Bearer secret"}


def test_missing_recipe_is_none():
    http = FakeHTTP(FakeResponse({"result": None}))
    assert asyncio.run(_source(http).fetch_recipe("nope")) is None


def test_lists_are_mapped():
    docs = [{"_id": "c1", "name": "Dinner", "description": "Evening meals"}]
    http = FakeHTTP(FakeResponse({"result": docs}))
    categories = asyncio.run(_source(http).fetch_categories())

    assert categories[0].name == "Dinner"
    assert categories[0].image == ""


def test_dietary_options_fall_back_to_name_as_value():
    docs = [{"navn": "Vegetar", "verdi": "vegetarian"}, {"navn": "Halal"}]
    http = FakeHTTP(FakeResponse({"result": docs}))
    options = asyncio.run(_source(http).fetch_dietary_options())

    assert [(o.name, o.value) for o in options] == [("Vegetar", "vegetarian"), ("Halal", "Halal")]


@pytest.mark.parametrize("http", [
    FakeHTTP(FakeResponse({"error": "bad"}, status_code=500, text="boom")),
    FakeHTTP(FakeResponse(None)),
    FakeHTTP(error=requests.exceptions.ConnectionError("refused")),
    FakeHTTP(error=requests.exceptions.Timeout("slow")),
    FakeHTTP(FakeResponse({"result": {"not": "a list"}})),
])
def test_failures_become_content_source_errors(http):
    with pytest.raises(ContentSourceError):
        asyncio.run(_source(http).fetch_recipes())
