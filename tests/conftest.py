from __future__ import annotations

from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from mealplanner import create_app
from mealplanner.memory_storage import MemoryPlannerStorage


def recipe_fields(**overrides):
    fields = {
        "name": "Chocolate Cake",
        "category": "dessert",
        "prep_time": "20 mins",
        "cook_time": "35 mins",
        "servings": 8,
        "ingredients": ["flour", "sugar", "butter"],
        "instructions": "Mix and bake.",
    }
    fields.update(overrides)
    return fields


def recipe_payload(**overrides):
    """JSON body for the recipe endpoints."""
    payload = {
        "name": "Chocolate Cake",
        "category": "dessert",
        "prepTime": "20 mins",
        "cookTime": "35 mins",
        "servings": 8,
        "ingredients": ["flour", "sugar", "butter"],
        "instructions": "Mix and bake.",
    }
    payload.update(overrides)
    return payload


class FlaskResponse:
    """Minimal ``requests.Response`` look-alike over a Flask test response."""

    def __init__(self, response) -> None:
        self._response = response
        self.status_code = response.status_code

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        data = self._response.get_json(silent=True)
        if data is None:
            raise ValueError("response body is not JSON")
        return data


class FlaskSession:
    """Routes ``requests.Session.request`` calls into a Flask test client."""

    def __init__(self, test_client, base_url: str = "http://planner.test") -> None:
        self.test_client = test_client
        self.base_url = base_url
        self.calls = []

    def request(self, method, url, timeout=None, params=None, json=None):
        path = url[len(self.base_url):] if url.startswith(self.base_url) else url
        self.calls.append((method, path, params))
        response = self.test_client.open(path, method=method, query_string=params, json=json)
        return FlaskResponse(response)


@pytest.fixture
def storage():
    return MemoryPlannerStorage()


@pytest.fixture
def app(storage):
    app = create_app(storage=storage, config_name="testing")
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def api_session(client):
    return FlaskSession(client)
