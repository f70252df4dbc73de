"""Shared fixtures: apps built against a throwaway SQLite file."""

import pytest
from fastapi.testclient import TestClient

from catalog_api.config import Settings
from catalog_api.main import create_app


@pytest.fixture
def database_url(tmp_path):
    """Async SQLite URL for a database file that lives only for one test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
def make_client(database_url):
    """Factory building a started TestClient for the given settings."""
    clients = []

    def _make(api_key=None, environment="test", raise_server_exceptions=True):
        settings = Settings(
            database_url=database_url,
            api_key=api_key,
            environment=environment,
        )
        client = TestClient(
            create_app(settings),
            raise_server_exceptions=raise_server_exceptions,
        )
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    """Client for an app with the API key gate disabled."""
    return make_client()


def product_payload(**overrides):
    payload = {
        "name": "Widget",
        "description": "A small widget",
        "price": 9.99,
        "category": "Gadgets",
    }
    payload.update(overrides)
    return payload


def create_product(client, headers=None, **overrides):
    response = client.post("/api/products", json=product_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
