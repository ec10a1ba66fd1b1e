"""
Shared fixtures: an app wired to an in-memory mongomock database.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from pin_telemetry.main import create_app
from pin_telemetry.storage import Storage


@pytest.fixture()
def storage():
    """Fresh Storage on a mongomock database, with the real indexes."""
    database = mongomock.MongoClient()["esp32DB"]
    store = Storage(database)
    store.ensure_indexes()
    return store


@pytest.fixture()
def client(storage):
    with TestClient(create_app(storage=storage)) as test_client:
        yield test_client


@pytest.fixture()
def registered(client):
    """Register dev-42 and return its API key."""
    response = client.post("/auth", json={"unique_id": "dev-42"})
    assert response.status_code == 200
    return response.json()["api_key"]
