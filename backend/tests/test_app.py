import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from pin_telemetry.main import create_app, normalize_log_level
from pin_telemetry.storage import Storage, StorageUnavailableError


def test_root(client):
    body = client.get("/").json()
    assert body["endpoints"]["register"] == "POST /auth"
    assert body["endpoints"]["ingest"] == "POST /data"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


def test_health_degraded(client, storage, monkeypatch):
    monkeypatch.setattr(storage, "ping", lambda: False)
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert "error" in response.json()


def test_startup_fails_without_database(monkeypatch):
    def refuse(*args, **kwargs):
        raise StorageUnavailableError("Cannot connect to MongoDB")

    monkeypatch.setattr(Storage, "connect", refuse)
    with pytest.raises(StorageUnavailableError):
        with TestClient(create_app()):
            pass


def test_connect_raises_when_ping_fails(monkeypatch):
    class UnreachableClient:
        closed = False

        def __init__(self, *args, **kwargs):
            self.admin = self

        def command(self, name):
            raise ServerSelectionTimeoutError("connection refused")

        def close(self):
            UnreachableClient.closed = True

    monkeypatch.setattr("pin_telemetry.storage.MongoClient", UnreachableClient)
    with pytest.raises(StorageUnavailableError):
        Storage.connect("mongodb://localhost:27017", "esp32DB", timeout_ms=10)
    assert UnreachableClient.closed


def test_lifespan_closes_owned_storage(monkeypatch, storage):
    closed = []
    monkeypatch.setattr(storage, "close", lambda: closed.append(True))
    monkeypatch.setattr(Storage, "connect", classmethod(lambda cls, *a, **kw: storage))

    app = create_app()
    with TestClient(app):
        assert app.state.storage is storage
    assert closed == [True]
    assert app.state.storage is None


@pytest.mark.parametrize("raw, expected", [
    ("warn", "WARNING"),
    ("WARN", "WARNING"),
    ("fatal", "CRITICAL"),
    (" debug ", "DEBUG"),
    ("INFO", "INFO"),
])
def test_log_level_names_uvicorn_accepts(raw, expected):
    assert normalize_log_level(raw) == expected
