import pytest
from fastapi.testclient import TestClient

from pin_telemetry.main import create_app

READING = {"timestamp": "2024-01-01T00:00:00Z", "pin_state": "HIGH"}


def test_save_reading(client, storage, registered):
    response = client.post("/data", json=READING, headers={"api-key": registered})

    assert response.status_code == 200
    assert response.json() == {"message": "Signal data saved successfully"}

    user = storage.users.find_one({"uniqueID": "dev-42"})
    readings = list(storage.signals.find({}))
    assert len(readings) == 1
    assert readings[0]["userID"] == user["_id"]
    assert readings[0]["timestamp"] == "2024-01-01T00:00:00Z"
    assert readings[0]["pinState"] == "HIGH"


def test_readings_accumulate(client, storage, registered):
    for pin_state in ("HIGH", "LOW", "LOW"):
        body = {"timestamp": "2024-01-01T00:00:00Z", "pin_state": pin_state}
        assert client.post("/data", json=body, headers={"api-key": registered}).status_code == 200

    assert storage.signals.count_documents({}) == 3
    assert storage.signals.count_documents({"pinState": "LOW"}) == 2


def test_unknown_key(client, storage, registered):
    response = client.post("/data", json=READING, headers={"api-key": "0" * 32})

    assert response.status_code == 403
    assert response.json() == {"error": "Invalid API key"}
    assert storage.signals.count_documents({}) == 0


def test_missing_key(client, storage, registered):
    response = client.post("/data", json=READING)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}
    assert storage.signals.count_documents({}) == 0


@pytest.mark.parametrize("field", ["timestamp", "pin_state"])
def test_missing_field(client, storage, registered, field):
    body = {k: v for k, v in READING.items() if k != field}
    response = client.post("/data", json=body, headers={"api-key": registered})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}
    assert storage.signals.count_documents({}) == 0


def test_missing_fields_checked_before_key_lookup(client, storage, monkeypatch):
    def should_not_run(api_key):
        raise AssertionError("key lookup happened")

    monkeypatch.setattr(storage, "find_user_by_api_key", should_not_run)
    response = client.post("/data", json={"timestamp": "t"}, headers={"api-key": "whatever"})

    assert response.status_code == 400


@pytest.mark.parametrize("pin_state", ["MEDIUM", "high", "1"])
def test_invalid_pin_state(client, storage, registered, pin_state):
    body = {"timestamp": "2024-01-01T00:00:00Z", "pin_state": pin_state}
    response = client.post("/data", json=body, headers={"api-key": registered})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid pin_state: must be HIGH or LOW"}
    assert storage.signals.count_documents({}) == 0


def test_database_error_is_opaque(client, storage, registered, monkeypatch):
    from pymongo.errors import WriteError

    def broken(reading):
        raise WriteError("disk full")

    monkeypatch.setattr(storage, "insert_signal_reading", broken)
    response = client.post("/data", json=READING, headers={"api-key": registered})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}


@pytest.mark.parametrize("payload", [
    {"timestamp": 5, "pin_state": "HIGH"},
    {"timestamp": "2024-01-01T00:00:00Z", "pin_state": ["HIGH"]},
    ["2024-01-01T00:00:00Z", "HIGH"],
])
def test_wrong_json_type(client, storage, registered, payload):
    response = client.post("/data", json=payload, headers={"api-key": registered})

    assert response.status_code == 400
    assert "error" in response.json()
    assert storage.signals.count_documents({}) == 0


def test_unexpected_error_is_opaque(storage, monkeypatch):
    def broken(api_key):
        raise RuntimeError("boom")

    monkeypatch.setattr(storage, "find_user_by_api_key", broken)
    with TestClient(create_app(storage=storage), raise_server_exceptions=False) as client:
        response = client.post("/data", json=READING, headers={"api-key": "a" * 32})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    assert storage.signals.count_documents({}) == 0
