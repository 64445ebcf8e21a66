import uuid

import fakeredis
import pytest
from fastapi.testclient import TestClient

from telemetry_api.config.settings import Settings
from telemetry_api.main import create_app


@pytest.fixture
def settings():
    return Settings(redis_url="redis://localhost:6379/0")


@pytest.fixture
def redis_client():
    """Fresh in-memory Redis per test, so every test sees an empty collection."""
    return fakeredis.FakeAsyncRedis()


@pytest.fixture
def client(settings, redis_client):
    with TestClient(create_app(settings=settings, redis_client=redis_client)) as test_client:
        yield test_client


@pytest.fixture
def broken_client(settings):
    server = fakeredis.FakeServer()
    server.connected = False
    app = create_app(settings=settings, redis_client=fakeredis.FakeAsyncRedis(server=server))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def unique_id():
    return uuid.uuid4().hex[:8]


@pytest.fixture
def reading(unique_id):
    return {
        "device_id": f"esp32-{unique_id}",
        "ts_esp": "2025-01-01T12:00:00Z",
        "temperature": 22,
        "humidity": 55,
    }
