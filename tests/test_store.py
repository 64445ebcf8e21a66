"""
Redis-backed telemetry store tests.
"""

from datetime import datetime, timedelta, timezone

import fakeredis
import pytest

from telemetry_api.core.errors import StorageError
from telemetry_api.models.telemetry import TelemetryRecord
from telemetry_api.storage.telemetry_store import TelemetryStore

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_record(offset_seconds: int, temperature: float = 20.0) -> TelemetryRecord:
    return TelemetryRecord(
        device_id="esp32-test",
        device_timestamp=BASE_TIME,
        server_timestamp=BASE_TIME + timedelta(seconds=offset_seconds),
        temperature=temperature,
        humidity=50.0,
    )


@pytest.fixture
def store():
    return TelemetryStore(fakeredis.FakeAsyncRedis(), prefix="test")


@pytest.mark.asyncio
async def test_insert_assigns_increasing_ids(store):
    first = await store.insert(make_record(0))
    second = await store.insert(make_record(1))

    assert int(second) > int(first)


@pytest.mark.asyncio
async def test_latest_orders_by_server_timestamp(store):
    await store.insert(make_record(10, temperature=1))
    await store.insert(make_record(30, temperature=3))
    await store.insert(make_record(20, temperature=2))

    records = await store.latest(10)

    assert [r.temperature for r in records] == [3, 2, 1]
    assert all(r.id for r in records)


@pytest.mark.asyncio
async def test_latest_limit(store):
    for i in range(5):
        await store.insert(make_record(i))

    records = await store.latest(2)

    assert len(records) == 2
    assert records[0].server_timestamp == BASE_TIME + timedelta(seconds=4)


@pytest.mark.asyncio
async def test_count(store):
    assert await store.count() == 0

    for i in range(3):
        await store.insert(make_record(i))

    assert await store.count() == 3


@pytest.mark.asyncio
async def test_record_round_trips_optional_fields(store):
    record = make_record(0).model_copy(
        update={"touch": {"t0": 12.0}, "wifi_signal_strength": -70.0}
    )
    record_id = await store.insert(record)

    stored = (await store.latest(1))[0]

    assert stored.id == record_id
    assert stored.touch == {"t0": 12.0}
    assert stored.wifi_signal_strength == -70.0
    assert stored.free_memory is None


@pytest.mark.asyncio
async def test_prefixes_isolate_collections():
    client = fakeredis.FakeAsyncRedis()
    await TelemetryStore(client, prefix="a").insert(make_record(0))

    assert await TelemetryStore(client, prefix="b").count() == 0


@pytest.mark.asyncio
async def test_connection_errors_become_storage_errors():
    server = fakeredis.FakeServer()
    server.connected = False
    store = TelemetryStore(fakeredis.FakeAsyncRedis(server=server))

    with pytest.raises(StorageError):
        await store.insert(make_record(0))
    with pytest.raises(StorageError):
        await store.count()
    with pytest.raises(StorageError):
        await store.ping()


@pytest.mark.asyncio
async def test_equal_timestamps_fall_back_to_id_order(store):
    ids = [await store.insert(make_record(0, temperature=i)) for i in range(12)]

    records = await store.latest(12)

    assert [r.id for r in records] == list(reversed(ids))
    assert records[0].id == "12"
    assert records[2].id == "10"
    assert records[3].id == "9"
