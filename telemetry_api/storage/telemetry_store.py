import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from telemetry_api.core.errors import StorageError
from telemetry_api.models.telemetry import TelemetryRecord

logger = logging.getLogger(__name__)

INDEX_ID_WIDTH = 20


class TelemetryStore:
    """Append-only collection of readings.

    Records live in one hash keyed by id; a sorted set scored by the server
    timestamp indexes them for newest-first reads.

    Index members are the ids zero-padded to a fixed width, so readings with
    the same timestamp fall back to id order.
    """

    def __init__(self, client: redis.Redis, prefix: str = "telemetry"):
        self.redis = client
        self.seq_key = f"{prefix}:seq"
        self.records_key = f"{prefix}:records"
        self.index_key = f"{prefix}:by_server_ts"

    async def insert(self, record: TelemetryRecord) -> str:
        try:
            record_id = str(await self.redis.incr(self.seq_key))
            stored = record.model_copy(update={"id": record_id})
            member = record_id.zfill(INDEX_ID_WIDTH)

            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(self.records_key, record_id, stored.model_dump_json())
                pipe.zadd(self.index_key, {member: stored.server_timestamp.timestamp()})
                await pipe.execute()
        except RedisError as exc:
            raise StorageError("Failed to insert telemetry record") from exc

        return record_id

    async def latest(self, limit: int) -> list[TelemetryRecord]:
        try:
            members = await self.redis.zrevrange(self.index_key, 0, limit - 1)
            if not members:
                return []
            ids = [str(int(member)) for member in members]
            raw_records = await self.redis.hmget(self.records_key, ids)
        except RedisError as exc:
            raise StorageError("Failed to read latest telemetry") from exc

        records = []
        for record_id, raw in zip(ids, raw_records):
            if raw is None:
                logger.warning("Index entry %r has no stored record", record_id)
                continue
            records.append(TelemetryRecord.model_validate_json(raw))
        return records

    async def count(self) -> int:
        try:
            return int(await self.redis.hlen(self.records_key))
        except RedisError as exc:
            raise StorageError("Failed to count telemetry") from exc

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as exc:
            raise StorageError("Redis ping failed") from exc
