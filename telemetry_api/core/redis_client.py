import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from telemetry_api.config.settings import Settings
from telemetry_api.core.errors import StartupError

logger = logging.getLogger(__name__)


async def open_redis_client(settings: Settings) -> redis.Redis:
    client = redis.Redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        decode_responses=False,
    )

    # fail fast: no retry if the store is unreachable at startup
    try:
        await client.ping()
    except RedisError as exc:
        await client.aclose()
        raise StartupError(f"Cannot connect to Redis: {exc}") from exc

    logger.info("Connected to Redis")
    return client


async def close_redis_client(client: redis.Redis) -> None:
    await client.aclose()
    logger.info("Redis connection closed")
