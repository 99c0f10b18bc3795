"""Shared Redis client for broadcast fan-out and the SSE relay."""

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from solarops.core.config import get_settings

logger = structlog.get_logger(__name__)

_client: redis.Redis | None = None


async def init_redis(url: str | None = None) -> None:
    """Connect the shared client and verify it answers PING."""
    global _client

    if _client is not None:
        return

    redis_url = url or get_settings().redis_url
    _client = redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
        health_check_interval=30,
    )
    await _client.ping()
    logger.info("redis_connected", url=redis_url.rsplit("@", 1)[-1])


async def close_redis() -> None:
    global _client

    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """Return the shared Redis client.

    Raises RuntimeError if init_redis() has not been called.
    """
    if _client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _client


async def redis_ready() -> bool:
    """True when the shared client exists and answers PING."""
    try:
        return bool(await get_redis().ping())
    except (RuntimeError, RedisError, OSError) as exc:
        logger.error("redis_check_failed", error=str(exc))
        return False
