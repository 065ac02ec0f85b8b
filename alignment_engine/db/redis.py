"""Process-wide Redis client shared by the lock, queue, cache sink and outbox."""

import redis.asyncio as redis
import structlog

from alignment_engine.core.config import get_settings

logger = structlog.get_logger(__name__)

_client: redis.Redis | None = None


async def init_redis(url: str | None = None, client: redis.Redis | None = None) -> None:
    """Connect the shared client, or install ``client`` as-is.

    String responses are decoded, every key and payload in the engine is text.
    Safe to call more than once.
    """
    global _client

    if _client is not None:
        return

    if client is None:
        client = redis.from_url(url or get_settings().redis_url, decode_responses=True)
    await client.ping()

    _client = client
    logger.info("redis_connected")


async def close_redis() -> None:
    global _client

    if _client is None:
        return
    await _client.aclose()
    _client = None


def get_redis() -> redis.Redis:
    """Raises RuntimeError before init_redis()."""
    if _client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _client
