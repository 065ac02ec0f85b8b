"""Distributed Locking: single-flight recalculation using Redis.

This module provides:
- Conditional set-with-expiry lock acquisition (SET NX EX)
- Unconditional release
- Scoped acquisition that always releases on exit

The TTL is a crash-recovery safety net, not a renewable lease. A holder that
outlives its TTL can lose the lock to another worker; callers must keep the
guarded work deterministic and idempotent.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as redis

from alignment_engine.db.redis import get_redis


class DistributedLock:
    """Mutual exclusion over a shared Redis key."""

    DEFAULT_TTL = 30

    def __init__(self, client: redis.Redis | None = None):
        self._client = client

    @property
    def redis(self) -> redis.Redis:
        """Injected client, falling back to the shared connection pool."""
        return self._client if self._client is not None else get_redis()

    async def acquire(self, key: str, ttl: int | None = None) -> bool:
        """Attempt to take exclusive ownership of ``key``.

        Args:
            key: Lock key (see ``redis_keys.alignment_lock``)
            ttl: Expiry in seconds (default 30)

        Returns:
            True if this caller obtained the lock, False if it is already held
        """
        result = await self.redis.set(key, "1", nx=True, ex=ttl or self.DEFAULT_TTL)
        return bool(result)

    async def release(self, key: str) -> None:
        """Release the lock. Unconditional delete, releasing a free key is a no-op."""
        await self.redis.delete(key)

    @asynccontextmanager
    async def hold(self, key: str, ttl: int | None = None) -> AsyncGenerator[bool, None]:
        """Context manager for scoped acquisition.

        Yields:
            True if the lock was acquired. The lock is released on every exit
            path when acquired, including exceptions raised inside the block.

        Example:
            async with lock.hold(redis_keys.alignment_lock(user_id)) as acquired:
                if not acquired:
                    return None
                ...
        """
        acquired = await self.acquire(key, ttl)
        try:
            yield acquired
        finally:
            if acquired:
                await self.release(key)
