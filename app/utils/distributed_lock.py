"""
Distributed lock.

Redis-backed lock used to keep periodic jobs from overlapping.
Falls back to an in-process asyncio lock when Redis is not available,
which is enough for the single-process scheduler deployment.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import LockError, RedisError

from app.config.operational_constants import BLOCKING_TIMEOUT_DEFAULT
from app.config.settings import settings

# Process-wide fallback locks, keyed by lock name
_local_locks: dict[str, asyncio.Lock] = {}


def create_redis_client() -> redis.Redis:
    """
    Create a Redis client with settings from config.

    Returns:
        Configured Redis client with decode_responses=True
    """
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
        decode_responses=True,
    )


def _get_local_lock(key: str) -> asyncio.Lock:
    lock = _local_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _local_locks[key] = lock
    return lock


class DistributedLock:
    """
    Named lock with Redis as primary backend.

    Usage:
        lock = DistributedLock(redis_client=client)
        async with lock.lock("job_name", timeout=60) as acquired:
            if not acquired:
                return
            ...
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """
        Initialize lock.

        Args:
            redis_client: Redis client, or None for in-process locking only
        """
        self.redis_client = redis_client

    @asynccontextmanager
    async def lock(
        self,
        key: str,
        timeout: int = 60,
        blocking_timeout: float = BLOCKING_TIMEOUT_DEFAULT,
    ) -> AsyncIterator[bool]:
        """
        Acquire lock for the duration of the block.

        Args:
            key: Lock name
            timeout: Auto-release after this many seconds (Redis only)
            blocking_timeout: How long to wait for acquisition

        Yields:
            True if the lock was acquired, False otherwise
        """
        if self.redis_client is not None:
            try:
                redis_lock = self.redis_client.lock(
                    f"lock:{key}",
                    timeout=timeout,
                    blocking_timeout=blocking_timeout,
                )
                acquired = await redis_lock.acquire()
            except RedisError as e:
                logger.warning(
                    f"Redis lock unavailable for {key}, using local lock: {e}"
                )
            else:
                try:
                    yield acquired
                finally:
                    if acquired:
                        try:
                            await redis_lock.release()
                        except LockError as e:
                            logger.warning(f"Lock {key} expired before release: {e}")
                return

        local_lock = _get_local_lock(key)
        try:
            await asyncio.wait_for(local_lock.acquire(), timeout=blocking_timeout)
            acquired = True
        except TimeoutError:
            acquired = False

        try:
            yield acquired
        finally:
            if acquired:
                local_lock.release()
