"""
Key-value backends for game snapshots.

Two implementations of the same small async interface:
- MemoryStore: a dict with per-key expiry, for development and tests
- RedisStore: redis.asyncio, for deployments with more than one worker

Values are strings (JSON documents). Backend faults surface as
StoreUnavailableError so callers never see a driver-specific exception.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async string store with TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        """Release connections. Nothing to do by default."""


class MemoryStore(KeyValueStore):
    """
    In-process store with expiry.

    Expired keys are dropped when read and swept on every write.
    The clock is injectable so tests can move time forward.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[str, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        now = self._clock()
        self._sweep(now)
        expires_at = now + ttl_seconds if ttl_seconds else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (_, exp) in self._data.items() if exp is not None and now >= exp]
        for key in expired:
            del self._data[key]

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._data)


class RedisStore(KeyValueStore):
    """Redis-backed store."""

    def __init__(self, client: redis.Redis):
        """
        Args:
            client: Async Redis client (decode_responses may be on or off).
        """
        self.redis = client

    @classmethod
    async def connect(cls, redis_url: str) -> "RedisStore":
        """
        Open a connection and check it with PING.

        Raises:
            StoreUnavailableError: Redis could not be reached.
        """
        client = redis.from_url(redis_url, decode_responses=True)
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            await client.aclose()
            raise StoreUnavailableError(f"Redis unreachable: {e}") from e
        logger.info("Connected to Redis")
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis.get(key)
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis GET failed: {e}") from e
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        try:
            await self.redis.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis SET failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis DEL failed: {e}") from e

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis PING failed: {e}") from e

    async def close(self) -> None:
        """Close the Redis connection."""
        try:
            await self.redis.aclose()
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis close failed: {e}") from e
