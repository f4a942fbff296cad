"""
Connection holder for the game store.

The provider is created once by the app lifespan and passed to whatever
needs the store. It connects on first use and keeps the connection only
while it is healthy: a failed connect is not remembered, and reset() drops
a connection that went bad, so the next request tries again.
"""

import logging
from typing import Optional

from errors import StoreUnavailableError
from stores.kv import KeyValueStore, MemoryStore, RedisStore

logger = logging.getLogger(__name__)


class StoreProvider:
    """Lazily connected, resettable store handle."""

    def __init__(self, redis_url: str = "", store: Optional[KeyValueStore] = None):
        """
        Args:
            redis_url: Redis URL. Empty selects an in-memory store.
            store: Ready-made store to use instead (tests inject MemoryStore here).
        """
        self.redis_url = redis_url
        self._store = store
        self._injected = store is not None

    @property
    def backend(self) -> str:
        if self._injected:
            return type(self._store).__name__
        return "redis" if self.redis_url else "memory"

    async def get(self) -> KeyValueStore:
        """
        Return the store, connecting if needed.

        Raises:
            StoreUnavailableError: The backend could not be reached. Nothing
                is cached, so the next call retries.
        """
        if self._store is not None:
            return self._store

        if not self.redis_url:
            self._store = MemoryStore()
            logger.info("Using in-memory game store")
            return self._store

        self._store = await RedisStore.connect(self.redis_url)
        return self._store

    async def reset(self) -> None:
        """Drop the current connection so the next get() reconnects."""
        if self._injected or self._store is None:
            return
        store, self._store = self._store, None
        try:
            await store.close()
        except StoreUnavailableError as e:
            logger.warning(f"Error closing store during reset: {e}")
        logger.info("Store connection reset")

    async def close(self) -> None:
        """Close the connection on shutdown."""
        if self._store is not None:
            await self._store.close()
            if not self._injected:
                self._store = None
