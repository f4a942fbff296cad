"""
Live game and room state.

One JSON snapshot per room holds the whole game; every action loads it,
mutates it and writes it back. Writes carry the version the caller read, so
a snapshot that changed in the meantime is rejected instead of silently
overwritten. The check is read-compare-write, not a store transaction: two
writers that interleave exactly between the read and the write can still
both succeed, and the later one wins.

Key patterns:
- papayoo:game:{room_code}  -> JSON (full game snapshot)
- papayoo:room:{room_code}  -> JSON (room record)
"""

import json
import logging
from datetime import timedelta
from typing import Optional

from constants import GAME_TTL_SECONDS
from errors import StaleStateError, StoreUnavailableError
from stores.kv import KeyValueStore
from stores.provider import StoreProvider

logger = logging.getLogger(__name__)


class StateCache:
    """Versioned snapshot storage on top of a StoreProvider."""

    # Key patterns
    GAME_KEY = "papayoo:game:{room_code}"
    ROOM_KEY = "papayoo:room:{room_code}"

    def __init__(self, provider: StoreProvider, ttl: timedelta = timedelta(seconds=GAME_TTL_SECONDS)):
        """
        Args:
            provider: Store connection holder.
            ttl: Expiry for abandoned games and rooms, refreshed on every write.
        """
        self.provider = provider
        self.ttl_seconds = int(ttl.total_seconds())

    async def _store(self) -> KeyValueStore:
        return await self.provider.get()

    async def _read(self, key: str) -> Optional[dict]:
        store = await self._store()
        try:
            raw = await store.get(key)
        except StoreUnavailableError:
            await self.provider.reset()
            raise
        if not raw:
            return None
        return json.loads(raw)

    async def _write(self, key: str, value: dict) -> None:
        store = await self._store()
        try:
            await store.set(key, json.dumps(value), self.ttl_seconds)
        except StoreUnavailableError:
            await self.provider.reset()
            raise

    async def _delete(self, key: str) -> None:
        store = await self._store()
        try:
            await store.delete(key)
        except StoreUnavailableError:
            await self.provider.reset()
            raise

    async def ping(self) -> bool:
        """Check the backend is reachable."""
        store = await self._store()
        try:
            return await store.ping()
        except StoreUnavailableError:
            await self.provider.reset()
            raise

    # -------------------------------------------------------------------------
    # Game Snapshots
    # -------------------------------------------------------------------------

    async def get_game(self, room_code: str) -> Optional[dict]:
        """
        Get a room's game snapshot.

        Returns:
            The snapshot dict, or None if there is no game (or it expired).
        """
        return await self._read(self.GAME_KEY.format(room_code=room_code))

    async def save_game(self, snapshot: dict, expected_version: Optional[int] = None) -> dict:
        """
        Save a game snapshot and bump its version.

        Args:
            snapshot: Full snapshot from Game.to_dict(). Its "version" is
                overwritten with the new version.
            expected_version: Version the caller loaded. None creates or
                replaces the game unconditionally.

        Returns:
            The snapshot as stored.

        Raises:
            StaleStateError: The stored version is not expected_version, or
                the game disappeared since it was loaded.
        """
        room_code = snapshot["room_code"]
        key = self.GAME_KEY.format(room_code=room_code)

        if expected_version is None:
            snapshot["version"] = 1
        else:
            current = await self._read(key)
            if current is None:
                raise StaleStateError(f"Game in room {room_code} no longer exists")
            if current.get("version", 0) != expected_version:
                logger.warning(
                    f"Stale write rejected for room {room_code}: "
                    f"expected v{expected_version}, stored v{current.get('version', 0)}"
                )
                raise StaleStateError(
                    f"Game in room {room_code} changed (v{expected_version} -> "
                    f"v{current.get('version', 0)}), reload and retry"
                )
            snapshot["version"] = expected_version + 1

        await self._write(key, snapshot)
        logger.debug(f"Saved game {room_code} v{snapshot['version']}")
        return snapshot

    async def delete_game(self, room_code: str) -> None:
        await self._delete(self.GAME_KEY.format(room_code=room_code))
        logger.debug(f"Deleted game {room_code}")

    # -------------------------------------------------------------------------
    # Room Records
    # -------------------------------------------------------------------------

    async def get_room(self, room_code: str) -> Optional[dict]:
        return await self._read(self.ROOM_KEY.format(room_code=room_code))

    async def save_room(self, room: dict) -> None:
        await self._write(self.ROOM_KEY.format(room_code=room["code"]), room)

    async def delete_room(self, room_code: str) -> None:
        await self._delete(self.ROOM_KEY.format(room_code=room_code))
