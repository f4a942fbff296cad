"""Stores package for Papayoo game snapshots."""

from .kv import KeyValueStore, MemoryStore, RedisStore
from .provider import StoreProvider
from .state_cache import StateCache

__all__ = [
    # Backends
    "KeyValueStore",
    "MemoryStore",
    "RedisStore",
    # Connection
    "StoreProvider",
    # Snapshots
    "StateCache",
]
