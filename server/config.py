"""
Centralized configuration for the Papayoo game server.

Values come from the process environment, then a .env file at the repo
root (loaded with python-dotenv, never overriding real variables), then
the defaults below.

Usage:
    from config import config
    print(config.PORT)
    print(config.game_defaults.target_score)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


_TRUTHY = frozenset({"true", "1", "yes", "on"})
_FALSY = frozenset({"false", "0", "no", "off"})


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Parse a boolean flag; unrecognized values keep the default."""
    val = os.environ.get(key, "").strip().lower()
    if val in _TRUTHY:
        return True
    if val in _FALSY:
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Parse an integer; missing or malformed values keep the default."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class GameDefaults:
    """Default game settings."""
    max_rounds: int = 1
    target_score: int = 250  # infinite mode ends once a player reaches this
    min_players: int = 3
    max_players: int = 8


@dataclass
class ServerConfig:
    """Server configuration."""
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Storage. Empty REDIS_URL selects the in-memory store.
    REDIS_URL: str = ""
    GAME_TTL_HOURS: int = 24

    AI_DEBUG: bool = False

    game_defaults: GameDefaults = field(default_factory=GameDefaults)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            HOST=get_env("HOST", "0.0.0.0"),
            PORT=get_env_int("PORT", 8000),
            DEBUG=get_env_bool("DEBUG", False),
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            REDIS_URL=get_env("REDIS_URL", ""),
            GAME_TTL_HOURS=get_env_int("GAME_TTL_HOURS", 24),
            AI_DEBUG=get_env_bool("AI_DEBUG", False),
            game_defaults=GameDefaults(
                max_rounds=get_env_int("DEFAULT_MAX_ROUNDS", 1),
                target_score=get_env_int("TARGET_SCORE", 250),
                min_players=get_env_int("MIN_PLAYERS", 3),
                max_players=get_env_int("MAX_PLAYERS", 8),
            ),
        )


# Read once at import; tests call reload_config() after patching the env.
config = ServerConfig.from_env()


def reload_config() -> ServerConfig:
    global config
    config = ServerConfig.from_env()
    return config
