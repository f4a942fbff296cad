"""
Rule constants for Papayoo.

This module is the single source of truth for deck composition and point
values. Player-count limits and the infinite-mode target come from config.py
so they can be tuned through environment variables.

Papayoo Scoring:
    - Payoo (the fifth suit, 1-20): face value
    - The 7 of the suit rolled on the die (the "Papayoo"): 40 points
    - Every other card: 0 points
"""

from config import config


# =============================================================================
# Deck Composition
# =============================================================================

CLASSIC_MAX_VALUE = 10
PAYOO_MAX_VALUE = 20
DECK_SIZE = 4 * CLASSIC_MAX_VALUE + PAYOO_MAX_VALUE

# =============================================================================
# Scoring
# =============================================================================

PAPAYOO_FACE_VALUE = 7
PAPAYOO_POINTS = 40

# =============================================================================
# Passing
# =============================================================================

# Cards each seat passes, keyed by player count
CARDS_TO_PASS: dict[int, int] = {
    3: 5,
    4: 5,
    5: 4,
    6: 3,
    7: 3,
    8: 3,
}

# =============================================================================
# Game Constants
# =============================================================================

# Clamped to the player counts the passing table covers
MIN_PLAYERS = max(min(CARDS_TO_PASS), config.game_defaults.min_players)
MAX_PLAYERS = min(max(CARDS_TO_PASS), config.game_defaults.max_players)
DEFAULT_MAX_ROUNDS = config.game_defaults.max_rounds
DEFAULT_TARGET_SCORE = config.game_defaults.target_score
INFINITE_ROUNDS = "infinite"

GAME_TTL_SECONDS = config.GAME_TTL_HOURS * 3600
