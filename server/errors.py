"""
Typed failures for game actions.

Every rejected action raises one of these before any state is touched, so
a caller can map the failure straight to a response. Only
StoreUnavailableError describes a transient fault worth retrying; the rest
are logical errors in the request itself.
"""

# Error codes carried on the wire
NOT_FOUND = "NOT_FOUND"
PHASE_MISMATCH = "PHASE_MISMATCH"
TURN_VIOLATION = "TURN_VIOLATION"
ILLEGAL_PLAY = "ILLEGAL_PLAY"
VALIDATION_ERROR = "VALIDATION_ERROR"
STALE_STATE = "STALE_STATE"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class GameError(Exception):
    """Base exception for game-related errors."""

    code = VALIDATION_ERROR
    status_code = 400
    retryable = False

    def __init__(self, message: str, code: str = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict:
        """Failure payload sent back to the caller."""
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }


class NotFoundError(GameError):
    """Unknown room, game or player."""
    code = NOT_FOUND
    status_code = 404


class PhaseMismatchError(GameError):
    """Action is not valid in the current phase."""
    code = PHASE_MISMATCH
    status_code = 409


class TurnViolationError(GameError):
    """Acting seat is not the current player."""
    code = TURN_VIOLATION
    status_code = 403


class IllegalPlayError(GameError):
    """Card is not in hand, or breaks suit-following."""
    code = ILLEGAL_PLAY
    status_code = 422


class GameValidationError(GameError):
    """Malformed or missing fields, or a selection of the wrong size."""
    code = VALIDATION_ERROR
    status_code = 400


class StaleStateError(GameError):
    """The snapshot changed between read and write (optimistic concurrency)."""
    code = STALE_STATE
    status_code = 409


class StoreUnavailableError(GameError):
    """The backing store could not be reached. Safe to retry."""
    code = STORE_UNAVAILABLE
    status_code = 503
    retryable = True
