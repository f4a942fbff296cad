"""
Request bodies for game actions.

Every action names the room and the acting seat. Room codes are normalized
here so handlers never see lower-case or padded codes.
"""

from typing import Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

from constants import DEFAULT_MAX_ROUNDS, INFINITE_ROUNDS, MAX_PLAYERS, MIN_PLAYERS
from room import normalize_room_code


class ActionRequest(BaseModel):
    """Fields shared by every action."""
    room_code: str = Field(min_length=1)
    player_id: str = Field(min_length=1)

    @field_validator("room_code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        code = normalize_room_code(value)
        if not code:
            raise ValueError("room_code must not be blank")
        return code


class SeatPayload(BaseModel):
    """One seat of a room."""
    id: str = Field(min_length=1)
    name: str = ""
    is_bot: bool = False


class RoomPayload(BaseModel):
    """Room record sent with init."""
    code: str = Field(min_length=1)
    host_id: Optional[str] = None
    seats: list[SeatPayload] = Field(
        min_length=MIN_PLAYERS,
        max_length=MAX_PLAYERS,
        validation_alias=AliasChoices("seats", "players"),
    )
    max_rounds: Union[int, Literal["infinite"]] = DEFAULT_MAX_ROUNDS
    target_score: Optional[int] = Field(default=None, ge=1)

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return normalize_room_code(value)

    @field_validator("max_rounds")
    @classmethod
    def _check_rounds(cls, value):
        if value != INFINITE_ROUNDS and value < 1:
            raise ValueError("max_rounds must be at least 1")
        return value


class InitRequest(BaseModel):
    """Start a game from a room's seats."""
    player_id: str = Field(min_length=1)
    room: RoomPayload


class StateRequest(ActionRequest):
    """Read the game as one seat sees it."""


class SelectCardsRequest(ActionRequest):
    """Stage cards to pass."""
    card_ids: list[int]


class ConfirmPassRequest(ActionRequest):
    """Confirm the pass, optionally staging card_ids first."""
    card_ids: Optional[list[int]] = None


class RollDieRequest(ActionRequest):
    """Roll the die, or force a classic suit."""
    suit: Optional[str] = None


class PlayCardRequest(ActionRequest):
    """Play one card from hand."""
    card_id: int
