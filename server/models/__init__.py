"""Models package for Papayoo request bodies."""

from .requests import (
    ActionRequest,
    ConfirmPassRequest,
    InitRequest,
    PlayCardRequest,
    RollDieRequest,
    RoomPayload,
    SeatPayload,
    SelectCardsRequest,
    StateRequest,
)

__all__ = [
    "ActionRequest",
    "ConfirmPassRequest",
    "InitRequest",
    "PlayCardRequest",
    "RollDieRequest",
    "RoomPayload",
    "SeatPayload",
    "SelectCardsRequest",
    "StateRequest",
]
