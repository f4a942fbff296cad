"""
Room records for Papayoo tables.

Lobby membership (joining, leaving, readiness) is managed elsewhere; the
game server only needs a room's seat list when a game starts, and puts the
room back to "waiting" when the table returns to the lobby.

A Room contains:
    - A short upper-case code shared by everyone at the table
    - The host seat id
    - The ordered seat list (human or bot)
    - The number of rounds to play, or "infinite"
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from constants import DEFAULT_MAX_ROUNDS


class RoomStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"


def normalize_room_code(code: Optional[str]) -> str:
    """Room codes are compared upper-cased with surrounding whitespace removed."""
    return (code or "").strip().upper()


@dataclass
class RoomSeat:
    """
    A seat in a room (lobby-level representation).

    This is separate from game.Player: RoomSeat is who sits at the table,
    game.Player is what that seat holds during play.
    """

    id: str
    name: str
    is_bot: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "is_bot": self.is_bot}


@dataclass
class Room:
    """
    A table that hosts one Papayoo game at a time.

    Attributes:
        code: Room code (e.g. "ABCD").
        host_id: Seat id of the host.
        seats: Seats in table order.
        max_rounds: Round count or "infinite".
        status: WAITING in the lobby, PLAYING while a game exists.
    """

    code: str
    host_id: Optional[str] = None
    seats: list[RoomSeat] = field(default_factory=list)
    max_rounds: Union[int, str] = DEFAULT_MAX_ROUNDS
    status: RoomStatus = RoomStatus.WAITING

    def get_seat(self, seat_id: str) -> Optional[RoomSeat]:
        for seat in self.seats:
            if seat.id == seat_id:
                return seat
        return None

    def seat_list(self) -> list[dict]:
        """Seat snapshot consumed by Game.create()."""
        return [seat.to_dict() for seat in self.seats]

    def mark_playing(self) -> None:
        self.status = RoomStatus.PLAYING

    def mark_waiting(self) -> None:
        self.status = RoomStatus.WAITING

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "host_id": self.host_id,
            "seats": self.seat_list(),
            "max_rounds": self.max_rounds,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Room":
        return cls(
            code=normalize_room_code(data["code"]),
            host_id=data.get("host_id"),
            seats=[
                RoomSeat(id=s["id"], name=s.get("name") or s["id"], is_bot=bool(s.get("is_bot", False)))
                for s in data.get("seats", [])
            ],
            max_rounds=data.get("max_rounds", DEFAULT_MAX_ROUNDS),
            status=RoomStatus(data.get("status", RoomStatus.WAITING.value)),
        )
