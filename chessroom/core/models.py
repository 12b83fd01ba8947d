"""
Boundary layer data model(s).

These objects are shared by the rules engine adapter, the room registry, the session handler and the socket gateway.
(Decouples the python-chess objects and the wire format from the information passed across layers)
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from chessroom.core.shared_types import Seat

if TYPE_CHECKING:
    from chessroom.chess.engine import RulesEngine

ConnectionId = str
RoomId = str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MoveResult:
    """What the rules engine reports back for an accepted move."""

    color: Seat
    from_square: str
    to_square: str
    notation: str
    flags: str
    captured: Optional[str] = None


@dataclass(frozen=True)
class LastMove:
    """Descriptor of the most recent move, as included in a state snapshot."""

    from_square: str
    to_square: str
    notation: str
    flags: str

    @classmethod
    def from_result(cls, result: MoveResult) -> "LastMove":
        return cls(
            from_square=result.from_square,
            to_square=result.to_square,
            notation=result.notation,
            flags=result.flags,
        )


def _empty_seats() -> dict[Seat, Optional[ConnectionId]]:
    return {Seat.FIRST: None, Seat.SECOND: None}


def _empty_captures() -> dict[Seat, list[str]]:
    return {Seat.FIRST: [], Seat.SECOND: []}


@dataclass
class RoomState:
    """One game session: who sits where, what has been captured, and the position itself."""

    room_id: RoomId
    engine: "RulesEngine"
    seats: dict[Seat, Optional[ConnectionId]] = field(default_factory=_empty_seats)
    captured_by: dict[Seat, list[str]] = field(default_factory=_empty_captures)
    created_at: datetime = field(default_factory=utc_now)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def is_full(self) -> bool:
        return all(self.seats.values())

    @property
    def is_empty(self) -> bool:
        return not any(self.seats.values())

    def seat_of(self, connection_id: ConnectionId) -> Optional[Seat]:
        """Seat occupied by the connection, if any."""
        for seat, occupant in self.seats.items():
            if occupant == connection_id:
                return seat
        return None

    def first_free_seat(self) -> Optional[Seat]:
        """First seat is preferred over the second when both are empty."""
        return next((seat for seat in Seat if self.seats[seat] is None), None)

    def occupants(self) -> list[ConnectionId]:
        return [occupant for occupant in self.seats.values() if occupant]

    def reset_captures(self) -> None:
        self.captured_by = _empty_captures()


@dataclass
class ConnectionSession:
    """Per-connection binding kept by the socket gateway for as long as the connection lives."""

    connection_id: ConnectionId
    room_id: Optional[RoomId] = None
    seat: Optional[Seat] = None
    closed: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def bind(self, room_id: RoomId, seat: Seat) -> None:
        self.room_id = room_id
        self.seat = seat

    def unbind(self) -> None:
        self.room_id = None
        self.seat = None
