"""Requests (client -> server) and event (server -> client) models"""

from typing import Any, ClassVar, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from chessroom.core.exceptions import InvalidRequestError
from chessroom.core.messages import INVALID_REQUEST, INVALID_ROOM_ID
from chessroom.core.models import LastMove
from chessroom.core.shared_types import ResultStatus, Seat

ROOM_ID_ALIAS = "roomId"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- REQUEST MODELS ---
class RoomRequest(WireModel):
    room_id: str = Field(alias=ROOM_ID_ALIAS)

    @field_validator("room_id", mode="before")
    @classmethod
    def validate_room_id(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise InvalidRequestError(INVALID_ROOM_ID)
        return value

    @classmethod
    def parse(cls, payload: Any) -> Self:
        """Validate a raw event payload. Any problem is reported as an InvalidRequestError."""
        if not isinstance(payload, dict):
            raise InvalidRequestError(INVALID_ROOM_ID)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            locations = {error["loc"][0] for error in exc.errors() if error["loc"]}
            if ROOM_ID_ALIAS in locations or "room_id" in locations:
                raise InvalidRequestError(INVALID_ROOM_ID) from exc
            raise InvalidRequestError(INVALID_REQUEST) from exc


class JoinGameRequest(RoomRequest):
    pass


class NewGameRequest(RoomRequest):
    pass


class MoveRequest(RoomRequest):
    """Parsed once room and turn are checked. Squares are not checked here: a malformed square is an illegal move."""

    from_square: str = Field(default="", alias="from")
    to_square: str = Field(default="", alias="to")
    promotion: Optional[str] = None


# --- EVENT MODELS ---
class ServerEvent(WireModel):
    event: ClassVar[str]

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class AssignedColorEvent(ServerEvent):
    event: ClassVar[str] = "assignedColor"

    room_id: str = Field(alias=ROOM_ID_ALIAS)
    color: Seat


class InvalidMoveEvent(ServerEvent):
    event: ClassVar[str] = "invalidMove"

    reason: str


class RoomFullEvent(ServerEvent):
    event: ClassVar[str] = "roomFull"

    room_id: str = Field(alias=ROOM_ID_ALIAS)
    message: str


class OpponentDisconnectedEvent(ServerEvent):
    event: ClassVar[str] = "opponentDisconnected"

    message: str


class CapturedBy(WireModel):
    first: list[str]
    second: list[str]


class LastMovePayload(WireModel):
    from_square: str = Field(alias="from")
    to_square: str = Field(alias="to")
    notation: str
    flags: str

    @classmethod
    def from_last_move(cls, last_move: LastMove) -> Self:
        return cls(
            from_square=last_move.from_square,
            to_square=last_move.to_square,
            notation=last_move.notation,
            flags=last_move.flags,
        )


class GameResult(WireModel):
    status: ResultStatus
    winner: Optional[Seat] = None


class GameStateUpdate(ServerEvent):
    event: ClassVar[str] = "gameStateUpdate"

    fen: str
    turn: Seat
    in_check: bool
    in_checkmate: bool
    in_stalemate: bool
    in_draw: bool
    captured_by: CapturedBy = Field(alias="capturedBy")
    last_move: Optional[LastMovePayload] = Field(default=None, alias="lastMove")
    result: GameResult
