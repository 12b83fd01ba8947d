"""
Type definitions used across layers
"""

from enum import StrEnum


class Seat(StrEnum):
    """One of the two seats of a room. FIRST plays white, SECOND plays black."""

    FIRST = "first"
    SECOND = "second"

    @property
    def opponent(self) -> "Seat":
        return Seat.SECOND if self is Seat.FIRST else Seat.FIRST


class PieceKind(StrEnum):
    """Pieces a pawn may promote to, by their lower-case FEN letter."""

    QUEEN = "q"
    ROOK = "r"
    BISHOP = "b"
    KNIGHT = "n"


class ResultStatus(StrEnum):
    ONGOING = "ongoing"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


class ActionKind(StrEnum):
    """Inbound client actions, by their event name on the wire."""

    JOIN_GAME = "joinGame"
    MOVE = "move"
    NEW_GAME = "newGame"
    DISCONNECT = "disconnect"
