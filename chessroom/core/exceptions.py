"""
Custom exceptions raised while handling client actions.

Every one of them is local to a single action: the session handler catches GameError at its dispatch
entry point and reports it to the connection that sent the action only.
"""


class GameError(Exception):
    """Top-level exception for anything a client action can be rejected for."""


class InvalidRequestError(GameError):
    """Malformed payload, e.g. a missing or empty room ID."""


class RoomFullError(GameError):
    """Both seats of the requested room are taken."""

    def __init__(self, room_id: str, message: str) -> None:
        super().__init__(message)
        self.room_id = room_id
        self.message = message


class NotYourTurnError(GameError):
    """The requesting connection does not occupy the seat whose turn it is."""


class NotSeatedError(GameError):
    """The requesting connection does not occupy a seat in the room."""


class IllegalMoveError(GameError):
    """The rules engine rejected the move attempt."""


class RepositoryError(GameError):
    """Problems looking up state in the room registry."""


class RoomNotFoundError(RepositoryError):
    """No room is registered under the requested ID."""
