"""
Orchestration of client actions: from the socket gateway to the room registry, rules engine and broadcaster.

Locking: every action of one connection runs under that connection's lock, and every change to a room runs under
the room's lock (connection lock first, room lock second). Unrelated rooms never wait on each other.
"""

from typing import Any

import structlog

from chessroom.api.models import (
    AssignedColorEvent,
    InvalidMoveEvent,
    JoinGameRequest,
    MoveRequest,
    NewGameRequest,
    RoomFullEvent,
    RoomRequest,
)
from chessroom.core.exceptions import (
    GameError,
    IllegalMoveError,
    InvalidRequestError,
    NotSeatedError,
    NotYourTurnError,
    RoomFullError,
    RoomNotFoundError,
)
from chessroom.core.messages import (
    ILLEGAL_MOVE,
    NOT_YOUR_TURN,
    OPPONENT_DISCONNECTED,
    ROOM_FULL,
    ROOM_NOT_FOUND,
)
from chessroom.core.models import ConnectionId, ConnectionSession, LastMove, RoomState
from chessroom.core.shared_types import ActionKind, Seat
from chessroom.registry.room_registry import RoomRegistry
from chessroom.services.broadcaster import Broadcaster

logger = structlog.get_logger()


class SessionHandler:
    """Applies join / move / new game / disconnect actions to the rooms of the registry."""

    def __init__(self, registry: RoomRegistry, broadcaster: Broadcaster) -> None:
        self.registry = registry
        self.broadcaster = broadcaster

    def open_session(self, connection_id: ConnectionId) -> ConnectionSession:
        """Called when a connection opens. The session is not bound to any room yet."""
        return ConnectionSession(connection_id=connection_id)

    # --- Single entry point per connection ---
    async def handle(
        self, session: ConnectionSession, action: ActionKind | str, payload: Any = None
    ) -> None:
        """Run one action to completion. Rejections are reported to the requesting connection only."""
        action = ActionKind(action)
        async with session.lock:
            if session.closed:
                logger.debug("action dropped for closed connection", action=action)
                return
            try:
                if action == ActionKind.JOIN_GAME:
                    await self.join_game(session, payload)
                elif action == ActionKind.MOVE:
                    await self.make_move(session, payload)
                elif action == ActionKind.NEW_GAME:
                    await self.new_game(session, payload)
                else:
                    await self.disconnect(session)
            except RoomFullError as exc:
                logger.info("room full", room_id=exc.room_id, connection_id=session.connection_id)
                await self.broadcaster.send(
                    session.connection_id, RoomFullEvent(room_id=exc.room_id, message=exc.message)
                )
            except NotSeatedError:
                logger.debug("ignored action from non-seated connection", action=action)
            except GameError as exc:
                logger.info(
                    "action rejected",
                    action=action,
                    connection_id=session.connection_id,
                    reason=str(exc),
                )
                await self.broadcaster.send(session.connection_id, InvalidMoveEvent(reason=str(exc)))

    # --- Actions ---
    async def join_game(self, session: ConnectionSession, payload: Any) -> None:
        """Seat the connection in the requested room (created if unknown)."""
        request = JoinGameRequest.parse(payload)

        if session.room_id == request.room_id and session.seat is not None:
            # Already seated here: repeat the assignment, never take the second seat too
            await self._send_assignment(session.connection_id, request.room_id, session.seat)
            return
        # The previous seat is only given up once the new one is taken: a full room leaves it untouched
        previous_room_id = session.room_id

        while True:
            room = self.registry.get_or_create(request.room_id)
            async with room.lock:
                # The room may have been reaped while waiting for the lock
                if not self.registry.is_registered(room):
                    continue
                await self._take_seat(session, room)
                break

        if previous_room_id is not None:
            await self._release_seat(session.connection_id, previous_room_id)

    async def make_move(self, session: ConnectionSession, payload: Any) -> None:
        """Move attempt by the player whose turn it is. Accepted moves are broadcast to the room."""
        # Room and turn are checked before the move fields are even looked at
        room_id = RoomRequest.parse(payload).room_id

        room = self.registry.get(room_id)
        if room is None:
            raise RoomNotFoundError(ROOM_NOT_FOUND)

        async with room.lock:
            if not self.registry.is_registered(room):
                raise RoomNotFoundError(ROOM_NOT_FOUND)

            # Only the occupant of the seat to move may play (spectators and the opponent are refused)
            turn = room.engine.side_to_move()
            if room.seats[turn] != session.connection_id:
                raise NotYourTurnError(NOT_YOUR_TURN)

            try:
                request = MoveRequest.parse(payload)
            except InvalidRequestError as exc:
                raise IllegalMoveError(ILLEGAL_MOVE) from exc

            result = room.engine.attempt_move(
                request.from_square, request.to_square, request.promotion
            )
            if result is None:
                raise IllegalMoveError(ILLEGAL_MOVE)

            if result.captured:
                room.captured_by[result.color].append(result.captured)

            logger.info(
                "move accepted",
                room_id=room.room_id,
                seat=result.color,
                notation=result.notation,
            )
            await self.broadcaster.broadcast_state(room, LastMove.from_result(result))

    async def new_game(self, session: ConnectionSession, payload: Any) -> None:
        """Reset the position of a room. Requests from outside the room are ignored."""
        try:
            request = NewGameRequest.parse(payload)
        except InvalidRequestError:
            logger.debug("ignored new game request without room ID")
            return

        room = self.registry.get(request.room_id)
        if room is None:
            logger.debug("ignored new game request for unknown room", room_id=request.room_id)
            return

        async with room.lock:
            if not self.registry.is_registered(room) or room.seat_of(session.connection_id) is None:
                raise NotSeatedError(request.room_id)

            room.engine = self.registry.engine_factory()
            room.reset_captures()
            logger.info("new game", room_id=room.room_id)
            await self.broadcaster.broadcast_state(room)

    async def disconnect(self, session: ConnectionSession) -> None:
        """Connection lost: free its seat, tell the opponent, drop the room once nobody is left."""
        session.closed = True
        await self._vacate(session)

    # --- Internal helpers ---
    async def _take_seat(self, session: ConnectionSession, room: RoomState) -> None:
        """Bind the connection to the first free seat. Caller holds the room lock."""
        seat = room.first_free_seat()
        if seat is None:
            raise RoomFullError(room.room_id, ROOM_FULL)

        room.seats[seat] = session.connection_id
        session.bind(room.room_id, seat)
        logger.info(
            "seat assigned",
            room_id=room.room_id,
            seat=seat,
            connection_id=session.connection_id,
        )
        await self._send_assignment(session.connection_id, room.room_id, seat)

        # A lone first player gets no snapshot until the opponent arrives
        if room.is_full:
            await self.broadcaster.broadcast_state(room)

    async def _send_assignment(
        self, connection_id: ConnectionId, room_id: str, seat: Seat
    ) -> None:
        await self.broadcaster.send(connection_id, AssignedColorEvent(room_id=room_id, color=seat))

    async def _vacate(self, session: ConnectionSession) -> None:
        """Free the seat bound to the session (if any) and reap the room when it is empty."""
        room_id = session.room_id
        if room_id is None:
            return
        session.unbind()
        await self._release_seat(session.connection_id, room_id)

    async def _release_seat(self, connection_id: ConnectionId, room_id: str) -> None:
        room = self.registry.get(room_id)
        if room is None:
            return

        async with room.lock:
            seat = room.seat_of(connection_id)
            if seat is not None:
                room.seats[seat] = None
                logger.info(
                    "seat vacated",
                    room_id=room_id,
                    seat=seat,
                    connection_id=connection_id,
                )
            await self.broadcaster.notify_opponents(
                room, OPPONENT_DISCONNECTED, exclude=connection_id
            )
            if self.registry.is_registered(room):
                self.registry.remove_if_empty(room_id)
