"""Builds the state snapshot of a room and fans events out to the connections seated in it."""

from typing import Any, Optional, Protocol

import socketio
import structlog

from chessroom.api.models import (
    CapturedBy,
    GameResult,
    GameStateUpdate,
    LastMovePayload,
    OpponentDisconnectedEvent,
    ServerEvent,
)
from chessroom.core.models import ConnectionId, LastMove, RoomState
from chessroom.core.shared_types import ResultStatus, Seat

logger = structlog.get_logger()


class Transport(Protocol):
    """Outbound half of the real-time channel."""

    async def emit(self, event: str, data: dict[str, Any], *, to: ConnectionId) -> None:
        """Send one event to one connection."""
        ...


class SocketIOTransport:
    """Transport backed by a python-socketio server. Every connection is addressed by its sid."""

    def __init__(self, sio: socketio.AsyncServer) -> None:
        self.sio = sio

    async def emit(self, event: str, data: dict[str, Any], *, to: ConnectionId) -> None:
        await self.sio.emit(event, data, to=to)


def game_result(room: RoomState) -> GameResult:
    """Checkmate takes precedence over stalemate, stalemate over draw."""
    engine = room.engine
    if engine.is_in_checkmate():
        return GameResult(status=ResultStatus.CHECKMATE, winner=engine.side_to_move().opponent)
    if engine.is_in_stalemate():
        return GameResult(status=ResultStatus.STALEMATE)
    if engine.is_in_draw():
        return GameResult(status=ResultStatus.DRAW)
    return GameResult(status=ResultStatus.ONGOING)


def build_snapshot(room: RoomState, last_move: Optional[LastMove] = None) -> GameStateUpdate:
    """Full state of the room as seen by both players."""
    engine = room.engine
    return GameStateUpdate(
        fen=engine.current_encoding(),
        turn=engine.side_to_move(),
        in_check=engine.is_in_check(),
        in_checkmate=engine.is_in_checkmate(),
        in_stalemate=engine.is_in_stalemate(),
        in_draw=engine.is_in_draw(),
        captured_by=CapturedBy(
            first=list(room.captured_by[Seat.FIRST]),
            second=list(room.captured_by[Seat.SECOND]),
        ),
        last_move=LastMovePayload.from_last_move(last_move) if last_move else None,
        result=game_result(room),
    )


class Broadcaster:
    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    async def send(self, connection_id: ConnectionId, event: ServerEvent) -> None:
        """Send an event to a single connection."""
        await self.transport.emit(event.event, event.to_payload(), to=connection_id)

    async def broadcast(
        self, room: RoomState, event: ServerEvent, exclude: Optional[ConnectionId] = None
    ) -> None:
        """Send an event to every connection seated in the room (except `exclude`)."""
        payload = event.to_payload()
        for connection_id in room.occupants():
            if connection_id == exclude:
                continue
            await self.transport.emit(event.event, payload, to=connection_id)

    async def broadcast_state(
        self, room: RoomState, last_move: Optional[LastMove] = None
    ) -> GameStateUpdate:
        snapshot = build_snapshot(room, last_move)
        await self.broadcast(room, snapshot)
        logger.debug(
            "state broadcast",
            room_id=room.room_id,
            turn=snapshot.turn,
            status=snapshot.result.status,
        )
        return snapshot

    async def notify_opponents(
        self, room: RoomState, message: str, exclude: Optional[ConnectionId] = None
    ) -> None:
        await self.broadcast(room, OpponentDisconnectedEvent(message=message), exclude=exclude)
