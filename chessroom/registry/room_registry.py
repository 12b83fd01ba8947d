"""In-memory registry of live rooms (single process, nothing survives a restart)."""

from typing import Callable, Optional

import structlog

from chessroom.chess.engine import RulesEngine, new_engine
from chessroom.core.models import RoomId, RoomState

logger = structlog.get_logger()


class RoomRegistry:
    """Owns every RoomState, keyed by room ID. Rooms are created on first join and removed once empty."""

    def __init__(self, engine_factory: Callable[[], RulesEngine] = new_engine) -> None:
        self._rooms: dict[RoomId, RoomState] = {}
        self.engine_factory = engine_factory

    def get(self, room_id: RoomId) -> Optional[RoomState]:
        """Get room by ID, if it exists."""
        return self._rooms.get(room_id)

    def get_or_create(self, room_id: RoomId) -> RoomState:
        """Return the existing room, or store a fresh one with two empty seats and a new position."""
        room = self._rooms.get(room_id)
        if room is None:
            room = RoomState(room_id=room_id, engine=self.engine_factory())
            self._rooms[room_id] = room
            logger.info("room created", room_id=room_id)
        return room

    def remove_if_empty(self, room_id: RoomId) -> bool:
        """Delete the room if both seats are empty. Returns whether it was removed."""
        room = self._rooms.get(room_id)
        if room is None or not room.is_empty:
            return False
        del self._rooms[room_id]
        logger.info("room removed", room_id=room_id)
        return True

    def is_registered(self, room: RoomState) -> bool:
        """True if this exact RoomState is still the one stored under its ID."""
        return self._rooms.get(room.room_id) is room

    def room_ids(self) -> list[RoomId]:
        return list(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
