"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from dataclasses import dataclass
from typing import Any, Generator, Optional

import pytest

from chessroom.registry.room_registry import RoomRegistry
from chessroom.services.broadcaster import Broadcaster
from chessroom.services.session_handler import SessionHandler

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass
class SentEvent:
    event: str
    data: dict[str, Any]
    to: str


class RecordingTransport:
    """Mock the Socket.IO server: remember every emitted event instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[SentEvent] = []

    async def emit(self, event: str, data: dict[str, Any], *, to: str) -> None:
        self.sent.append(SentEvent(event=event, data=data, to=to))

    def received(self, connection_id: str, event: Optional[str] = None) -> list[SentEvent]:
        """Events sent to one connection (optionally only those with the given name)."""
        return [
            sent
            for sent in self.sent
            if sent.to == connection_id and (event is None or sent.event == event)
        ]

    def last(self, connection_id: str, event: str) -> dict[str, Any]:
        return self.received(connection_id, event)[-1].data

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def transport() -> Generator[RecordingTransport, None, None]:
    """Ensures to clear the recorded events between tests"""
    recorder = RecordingTransport()
    try:
        yield recorder
    finally:
        recorder.clear()


@pytest.fixture
def registry() -> RoomRegistry:
    return RoomRegistry()


@pytest.fixture
def broadcaster(transport: RecordingTransport) -> Broadcaster:
    return Broadcaster(transport)


@pytest.fixture
def handler(registry: RoomRegistry, broadcaster: Broadcaster) -> SessionHandler:
    return SessionHandler(registry, broadcaster)
