"""Assemble the server: one room registry, one session handler, Socket.IO mounted in front of FastAPI."""

from typing import Optional

import socketio
import structlog
import uvicorn

from chessroom.api.app import create_http_app
from chessroom.api.socket_events import SocketGateway
from chessroom.core.config import Settings, get_settings
from chessroom.core.logging import configure_logging
from chessroom.registry.room_registry import RoomRegistry
from chessroom.services.broadcaster import Broadcaster, SocketIOTransport
from chessroom.services.session_handler import SessionHandler

logger = structlog.get_logger()


def create_app(settings: Optional[Settings] = None) -> socketio.ASGIApp:
    settings = settings or get_settings()

    sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=settings.cors_origins)
    registry = RoomRegistry()
    handler = SessionHandler(registry, Broadcaster(SocketIOTransport(sio)))
    SocketGateway(sio, handler).register()

    return socketio.ASGIApp(sio, other_asgi_app=create_http_app(settings))


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)
    logger.info("chess server listening", host=settings.host, port=settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
