"""Socket.IO event handlers: one ConnectionSession per live connection, every event forwarded to the SessionHandler."""

from typing import Any, Awaitable, Callable, Optional

import socketio
import structlog

from chessroom.core.models import ConnectionId, ConnectionSession
from chessroom.core.shared_types import ActionKind
from chessroom.services.session_handler import SessionHandler

logger = structlog.get_logger()

CLIENT_ACTIONS = (ActionKind.JOIN_GAME, ActionKind.MOVE, ActionKind.NEW_GAME)

EventHandler = Callable[..., Awaitable[None]]


class SocketGateway:
    def __init__(self, sio: socketio.AsyncServer, handler: SessionHandler) -> None:
        self.sio = sio
        self.handler = handler
        self.sessions: dict[ConnectionId, ConnectionSession] = {}

    def register(self) -> None:
        """Attach the connection lifecycle and client action handlers to the server."""
        self.sio.on("connect", self.on_connect)
        self.sio.on("disconnect", self.on_disconnect)
        for action in CLIENT_ACTIONS:
            self.sio.on(action.value, self._forward(action))

    async def on_connect(
        self, sid: ConnectionId, environ: dict, auth: Optional[dict] = None
    ) -> None:
        self.sessions[sid] = self.handler.open_session(sid)
        logger.debug("connection opened", connection_id=sid)

    async def on_disconnect(self, sid: ConnectionId, reason: Any = None) -> None:
        session = self.sessions.pop(sid, None)
        if session is None:
            return
        logger.debug("connection closed", connection_id=sid, reason=str(reason) if reason else None)
        await self.handler.handle(session, ActionKind.DISCONNECT)

    async def dispatch(self, sid: ConnectionId, action: ActionKind, payload: Any = None) -> None:
        session = self.sessions.get(sid)
        if session is None:
            logger.warning("event from unknown connection", connection_id=sid, action=action)
            return
        await self.handler.handle(session, action, payload)

    def _forward(self, action: ActionKind) -> EventHandler:
        async def forward(sid: ConnectionId, payload: Any = None) -> None:
            await self.dispatch(sid, action, payload)

        return forward
