"""HTTP side of the server: CORS and the stateless status route."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from chessroom.core.config import Settings
from chessroom.core.messages import STATUS_OK


class StatusResponse(BaseModel):
    status: str
    message: str


def create_http_app(settings: Settings) -> FastAPI:
    app = FastAPI(title="chessroom")

    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if origins == "*" else origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=StatusResponse)
    def status() -> StatusResponse:
        return StatusResponse(status="ok", message=STATUS_OK)

    return app
