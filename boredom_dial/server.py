"""
FastAPI server for the Boredom Dial service.

This module implements the administrative HTTP endpoints and the WebSocket
endpoint that participants connect to. Rooms, bots and the idle-room sweeper
all live in one process and share one in-memory registry.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .bots import DEFAULT_BOT_PROFILES, BotDriver
from .broadcast import Broadcaster
from .config import Settings, get_settings
from .models import (
    CreateRoomRequest,
    CreateRoomResponse,
    ErrorResponse,
    HealthResponse,
)
from .session import Session
from .stats import compute_stats
from .store import RoomRegistry
from .sweeper import RoomSweeper

logger = logging.getLogger(__name__)


def create_app(registry: RoomRegistry, settings: Settings | None = None) -> FastAPI:
    """
    Create a FastAPI application with the given room registry.

    Args:
        registry: The RoomRegistry instance to use for the application
        settings: Runtime settings, defaults to the environment

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    broadcaster = Broadcaster(registry)
    bot_driver = BotDriver(registry, broadcaster, DEFAULT_BOT_PROFILES)
    sweeper = RoomSweeper(
        registry,
        interval=settings.sweep_interval,
        idle_threshold=settings.room_idle_ttl,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Start background tasks, then close every connection on shutdown."""
        if settings.bots_enabled:
            bot_driver.start()
        sweeper.start()
        logger.info(
            "Global room initialized with %d bots",
            len(registry.global_room.participants),
        )
        yield
        logger.info("Shutting down...")
        await bot_driver.stop()
        await sweeper.stop()
        closing = registry.close_all_connections()
        if closing:
            logger.info("Closing %d live connections", closing)
            # Let each session's pump send its close frame.
            await asyncio.sleep(0)

    app = FastAPI(
        title="Boredom Dial",
        description="A real-time group mood relay over WebSockets",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.state.registry = registry
    app.state.broadcaster = broadcaster
    app.state.bot_driver = bot_driver
    app.state.sweeper = sweeper

    @app.get("/")
    async def root() -> dict[str, str]:
        """Liveness endpoint."""
        return {"status": "ok", "service": "boredom-dial"}

    @app.get("/health")
    async def health() -> JSONResponse:
        """Report room count and the number of live participants in the global room."""
        body = HealthResponse(
            rooms=registry.room_count,
            global_users=len(registry.global_room.live_participants()),
        )
        return JSONResponse(body.model_dump(by_alias=True))

    @app.post("/api/rooms")
    async def create_room(request: Request) -> JSONResponse:
        """
        Create a room with an optional display name.

        The body is optional; an unparseable body gets a 400 and creates nothing.
        """
        raw = await request.body()
        try:
            payload = CreateRoomRequest.model_validate_json(raw or b"{}")
        except ValidationError:
            logger.info("Rejected room creation with invalid body")
            return JSONResponse(
                ErrorResponse(error="Invalid request").model_dump(), status_code=400
            )

        room = registry.create_room(payload.name)
        body = CreateRoomResponse(room_id=room.room_id, room_name=room.name)
        return JSONResponse(body.model_dump(by_alias=True))

    @app.get("/api/rooms/{room_id}")
    async def get_room_stats(room_id: str) -> JSONResponse:
        """Return the current stats of a room, or 404 if it does not exist."""
        room = registry.get_room(room_id)
        if room is None:
            return JSONResponse(
                ErrorResponse(error="Room not found").model_dump(), status_code=404
            )
        return JSONResponse(compute_stats(room).model_dump(by_alias=True))

    async def room_socket(websocket: WebSocket) -> None:
        """
        Join a room and relay messages until the client goes away.

        Query parameters:
        - room: Room code to join; unknown non-codes land in the global room
        - name: Optional display name
        """
        await websocket.accept()
        session = Session(
            registry,
            broadcaster,
            requested_room=websocket.query_params.get("room"),
            name=websocket.query_params.get("name"),
            queue_size=settings.send_queue_size,
        )
        session.join()
        pump = asyncio.create_task(session.pump(websocket))
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                session.handle_message(raw)
        except Exception:
            logger.warning(
                "WebSocket error for %s", session.participant_id, exc_info=True
            )
        finally:
            session.close()
            pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pump

    app.add_api_websocket_route("/", room_socket)
    app.add_api_websocket_route("/ws", room_socket)

    return app


# Default app instance for `uvicorn boredom_dial.server:app`
app = create_app(RoomRegistry(DEFAULT_BOT_PROFILES))


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    from .logging_config import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
