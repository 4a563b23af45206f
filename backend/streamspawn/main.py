# backend/streamspawn/main.py
import asyncio
import contextlib
import json
import logging
import random
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import ConfigStore
from .engine import EventParseError, StreamEngine, World, parse_event
from .engine.systems.executor import GameAdapter
from .eventsub import MESSAGE_TYPE_HEADER, NOTIFICATION, REVOCATION, VERIFICATION, translate_notification
from .routes.admin import router as admin_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    - Start the single game loop that applies world commands.
    - Cancel it on shutdown.
    """
    engine: StreamEngine = app.state.stream_engine
    app.state.engine_task = asyncio.create_task(engine.game_loop())

    store: ConfigStore = app.state.config_store
    logger.info("Target mode: %s", store.get_str("target.mode", "streamer"))
    logger.info("Target player: %s", store.get_str("target.streamer_username", "NOT_SET"))
    logger.info("StreamSpawn engine started")

    yield

    engine_task: Optional[asyncio.Task] = getattr(app.state, "engine_task", None)
    if engine_task is not None:
        engine_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await engine_task

    logger.info("StreamSpawn engine stopped")


def get_stream_engine(request: Request) -> StreamEngine:
    """Retrieve the StreamEngine from app.state."""
    engine: Optional[StreamEngine] = getattr(request.app.state, "stream_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Stream engine not initialized",
        )
    return engine


def _error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "message": message},
    )


def create_app(
    store: ConfigStore | None = None,
    adapter: GameAdapter | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    """
    Build the HTTP app around a StreamEngine.

    Args:
        store: Configuration; defaults to config.yml (written from defaults if absent)
        adapter: Game adapter; defaults to an empty in-memory World
        rng: Random source for random target mode
    """
    if store is None:
        store = ConfigStore.from_file()
    if adapter is None:
        adapter = World()

    app = FastAPI(lifespan=lifespan, title="StreamSpawn")
    app.state.config_store = store
    app.state.game_adapter = adapter
    app.state.stream_engine = StreamEngine(store, adapter, rng=rng)
    app.include_router(admin_router)

    # ---------- HTTP Endpoints ----------

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/event")
    @app.post("/twitch-event")
    async def receive_event(request: Request):
        """
        Accept one stream event and queue it for the game loop.

        200 means "queued", not "applied": world effects happen later on the
        game loop and may still be skipped (disabled kind, no target...).
        """
        engine = get_stream_engine(request)
        body = await request.body()

        if store.get_bool("debug.log_events", True):
            logger.info("Received event: %s", body.decode("utf-8", errors="replace"))

        try:
            event = parse_event(json.loads(body))
        except (json.JSONDecodeError, UnicodeDecodeError, EventParseError) as e:
            logger.warning("Error processing event: %s", e)
            return _error(str(e))

        engine.submit(event)
        return {"status": "success", "message": "Event queued"}

    @app.post("/eventsub")
    async def receive_eventsub(request: Request):
        """Twitch EventSub webhook callback. Signatures are not verified here."""
        engine = get_stream_engine(request)
        message_type = request.headers.get(MESSAGE_TYPE_HEADER, "")

        try:
            body = json.loads(await request.body())
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return _error(str(e))
        if not isinstance(body, dict):
            return _error("Request body must be a JSON object")

        if message_type == VERIFICATION:
            logger.info("EventSub webhook verification")
            return PlainTextResponse(str(body.get("challenge", "")))

        if message_type == REVOCATION:
            logger.warning("EventSub subscription revoked: %s", body.get("subscription"))
            return Response(status_code=status.HTTP_204_NO_CONTENT)

        if message_type == NOTIFICATION:
            try:
                translated = translate_notification(body)
                if translated is None:
                    logger.info("Unhandled EventSub type: %s", (body.get("subscription") or {}).get("type"))
                    return Response(status_code=status.HTTP_204_NO_CONTENT)
                event = parse_event(translated)
            except EventParseError as e:
                logger.warning("Error processing EventSub notification: %s", e)
                return _error(str(e))
            engine.submit(event)
            return Response(status_code=status.HTTP_204_NO_CONTENT)

        return Response(status_code=status.HTTP_200_OK)

    return app
