"""FastAPI application factory"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from dartqueue import __version__
from dartqueue.api.control import ControlChannelHandler
from dartqueue.api.hub import BroadcastHub
from dartqueue.api.schemas import build_snapshot
from dartqueue.components.announcements import AnnouncementDispatcher
from dartqueue.components.queue_commands import CommandWords, QueueCommands
from dartqueue.core.config import BotSettings, get_settings
from dartqueue.core.engine import Engine
from dartqueue.core.events import ClientConnected, OperatorMessage, OperatorRequest
from dartqueue.core.session import ChatSession, TransportFactory
from dartqueue.core.state import StateModel, now_ms
from dartqueue.shared.repositories import Repositories

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


@dataclass
class Runtime:
    """Everything one running instance owns, wired together."""

    settings: BotSettings
    repos: Repositories
    state: StateModel
    engine: Engine
    hub: BroadcastHub
    session: ChatSession
    commands: QueueCommands
    control: ControlChannelHandler
    dispatcher: AnnouncementDispatcher
    started_at: float = field(default_factory=time.time)


def build_runtime(
    settings: BotSettings,
    *,
    transport_factory: TransportFactory | None = None,
    clock: Callable[[], int] = now_ms,
) -> Runtime:
    """Load all documents from the data directory and wire the components."""
    if transport_factory is None:
        from dartqueue.core.bot import twitch_transport_factory

        transport_factory = twitch_transport_factory(settings)

    repos = Repositories.for_directory(settings.data_dir)
    config = repos.config.load()
    state = StateModel.load(repos, clock())
    logger.info(
        f"Loaded state from {settings.data_dir}: {len(state.queue)} queued, "
        f"{len(state.stats)} players, {len(state.announcements)} announcements, "
        f"{len(state.commands)} custom commands (channel: {config.channel or '-'})"
    )

    engine = Engine()
    session: ChatSession | None = None

    def snapshot() -> dict:
        return build_snapshot(
            state,
            repos.config.load(),
            connected=session is not None and session.connected,
            now_ms=clock(),
        )

    hub = BroadcastHub(snapshot)
    session = ChatSession(
        config_repo=repos.config,
        hub=hub,
        transport_factory=transport_factory,
        submit=engine.submit,
    )
    commands = QueueCommands(
        state=state,
        repos=repos,
        hub=hub,
        chat=session,
        words=CommandWords.from_settings(settings),
    )
    control = ControlChannelHandler(
        state=state, repos=repos, hub=hub, session=session, clock=clock
    )
    dispatcher = AnnouncementDispatcher(
        state=state, repos=repos, hub=hub, chat=session, clock=clock
    )
    engine.bind(
        commands=commands, control=control, dispatcher=dispatcher, session=session, hub=hub
    )

    return Runtime(
        settings=settings,
        repos=repos,
        state=state,
        engine=engine,
        hub=hub,
        session=session,
        commands=commands,
        control=control,
        dispatcher=dispatcher,
    )


class SetupRequest(BaseModel):
    channel: str = ""


def create_app(settings: BotSettings | None = None, *, runtime: Runtime | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    if runtime is None:
        runtime = build_runtime(settings or get_settings())
    settings = runtime.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Handle startup and shutdown"""
        runtime.started_at = time.time()
        logger.info("Starting dartqueue server")

        engine_task = asyncio.create_task(runtime.engine.run())
        poll_task = asyncio.create_task(
            runtime.dispatcher.poll_loop(
                runtime.engine.submit, settings.announcement_poll_seconds
            )
        )
        runtime.session.connect()

        yield

        logger.info("Shutting down dartqueue server")
        for task in (poll_task, engine_task):
            task.cancel()
        for task in (poll_task, engine_task):
            try:
                await task
            except asyncio.CancelledError:
                pass
        # Persist whatever was already queued before the session goes away
        await runtime.engine.process_pending()
        try:
            await runtime.session.shutdown()
        except Exception as e:
            logger.exception(f"Error during shutdown: {e}")

    app = FastAPI(
        title="dartqueue",
        description="Twitch chat queue and darts stats bot",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.runtime = runtime

    # Display and admin pages are never served from a cache
    @app.middleware("http")
    async def no_store(request: Request, call_next):
        response = await call_next(request)
        if request.method == "GET":
            response.headers.update(NO_STORE_HEADERS)
        return response

    # Liveness check
    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "uptime_seconds": int(time.time() - runtime.started_at),
        }

    @app.get("/status")
    async def status():
        config = runtime.repos.config.load()
        return {
            "service": "dartqueue",
            "version": __version__,
            "uptime_seconds": int(time.time() - runtime.started_at),
            "bot_state": runtime.session.state.value,
            "channel": config.channel,
            "setup_completed": config.setup_completed,
            "display_clients": len(runtime.hub),
            "queue_length": len(runtime.state.queue),
        }

    async def display_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        runtime.engine.submit(ClientConnected(websocket))
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                # Text and binary frames both carry JSON
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes")
                if raw is not None:
                    runtime.engine.submit(OperatorMessage(raw))
        except WebSocketDisconnect:
            pass
        finally:
            runtime.hub.discard(websocket)

    app.add_api_websocket_route("/", display_socket)
    app.add_api_websocket_route("/ws", display_socket)

    @app.post("/setup/save")
    async def setup_save(request: SetupRequest):
        channel = request.channel.strip().lower()
        if not channel:
            raise HTTPException(status_code=400, detail="Channel is required")
        runtime.engine.submit(OperatorRequest("settings_save", {"channel": channel}))
        logger.info(f"Setup saved via HTTP, channel: {channel}")
        return {"ok": True}

    overlay_dir = settings.overlay_dir
    if overlay_dir is not None and overlay_dir.is_dir():

        @app.get("/admin")
        async def admin_page():
            return FileResponse(overlay_dir / "admin.html")

        @app.get("/setup.html")
        async def setup_page():
            return FileResponse(overlay_dir / "setup.html")

        app.mount("/", StaticFiles(directory=str(overlay_dir), html=True), name="overlay")
        logger.info(f"Serving display pages from {overlay_dir}")
    elif overlay_dir is not None:
        logger.warning(f"Overlay directory not found: {overlay_dir}")

    logger.info("FastAPI application configured")

    return app
