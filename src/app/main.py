"""LAWNLINE - lane-defense simulation server.

Main FastAPI application.
"""

import asyncio
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers import game_router, ws_router
from app.routers.ws import SnapshotThrottle, start_game_event_bridge
from lawnline import __version__
from lawnline.comms.event_bus import EventBus
from lawnline.simulation import Game, LoopDriver


def _configure_logging() -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.debug else settings.log_level.upper())


def _create_game() -> Game:
    """Create the Game with the configured player defaults."""
    game = Game(EventBus(), seed=settings.random_seed, auto_collect=settings.auto_collect)
    if not game.set_speed(settings.speed_multiplier):
        logger.warning(f"Ignoring unsupported speed multiplier: {settings.speed_multiplier}")
    logger.info(
        f"Game created (seed={settings.random_seed}, speed={game.speed_multiplier}x, "
        f"auto_collect={game.auto_collect})"
    )
    return game


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    _configure_logging()
    logger.info(f"{settings.app_name} v{__version__} - INITIALIZING")

    loop = asyncio.get_running_loop()
    game = _create_game()
    app.state.game = game

    driver = LoopDriver(
        game,
        on_frame=SnapshotThrottle(loop, settings.snapshot_hz),
        frame_rate=settings.frame_rate,
    )
    app.state.loop_driver = driver
    if settings.loop_enabled:
        driver.start()
    else:
        logger.info("Game loop disabled; advance ticks through the API only")

    bridge_stop = start_game_event_bridge(game.event_bus, loop)
    logger.info(f"{settings.app_name} ONLINE")

    yield

    bridge_stop.set()
    if driver.running:
        logger.info("Stopping game loop...")
        driver.stop()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title="LAWNLINE",
    description="Lane-defense simulation server",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game_router)
app.include_router(ws_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": __version__,
        "system": settings.app_name,
    }


def main() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
