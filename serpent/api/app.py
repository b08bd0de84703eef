"""FastAPI application factory with dependency injection.

This module provides the create_app() factory function that creates a
configured FastAPI application. The app receives the GameSession and the
WebSocket ConnectionManager from main.py rather than creating them itself.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from serpent import __version__
from serpent.api.ws_handler import ConnectionManager
from serpent.core.session import GameSession


class AppState:
    """Application state container for dependency injection.

    Holds references to shared components that API routes need.
    """

    def __init__(
        self,
        session: GameSession,
        start_time: float,
        ws_manager: ConnectionManager,
    ) -> None:
        """Initialize app state.

        Args:
            session: The game session controller.
            start_time: Server start timestamp for uptime calculation.
            ws_manager: WebSocket connection manager for frame streaming.
        """
        self.session = session
        self.start_time = start_time
        self.ws_manager = ws_manager


def create_app(
    session: GameSession,
    ws_manager: Optional[ConnectionManager] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        session: Game session controller (created in main.py).
        ws_manager: WebSocket connection manager for real-time streaming.

    Returns:
        Configured FastAPI application.

    Note:
        Shutting the app down stops any running game scheduler.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.app_state.session.stop()

    app = FastAPI(
        title="Serpent",
        description="Real-time grid arcade simulation",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if ws_manager is None:
        ws_manager = ConnectionManager()

    app.state.app_state = AppState(
        session=session,
        start_time=time.time(),
        ws_manager=ws_manager,
    )

    from serpent.api.routes_game import router as game_router

    app.include_router(game_router, prefix="/api", tags=["game"])

    @app.get("/", tags=["health"])
    async def root() -> dict[str, str]:
        """Root endpoint - basic health check."""
        return {
            "status": "ok",
            "service": "Serpent API",
            "version": __version__,
        }

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Health check endpoint for monitoring."""
        app_state = app.state.app_state
        state = app_state.session.state
        return {
            "status": "healthy",
            "game_running": str(app_state.session.running),
            "tick": str(state.tick if state is not None else 0),
            "uptime_seconds": f"{time.time() - app_state.start_time:.1f}",
        }

    return app
