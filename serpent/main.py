"""Serpent entry point: game session controller with FastAPI server.

Initializes the session and the API server and runs them on one event
loop until a shutdown signal arrives.

Can be run directly via `python -m serpent.main`.
"""

from __future__ import annotations

import asyncio
import signal
from typing import Optional

import structlog
import uvicorn

from serpent import __version__
from serpent.api.app import create_app
from serpent.api.ws_handler import ConnectionManager, StreamRenderer
from serpent.config import Settings
from serpent.core.session import GameSession
from serpent.log_config import configure_logging

logger = structlog.get_logger()


class GameRunner:
    """Manages server lifecycle and graceful shutdown."""

    def __init__(self) -> None:
        self.session: Optional[GameSession] = None
        self.uvicorn_server: Optional[uvicorn.Server] = None
        self.shutdown_event = asyncio.Event()

    async def run(self) -> None:
        """Build the components and serve until a shutdown signal.

        Games are started through the API (POST /api/game/start); the
        server itself starts idle.
        """
        settings = Settings()
        configure_logging(settings.log_level)
        logger.info("serpent_starting", version=__version__)
        logger.info(
            "settings_loaded",
            tick_rate_ms=settings.tick_rate_ms,
            field_width=settings.field_width,
            field_height=settings.field_height,
        )

        ws_manager = ConnectionManager()
        self.session = GameSession(settings, renderer=StreamRenderer(ws_manager))
        logger.info("game_session_initialized")

        app = create_app(session=self.session, ws_manager=ws_manager)

        config = uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level,
            access_log=False,
        )
        self.uvicorn_server = uvicorn.Server(config)
        logger.info("uvicorn_configured", host=settings.host, port=settings.port)

        def handle_shutdown(sig: int) -> None:
            logger.info("shutdown_signal_received", signal=sig)
            self.shutdown_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda s=sig: handle_shutdown(s))

        server_task = asyncio.create_task(self.uvicorn_server.serve())
        logger.info(
            "services_running",
            api_server=f"http://{settings.host}:{settings.port}",
            docs=f"http://{settings.host}:{settings.port}/docs",
        )

        # uvicorn may handle the signal itself and exit first
        shutdown_task = asyncio.create_task(self.shutdown_event.wait())
        await asyncio.wait({shutdown_task, server_task}, return_when=asyncio.FIRST_COMPLETED)
        shutdown_task.cancel()

        logger.info("initiating_graceful_shutdown")
        self.uvicorn_server.should_exit = True
        await self.session.stop()

        try:
            await asyncio.wait_for(server_task, timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("shutdown_timeout")
            server_task.cancel()

        logger.info("all_services_stopped")


async def main() -> None:
    """Main entry point."""
    runner = GameRunner()
    try:
        await runner.run()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt_received")
    except Exception as exc:
        logger.error("fatal_error", error=str(exc), error_type=type(exc).__name__)
        raise


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
