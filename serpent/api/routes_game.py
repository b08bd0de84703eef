"""Game control API routes.

Provides endpoints for:
- Starting a game from the three start parameters
- Changing direction, pausing and quitting
- Reading the current game state
- Streaming frames over WebSocket
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request, WebSocket
from pydantic import BaseModel, Field

from serpent.api.ws_handler import websocket_endpoint
from serpent.core.errors import SessionNotStartedError
from serpent.core.grid import Direction
from serpent.core.session import GameSession

logger = structlog.get_logger()

router = APIRouter()


# -------------------------------------------------------------------------
# Request/Response Models
# -------------------------------------------------------------------------


class StartGameRequest(BaseModel):
    """Start parameters. Out-of-range values are replaced by defaults."""

    agent_length: int = Field(default=3, description="Agent length including the head")
    obstacle_count: int = Field(default=10, description="Number of obstacles")
    item_count: int = Field(default=5, description="Number of collectibles")


class DirectionRequest(BaseModel):
    direction: Direction = Field(..., description="New heading: up, down, left or right")


class QuitRequest(BaseModel):
    confirm: bool = Field(default=False, description="Must be true to end the game")


class CellResponse(BaseModel):
    kind: str
    x: int
    y: int
    color: str


class GameStateResponse(BaseModel):
    """Response model for the game state endpoint."""

    tick: int = Field(..., description="Ticks executed in this game")
    status: str = Field(..., description='"running" or "terminated"')
    end_reason: str | None = Field(default=None, description="Why the game ended")
    paused: bool = Field(..., description="Informational pause flag")
    lives: int = Field(..., description="Remaining lives")
    score: int = Field(..., description="Items eaten")
    length: int = Field(..., description="Body segments behind the head")
    direction: str = Field(..., description="Current heading")
    field: dict[str, int] = Field(..., description="Field width, height and cell size")
    entities: list[CellResponse] = Field(default_factory=list)


def _session(request: Request) -> GameSession:
    return request.app.state.app_state.session


def _state_response(session: GameSession) -> GameStateResponse:
    snapshot = session.snapshot()
    return GameStateResponse(
        tick=snapshot.tick,
        status=snapshot.status,
        end_reason=snapshot.end_reason,
        paused=snapshot.paused,
        lives=snapshot.lives,
        score=snapshot.score,
        length=snapshot.length,
        direction=snapshot.direction,
        field={
            "width": snapshot.field_width,
            "height": snapshot.field_height,
            "cell_size": snapshot.cell_size,
        },
        entities=[CellResponse(**asdict(cell)) for cell in snapshot.entities],
    )


def _not_started(exc: SessionNotStartedError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


# -------------------------------------------------------------------------
# POST /api/game/start
# -------------------------------------------------------------------------


@router.post("/game/start", response_model=GameStateResponse)
async def start_game(params: StartGameRequest, request: Request) -> GameStateResponse:
    """Start a new game, replacing any game in progress."""
    session = _session(request)
    session.start(params.agent_length, params.obstacle_count, params.item_count)
    return _state_response(session)


# -------------------------------------------------------------------------
# POST /api/game/direction
# -------------------------------------------------------------------------


@router.post("/game/direction")
async def change_direction(body: DirectionRequest, request: Request) -> dict[str, str]:
    """Set the heading applied on the next tick."""
    try:
        _session(request).change_direction(body.direction)
    except SessionNotStartedError as exc:
        raise _not_started(exc)
    return {"status": "success", "direction": body.direction.value}


# -------------------------------------------------------------------------
# POST /api/game/pause
# -------------------------------------------------------------------------


@router.post("/game/pause")
async def pause_game(request: Request) -> dict[str, Any]:
    """Toggle the pause flag.

    Note:
        The flag is informational: the scheduler keeps ticking.
    """
    try:
        paused = _session(request).pause()
    except SessionNotStartedError as exc:
        raise _not_started(exc)
    return {"status": "success", "paused": paused}


# -------------------------------------------------------------------------
# POST /api/game/quit
# -------------------------------------------------------------------------


@router.post("/game/quit")
async def quit_game(body: QuitRequest, request: Request) -> dict[str, Any]:
    """End the game once the player confirmed."""
    try:
        ended = await _session(request).quit(body.confirm)
    except SessionNotStartedError as exc:
        raise _not_started(exc)
    return {
        "status": "success" if ended else "cancelled",
        "ended": ended,
    }


# -------------------------------------------------------------------------
# GET /api/game/state
# -------------------------------------------------------------------------


@router.get("/game/state", response_model=GameStateResponse)
async def get_game_state(request: Request) -> GameStateResponse:
    """Get the current game state."""
    try:
        return _state_response(_session(request))
    except SessionNotStartedError as exc:
        raise _not_started(exc)


# -------------------------------------------------------------------------
# WebSocket /api/ws/game-stream
# -------------------------------------------------------------------------


@router.websocket("/ws/game-stream")
async def game_stream(websocket: WebSocket) -> None:
    """Stream binary frames and accept text commands."""
    app_state = websocket.app.state.app_state
    await websocket_endpoint(websocket, app_state.ws_manager, app_state.session)
