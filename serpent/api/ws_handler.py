"""WebSocket handler for real-time game streaming and keyboard-style input.

Provides:
- ConnectionManager for managing active WebSocket connections
- Binary frame protocol for per-tick game state
- StreamRenderer, the render collaborator plugged into GameSession
- WebSocket endpoint that streams frames and accepts text commands
"""

from __future__ import annotations

import struct

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from serpent.core.errors import SerpentError
from serpent.core.session import GameSession
from serpent.core.telemetry import SessionSnapshot

logger = structlog.get_logger()

# tick, status, paused, lives, score, length, entity_count
FRAME_HEADER = struct.Struct(">IBBBIHH")
# kind, x, y, color
FRAME_ENTITY = struct.Struct(">BhhI")

KIND_CODES: dict[str, int] = {
    "agent": 0,
    "body": 1,
    "obstacle": 2,
    "collectible": 3,
}

STATUS_CODES: dict[str, int] = {
    "running": 0,
    "terminated": 1,
}

DIRECTION_COMMANDS = {"up", "down", "left", "right"}


class ConnectionManager:
    """Manages active WebSocket connections.

    Handles connection lifecycle and broadcasting frames to all
    connected clients.
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection.

        Args:
            websocket: The WebSocket connection to accept.
        """
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(
            "ws_client_connected",
            total_connections=len(self.active_connections),
            origin=websocket.headers.get("origin", "unknown"),
        )

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection.

        Args:
            websocket: The WebSocket connection to remove.
        """
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(
                "ws_client_disconnected",
                total_connections=len(self.active_connections),
            )

    async def broadcast_bytes(self, data: bytes) -> None:
        """Broadcast binary data to all connected clients.

        Args:
            data: Binary data to send to all clients.

        Note:
            Removes disconnected clients automatically.
        """
        disconnected: list[WebSocket] = []

        for connection in self.active_connections:
            try:
                await connection.send_bytes(data)
            except Exception as exc:
                logger.warning(
                    "ws_broadcast_error",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                disconnected.append(connection)

        for connection in disconnected:
            self.disconnect(connection)


def build_frame(snapshot: SessionSnapshot) -> bytes:
    """Build a binary game frame using struct.pack.

    Binary protocol format (big-endian):
    - Header (15 bytes):
        - Tick: uint32
        - Status: uint8 (0=running, 1=terminated)
        - Paused: uint8 (0/1)
        - Lives: uint8
        - Score: uint32
        - Length: uint16 (body segments)
        - EntityCount: uint16
    - Body (9 bytes per cell, agent head first, then body segments):
        - Kind: uint8 (0=head, 1=body, 2=obstacle, 3=collectible)
        - X: int16 (signed: the head may be past the field edge)
        - Y: int16
        - Color: uint32 (0xRRGGBB)

    Args:
        snapshot: Session snapshot to encode.

    Returns:
        Binary frame as bytes.
    """
    header = FRAME_HEADER.pack(
        snapshot.tick,
        STATUS_CODES[snapshot.status],
        int(snapshot.paused),
        snapshot.lives,
        snapshot.score,
        snapshot.length,
        len(snapshot.entities),
    )

    cells = [
        FRAME_ENTITY.pack(
            KIND_CODES[cell.kind],
            cell.x,
            cell.y,
            int(cell.color.lstrip("#"), 16),
        )
        for cell in snapshot.entities
    ]

    return header + b"".join(cells)


class StreamRenderer:
    """Render collaborator that pushes one binary frame per tick to all clients."""

    def __init__(self, manager: ConnectionManager) -> None:
        self.manager = manager

    async def render(self, snapshot: SessionSnapshot) -> None:
        if not self.manager.active_connections:
            return
        await self.manager.broadcast_bytes(build_frame(snapshot))


async def handle_command(session: GameSession, command: str) -> None:
    """Apply one text command received from a client.

    Commands mirror the keyboard controls: the four arrow
    directions, "pause" (p) and "quit" (q). Quitting over the socket counts
    as confirmed. "ping" and unknown commands are ignored.
    """
    command = command.strip().lower()

    if command in DIRECTION_COMMANDS:
        session.change_direction(command)
    elif command == "pause":
        session.pause()
    elif command == "quit":
        await session.quit(confirmed=True)
    elif command and command != "ping":
        logger.debug("ws_unknown_command", command=command)


async def websocket_endpoint(
    websocket: WebSocket,
    manager: ConnectionManager,
    session: GameSession,
) -> None:
    """WebSocket endpoint for game streaming and input.

    Args:
        websocket: The WebSocket connection.
        manager: The connection manager instance.
        session: The game session receiving input commands.

    Note:
        Clients receive binary frames pushed by the scheduler. Anything
        they send is interpreted as a text command.
    """
    await manager.connect(websocket)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                await handle_command(session, data)
            except SerpentError as exc:
                logger.debug("ws_command_rejected", command=data, error=str(exc))

    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.info("ws_client_disconnected_gracefully")
    except Exception as exc:
        logger.error(
            "ws_endpoint_error",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        manager.disconnect(websocket)
