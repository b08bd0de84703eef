"""Telemetry: read-only snapshots of a session for renderers and the API.

A snapshot flattens the entity collection into drawable cells (agent head,
then body segments, then obstacles and collectibles) together with the HUD
values a renderer shows: lives and score.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import structlog

from serpent.core.engine import SessionState
from serpent.core.grid import GameField

logger = structlog.get_logger()


@dataclass(frozen=True)
class EntitySnapshot:
    """One drawable cell.

    Attributes:
        kind: "agent", "body", "obstacle" or "collectible".
        x: Left edge in field pixels.
        y: Top edge in field pixels.
        color: Hex color string, e.g. "#FF0000".
    """

    kind: str
    x: int
    y: int
    color: str


@dataclass
class SessionSnapshot:
    """State of a session at a specific tick.

    Attributes:
        tick: Ticks executed so far.
        status: "running" or "terminated".
        end_reason: Why the session ended, if it did.
        paused: Informational pause flag.
        lives: Agent's remaining lives.
        score: Total items eaten.
        length: Number of body segments.
        direction: Agent's current heading.
        field_width, field_height, cell_size: Field geometry.
        entities: Drawable cells, agent head first.
        timestamp: Unix timestamp when the snapshot was taken.
    """

    tick: int
    status: str
    end_reason: str | None
    paused: bool
    lives: int
    score: int
    length: int
    direction: str
    field_width: int
    field_height: int
    cell_size: int
    entities: list[EntitySnapshot] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)


def collect_snapshot(state: SessionState, game_field: GameField) -> SessionSnapshot:
    """Capture the current state of a session.

    Args:
        state: The session to read.
        game_field: Field geometry reported alongside the entities.

    Returns:
        SessionSnapshot with every drawable cell.
    """
    agent = state.agent

    cells = [EntitySnapshot(agent.kind, agent.x, agent.y, agent.color)]
    cells.extend(EntitySnapshot(s.kind, s.x, s.y, s.color) for s in agent.body_segments)
    cells.extend(EntitySnapshot(e.kind, e.x, e.y, e.color) for e in state.entities.others())

    return SessionSnapshot(
        tick=state.tick,
        status=state.status.value,
        end_reason=state.end_reason,
        paused=state.paused,
        lives=agent.lives,
        score=agent.total_items_eaten,
        length=agent.length,
        direction=str(getattr(agent.direction, "value", agent.direction)),
        field_width=game_field.width,
        field_height=game_field.height,
        cell_size=game_field.cell_size,
        entities=cells,
    )


def log_statistics(snapshot: SessionSnapshot) -> None:
    """Log a compact summary of a snapshot."""
    logger.info(
        "session_stats",
        tick=snapshot.tick,
        lives=snapshot.lives,
        score=snapshot.score,
        length=snapshot.length,
        entities=len(snapshot.entities),
        paused=snapshot.paused,
    )
