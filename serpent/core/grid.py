"""Grid model: positions, directions, and the bounded game field.

Every entity sits on a square grid whose cell size is shared by both axes.
Positions are stored in field pixels and are always a multiple of the cell
size, so two entities overlap exactly when their positions are equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Position:
    """Top-left corner of a grid cell, in field pixels."""

    x: int
    y: int

    def shifted(self, dx: int, dy: int) -> Position:
        """Return a new position offset by (dx, dy) pixels."""
        return Position(self.x + dx, self.y + dy)


class Direction(str, Enum):
    """Heading of the agent. Y grows downwards, as on a screen."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


# Unit step per direction, in cells
STEPS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


@dataclass(frozen=True)
class GameField:
    """Immutable bounds of the playing field.

    Attributes:
        width: Field width in pixels.
        height: Field height in pixels.
        cell_size: Edge length of one grid cell in pixels.
    """

    width: int = 960
    height: int = 500
    cell_size: int = 20

    @property
    def max_x(self) -> int:
        """Largest x at which a whole cell still fits inside the field."""
        return self.width - self.cell_size

    @property
    def max_y(self) -> int:
        """Largest y at which a whole cell still fits inside the field."""
        return self.height - self.cell_size

    @property
    def max_agent_length(self) -> float:
        """Upper bound for the requested agent length at session start."""
        return (self.width - 100) / self.cell_size

    def contains(self, position: Position) -> bool:
        """Check whether a position lies within [0, width] x [0, height].

        Both edges are inclusive: a head sitting exactly on the far edge is
        still considered inside and only collides once it moves past it.
        """
        return 0 <= position.x <= self.width and 0 <= position.y <= self.height

    def is_aligned(self, position: Position) -> bool:
        """Check whether a position sits on the grid."""
        return position.x % self.cell_size == 0 and position.y % self.cell_size == 0
