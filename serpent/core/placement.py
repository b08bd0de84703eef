"""Random placement: grid-quantized coordinates inside the field."""

from __future__ import annotations

import random
from typing import Iterable, Optional

import structlog

from serpent.core.grid import GameField, Position

logger = structlog.get_logger()


def random_grid_coordinate(
    start: int,
    end: int,
    cell_size: int,
    rng: Optional[random.Random] = None,
) -> int:
    """Sample a coordinate in [start, end] and floor it to the grid.

    Args:
        start: Lowest coordinate allowed.
        end: Highest coordinate allowed.
        cell_size: Grid cell size the result is floored to.
        rng: Random source (module-level random if None).

    Returns:
        A multiple of cell_size. When start is 0 and end is
        field_dimension - cell_size the whole cell stays inside the field.
    """
    rng = rng or random
    value = start + rng.random() * (end - start + 1)
    return int(value // cell_size) * cell_size


def random_grid_position(field: GameField, rng: Optional[random.Random] = None) -> Position:
    """Pick a uniformly random cell that lies fully inside the field."""
    return Position(
        random_grid_coordinate(0, field.max_x, field.cell_size, rng),
        random_grid_coordinate(0, field.max_y, field.cell_size, rng),
    )


def free_grid_position(
    field: GameField,
    occupied: Iterable[Position],
    rng: Optional[random.Random] = None,
    attempts: int = 200,
) -> Position:
    """Pick a random cell not present in `occupied`.

    Args:
        field: The playing field.
        occupied: Cells already taken by other entities.
        rng: Random source (module-level random if None).
        attempts: Number of draws before giving up on finding a free cell.

    Returns:
        A free cell, or the last drawn cell if every attempt hit an
        occupied one (a crowded field is not an error).
    """
    taken = set(occupied)
    position = random_grid_position(field, rng)
    for _ in range(attempts):
        if position not in taken:
            return position
        position = random_grid_position(field, rng)

    logger.warning("placement_exhausted", attempts=attempts, occupied=len(taken))
    return position
