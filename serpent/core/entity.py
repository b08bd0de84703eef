"""Entity model: the closed set of things that live on the field.

Variants:
- Collectible: edible, respawns elsewhere once eaten
- Obstacle: static hazard
- BodySegment: one trailing cell of the agent
- Agent: the player-controlled head that owns its body segments

Every variant must implement update(); BaseEntity declares it abstract so a
variant without one cannot be instantiated.
"""

from __future__ import annotations

import random
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, Optional

import structlog

from serpent.core.errors import InvalidDirectionError
from serpent.core.grid import STEPS, Direction, GameField, Position
from serpent.core.placement import random_grid_coordinate, random_grid_position

logger = structlog.get_logger()


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(eq=False)
class BaseEntity(ABC):
    """Common interface for everything placed on the grid.

    Attributes:
        position: Current top-left cell corner.
        id: Unique identifier (used by renderers to track entities).
        destroyed: Transient flag, set on collision and consumed by the
            entity's own update() within the same tick.
    """

    position: Position
    id: str = field(default_factory=_new_id)
    destroyed: bool = False

    edible: ClassVar[bool] = False
    kind: ClassVar[str] = "entity"
    color: ClassVar[str] = "#FFFFFF"

    @property
    def x(self) -> int:
        return self.position.x

    @property
    def y(self) -> int:
        return self.position.y

    @abstractmethod
    def update(self, game_field: GameField, rng: Optional[random.Random] = None) -> None:
        """Advance this entity by one tick.

        Args:
            game_field: The playing field (bounds and cell size).
            rng: Random source for entities that relocate themselves.
        """


@dataclass(eq=False)
class Collectible(BaseEntity):
    """Edible item. Once eaten it reappears at a random cell."""

    edible: ClassVar[bool] = True
    kind: ClassVar[str] = "collectible"
    color: ClassVar[str] = "#FF0000"

    def update(self, game_field: GameField, rng: Optional[random.Random] = None) -> None:
        if not self.destroyed:
            return

        old = self.position
        self.position = random_grid_position(game_field, rng)
        self.destroyed = False
        logger.debug("collectible_respawned", entity_id=self.id, old=old, new=self.position)


@dataclass(eq=False)
class Obstacle(BaseEntity):
    """Static hazard; touching it costs a life."""

    kind: ClassVar[str] = "obstacle"
    color: ClassVar[str] = "#808080"

    def update(self, game_field: GameField, rng: Optional[random.Random] = None) -> None:
        pass


@dataclass(eq=False)
class BodySegment(BaseEntity):
    """One trailing cell of the agent. Positioned by Agent.update()."""

    kind: ClassVar[str] = "body"
    color: ClassVar[str] = "#90EE90"

    def update(self, game_field: GameField, rng: Optional[random.Random] = None) -> None:
        pass


@dataclass(eq=False)
class Agent(BaseEntity):
    """The player-controlled head and the body trailing behind it.

    position_history holds the cells most recently vacated by the head,
    newest first, one slot per body segment. Each tick segment i moves to
    position_history[i], so the body follows the exact path of the head.

    Attributes:
        lives: Remaining spare lives; at zero the next hit ends the session.
        direction: Heading applied on the next movement step.
        position_history: Previously visited head cells, newest first.
        body_segments: Trailing segments, nearest to the head first.
        items_eaten_since_growth: Items eaten since the last new segment.
        total_items_eaten: Score.
        growth_threshold: Items needed for one new segment.
    """

    lives: int = 5
    direction: Direction = Direction.RIGHT
    position_history: list[Position] = field(default_factory=list)
    body_segments: list[BodySegment] = field(default_factory=list)
    items_eaten_since_growth: int = 0
    total_items_eaten: int = 0
    growth_threshold: int = 3

    kind: ClassVar[str] = "agent"
    color: ClassVar[str] = "#008000"

    @classmethod
    def create(
        cls,
        head: Position,
        segments: int,
        cell_size: int,
        lives: int = 5,
        growth_threshold: int = 3,
    ) -> Agent:
        """Build an agent heading right with its body laid out to the left.

        Args:
            head: Starting head cell.
            segments: Number of body segments behind the head.
            cell_size: Grid cell size.
            lives: Starting number of lives.
            growth_threshold: Items needed for one new segment.
        """
        agent = cls(
            position=head,
            lives=lives,
            direction=Direction.RIGHT,
            growth_threshold=growth_threshold,
        )
        agent.body_segments = [BodySegment(position=head) for _ in range(segments)]
        agent.position_history = [head] * segments
        agent._lay_body_behind_head(cell_size)
        return agent

    @property
    def length(self) -> int:
        """Number of body segments (the head is not counted)."""
        return len(self.body_segments)

    def change_direction(self, direction: Direction | str) -> None:
        """Set the heading used by the next movement step.

        Raises:
            InvalidDirectionError: If the value is not one of the four directions.
        """
        try:
            self.direction = Direction(direction)
        except ValueError:
            raise InvalidDirectionError(direction) from None

    def update(self, game_field: GameField, rng: Optional[random.Random] = None) -> None:
        """Move one cell, drag the body along, and grow if enough was eaten.

        Raises:
            InvalidDirectionError: If direction was set outside the enumeration.
        """
        self.move(game_field.cell_size)

        if self.items_eaten_since_growth >= self.growth_threshold:
            self.items_eaten_since_growth = 0
            self.grow()

    def move(self, cell_size: int) -> None:
        """Advance the head one cell and sync every body segment."""
        step = STEPS.get(self.direction)
        if step is None:
            raise InvalidDirectionError(self.direction)

        self.position_history.insert(0, self.position)
        self.position_history.pop()

        dx, dy = step
        self.position = self.position.shifted(dx * cell_size, dy * cell_size)

        for segment, position in zip(self.body_segments, self.position_history):
            segment.position = position

    def grow(self) -> None:
        """Append a segment on top of the current tail.

        The new segment shares the tail cell for one tick; the history shift
        on the following ticks pulls it into its own trailing cell.
        """
        tail = self.body_segments[-1].position if self.body_segments else self.position
        self.body_segments.append(BodySegment(position=tail))
        self.position_history.append(tail)
        logger.info("agent_grew", length=self.length, score=self.total_items_eaten)

    def eat(self) -> None:
        """Count one consumed item towards growth and score."""
        self.items_eaten_since_growth += 1
        self.total_items_eaten += 1

    def reset(self, game_field: GameField, rng: Optional[random.Random] = None) -> None:
        """Respawn near the left edge, heading right, body straight behind.

        The head is placed (length + 2) cells from the left edge so the whole
        body fits on the field, on a random row.
        """
        cell = game_field.cell_size
        self.direction = Direction.RIGHT
        self.position = Position(
            (self.length + 2) * cell,
            random_grid_coordinate(0, game_field.max_y, cell, rng),
        )
        self._lay_body_behind_head(cell)
        logger.info("agent_reset", x=self.position.x, y=self.position.y, lives=self.lives)

    def has_bitten_itself(self) -> bool:
        """Check whether the head shares a cell with any body segment."""
        return any(segment.position == self.position for segment in self.body_segments)

    def _lay_body_behind_head(self, cell_size: int) -> None:
        for i, segment in enumerate(self.body_segments):
            segment.position = self.position.shifted(-(i + 1) * cell_size, 0)
            self.position_history[i] = segment.position
