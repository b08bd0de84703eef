"""Collision detection between the agent and everything else.

All entities share the same cell size and sit on the grid, so two entities
overlap exactly when their top-left corners are equal. Three checks run in a
fixed order, each with its own resolution path:

1. Boundary: the head left the field
2. Self-bite: the head entered one of its own body segments
3. Entity: the head shares a cell with an obstacle or collectible

Detection runs before movement, so the head is tested against where
obstacles and collectibles were drawn on the previous tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from serpent.core.entity import Agent, BaseEntity, BodySegment
from serpent.core.grid import GameField


class CollisionKind(str, Enum):
    BOUNDARY = "boundary"
    SELF_BITE = "self_bite"
    ENTITY = "entity"


@dataclass(frozen=True)
class Collision:
    """One detected collision.

    Attributes:
        kind: Which check produced it.
        entity: The entity hit. Boundary and self-bite collisions report
            the agent itself.
        edible: Whether the hit entity can be eaten.
    """

    kind: CollisionKind
    entity: BaseEntity
    edible: bool


def collide(a: BaseEntity, b: BaseEntity) -> bool:
    """Two grid entities collide iff they occupy the same cell."""
    return a.position == b.position


class CollisionDetector:
    """Runs the boundary, self-bite and entity checks for one agent."""

    def __init__(self, game_field: GameField) -> None:
        """Initialize the detector.

        Args:
            game_field: Bounds used by the boundary check.
        """
        self.field = game_field

    def iter_collisions(self, agent: Agent, entities: Iterable[BaseEntity]) -> Iterator[Collision]:
        """Lazily yield collisions in check order.

        Each check reads the agent's position at the moment it runs. When a
        caller resolves a collision between two yields (e.g. by resetting
        the agent), the remaining checks see the updated position.

        Args:
            agent: The agent whose head is tested.
            entities: The session's entity collection (the agent itself and
                body segments are skipped).
        """
        if not self.field.contains(agent.position):
            yield Collision(CollisionKind.BOUNDARY, agent, edible=False)

        if agent.has_bitten_itself():
            yield Collision(CollisionKind.SELF_BITE, agent, edible=False)

        for entity in entities:
            if entity is agent or isinstance(entity, BodySegment):
                continue
            if collide(agent, entity):
                yield Collision(CollisionKind.ENTITY, entity, edible=entity.edible)

    def detect(self, agent: Agent, entities: Iterable[BaseEntity]) -> list[Collision]:
        """Return all collisions for the agent's current position."""
        return list(self.iter_collisions(agent, entities))
