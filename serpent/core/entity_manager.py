"""Entity manager: the ordered entity collection owned by one game session."""

from __future__ import annotations

from typing import Iterator, Optional

import structlog

from serpent.core.entity import Agent, BaseEntity, Collectible, Obstacle
from serpent.core.grid import Position

logger = structlog.get_logger()


class EntityManager:
    """Holds the agent, obstacles and collectibles of a session.

    The agent is always the first entity. Body segments belong to the agent
    and are not stored here; occupied_positions() still reports them so
    placement can avoid the body.
    """

    def __init__(self) -> None:
        """Initialize an empty collection."""
        self._entities: dict[str, BaseEntity] = {}
        self._agent: Optional[Agent] = None

    @property
    def agent(self) -> Agent:
        """The session's single agent.

        Raises:
            LookupError: If no agent was added yet.
        """
        if self._agent is None:
            raise LookupError("No agent in the entity collection")
        return self._agent

    def add_agent(self, agent: Agent) -> Agent:
        """Register the session's agent, placing it first in update order.

        Raises:
            ValueError: If an agent is already registered.
        """
        if self._agent is not None:
            raise ValueError("Entity collection already has an agent")

        self._agent = agent
        self._entities = {agent.id: agent, **self._entities}
        logger.debug(
            "entity_spawned",
            entity_id=agent.id,
            kind=agent.kind,
            x=agent.x,
            y=agent.y,
            length=agent.length,
        )
        return agent

    def spawn_obstacle(self, position: Position) -> Obstacle:
        """Create an obstacle at a cell and add it to the collection."""
        obstacle = Obstacle(position=position)
        self._add(obstacle)
        return obstacle

    def spawn_collectible(self, position: Position) -> Collectible:
        """Create a collectible at a cell and add it to the collection."""
        collectible = Collectible(position=position)
        self._add(collectible)
        return collectible

    def _add(self, entity: BaseEntity) -> None:
        self._entities[entity.id] = entity
        logger.debug("entity_spawned", entity_id=entity.id, kind=entity.kind, x=entity.x, y=entity.y)

    def get(self, entity_id: str) -> Optional[BaseEntity]:
        """Get an entity by ID, or None if unknown."""
        return self._entities.get(entity_id)

    def all(self) -> list[BaseEntity]:
        """All entities in update order (agent first)."""
        return list(self._entities.values())

    def others(self) -> list[BaseEntity]:
        """Every entity except the agent."""
        return [e for e in self._entities.values() if e is not self._agent]

    def obstacles(self) -> list[Obstacle]:
        return [e for e in self._entities.values() if isinstance(e, Obstacle)]

    def collectibles(self) -> list[Collectible]:
        return [e for e in self._entities.values() if isinstance(e, Collectible)]

    def occupied_positions(self) -> Iterator[Position]:
        """Yield every occupied cell, including the agent's body."""
        for entity in self._entities.values():
            yield entity.position
        if self._agent is not None:
            for segment in self._agent.body_segments:
                yield segment.position

    def count(self) -> int:
        return len(self._entities)

    def clear(self) -> None:
        """Remove all entities, agent included."""
        self._entities.clear()
        self._agent = None
        logger.debug("entity_manager_cleared")
