"""Tick engine: the per-tick state transition of a game session.

One tick runs these steps in order:
1. Detect collisions and resolve each one as it is found
2. Move the agent one cell and shift the position history
3. Sync body segments to the history
4. Grow if enough items were eaten
5. Update every other entity (collectibles respawn, obstacles stay)

The render hand-off is left to the caller (GameSession).
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import structlog

from serpent.core.collision import Collision, CollisionDetector
from serpent.core.entity import Agent
from serpent.core.entity_manager import EntityManager
from serpent.core.grid import GameField

logger = structlog.get_logger()


class SessionStatus(str, Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class CollisionOutcome(str, Enum):
    CONSUMED = "consumed"  # edible entity eaten
    LIFE_LOST = "life_lost"  # agent reset, one life spent
    FATAL = "fatal"  # no lives left, session over


@dataclass
class SessionState:
    """Mutable state of one game session.

    Attributes:
        entities: The entity collection (agent first).
        tick: Number of ticks executed so far.
        status: RUNNING until the session ends.
        end_reason: Why the session ended ("out_of_lives", "quit", "error").
        paused: Informational pause flag; ticks keep running while set.
    """

    entities: EntityManager
    tick: int = 0
    status: SessionStatus = SessionStatus.RUNNING
    end_reason: Optional[str] = None
    paused: bool = False

    @property
    def agent(self) -> Agent:
        return self.entities.agent

    @property
    def terminated(self) -> bool:
        return self.status is SessionStatus.TERMINATED

    def terminate(self, reason: str) -> bool:
        """Move to the terminal state.

        Returns:
            True if this call ended the session, False if it had already ended.
        """
        if self.terminated:
            return False
        self.status = SessionStatus.TERMINATED
        self.end_reason = reason
        return True


@dataclass
class TickReport:
    """What happened during one tick."""

    tick: int
    collisions: list[tuple[Collision, CollisionOutcome]] = field(default_factory=list)
    grew: bool = False
    terminated: bool = False


class TickEngine:
    """Applies one simulation step to a SessionState.

    The engine keeps no session data of its own: the same engine can drive
    any number of consecutive sessions on the same field.
    """

    def __init__(
        self,
        game_field: GameField,
        detector: Optional[CollisionDetector] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the tick engine.

        Args:
            game_field: Field bounds and cell size.
            detector: Collision detector (one for game_field if None).
            rng: Random source for resets and respawns.
        """
        self.field = game_field
        self.detector = detector or CollisionDetector(game_field)
        self.rng = rng

    def tick(self, state: SessionState) -> Optional[TickReport]:
        """Run one full tick.

        Args:
            state: The session to advance.

        Returns:
            A TickReport, or None if the session had already ended.

        Raises:
            InvalidDirectionError: If the agent's direction is not one of
                the four enumeration values. The tick is aborted.
        """
        if state.terminated:
            logger.debug("tick_skipped", tick=state.tick, reason=state.end_reason)
            return None

        state.tick += 1
        report = TickReport(tick=state.tick)
        agent = state.agent

        for collision in self.detector.iter_collisions(agent, state.entities.all()):
            outcome = self.resolve(state, collision)
            report.collisions.append((collision, outcome))

        length_before = agent.length
        agent.update(self.field, self.rng)
        report.grew = agent.length > length_before

        for entity in state.entities.others():
            entity.update(self.field, self.rng)

        report.terminated = state.terminated
        return report

    def resolve(self, state: SessionState, collision: Collision) -> CollisionOutcome:
        """Apply the outcome of one collision to the session.

        - Edible: the agent eats it and the entity is flagged destroyed so
          its own update relocates it later in the same tick.
        - Non-edible with no lives left: the session ends.
        - Non-edible otherwise: one life is spent and the agent is reset.
        """
        agent = state.agent

        if collision.edible:
            agent.eat()
            collision.entity.destroyed = True
            outcome = CollisionOutcome.CONSUMED
        elif agent.lives == 0:
            state.terminate("out_of_lives")
            outcome = CollisionOutcome.FATAL
        else:
            agent.lives -= 1
            agent.reset(self.field, self.rng)
            outcome = CollisionOutcome.LIFE_LOST

        logger.info(
            "collision_resolved",
            tick=state.tick,
            kind=collision.kind.value,
            entity_kind=collision.entity.kind,
            outcome=outcome.value,
            lives=agent.lives,
            score=agent.total_items_eaten,
        )
        return outcome
