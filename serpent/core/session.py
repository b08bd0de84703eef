"""Game session controller: start, input commands, and the tick scheduler.

GameSession owns the entity collection of the current game and drives the
TickEngine from a single asyncio task, one tick per period. Input commands
(direction, pause, quit) arrive on the same event loop between ticks and
never interrupt a tick in progress.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Optional, Protocol

import structlog

from serpent.config import Settings
from serpent.core.engine import SessionState, TickEngine, TickReport
from serpent.core.entity import Agent
from serpent.core.entity_manager import EntityManager
from serpent.core.errors import SessionNotStartedError
from serpent.core.grid import Direction, GameField, Position
from serpent.core.placement import free_grid_position, random_grid_coordinate
from serpent.core.telemetry import SessionSnapshot, collect_snapshot, log_statistics

logger = structlog.get_logger()


class Renderer(Protocol):
    """Receives the full session state once per tick."""

    async def render(self, snapshot: SessionSnapshot) -> None:
        ...


@dataclass(frozen=True)
class StartParameters:
    """Validated start-time values.

    Attributes:
        agent_length: Total agent length including the head.
        obstacle_count: Number of obstacles to place.
        item_count: Number of collectibles to place.
    """

    agent_length: int
    obstacle_count: int
    item_count: int


def normalize_start_parameters(
    agent_length: int,
    obstacle_count: int,
    item_count: int,
    game_field: GameField,
    settings: Settings,
) -> StartParameters:
    """Replace out-of-range start values with defaults.

    Invalid input is never an error:
    - agent_length must satisfy 1 < agent_length <= (width - 100) / cell_size
    - obstacle_count must be >= 0
    - item_count must be > 0
    """
    params = StartParameters(
        agent_length=(
            agent_length
            if 1 < agent_length <= game_field.max_agent_length
            else settings.default_agent_length
        ),
        obstacle_count=obstacle_count if obstacle_count >= 0 else settings.default_obstacle_count,
        item_count=item_count if item_count > 0 else settings.default_item_count,
    )

    if params != StartParameters(agent_length, obstacle_count, item_count):
        logger.info(
            "start_parameters_clamped",
            requested=(agent_length, obstacle_count, item_count),
            used=(params.agent_length, params.obstacle_count, params.item_count),
        )
    return params


class GameSession:
    """Controller for one game at a time.

    Starting a game tears down the previous one (its scheduled ticks are
    cancelled before any new state is built), so two tick streams never run
    concurrently.
    """

    def __init__(
        self,
        settings: Settings,
        renderer: Optional[Renderer] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the controller.

        Args:
            settings: Application settings (field geometry, rules, tick rate).
            renderer: Optional collaborator receiving a snapshot every tick.
            rng: Random source for placement, resets and respawns.
        """
        self.settings = settings
        self.field = GameField(
            width=settings.field_width,
            height=settings.field_height,
            cell_size=settings.cell_size,
        )
        self.renderer = renderer
        self.rng = rng
        self.engine = TickEngine(self.field, rng=rng)

        self.state: Optional[SessionState] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        """True while a tick scheduler task is alive."""
        return self._task is not None and not self._task.done()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def new_game(self, agent_length: int, obstacle_count: int, item_count: int) -> SessionState:
        """Tear down the current game and build a fresh one without scheduling it.

        Args:
            agent_length: Requested agent length including the head.
            obstacle_count: Requested number of obstacles.
            item_count: Requested number of collectibles.

        Returns:
            The new session state.
        """
        params = normalize_start_parameters(
            agent_length, obstacle_count, item_count, self.field, self.settings
        )
        self._teardown()

        cell = self.field.cell_size
        entities = EntityManager()

        head = Position(
            (params.agent_length + 1) * cell,
            random_grid_coordinate(0, self.field.max_y, cell, self.rng),
        )
        entities.add_agent(
            Agent.create(
                head,
                segments=params.agent_length - 1,
                cell_size=cell,
                lives=self.settings.initial_lives,
                growth_threshold=self.settings.growth_threshold,
            )
        )

        for _ in range(params.obstacle_count):
            entities.spawn_obstacle(self._free_cell(entities))
        for _ in range(params.item_count):
            entities.spawn_collectible(self._free_cell(entities))

        self.state = SessionState(entities=entities)
        logger.info(
            "session_started",
            agent_length=params.agent_length,
            obstacles=params.obstacle_count,
            items=params.item_count,
            head_x=head.x,
            head_y=head.y,
        )
        return self.state

    def start(self, agent_length: int, obstacle_count: int, item_count: int) -> SessionState:
        """Start a new game and schedule its ticks on the running event loop.

        Raises:
            RuntimeError: If called outside a running asyncio event loop.
        """
        loop = asyncio.get_running_loop()
        state = self.new_game(agent_length, obstacle_count, item_count)
        self._task = loop.create_task(self._run(state))
        return state

    def end(self, reason: str = "quit") -> None:
        """End the current game and stop scheduling ticks.

        Raises:
            SessionNotStartedError: If no game was started.
        """
        state = self._require_state()
        if state.terminate(reason):
            self._log_end(state)
        self._cancel_scheduler()

    async def stop(self) -> None:
        """Cancel the scheduler and wait for it to finish (used on shutdown)."""
        task = self._task
        self._cancel_scheduler()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def _teardown(self) -> None:
        self._cancel_scheduler()
        if self.state is not None:
            logger.info("session_torn_down", tick=self.state.tick, status=self.state.status.value)
            self.state.entities.clear()
            self.state = None

    def _cancel_scheduler(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    def _free_cell(self, entities: EntityManager) -> Position:
        return free_grid_position(
            self.field,
            entities.occupied_positions(),
            rng=self.rng,
            attempts=self.settings.placement_attempts,
        )

    # -------------------------------------------------------------------------
    # Input commands
    # -------------------------------------------------------------------------

    def change_direction(self, direction: Direction | str) -> None:
        """Set the agent's heading for the next movement step.

        Raises:
            SessionNotStartedError: If no game was started.
            InvalidDirectionError: If direction is not one of the four values.
        """
        state = self._require_state()
        state.agent.change_direction(direction)
        logger.debug("direction_changed", tick=state.tick, direction=state.agent.direction.value)

    def pause(self) -> bool:
        """Toggle the informational pause flag. Ticks keep running.

        Returns:
            The new value of the flag.
        """
        state = self._require_state()
        state.paused = not state.paused
        logger.info("session_paused" if state.paused else "session_resumed", tick=state.tick)
        return state.paused

    async def quit(self, confirmed: bool) -> bool:
        """End the game if the player confirmed, then render the final state.

        Returns:
            True if the game was ended.
        """
        state = self._require_state()
        if not confirmed:
            logger.info("quit_cancelled", tick=state.tick)
            return False

        self.end("quit")
        await self._render(state)
        return True

    # -------------------------------------------------------------------------
    # Ticking
    # -------------------------------------------------------------------------

    def tick(self) -> Optional[TickReport]:
        """Run a single tick of the current game outside the scheduler.

        Returns:
            The tick report, or None if the game has ended or the tick failed.
        """
        return self._advance(self._require_state())

    def snapshot(self) -> SessionSnapshot:
        """Capture the current game for renderers and the API."""
        return collect_snapshot(self._require_state(), self.field)

    async def _run(self, state: SessionState) -> None:
        """Fixed-period scheduler loop for one game.

        Sleeps one period, runs a full tick, renders, and repeats until the
        game ends. A period that overruns is logged and the next tick starts
        immediately.
        """
        loop = asyncio.get_running_loop()
        period = self.settings.tick_rate_ms / 1000.0
        delay = period
        logger.info("scheduler_started", tick_rate_ms=self.settings.tick_rate_ms)

        try:
            while not state.terminated:
                await asyncio.sleep(delay)

                tick_start = loop.time()
                self._advance(state)
                await self._render(state)
                tick_duration = loop.time() - tick_start

                if tick_duration > period:
                    logger.warning(
                        "tick_overrun",
                        tick=state.tick,
                        duration_ms=tick_duration * 1000,
                        budget_ms=self.settings.tick_rate_ms,
                    )
                delay = max(0.0, period - tick_duration)
        except asyncio.CancelledError:
            logger.info("scheduler_cancelled", tick=state.tick)
            raise

        logger.info("scheduler_stopped", tick=state.tick, reason=state.end_reason)

    def _advance(self, state: SessionState) -> Optional[TickReport]:
        try:
            report = self.engine.tick(state)
        except Exception as exc:
            # Tick errors are unrecoverable; the game ends here
            logger.error(
                "tick_error",
                tick=state.tick,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            if state.terminate("error"):
                self._log_end(state)
            return None

        if report is None:
            return None

        if report.terminated:
            self._log_end(state)

        interval = self.settings.stats_interval_ticks
        if interval > 0 and state.tick % interval == 0:
            log_statistics(collect_snapshot(state, self.field))

        return report

    async def _render(self, state: SessionState) -> None:
        if self.renderer is None:
            return
        try:
            await self.renderer.render(collect_snapshot(state, self.field))
        except Exception as exc:
            logger.warning(
                "render_failed",
                tick=state.tick,
                error=str(exc),
                error_type=type(exc).__name__,
            )

    def _log_end(self, state: SessionState) -> None:
        agent = state.agent
        logger.info(
            "session_ended",
            reason=state.end_reason,
            tick=state.tick,
            score=agent.total_items_eaten,
            lives=agent.lives,
            length=agent.length,
        )

    def _require_state(self) -> SessionState:
        if self.state is None:
            raise SessionNotStartedError("No game session has been started")
        return self.state
