"""Core simulation: grid, entities, collisions, tick engine, session."""

from serpent.core.engine import SessionState, TickEngine
from serpent.core.entity import Agent, BaseEntity, BodySegment, Collectible, Obstacle
from serpent.core.grid import Direction, GameField, Position
from serpent.core.session import GameSession

__all__ = [
    "Agent",
    "BaseEntity",
    "BodySegment",
    "Collectible",
    "Direction",
    "GameField",
    "GameSession",
    "Obstacle",
    "Position",
    "SessionState",
    "TickEngine",
]
