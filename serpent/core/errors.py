"""Exception hierarchy for the simulation core."""

from __future__ import annotations


class SerpentError(Exception):
    """Base class for all simulation errors."""


class InvalidDirectionError(SerpentError, ValueError):
    """Raised when a direction outside UP/DOWN/LEFT/RIGHT reaches the agent.

    This is a configuration error: directions are only ever set through
    Agent.change_direction(), which validates against the enumeration.
    """

    def __init__(self, direction: object) -> None:
        super().__init__(f"Unknown direction {direction!r}; use the Direction enumeration")
        self.direction = direction


class SessionNotStartedError(SerpentError):
    """Raised when an input command arrives before any session was started."""
