"""Unit tests for collision detection."""

from __future__ import annotations

import pytest

from serpent.core.collision import CollisionDetector, CollisionKind, collide
from serpent.core.entity import Agent, Collectible, Obstacle
from serpent.core.grid import GameField, Position


@pytest.fixture
def detector() -> CollisionDetector:
    """Create a detector for the default field."""
    return CollisionDetector(GameField())


def make_agent(x: int, y: int) -> Agent:
    return Agent.create(Position(x, y), segments=2, cell_size=20)


def test_collide_compares_cells():
    """Test exact-cell collision."""
    a = Obstacle(position=Position(20, 20))

    assert collide(a, Collectible(position=Position(20, 20)))
    assert not collide(a, Collectible(position=Position(40, 20)))


def test_no_collision_in_open_field(detector):
    """Test a clear field."""
    agent = make_agent(200, 200)
    stone = Obstacle(position=Position(400, 200))

    assert detector.detect(agent, [agent, stone]) == []


def test_boundary_collision(detector):
    """Test the head past the right edge."""
    agent = make_agent(980, 100)

    collisions = detector.detect(agent, [agent])

    assert len(collisions) == 1
    assert collisions[0].kind is CollisionKind.BOUNDARY
    assert collisions[0].entity is agent
    assert collisions[0].edible is False


def test_head_on_far_edge_is_inside(detector):
    """Test that the edge itself does not count as out of bounds."""
    agent = make_agent(960, 500)

    assert detector.detect(agent, [agent]) == []


def test_self_bite(detector):
    """Test the head entering its own body."""
    agent = make_agent(200, 200)
    agent.body_segments[1].position = Position(200, 200)

    collisions = detector.detect(agent, [agent])

    assert [c.kind for c in collisions] == [CollisionKind.SELF_BITE]
    assert collisions[0].edible is False


def test_entity_collisions_carry_edibility(detector):
    """Test obstacle and collectible hits."""
    agent = make_agent(200, 200)
    stone = Obstacle(position=Position(200, 200))
    item = Collectible(position=Position(200, 200))

    collisions = detector.detect(agent, [agent, stone, item])

    assert [(c.kind, c.entity, c.edible) for c in collisions] == [
        (CollisionKind.ENTITY, stone, False),
        (CollisionKind.ENTITY, item, True),
    ]


def test_checks_run_in_fixed_order(detector):
    """Test boundary before self-bite before entity collisions."""
    agent = make_agent(-20, 100)
    agent.body_segments[0].position = Position(-20, 100)
    stone = Obstacle(position=Position(-20, 100))

    kinds = [c.kind for c in detector.detect(agent, [agent, stone])]

    assert kinds == [CollisionKind.BOUNDARY, CollisionKind.SELF_BITE, CollisionKind.ENTITY]


def test_later_checks_see_resolved_position(detector):
    """Test that moving the agent between yields affects remaining checks."""
    agent = make_agent(-20, 100)
    stone = Obstacle(position=Position(-20, 100))

    collisions = detector.iter_collisions(agent, [agent, stone])
    first = next(collisions)
    agent.position = Position(300, 300)

    assert first.kind is CollisionKind.BOUNDARY
    assert list(collisions) == []
