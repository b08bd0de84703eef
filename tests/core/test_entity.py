"""Unit tests for entity variants."""

from __future__ import annotations

import random

import pytest

from serpent.core.entity import Agent, BaseEntity, BodySegment, Collectible, Obstacle
from serpent.core.errors import InvalidDirectionError
from serpent.core.grid import Direction, GameField, Position


@pytest.fixture
def field() -> GameField:
    """Create the default field."""
    return GameField()


@pytest.fixture
def agent() -> Agent:
    """Create an agent at (80, 100) with two body segments."""
    return Agent.create(Position(80, 100), segments=2, cell_size=20)


def test_base_entity_is_abstract():
    """Test that the base entity cannot be instantiated."""
    with pytest.raises(TypeError):
        BaseEntity(position=Position(0, 0))


def test_variant_without_update_cannot_be_instantiated():
    """Test that every variant must implement update()."""

    class Incomplete(BaseEntity):
        pass

    with pytest.raises(TypeError):
        Incomplete(position=Position(0, 0))


def test_variant_flags_and_colors():
    """Test edibility and colours of each variant."""
    assert Collectible.edible is True
    assert Obstacle.edible is False
    assert BodySegment.edible is False
    assert Agent.edible is False

    assert Collectible.color == "#FF0000"
    assert Obstacle.color == "#808080"
    assert Agent.color == "#008000"
    assert BodySegment.color == "#90EE90"


def test_entities_get_unique_ids():
    """Test that ids differ between entities at the same cell."""
    a = Obstacle(position=Position(0, 0))
    b = Obstacle(position=Position(0, 0))

    assert a.id != b.id
    assert a != b


def test_agent_create_lays_body_behind_head(agent):
    """Test the initial agent layout."""
    assert agent.position == Position(80, 100)
    assert agent.direction is Direction.RIGHT
    assert agent.length == 2
    assert [s.position for s in agent.body_segments] == [Position(60, 100), Position(40, 100)]
    assert agent.position_history == [Position(60, 100), Position(40, 100)]


def test_agent_move_shifts_history_and_body(agent):
    """Test one movement step to the right."""
    agent.move(20)

    assert agent.position == Position(100, 100)
    assert agent.position_history == [Position(80, 100), Position(60, 100)]
    assert [s.position for s in agent.body_segments] == [Position(80, 100), Position(60, 100)]


def test_agent_direction_change_applies_on_next_move(agent):
    """Test turning up."""
    agent.change_direction("up")
    assert agent.position == Position(80, 100)

    agent.move(20)

    assert agent.position == Position(80, 80)
    assert agent.body_segments[0].position == Position(80, 100)


def test_agent_rejects_unknown_direction(agent):
    """Test direction validation."""
    with pytest.raises(InvalidDirectionError) as exc_info:
        agent.change_direction("diagonal")

    assert exc_info.value.direction == "diagonal"
    assert isinstance(exc_info.value, ValueError)
    assert agent.direction is Direction.RIGHT


def test_agent_move_with_corrupted_direction_raises(agent):
    """Test that a direction set around the validator aborts movement."""
    agent.direction = "sideways"  # type: ignore[assignment]

    with pytest.raises(InvalidDirectionError):
        agent.move(20)


def test_eat_counts_towards_growth_and_score(agent):
    """Test eating increments both counters."""
    agent.eat()
    agent.eat()

    assert agent.items_eaten_since_growth == 2
    assert agent.total_items_eaten == 2


def test_grow_duplicates_tail(agent):
    """Test that a new segment starts on the current tail cell."""
    agent.grow()

    assert agent.length == 3
    assert len(agent.position_history) == 3
    assert agent.body_segments[-1].position == agent.body_segments[-2].position

    # the overlap resolves after one more step
    agent.move(20)
    positions = [s.position for s in agent.body_segments]
    assert positions == [Position(80, 100), Position(60, 100), Position(40, 100)]
    assert len(set(positions)) == 3


def test_update_grows_after_threshold(agent, field):
    """Test growth once three items were eaten."""
    for _ in range(3):
        agent.eat()

    agent.update(field)

    assert agent.length == 3
    assert agent.items_eaten_since_growth == 0
    assert agent.total_items_eaten == 3


def test_update_below_threshold_does_not_grow(agent, field):
    """Test no growth with two items eaten."""
    agent.eat()
    agent.eat()

    agent.update(field)

    assert agent.length == 2
    assert agent.items_eaten_since_growth == 2


def test_reset_returns_to_left_edge(field):
    """Test reset layout, heading and body placement."""
    agent = Agent.create(Position(400, 200), segments=3, cell_size=20)
    agent.change_direction(Direction.UP)
    agent.move(20)

    agent.reset(field, random.Random(3))

    assert agent.direction is Direction.RIGHT
    assert agent.x == (3 + 2) * 20
    assert 0 <= agent.y <= field.max_y
    assert field.is_aligned(agent.position)
    expected = [Position(agent.x - (i + 1) * 20, agent.y) for i in range(3)]
    assert [s.position for s in agent.body_segments] == expected
    assert agent.position_history == expected


def test_has_bitten_itself(agent):
    """Test self-bite detection."""
    assert not agent.has_bitten_itself()

    agent.position = Position(40, 100)

    assert agent.has_bitten_itself()


def test_collectible_respawns_when_destroyed(field):
    """Test relocation of a consumed collectible."""
    rng = random.Random(11)
    item = Collectible(position=Position(100, 100))

    for _ in range(200):
        item.destroyed = True
        item.update(field, rng)

        assert item.destroyed is False
        assert 0 <= item.x <= field.max_x
        assert 0 <= item.y <= field.max_y
        assert field.is_aligned(item.position)


def test_collectible_stays_when_not_destroyed(field):
    """Test that an untouched collectible keeps its cell."""
    item = Collectible(position=Position(100, 100))

    item.update(field, random.Random(1))

    assert item.position == Position(100, 100)


def test_obstacle_update_is_noop(field):
    """Test obstacles never move."""
    stone = Obstacle(position=Position(200, 40))
    stone.destroyed = True

    stone.update(field)

    assert stone.position == Position(200, 40)
