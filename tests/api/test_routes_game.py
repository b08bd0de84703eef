"""Tests for the game control API endpoints."""

from __future__ import annotations

import random

import pytest
from fastapi.testclient import TestClient

from serpent.api.app import create_app
from serpent.config import Settings
from serpent.core.session import GameSession


@pytest.fixture
def session() -> GameSession:
    """Create a session whose scheduler never fires during a test."""
    return GameSession(Settings(tick_rate_ms=60_000), rng=random.Random(7))


@pytest.fixture
def client(session):
    """Create a test client running the app lifespan."""
    with TestClient(create_app(session=session)) as client:
        yield client


def test_root(client):
    """Test the root health endpoint."""
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["service"] == "Serpent API"


def test_health_before_start(client):
    """Test health reporting with no game."""
    data = client.get("/health").json()

    assert data["status"] == "healthy"
    assert data["game_running"] == "False"
    assert data["tick"] == "0"


def test_state_before_start_is_conflict(client):
    """Test that reading state without a game returns 409."""
    assert client.get("/api/game/state").status_code == 409
    assert client.post("/api/game/direction", json={"direction": "up"}).status_code == 409
    assert client.post("/api/game/pause").status_code == 409
    assert client.post("/api/game/quit", json={"confirm": True}).status_code == 409


def test_start_game_with_defaults(client):
    """Test starting a game without a body."""
    response = client.post("/api/game/start", json={})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "running"
    assert data["lives"] == 5
    assert data["score"] == 0
    assert data["length"] == 2
    assert data["direction"] == "right"
    assert data["field"] == {"width": 960, "height": 500, "cell_size": 20}

    kinds = [cell["kind"] for cell in data["entities"]]
    assert kinds[:3] == ["agent", "body", "body"]
    assert kinds.count("obstacle") == 10
    assert kinds.count("collectible") == 5
    assert data["entities"][0]["x"] == 80


def test_start_game_clamps_invalid_parameters(client):
    """Test that bad start values fall back to defaults."""
    response = client.post(
        "/api/game/start",
        json={"agent_length": 1, "obstacle_count": -3, "item_count": 0},
    )

    assert response.status_code == 200
    data = response.json()
    kinds = [cell["kind"] for cell in data["entities"]]
    assert data["length"] == 2
    assert kinds.count("obstacle") == 10
    assert kinds.count("collectible") == 5


def test_start_game_with_custom_parameters(client):
    """Test a longer agent with no obstacles."""
    data = client.post(
        "/api/game/start",
        json={"agent_length": 6, "obstacle_count": 0, "item_count": 2},
    ).json()

    kinds = [cell["kind"] for cell in data["entities"]]
    assert data["length"] == 5
    assert kinds.count("obstacle") == 0
    assert kinds.count("collectible") == 2
    assert data["entities"][0]["x"] == (6 + 1) * 20


def test_change_direction(client):
    """Test setting a new heading."""
    client.post("/api/game/start", json={})

    response = client.post("/api/game/direction", json={"direction": "up"})

    assert response.status_code == 200
    assert response.json() == {"status": "success", "direction": "up"}
    assert client.get("/api/game/state").json()["direction"] == "up"


def test_change_direction_rejects_unknown_value(client):
    """Test validation of the direction enum."""
    client.post("/api/game/start", json={})

    response = client.post("/api/game/direction", json={"direction": "diagonal"})

    assert response.status_code == 422


def test_pause_toggles(client):
    """Test the informational pause flag."""
    client.post("/api/game/start", json={})

    assert client.post("/api/game/pause").json()["paused"] is True
    assert client.get("/api/game/state").json()["paused"] is True
    assert client.post("/api/game/pause").json()["paused"] is False


def test_quit_needs_confirmation(client, session):
    """Test that only a confirmed quit ends the game."""
    client.post("/api/game/start", json={})

    response = client.post("/api/game/quit", json={"confirm": False})
    assert response.json() == {"status": "cancelled", "ended": False}
    assert session.running

    response = client.post("/api/game/quit", json={"confirm": True})
    assert response.json() == {"status": "success", "ended": True}
    assert not session.running

    state = client.get("/api/game/state").json()
    assert state["status"] == "terminated"
    assert state["end_reason"] == "quit"
