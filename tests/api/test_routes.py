"""Tests for the progress API routes"""
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from momentum import config
from momentum.api.middleware import limiter
from momentum.api.server import create_api_application
from momentum.db.connection import db

HEADERS = {"Authorization": "Bearer test_key_123"}


@pytest.fixture
def client(monkeypatch):
    """API client over a fresh in-memory store"""
    monkeypatch.setattr(config, "API_KEYS", "test_key_123,other_key")
    monkeypatch.setattr(config, "STORE_BACKEND", "memory")
    monkeypatch.setattr(limiter, "enabled", False)

    with TestClient(create_api_application()) as test_client:
        yield test_client


def test_health_check(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_check_degraded_when_store_unreachable(client, monkeypatch):
    monkeypatch.setattr(config, "STORE_BACKEND", "postgres")
    monkeypatch.setattr(db, "ping", AsyncMock(return_value=False))

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["store"] == "postgres"


def test_invalid_api_key_rejected(client):
    response = client.get(
        "/api/v1/users/u1/progress",
        headers={"Authorization": "Bearer wrong_key"}
    )

    assert response.status_code == 401


def test_new_user_progress(client):
    response = client.get("/api/v1/users/u1/progress", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["total_xp"] == 0
    assert data["current_level"] == 1
    assert data["earned_badges"] == []


def test_complete_action(client):
    """First action: 25 XP plus First Step"""
    response = client.post("/api/v1/users/u1/actions/complete", json={}, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["total_xp"] == 125
    assert data["current_streak"] == 1
    assert data["badges_unlocked"] == ["firstStep"]
    badge_event = next(e for e in data["events"] if e["kind"] == "badge_unlocked")
    assert "First Step" in badge_event["message"]

    progress = client.get("/api/v1/users/u1/progress", headers=HEADERS).json()
    assert progress["total_xp"] == 125


def test_log_win(client):
    response = client.post(
        "/api/v1/users/u1/wins",
        json={"description": "Signed the lease", "size": "big", "emotion": 5},
        headers=HEADERS
    )

    assert response.status_code == 201
    assert set(response.json()["badges_unlocked"]) == {"firstWin", "bigWinner"}

    wins = client.get("/api/v1/users/u1/wins", headers=HEADERS).json()
    assert [w["description"] for w in wins] == ["Signed the lease"]


def test_challenge_flow(client):
    templates = client.get(
        "/api/v1/challenges/templates",
        params={"duration": "daily", "focus_areas": ["wellness"]},
        headers=HEADERS
    ).json()
    challenge = next(t for t in templates if t["title"] == "Power Walk")

    accepted = client.post(
        "/api/v1/users/u1/challenges/accept",
        json={"challenge": challenge},
        headers=HEADERS
    )
    assert accepted.status_code == 201
    assert accepted.json()["is_active"] is True

    completed = client.post(
        f"/api/v1/users/u1/challenges/{challenge['id']}/complete",
        json={"reflection": {"notes": "Sunny walk", "emotion": 4}},
        headers=HEADERS
    )
    assert completed.status_code == 200
    data = completed.json()
    assert data["challenge"]["is_completed"] is True
    assert "fitnessFreak" in data["badges_unlocked"]
    assert data["wins_created"][0]["description"] == "Sunny walk"


def test_abandon_challenge(client):
    challenge = {
        "id": "c-abandon",
        "title": "Say Yes",
        "category": "adventure",
        "difficulty": "medium",
        "duration": "daily",
        "xp_reward": 75,
    }
    client.post("/api/v1/users/u1/challenges/accept", json={"challenge": challenge}, headers=HEADERS)

    response = client.post("/api/v1/users/u1/challenges/c-abandon/abandon", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["abandoned_at"] is not None


def test_unknown_challenge_is_404(client):
    response = client.post(
        "/api/v1/users/u1/challenges/missing/complete",
        json={},
        headers=HEADERS
    )

    assert response.status_code == 404
    assert response.json()["error"] == "RecordNotFoundError"


def test_log_interaction(client):
    relationship = {"id": "r1", "name": "Sam", "category": "peer"}
    response = client.post(
        "/api/v1/users/u1/interactions",
        json={
            "interaction": {"interaction_type": "call", "initiated_by": "me"},
            "relationship": relationship,
            "all_relationships": [relationship],
        },
        headers=HEADERS
    )

    assert response.status_code == 200
    data = response.json()
    assert data["badges_unlocked"] == ["firstReachOut", "firstWin"]
    assert data["wins_created"][0]["description"] == "First reach-out to Sam!"


def test_goal_progress(client):
    goal = {
        "title": "Learn Spanish",
        "category": "growth",
        "actions": [
            {"title": "Lesson 1", "is_completed": True},
            {"title": "Lesson 2", "is_completed": True},
            {"title": "Lesson 3"},
            {"title": "Lesson 4"},
        ],
    }
    response = client.post(
        "/api/v1/users/u1/goals/progress",
        json={"goal": goal, "previous_progress": 0.25},
        headers=HEADERS
    )

    assert response.status_code == 200
    data = response.json()
    assert data["milestone"] == "half"
    assert data["wins_created"][0]["description"] == "Halfway There: Learn Spanish"


def test_badges_endpoint(client):
    client.post("/api/v1/users/u1/actions/complete", json={}, headers=HEADERS)

    response = client.get(
        "/api/v1/users/u1/badges",
        params={"total_actions_completed": 1},
        headers=HEADERS
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_earned"] == 1
    assert data["earned"][0]["id"] == "firstStep"
