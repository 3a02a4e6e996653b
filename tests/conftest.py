"""Global test fixtures and utilities for momentum tests"""
import pytest
from datetime import datetime, timezone

from momentum import config
from momentum.db.store import InMemoryProgressStore
from momentum.gamification.events import EventDispatcher
from momentum.gamification.streak_system import DayBoundary
from momentum.models.progress import AggregateSnapshot, ProgressState
from momentum.services.gamification_service import GamificationService


# ============================================================================
# Contract Mode Fixtures
# ============================================================================

@pytest.fixture
def strict_contracts(monkeypatch):
    """Contract violations raise"""
    monkeypatch.setattr(config, "STRICT_CONTRACTS", True)


@pytest.fixture
def lenient_contracts(monkeypatch):
    """Contract violations are logged and ignored"""
    monkeypatch.setattr(config, "STRICT_CONTRACTS", False)


# ============================================================================
# State Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-42"


@pytest.fixture
def fresh_state(test_user_id):
    """Progress of a brand-new user"""
    return ProgressState(user_id=test_user_id)


@pytest.fixture
def utc_boundary():
    """Calendar days in UTC"""
    return DayBoundary("UTC")


@pytest.fixture
def noon():
    """A weekday at noon (Wednesday 2024-01-10 12:00 UTC)"""
    return datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def snapshot_factory():
    """Build an AggregateSnapshot with overrides"""
    def _create(**kwargs):
        return AggregateSnapshot(**kwargs)
    return _create


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def memory_store():
    """Empty in-memory progress store"""
    return InMemoryProgressStore()


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def gamification_service(memory_store, dispatcher, utc_boundary, noon):
    """GamificationService over an in-memory store with a fixed clock"""
    return GamificationService(
        memory_store,
        dispatcher=dispatcher,
        day_boundary=utc_boundary,
        clock=lambda: noon
    )
