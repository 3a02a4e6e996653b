"""Unit tests for the PostgreSQL progress store (momentum/db/postgres_store.py)"""
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import psycopg
import pytest

from momentum.db.postgres_store import PostgresProgressStore
from momentum.exceptions import ConnectionError, QueryError
from momentum.models.progress import ProgressState
from momentum.models.win import Win, WinSize


@pytest.fixture
def mock_cursor():
    cursor = AsyncMock()
    cursor.fetchone = AsyncMock(return_value=None)
    cursor.fetchall = AsyncMock(return_value=[])
    return cursor


@pytest.fixture
def mock_conn(mock_cursor):
    conn = MagicMock()
    conn.cursor.return_value.__aenter__.return_value = mock_cursor
    conn.commit = AsyncMock()
    return conn


@pytest.fixture
def store(mock_conn):
    database = MagicMock()
    database.connection.return_value.__aenter__.return_value = mock_conn
    return PostgresProgressStore(database)


def executed_sql(cursor):
    return [call.args[0] for call in cursor.execute.call_args_list]


# ============================================================================
# load_state
# ============================================================================

@pytest.mark.asyncio
async def test_load_state_new_user(store, mock_cursor):
    """Test a user with no row gets a fresh state"""
    state = await store.load_state("u1")

    assert state == ProgressState(user_id="u1")


@pytest.mark.asyncio
async def test_load_state_existing_user(store, mock_cursor):
    mock_cursor.fetchone.return_value = {
        "total_xp": 640,
        "current_streak": 4,
        "last_active_day": date(2024, 1, 10),
    }
    mock_cursor.fetchall.return_value = [{"badge_id": "firstStep"}, {"badge_id": "firstWin"}]

    state = await store.load_state("u1")

    assert state.total_xp == 640
    assert state.current_streak == 4
    assert state.last_active_day == date(2024, 1, 10)
    assert state.earned_badges == {"firstStep", "firstWin"}


@pytest.mark.asyncio
async def test_load_state_connection_failure(store, mock_cursor):
    mock_cursor.execute.side_effect = psycopg.OperationalError("server closed the connection")

    with pytest.raises(ConnectionError):
        await store.load_state("u1")


# ============================================================================
# save_outcome
# ============================================================================

@pytest.mark.asyncio
async def test_save_outcome_writes_everything_in_one_transaction(store, mock_conn, mock_cursor):
    state = ProgressState(
        user_id="u1",
        total_xp=125,
        current_streak=1,
        last_active_day=date(2024, 1, 10),
        earned_badges={"firstStep"},
    )
    win = Win(description="First reach-out to Sam!", size=WinSize.SMALL)

    await store.save_outcome("u1", state, [win], ["firstStep"])

    mock_conn.transaction.assert_called_once()
    statements = executed_sql(mock_cursor)
    assert len(statements) == 3
    assert "INSERT INTO user_progress" in statements[0]
    assert "INSERT INTO user_badges" in statements[1]
    assert "ON CONFLICT (user_id, badge_id) DO NOTHING" in statements[1]
    assert "INSERT INTO wins" in statements[2]

    progress_params = mock_cursor.execute.call_args_list[0].args[1]
    assert progress_params == ("u1", 125, 1, date(2024, 1, 10))


@pytest.mark.asyncio
async def test_save_outcome_query_failure(store, mock_cursor):
    mock_cursor.execute.side_effect = psycopg.errors.UniqueViolation("duplicate key")

    with pytest.raises(QueryError):
        await store.save_outcome("u1", ProgressState(user_id="u1"), [], [])


# ============================================================================
# wins and challenges
# ============================================================================

@pytest.mark.asyncio
async def test_list_wins(store, mock_cursor):
    win_id = uuid4()
    mock_cursor.fetchall.return_value = [{
        "id": win_id,
        "description": "Ran 5k",
        "size": "medium",
        "emotion": 4,
        "category": None,
        "goal_id": None,
        "action_id": None,
        "created_at": datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
    }]

    wins = await store.list_wins("u1")

    assert len(wins) == 1
    assert wins[0].id == str(win_id)
    assert wins[0].size == WinSize.MEDIUM


@pytest.mark.asyncio
async def test_get_challenge_missing(store, mock_cursor):
    assert await store.get_challenge("u1", "missing") is None


@pytest.mark.asyncio
async def test_get_challenge_from_payload(store, mock_cursor):
    mock_cursor.fetchone.return_value = {"payload": {
        "id": "c1",
        "title": "Power Walk",
        "category": "fitness",
        "difficulty": "easy",
        "duration": "daily",
        "xp_reward": 50,
        "is_active": True,
    }}

    challenge = await store.get_challenge("u1", "c1")

    assert challenge.id == "c1"
    assert challenge.is_active is True
