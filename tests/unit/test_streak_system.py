"""Unit tests for Streak System (momentum/gamification/streak_system.py)"""
from datetime import date, datetime, timezone

from momentum.gamification.streak_system import DayBoundary, StreakTracker
from momentum.models.progress import ProgressState


def test_first_activity_starts_streak():
    """First ever activity starts a streak at 1"""
    state = ProgressState(user_id="u1")
    update = StreakTracker(state).record_activity(date(2024, 1, 10))

    assert update.started is True
    assert state.current_streak == 1
    assert state.last_active_day == date(2024, 1, 10)


def test_same_day_activity_is_idempotent():
    """Second activity on the same day changes nothing"""
    state = ProgressState(user_id="u1", current_streak=3, last_active_day=date(2024, 1, 10))
    update = StreakTracker(state).record_activity(date(2024, 1, 10))

    assert update.changed is False
    assert state.current_streak == 3
    assert state.last_active_day == date(2024, 1, 10)


def test_next_day_continues_streak():
    """Activity on the following day increments the streak"""
    state = ProgressState(user_id="u1", current_streak=3, last_active_day=date(2024, 1, 10))
    update = StreakTracker(state).record_activity(date(2024, 1, 11))

    assert update.continued is True
    assert state.current_streak == 4
    assert state.last_active_day == date(2024, 1, 11)


def test_gap_resets_streak():
    """Missing a day resets the streak to 1"""
    state = ProgressState(user_id="u1", current_streak=12, last_active_day=date(2024, 1, 10))
    update = StreakTracker(state).record_activity(date(2024, 1, 13))

    assert update.reset is True
    assert update.old_streak == 12
    assert state.current_streak == 1
    assert state.last_active_day == date(2024, 1, 13)


def test_earlier_day_is_ignored():
    """Back-dated activity never moves the streak backwards"""
    state = ProgressState(user_id="u1", current_streak=5, last_active_day=date(2024, 1, 10))
    update = StreakTracker(state).record_activity(date(2024, 1, 8))

    assert update.changed is False
    assert state.current_streak == 5
    assert state.last_active_day == date(2024, 1, 10)


def test_streak_across_month_boundary():
    """Calendar arithmetic crosses month ends"""
    state = ProgressState(user_id="u1", current_streak=2, last_active_day=date(2024, 1, 31))
    StreakTracker(state).record_activity(date(2024, 2, 1))

    assert state.current_streak == 3


def test_day_boundary_uses_user_timezone():
    """A UTC instant maps onto the user's local calendar day"""
    moment = datetime(2024, 1, 11, 3, 0, tzinfo=timezone.utc)

    assert DayBoundary("UTC").local_day(moment) == date(2024, 1, 11)
    assert DayBoundary("America/New_York").local_day(moment) == date(2024, 1, 10)
    assert DayBoundary("America/New_York").local_time(moment).hour == 22


def test_day_boundary_naive_datetime_is_local():
    moment = datetime(2024, 1, 11, 3, 0)
    assert DayBoundary("America/New_York").local_day(moment) == date(2024, 1, 11)
