"""Unit tests for Pydantic models"""
import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError

from momentum import config
from momentum.models.challenge import (
    Challenge,
    ChallengeCategory,
    ChallengeDifficulty,
    ChallengeDuration,
    ChallengeReflection,
)
from momentum.models.goal import Goal, GoalCategory, MicroAction
from momentum.models.progress import AggregateSnapshot, ProgressState
from momentum.models.relationship import (
    ContactGoal,
    HealthStatus,
    Interaction,
    InteractionType,
    Relationship,
    RelationshipCategory,
)
from momentum.models.win import Win, WinSize


NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


def test_progress_state_defaults():
    """Test a fresh user starts at zero"""
    state = ProgressState(user_id="user-42")

    assert state.total_xp == 0
    assert state.current_streak == 0
    assert state.last_active_day is None
    assert state.earned_badges == set()


def test_progress_state_rejects_negative_xp():
    with pytest.raises(ValidationError):
        ProgressState(user_id="user-42", total_xp=-1)


def test_snapshot_rejects_negative_counts():
    with pytest.raises(ValidationError):
        AggregateSnapshot(total_wins=-3)


@pytest.mark.parametrize("given,expected", [(0, 1), (3, 3), (9, 5)])
def test_win_emotion_is_clamped(given, expected):
    win = Win(description="Ran 5k", size=WinSize.MEDIUM, emotion=given)
    assert win.emotion == expected


def test_win_size_properties():
    assert WinSize.BIG.is_big_or_larger
    assert WinSize.MASSIVE.is_big_or_larger
    assert not WinSize.MEDIUM.is_big_or_larger
    assert WinSize.TINY.confetti_intensity < WinSize.MASSIVE.confetti_intensity


def test_reflection_emotion_is_clamped():
    assert ChallengeReflection(emotion=0).emotion == 1


class TestGoal:
    """Test goal progress"""

    def test_empty_goal_has_zero_progress(self):
        goal = Goal(title="Learn Spanish", category=GoalCategory.GROWTH)
        assert goal.progress_percentage == 0.0

    def test_progress_is_fraction_of_completed_actions(self):
        actions = [MicroAction(title=f"Lesson {i}") for i in range(4)]
        actions[0].complete(NOW)
        goal = Goal(title="Learn Spanish", category=GoalCategory.GROWTH, actions=actions)

        assert goal.progress_percentage == 0.25
        assert len(goal.completed_actions) == 1
        assert len(goal.active_actions) == 3
        assert actions[0].completed_at == NOW


class TestChallenge:
    """Test challenge derived properties"""

    def _challenge(self, **kwargs):
        return Challenge(
            title="Cold shower",
            category=ChallengeCategory.WELLNESS,
            difficulty=ChallengeDifficulty.HARD,
            duration=ChallengeDuration.DAILY,
            xp_reward=100,
            **kwargs
        )

    def test_win_size_follows_difficulty(self):
        assert self._challenge().corresponding_win_size == WinSize.BIG

    def test_inert_challenge_never_expires(self):
        challenge = self._challenge(expires_at=NOW - timedelta(days=1))
        assert not challenge.is_expired(NOW)

    def test_active_challenge_expires(self):
        challenge = self._challenge(is_active=True, expires_at=NOW)
        assert challenge.is_expired(NOW)
        assert not challenge.is_expired(NOW - timedelta(seconds=1))


class TestRelationship:
    """Test relationship health"""

    def _relationship(self, *days_ago, goal=ContactGoal.WEEKLY):
        return Relationship(
            name="Sam",
            category=RelationshipCategory.MENTOR,
            contact_goal=goal,
            interactions=[
                Interaction(interaction_type=InteractionType.CALL, created_at=NOW - timedelta(days=d))
                for d in days_ago
            ]
        )

    def test_no_interactions_is_neutral(self):
        relationship = self._relationship()
        assert relationship.health_status(NOW) == HealthStatus.NEUTRAL
        assert relationship.days_since_last_contact(NOW) is None

    @pytest.mark.parametrize("days_ago,expected", [
        (3, HealthStatus.HEALTHY),
        (7, HealthStatus.HEALTHY),
        (10, HealthStatus.WARNING),
        (15, HealthStatus.NEGLECTED),
    ])
    def test_health_relative_to_contact_goal(self, days_ago, expected):
        assert self._relationship(days_ago).health_status(NOW) == expected

    def test_last_interaction_is_most_recent(self):
        relationship = self._relationship(20, 2, 9)
        assert relationship.days_since_last_contact(NOW) == 2

    def test_weekly_contact_for_four_weeks(self):
        assert self._relationship(1, 8, 15, 22).has_weekly_contact(NOW)

    def test_gap_breaks_weekly_contact(self):
        assert not self._relationship(1, 8, 22).has_weekly_contact(NOW)


def test_naive_interaction_time_is_localized(monkeypatch):
    """Naive timestamps are read in the user's timezone"""
    monkeypatch.setattr(config, "USER_TIMEZONE", "America/New_York")
    interaction = Interaction(interaction_type=InteractionType.CALL, created_at=datetime(2024, 1, 10, 9, 0))

    assert interaction.created_at.tzinfo is not None
    assert interaction.created_at.astimezone(timezone.utc) == datetime(2024, 1, 10, 14, 0, tzinfo=timezone.utc)


def test_naive_times_compare_with_aware_now(monkeypatch):
    monkeypatch.setattr(config, "USER_TIMEZONE", "UTC")
    relationship = Relationship(
        name="Sam",
        category=RelationshipCategory.PEER,
        contact_goal=ContactGoal.WEEKLY,
        interactions=[Interaction(interaction_type=InteractionType.CALL, created_at=datetime(2024, 1, 3, 9, 0))]
    )

    assert relationship.days_since_last_contact(NOW) == 7
    assert relationship.health_status(datetime(2024, 1, 10, 12, 0)) == HealthStatus.HEALTHY
    assert not relationship.has_weekly_contact(NOW)
