"""
GamificationService - Gamification Business Logic

Applies the engine's decisions: loads a user's progress, runs the matching
decide_* function, persists the outcome in one store write and only then
hands the outcome's events to the dispatcher.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from momentum import config
from momentum.db.store import ProgressStore
from momentum.exceptions import RecordNotFoundError
from momentum.gamification import challenges as challenge_lifecycle
from momentum.gamification.achievement_system import get_badge_progress
from momentum.gamification.badges import BadgeContext
from momentum.gamification.engine import (
    GamificationOutcome,
    decide_action_completion,
    decide_challenge_completion,
    decide_goal_progress,
    decide_interaction,
    decide_win_logged,
)
from momentum.gamification.events import EventDispatcher
from momentum.gamification.streak_system import DayBoundary
from momentum.gamification.xp_system import calculate_level_from_xp
from momentum.models.challenge import Challenge, ChallengeReflection
from momentum.models.goal import Goal
from momentum.models.progress import AggregateSnapshot, ProgressState
from momentum.models.relationship import Interaction, Relationship
from momentum.models.win import Win
from momentum.monitoring import record_outcome

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _UserLock:
    """A user's mutation lock and the number of callers holding or awaiting it"""

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - Serialising updates per user
    - Persisting XP, streak, badges, wins and challenges atomically
    - Dispatching celebration events after the write succeeded
    - Progress and badge reads
    """

    def __init__(
        self,
        store: ProgressStore,
        dispatcher: Optional[EventDispatcher] = None,
        day_boundary: Optional[DayBoundary] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize GamificationService.

        Args:
            store: Progress store
            dispatcher: Receives events of persisted outcomes
            day_boundary: User's calendar day (defaults to USER_TIMEZONE)
            clock: Source of "now" for calls that omit a timestamp
        """
        self.store = store
        self.dispatcher = dispatcher or EventDispatcher()
        self.day_boundary = day_boundary or DayBoundary(config.USER_TIMEZONE)
        self.clock = clock or _utcnow
        self._locks: Dict[str, _UserLock] = {}
        logger.debug("GamificationService initialized")

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        """Serialise mutations per user; the lock is dropped once nobody holds or awaits it"""
        entry = self._locks.get(user_id)
        if entry is None:
            entry = self._locks[user_id] = _UserLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[user_id]

    async def _decide_and_save(
        self,
        user_id: str,
        decide: Callable[[ProgressState], GamificationOutcome],
        extra_wins: Optional[List[Win]] = None
    ) -> GamificationOutcome:
        """Load, decide and persist; callers hold the user's lock"""
        state = await self.store.load_state(user_id)
        outcome = decide(state)

        wins = list(extra_wins or []) + outcome.wins_created
        if outcome.applied:
            await self.store.save_outcome(
                user_id,
                outcome.state,
                wins,
                outcome.badges_unlocked,
                challenge=outcome.challenge
            )
        return outcome

    async def _apply(
        self,
        user_id: str,
        decide: Callable[[ProgressState], GamificationOutcome],
        extra_wins: Optional[List[Win]] = None
    ) -> GamificationOutcome:
        async with self._user_lock(user_id):
            outcome = await self._decide_and_save(user_id, decide, extra_wins)
        return await self._publish(user_id, outcome)

    async def _publish(self, user_id: str, outcome: GamificationOutcome) -> GamificationOutcome:
        record_outcome(outcome)
        if outcome.applied:
            await self.dispatcher.dispatch(outcome.events)

        logger.info(
            f"{outcome.trigger} for user {user_id}: +{outcome.xp_awarded} XP, "
            f"badges={outcome.badges_unlocked}, wins={len(outcome.wins_created)}"
        )
        return outcome

    # ============================================
    # Triggers
    # ============================================

    async def record_action_completion(
        self,
        user_id: str,
        snapshot: AggregateSnapshot,
        completed_at: Optional[datetime] = None
    ) -> GamificationOutcome:
        """
        Process gamification for a completed micro-action.

        Args:
            user_id: User identifier
            snapshot: Action counters before this completion
            completed_at: Completion time (defaults to now)
        """
        completed_at = completed_at or self.clock()
        return await self._apply(
            user_id,
            lambda state: decide_action_completion(state, snapshot, completed_at, self.day_boundary)
        )

    async def record_win_logged(
        self,
        user_id: str,
        win: Win,
        snapshot: AggregateSnapshot
    ) -> GamificationOutcome:
        """Store a user-authored win and unlock win badges"""
        return await self._apply(
            user_id,
            lambda state: decide_win_logged(state, snapshot, win),
            extra_wins=[win]
        )

    async def record_challenge_completion(
        self,
        user_id: str,
        challenge_id: str,
        snapshot: AggregateSnapshot,
        reflection: Optional[ChallengeReflection] = None,
        completed_at: Optional[datetime] = None
    ) -> GamificationOutcome:
        """
        Complete one of the user's stored challenges.

        The challenge is read under the user's lock, so a second completion
        sees the first one's terminal state.

        Raises:
            RecordNotFoundError: If the user has no such challenge
        """
        completed_at = completed_at or self.clock()
        async with self._user_lock(user_id):
            challenge = await self.get_challenge(user_id, challenge_id)
            outcome = await self._decide_and_save(
                user_id,
                lambda state: decide_challenge_completion(
                    state, snapshot, challenge, completed_at, reflection
                )
            )
        return await self._publish(user_id, outcome)

    async def record_interaction(
        self,
        user_id: str,
        interaction: Interaction,
        relationship: Relationship,
        all_relationships: List[Relationship],
        snapshot: Optional[AggregateSnapshot] = None,
        now: Optional[datetime] = None
    ) -> GamificationOutcome:
        now = now or self.clock()
        return await self._apply(
            user_id,
            lambda state: decide_interaction(
                state, interaction, relationship, all_relationships, now, snapshot
            )
        )

    async def record_goal_progress(
        self,
        user_id: str,
        goal: Goal,
        previous_progress: float,
        snapshot: Optional[AggregateSnapshot] = None,
        now: Optional[datetime] = None
    ) -> GamificationOutcome:
        now = now or self.clock()
        return await self._apply(
            user_id,
            lambda state: decide_goal_progress(state, goal, previous_progress, now, snapshot)
        )

    # ============================================
    # Challenge lifecycle
    # ============================================

    async def accept_challenge(
        self,
        user_id: str,
        challenge: Challenge,
        now: Optional[datetime] = None
    ) -> Optional[Challenge]:
        """
        Accept a challenge and store it

        Returns:
            The accepted challenge, or None if the transition was rejected
        """
        challenge = challenge.model_copy(deep=True)
        async with self._user_lock(user_id):
            if not challenge_lifecycle.accept_challenge(challenge, now or self.clock()):
                return None
            await self.store.save_challenge(user_id, challenge)
        return challenge

    async def abandon_challenge(
        self,
        user_id: str,
        challenge_id: str,
        now: Optional[datetime] = None
    ) -> Optional[Challenge]:
        """
        Abandon one of the user's stored challenges

        Returns:
            The abandoned challenge, or None if the transition was rejected
        """
        async with self._user_lock(user_id):
            challenge = await self.get_challenge(user_id, challenge_id)
            if not challenge_lifecycle.abandon_challenge(challenge, now or self.clock()):
                return None
            await self.store.save_challenge(user_id, challenge)
        return challenge

    async def get_challenge(self, user_id: str, challenge_id: str) -> Challenge:
        challenge = await self.store.get_challenge(user_id, challenge_id)
        if challenge is None:
            raise RecordNotFoundError(
                f"Challenge {challenge_id} not found",
                record_type="Challenge",
                record_id=challenge_id,
                user_id=user_id,
                operation="get_challenge",
            )
        return challenge

    async def list_challenges(self, user_id: str) -> List[Challenge]:
        return await self.store.list_challenges(user_id)

    # ============================================
    # Reads
    # ============================================

    async def get_progress(self, user_id: str) -> Dict[str, Any]:
        """
        Get XP, level and streak for display.

        Returns:
            {
                'user_id': str,
                'total_xp': int,
                'current_level': int,
                'level_title': str,
                'xp_in_current_level': int,
                'xp_to_next_level': int,
                'level_progress': float,
                'current_streak': int,
                'last_active_day': date or None,
                'earned_badges': sorted list of badge ids
            }
        """
        state = await self.store.load_state(user_id)
        return {
            "user_id": user_id,
            "total_xp": state.total_xp,
            **calculate_level_from_xp(state.total_xp),
            "current_streak": state.current_streak,
            "last_active_day": state.last_active_day,
            "earned_badges": sorted(state.earned_badges),
        }

    async def get_badges(
        self,
        user_id: str,
        snapshot: Optional[AggregateSnapshot] = None
    ) -> Dict[str, Any]:
        """Earned badges plus progress toward locked ones (counters from the snapshot)"""
        state = await self.store.load_state(user_id)
        snapshot = snapshot or AggregateSnapshot()
        context = BadgeContext(
            total_actions=snapshot.total_actions_completed,
            weekend_actions=snapshot.weekend_actions_completed,
            current_streak=state.current_streak,
            total_wins=snapshot.total_wins,
            has_big_win=snapshot.has_big_win,
            total_challenges=snapshot.total_challenges_completed,
        )
        return get_badge_progress(state.earned_badges, context)

    async def list_wins(self, user_id: str) -> List[Win]:
        return await self.store.list_wins(user_id)
