"""
Progress store interface and in-memory implementation

A store persists the three pieces of user progress (total XP, streak,
earned badges) together with the wins and challenges an outcome produced.
save_outcome is atomic: either everything in it is written or nothing is.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from momentum.models.challenge import Challenge
from momentum.models.progress import ProgressState
from momentum.models.win import Win

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    """Storage used by GamificationService"""

    @abstractmethod
    async def load_state(self, user_id: str) -> ProgressState:
        """Load the user's progress, or a fresh state for a new user"""

    @abstractmethod
    async def save_outcome(
        self,
        user_id: str,
        state: ProgressState,
        wins: List[Win],
        unlocked_badges: List[str],
        challenge: Optional[Challenge] = None
    ) -> None:
        """Atomically persist new state, new wins, new badges and a changed challenge"""

    @abstractmethod
    async def list_wins(self, user_id: str) -> List[Win]:
        """All of the user's wins, newest first"""

    @abstractmethod
    async def save_challenge(self, user_id: str, challenge: Challenge) -> None:
        """Insert or update a challenge"""

    @abstractmethod
    async def get_challenge(self, user_id: str, challenge_id: str) -> Optional[Challenge]:
        """Get one of the user's challenges"""

    @abstractmethod
    async def list_challenges(self, user_id: str) -> List[Challenge]:
        """All of the user's accepted challenges"""


class InMemoryProgressStore(ProgressStore):
    """In-process store; state does not survive a restart"""

    def __init__(self):
        self._states: Dict[str, ProgressState] = {}
        self._wins: Dict[str, List[Win]] = {}
        self._challenges: Dict[str, Dict[str, Challenge]] = {}

    async def load_state(self, user_id: str) -> ProgressState:
        state = self._states.get(user_id)
        if state is None:
            return ProgressState(user_id=user_id)
        return state.model_copy(deep=True)

    async def save_outcome(
        self,
        user_id: str,
        state: ProgressState,
        wins: List[Win],
        unlocked_badges: List[str],
        challenge: Optional[Challenge] = None
    ) -> None:
        # Build everything first so a failure leaves the store untouched
        new_state = state.model_copy(deep=True)
        new_state.earned_badges |= set(unlocked_badges)
        new_wins = self._wins.get(user_id, []) + [w.model_copy(deep=True) for w in wins]

        self._states[user_id] = new_state
        self._wins[user_id] = new_wins
        if challenge is not None:
            self._challenges.setdefault(user_id, {})[challenge.id] = challenge.model_copy(deep=True)

        logger.debug(
            f"Saved progress for user {user_id}: {new_state.total_xp} XP, "
            f"{len(wins)} new win(s), {len(unlocked_badges)} new badge(s)"
        )

    async def list_wins(self, user_id: str) -> List[Win]:
        wins = [w.model_copy(deep=True) for w in self._wins.get(user_id, [])]
        wins.sort(key=lambda w: w.created_at, reverse=True)
        return wins

    async def save_challenge(self, user_id: str, challenge: Challenge) -> None:
        self._challenges.setdefault(user_id, {})[challenge.id] = challenge.model_copy(deep=True)

    async def get_challenge(self, user_id: str, challenge_id: str) -> Optional[Challenge]:
        challenge = self._challenges.get(user_id, {}).get(challenge_id)
        return challenge.model_copy(deep=True) if challenge else None

    async def list_challenges(self, user_id: str) -> List[Challenge]:
        return [c.model_copy(deep=True) for c in self._challenges.get(user_id, {}).values()]
