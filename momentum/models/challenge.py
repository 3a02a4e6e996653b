"""Challenge models"""
from enum import Enum
from datetime import datetime
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field, field_validator

from momentum.models.win import WinSize


class ChallengeCategory(str, Enum):
    """Challenge categories"""
    MINDSET = "mindset"
    FITNESS = "fitness"
    SOCIAL = "social"
    GROWTH = "growth"
    ADVENTURE = "adventure"
    CREATIVITY = "creativity"
    WELLNESS = "wellness"


class ChallengeDifficulty(str, Enum):
    """Challenge difficulty levels"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EPIC = "epic"

    @property
    def xp_multiplier(self) -> float:
        return {
            ChallengeDifficulty.EASY: 1.0,
            ChallengeDifficulty.MEDIUM: 1.5,
            ChallengeDifficulty.HARD: 2.0,
            ChallengeDifficulty.EPIC: 3.0,
        }[self]


class ChallengeDuration(str, Enum):
    """How long a challenge runs once accepted"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def base_xp(self) -> int:
        return {
            ChallengeDuration.DAILY: 50,
            ChallengeDuration.WEEKLY: 200,
            ChallengeDuration.MONTHLY: 500,
        }[self]


# Difficulty -> size of the win logged on completion
DIFFICULTY_WIN_SIZE: dict[ChallengeDifficulty, WinSize] = {
    ChallengeDifficulty.EASY: WinSize.SMALL,
    ChallengeDifficulty.MEDIUM: WinSize.MEDIUM,
    ChallengeDifficulty.HARD: WinSize.BIG,
    ChallengeDifficulty.EPIC: WinSize.MASSIVE,
}


class ChallengeReflection(BaseModel):
    """Journal-like reflection attached on completion"""
    notes: str = ""
    emotion: int = 3
    photo_ref: Optional[str] = None
    voice_memo_ref: Optional[str] = None

    @field_validator("emotion")
    @classmethod
    def clamp_emotion(cls, v: int) -> int:
        return min(5, max(1, v))


class Challenge(BaseModel):
    """
    A challenge instance.

    Lifecycle: inert (from a template) -> active (accepted) -> completed or
    abandoned. Completed and abandoned are terminal.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    description: str = ""
    category: ChallengeCategory
    difficulty: ChallengeDifficulty
    duration: ChallengeDuration
    xp_reward: int = Field(ge=0)
    is_active: bool = False
    is_completed: bool = False
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    abandoned_at: Optional[datetime] = None
    reflection: Optional[ChallengeReflection] = None

    @property
    def corresponding_win_size(self) -> WinSize:
        return DIFFICULTY_WIN_SIZE[self.difficulty]

    @property
    def is_abandoned(self) -> bool:
        return self.abandoned_at is not None

    def is_expired(self, now: datetime) -> bool:
        """Advisory only: an expired challenge can still be completed or abandoned"""
        return (
            self.is_active
            and not self.is_completed
            and self.expires_at is not None
            and now >= self.expires_at
        )
