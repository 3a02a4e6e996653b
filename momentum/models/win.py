"""Win models"""
from enum import Enum
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field, field_validator


class WinSize(str, Enum):
    """How big a win felt"""
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    BIG = "big"
    MASSIVE = "massive"

    @property
    def is_big_or_larger(self) -> bool:
        return self in (WinSize.BIG, WinSize.MASSIVE)

    @property
    def confetti_intensity(self) -> int:
        return {
            WinSize.TINY: 20,
            WinSize.SMALL: 50,
            WinSize.MEDIUM: 100,
            WinSize.BIG: 200,
            WinSize.MASSIVE: 300,
        }[self]


class Win(BaseModel):
    """A user- or engine-recorded accomplishment"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    description: str
    size: WinSize
    emotion: int = 3
    category: Optional[str] = None
    goal_id: Optional[str] = None
    action_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("emotion")
    @classmethod
    def clamp_emotion(cls, v: int) -> int:
        """Emotion is a 1-5 rating"""
        return min(5, max(1, v))
