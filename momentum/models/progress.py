"""User progress models: XP, streak and badge state plus caller-supplied aggregates"""
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class ProgressState(BaseModel):
    """
    Persisted gamification state for one user.

    Level is derived from total_xp and never stored.
    """
    user_id: str
    total_xp: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    last_active_day: Optional[date] = None
    earned_badges: set[str] = Field(default_factory=set)


class AggregateSnapshot(BaseModel):
    """
    Counters pre-fetched by the caller from the store.

    Counts describe persisted state before the triggering event; the engine
    folds the event itself in (the completed action, the logged win, the
    completed challenge).
    """
    total_actions_completed: int = Field(default=0, ge=0)
    weekend_actions_completed: int = Field(default=0, ge=0)
    total_wins: int = Field(default=0, ge=0)
    has_big_win: bool = False
    total_challenges_completed: int = Field(default=0, ge=0)
