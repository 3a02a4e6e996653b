"""Pydantic models for API request/response validation"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from momentum.gamification.engine import GamificationOutcome
from momentum.models.challenge import Challenge, ChallengeReflection
from momentum.models.goal import Goal
from momentum.models.progress import AggregateSnapshot
from momentum.models.relationship import Interaction, Relationship
from momentum.models.win import Win, WinSize


class ActionCompletionRequest(BaseModel):
    """Request to record a completed micro-action"""
    snapshot: AggregateSnapshot = Field(
        default_factory=AggregateSnapshot,
        description="Counters before this completion"
    )
    completed_at: Optional[datetime] = Field(
        default=None,
        description="When the action was completed (defaults to now)"
    )


class WinLogRequest(BaseModel):
    """Request to log a user-authored win"""
    description: str = Field(..., min_length=1, description="What was achieved")
    size: WinSize = WinSize.SMALL
    emotion: int = Field(default=3, description="How it felt, 1-5")
    category: Optional[str] = None
    goal_id: Optional[str] = None
    action_id: Optional[str] = None
    snapshot: AggregateSnapshot = Field(
        default_factory=AggregateSnapshot,
        description="Win counters before this win"
    )

    def to_win(self) -> Win:
        return Win(
            description=self.description,
            size=self.size,
            emotion=self.emotion,
            category=self.category,
            goal_id=self.goal_id,
            action_id=self.action_id,
        )


class ChallengeAcceptRequest(BaseModel):
    """Request to accept a challenge"""
    challenge: Challenge


class ChallengeCompleteRequest(BaseModel):
    """Request to complete an accepted challenge"""
    reflection: Optional[ChallengeReflection] = None
    snapshot: AggregateSnapshot = Field(default_factory=AggregateSnapshot)
    completed_at: Optional[datetime] = None


class InteractionRequest(BaseModel):
    """Request to record a relationship interaction"""
    interaction: Interaction
    relationship: Relationship
    all_relationships: List[Relationship] = Field(
        default_factory=list,
        description="Every relationship of the user"
    )
    snapshot: AggregateSnapshot = Field(default_factory=AggregateSnapshot)


class GoalProgressRequest(BaseModel):
    """Request to check a goal for a newly crossed milestone"""
    goal: Goal
    previous_progress: float = Field(..., description="Progress fraction before the change")
    snapshot: AggregateSnapshot = Field(default_factory=AggregateSnapshot)


class OutcomeResponse(BaseModel):
    """What one recorded event earned"""
    user_id: str
    trigger: str
    applied: bool
    total_xp: int
    xp_awarded: int
    level: int
    leveled_up: bool
    level_title: str
    current_streak: int
    badges_unlocked: List[str]
    wins_created: List[Win]
    milestone: Optional[str] = None
    challenge: Optional[Challenge] = None
    events: List[Dict[str, Any]]

    @classmethod
    def from_outcome(cls, outcome: GamificationOutcome) -> "OutcomeResponse":
        return cls(
            user_id=outcome.state.user_id,
            trigger=outcome.trigger,
            applied=outcome.applied,
            total_xp=outcome.state.total_xp,
            xp_awarded=outcome.xp_awarded,
            level=outcome.level_change.new_level,
            leveled_up=outcome.level_change.leveled_up,
            level_title=outcome.level_change.new_title,
            current_streak=outcome.state.current_streak,
            badges_unlocked=outcome.badges_unlocked,
            wins_created=outcome.wins_created,
            milestone=outcome.milestone.name.lower() if outcome.milestone else None,
            challenge=outcome.challenge,
            events=[event.model_dump(mode="json") for event in outcome.events],
        )


class ProgressResponse(BaseModel):
    """User XP, level and streak"""
    user_id: str
    total_xp: int
    current_level: int
    level_title: str
    xp_in_current_level: int
    xp_to_next_level: int
    level_progress: float
    current_streak: int
    last_active_day: Optional[date] = None
    earned_badges: List[str]


class BadgeResponse(BaseModel):
    """Earned badges and progress toward locked ones"""
    user_id: str
    earned: List[Dict[str, Any]]
    locked: List[Dict[str, Any]]
    total_earned: int
    total_badges: int
    total_xp_from_badges: int


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str
    store: str
    timestamp: datetime
