"""Goal and micro-action models"""
from enum import Enum
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field

from momentum.models.win import Win


class GoalCategory(str, Enum):
    """Goal focus areas"""
    ADVENTURE = "adventure"
    CAREER = "career"
    WEALTH = "wealth"
    RELATIONSHIPS = "relationships"
    GROWTH = "growth"
    WELLNESS = "wellness"
    WILDCARD = "wildcard"  # internal only, never offered to users


class ActionType(str, Enum):
    """Kinds of micro-action"""
    DO = "do"
    RESEARCH = "research"
    CONNECT = "connect"
    REFLECT = "reflect"
    CREATE = "create"


class MicroAction(BaseModel):
    """A small step toward a goal"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    action_type: ActionType = ActionType.DO
    is_completed: bool = False
    scheduled_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def complete(self, now: Optional[datetime] = None) -> None:
        self.is_completed = True
        self.completed_at = now or datetime.now(timezone.utc)


class Goal(BaseModel):
    """A goal owning its actions and associated wins"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    affirmation: str = ""
    category: GoalCategory
    target_date: Optional[datetime] = None
    is_archived: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    actions: list[MicroAction] = Field(default_factory=list)
    wins: list[Win] = Field(default_factory=list)

    @property
    def completed_actions(self) -> list[MicroAction]:
        return [a for a in self.actions if a.is_completed]

    @property
    def active_actions(self) -> list[MicroAction]:
        return [a for a in self.actions if not a.is_completed]

    @property
    def progress_percentage(self) -> float:
        """Fraction of actions completed, 0 when the goal has none"""
        if not self.actions:
            return 0.0
        return len(self.completed_actions) / len(self.actions)
