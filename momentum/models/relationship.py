"""Relationship and interaction models"""
from enum import Enum
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4
from zoneinfo import ZoneInfo
from pydantic import BaseModel, Field, field_validator

from momentum import config


def as_local_aware(moment: datetime) -> datetime:
    """Naive datetimes are taken to be in the user's timezone"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=ZoneInfo(config.USER_TIMEZONE))
    return moment


class RelationshipCategory(str, Enum):
    """Role a person plays in the user's life"""
    MENTOR = "mentor"
    PEER = "peer"
    SUPPORTER = "supporter"
    ASPIRATIONAL = "aspirational"
    PROFESSIONAL = "professional"
    PERSONAL = "personal"


class ContactGoal(str, Enum):
    """How often the user wants to be in touch"""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @property
    def days(self) -> int:
        return {
            ContactGoal.WEEKLY: 7,
            ContactGoal.BIWEEKLY: 14,
            ContactGoal.MONTHLY: 30,
            ContactGoal.QUARTERLY: 90,
        }[self]


class HealthStatus(str, Enum):
    """Relationship health relative to the contact goal"""
    HEALTHY = "healthy"
    WARNING = "warning"
    NEGLECTED = "neglected"
    NEUTRAL = "neutral"


class InteractionType(str, Enum):
    CALL = "call"
    MESSAGE = "message"
    IN_PERSON = "in_person"
    SENT_GIFT = "sent_gift"
    HELPED_THEM = "helped_them"
    THEY_HELPED_ME = "they_helped_me"


class Initiator(str, Enum):
    ME = "me"
    THEM = "them"


class Interaction(BaseModel):
    """A logged contact with someone"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    interaction_type: InteractionType
    initiated_by: Initiator = Initiator.ME
    notes: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("created_at")
    @classmethod
    def localize_created_at(cls, v: datetime) -> datetime:
        return as_local_aware(v)


class Relationship(BaseModel):
    """A person the user is investing in, with their interaction history"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    category: RelationshipCategory
    contact_goal: ContactGoal = ContactGoal.MONTHLY
    notes: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    interactions: list[Interaction] = Field(default_factory=list)

    @property
    def last_interaction(self) -> Optional[Interaction]:
        if not self.interactions:
            return None
        return max(self.interactions, key=lambda i: i.created_at)

    def days_since_last_contact(self, now: datetime) -> Optional[int]:
        last = self.last_interaction
        if last is None:
            return None
        return (as_local_aware(now) - last.created_at).days

    def health_status(self, now: datetime) -> HealthStatus:
        days = self.days_since_last_contact(now)
        if days is None:
            return HealthStatus.NEUTRAL

        goal_days = self.contact_goal.days
        if days <= goal_days:
            return HealthStatus.HEALTHY
        elif days <= goal_days * 2:
            return HealthStatus.WARNING
        return HealthStatus.NEGLECTED

    def has_weekly_contact(self, now: datetime, weeks: int = 4) -> bool:
        """True when every one of the last `weeks` 7-day windows has an interaction"""
        now = as_local_aware(now)
        for week in range(weeks):
            window_end = now - timedelta(days=7 * week)
            window_start = window_end - timedelta(days=7)
            if not any(window_start < i.created_at <= window_end for i in self.interactions):
                return False
        return True
