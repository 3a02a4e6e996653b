"""
Challenge System

Pre-built challenge templates filtered by the user's goal focus areas, and
the challenge lifecycle:

    template --to_challenge()--> inert --accept--> active --complete--> completed
                                                          --abandon---> abandoned

Completed and abandoned are terminal. expires_at is advisory: an expired
challenge is never failed automatically, the user may still complete or
abandon it.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Set

from momentum.exceptions import InvalidChallengeStateError, enforce_contract
from momentum.models.challenge import (
    Challenge,
    ChallengeCategory,
    ChallengeDifficulty,
    ChallengeDuration,
    ChallengeReflection,
)
from momentum.models.goal import GoalCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChallengeTemplate:
    """Challenge definition offered to users"""
    title: str
    description: str
    category: ChallengeCategory
    difficulty: ChallengeDifficulty
    duration: ChallengeDuration

    @property
    def xp_reward(self) -> int:
        return int(self.duration.base_xp * self.difficulty.xp_multiplier)

    def to_challenge(self) -> Challenge:
        return Challenge(
            title=self.title,
            description=self.description,
            category=self.category,
            difficulty=self.difficulty,
            duration=self.duration,
            xp_reward=self.xp_reward,
        )


def _t(title, description, category, difficulty, duration) -> ChallengeTemplate:
    return ChallengeTemplate(title, description, category, difficulty, duration)


C = ChallengeCategory
D = ChallengeDifficulty
DAILY = ChallengeDuration.DAILY
WEEKLY = ChallengeDuration.WEEKLY
MONTHLY = ChallengeDuration.MONTHLY


# ============================================
# Challenge Template Library
# ============================================
# Each entry: (focus areas that unlock it or None for everyone, templates)

DAILY_TEMPLATES = [
    (None, [
        _t("Morning Manifestation", "Write down 3 things you're grateful for before 9am", C.MINDSET, D.EASY, DAILY),
        _t("Affirmation Power", "Say your affirmation out loud 5 times", C.MINDSET, D.EASY, DAILY),
        _t("Digital Detox Hour", "No phone for 1 hour (not including sleep)", C.WELLNESS, D.MEDIUM, DAILY),
    ]),
    ({GoalCategory.WELLNESS, GoalCategory.ADVENTURE}, [
        _t("Power Walk", "Take a 30-minute walk outdoors", C.FITNESS, D.EASY, DAILY),
        _t("Morning Movement", "10 minutes of stretching or yoga before noon", C.FITNESS, D.EASY, DAILY),
        _t("Stairway to Goals", "Take the stairs instead of elevators all day", C.FITNESS, D.MEDIUM, DAILY),
    ]),
    ({GoalCategory.RELATIONSHIPS}, [
        _t("Reach Out", "Text or call someone you haven't talked to in 2+ weeks", C.SOCIAL, D.EASY, DAILY),
        _t("Genuine Compliment", "Give 3 genuine compliments to different people", C.SOCIAL, D.EASY, DAILY),
        _t("Voice Note Love", "Send a voice message to a friend instead of texting", C.SOCIAL, D.EASY, DAILY),
    ]),
    ({GoalCategory.CAREER, GoalCategory.GROWTH}, [
        _t("Learn Something New", "Watch a 15+ minute educational video", C.GROWTH, D.EASY, DAILY),
        _t("Network Nudge", "Connect with 1 new person on LinkedIn", C.GROWTH, D.MEDIUM, DAILY),
        _t("Skill Stack", "Spend 30 minutes learning a new skill", C.GROWTH, D.MEDIUM, DAILY),
    ]),
    ({GoalCategory.ADVENTURE}, [
        _t("New Route", "Take a different route somewhere today", C.ADVENTURE, D.EASY, DAILY),
        _t("Say Yes", "Say yes to something you'd normally say no to", C.ADVENTURE, D.MEDIUM, DAILY),
        _t("Solo Adventure", "Do one activity alone that you'd usually do with others", C.ADVENTURE, D.MEDIUM, DAILY),
    ]),
    (None, [
        _t("Creative 15", "Spend 15 minutes on a creative activity", C.CREATIVITY, D.EASY, DAILY),
        _t("Photo Moment", "Take a photo of something beautiful you notice", C.CREATIVITY, D.EASY, DAILY),
    ]),
]

WEEKLY_TEMPLATES = [
    (None, [
        _t("Consistency Champ", "Complete your morning routine 5 days this week", C.MINDSET, D.MEDIUM, WEEKLY),
        _t("Reflection Sunday", "Write a full journal entry reviewing your week", C.MINDSET, D.EASY, WEEKLY),
        _t("Action Streak", "Complete at least 3 micro-actions every day for 7 days", C.GROWTH, D.HARD, WEEKLY),
    ]),
    ({GoalCategory.WELLNESS, GoalCategory.ADVENTURE}, [
        _t("Move Your Body", "Exercise 4 times this week", C.FITNESS, D.MEDIUM, WEEKLY),
        _t("Hydration Station", "Drink 8 glasses of water every day for 7 days", C.WELLNESS, D.MEDIUM, WEEKLY),
        _t("Early Bird", "Wake up before 7am 5 days this week", C.WELLNESS, D.HARD, WEEKLY),
    ]),
    ({GoalCategory.RELATIONSHIPS}, [
        _t("Connection Week", "Have a meaningful conversation with 5 different people", C.SOCIAL, D.MEDIUM, WEEKLY),
        _t("Quality Time", "Spend 2+ hours of uninterrupted time with someone you love", C.SOCIAL, D.EASY, WEEKLY),
    ]),
    ({GoalCategory.ADVENTURE}, [
        _t("Explorer Mode", "Visit a place in your city you've never been to", C.ADVENTURE, D.MEDIUM, WEEKLY),
        _t("Try Something New", "Try a new restaurant, activity, or hobby", C.ADVENTURE, D.EASY, WEEKLY),
    ]),
]

MONTHLY_TEMPLATES = [
    (None, [
        _t("30-Day Journal Streak", "Write in your journal every single day", C.MINDSET, D.EPIC, MONTHLY),
        _t("Goal Crusher", "Complete 50 micro-actions this month", C.GROWTH, D.HARD, MONTHLY),
        _t("Digital Minimalist", "Reduce screen time by 1 hour daily average", C.WELLNESS, D.HARD, MONTHLY),
    ]),
    ({GoalCategory.WELLNESS}, [
        _t("Fitness Month", "Work out 20 times this month", C.FITNESS, D.EPIC, MONTHLY),
        _t("Sleep Routine", "Go to bed before 11pm for 20 days", C.WELLNESS, D.HARD, MONTHLY),
    ]),
    ({GoalCategory.CAREER}, [
        _t("Skill Master", "Complete an online course or certification", C.GROWTH, D.EPIC, MONTHLY),
        _t("Network Builder", "Have 10 career-related conversations", C.SOCIAL, D.HARD, MONTHLY),
    ]),
]

_LIBRARY = {
    DAILY: DAILY_TEMPLATES,
    WEEKLY: WEEKLY_TEMPLATES,
    MONTHLY: MONTHLY_TEMPLATES,
}


def get_challenge_templates(
    duration: ChallengeDuration,
    focus_areas: Set[GoalCategory]
) -> List[ChallengeTemplate]:
    """
    Templates of one duration available for the user's focus areas

    Args:
        duration: daily, weekly or monthly
        focus_areas: Categories of the user's goals

    Returns:
        Matching templates in library order
    """
    templates = []
    for required_areas, group in _LIBRARY[duration]:
        if required_areas is None or required_areas & focus_areas:
            templates.extend(group)
    return templates


# ============================================
# Challenge Lifecycle
# ============================================

def add_months(moment: datetime, months: int) -> datetime:
    """Same day-of-month `months` later, clamped to the month's last day"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def expiry_for(duration: ChallengeDuration, started_at: datetime) -> datetime:
    if duration == ChallengeDuration.DAILY:
        return started_at + timedelta(days=1)
    elif duration == ChallengeDuration.WEEKLY:
        return started_at + timedelta(days=7)
    return add_months(started_at, 1)


def _reject(challenge: Challenge, transition: str, reason: str) -> bool:
    enforce_contract(InvalidChallengeStateError(
        f"Cannot {transition} challenge '{challenge.title}': {reason}",
        challenge_id=challenge.id,
        transition=transition,
        operation=f"{transition}_challenge",
    ))
    return False


def accept_challenge(challenge: Challenge, now: datetime) -> bool:
    """
    Accept an inert challenge

    Returns:
        True if the transition was applied
    """
    if challenge.is_completed or challenge.is_abandoned:
        return _reject(challenge, "accept", "challenge already finished")
    if challenge.is_active:
        return _reject(challenge, "accept", "challenge already active")

    challenge.is_active = True
    challenge.started_at = now
    challenge.expires_at = expiry_for(challenge.duration, now)

    logger.info(f"Challenge accepted: {challenge.title} (expires {challenge.expires_at.isoformat()})")
    return True


def complete_challenge(
    challenge: Challenge,
    now: datetime,
    reflection: Optional[ChallengeReflection] = None
) -> bool:
    """
    Mark an active challenge completed and attach the reflection

    Returns:
        True if the transition was applied
    """
    if challenge.is_completed:
        return _reject(challenge, "complete", "challenge already completed")
    if challenge.is_abandoned:
        return _reject(challenge, "complete", "challenge was abandoned")
    if not challenge.is_active:
        return _reject(challenge, "complete", "challenge was never accepted")

    if challenge.is_expired(now):
        logger.info(f"Completing expired challenge: {challenge.title}")

    challenge.is_completed = True
    challenge.is_active = False
    challenge.completed_at = now
    challenge.reflection = reflection or ChallengeReflection()
    return True


def abandon_challenge(challenge: Challenge, now: datetime) -> bool:
    """
    Give up on an active, uncompleted challenge (expired or not)

    Returns:
        True if the transition was applied
    """
    if challenge.is_completed:
        return _reject(challenge, "abandon", "challenge already completed")
    if challenge.is_abandoned:
        return _reject(challenge, "abandon", "challenge already abandoned")
    if not challenge.is_active:
        return _reject(challenge, "abandon", "challenge was never accepted")

    challenge.is_active = False
    challenge.abandoned_at = now

    logger.info(f"Challenge abandoned: {challenge.title}")
    return True
