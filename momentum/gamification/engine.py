"""
Achievement Orchestration (decision layer)

Pure functions that decide what a user-visible event is worth: XP, streak
change, badge unlocks and auto-generated wins. Each takes the user's
ProgressState plus the event inputs, works on a deep copy and returns a
GamificationOutcome. Nothing here touches a store; GamificationService
persists the outcome and dispatches its events.

Sequences:
- Action completed: +25 XP, streak, streak badges (next-day only),
  time-of-day badges, action-count badges
- Win logged: win-count and big-win badges
- Challenge completed: terminal transition, completion win, challenge XP,
  challenge/category badges, first-epic win, win-count badges
- Interaction logged: first reach-out badge and win, interaction badges, +15 XP
- Goal progress: milestone XP and milestone win
"""

import logging
from collections import Counter
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from momentum import config
from momentum.gamification.achievement_system import evaluate_and_unlock, format_badge_unlock_message
from momentum.gamification.badges import (
    EPIC_CONQUEROR,
    FIRST_REACH_OUT,
    BadgeContext,
    EventKind,
)
from momentum.gamification.challenges import complete_challenge
from momentum.gamification.events import (
    BadgeUnlockedEvent,
    GamificationEvent,
    LevelUpEvent,
    MilestoneReachedEvent,
    StreakUpdatedEvent,
    WinCreatedEvent,
)
from momentum.gamification.milestones import MilestoneType, check_milestone
from momentum.gamification.streak_system import DayBoundary, StreakTracker, StreakUpdate
from momentum.gamification.xp_system import LevelChangeResult, XPLedger, level_for_xp, title_for_level
from momentum.models.challenge import Challenge, ChallengeDifficulty, ChallengeReflection
from momentum.models.goal import Goal
from momentum.models.progress import AggregateSnapshot, ProgressState
from momentum.models.relationship import HealthStatus, Initiator, Interaction, Relationship
from momentum.models.win import Win, WinSize

logger = logging.getLogger(__name__)

CONSISTENT_CONTACT_WEEKS = 4


class GamificationOutcome(BaseModel):
    """Everything one trigger decided; state is the user's state afterwards"""
    trigger: str
    applied: bool = True
    state: ProgressState
    xp_awarded: int = 0
    level_change: LevelChangeResult
    streak: Optional[StreakUpdate] = None
    badges_unlocked: List[str] = Field(default_factory=list)
    wins_created: List[Win] = Field(default_factory=list)
    milestone: Optional[MilestoneType] = None
    challenge: Optional[Challenge] = None
    events: List[GamificationEvent] = Field(default_factory=list)


class _Decision:
    """Accumulates the effects of one trigger on a working copy of the state"""

    def __init__(self, state: ProgressState, trigger: str):
        self.trigger = trigger
        self.state = state.model_copy(deep=True)
        self.ledger = XPLedger(self.state)
        self.start_xp = state.total_xp
        self.xp_awarded = 0
        self.streak: Optional[StreakUpdate] = None
        self.badges: List[str] = []
        self.wins: List[Win] = []
        self.events: List[GamificationEvent] = []

    def award(self, amount: int, source: str, reason: Optional[str] = None) -> None:
        result = self.ledger.add_xp(amount, source=source, reason=reason)
        self.xp_awarded += result.xp_awarded

    def unlock(self, trigger: EventKind, context: BadgeContext) -> List[str]:
        before = self.state.total_xp
        unlocked = evaluate_and_unlock(trigger, context, self.ledger)
        self.xp_awarded += self.state.total_xp - before

        for badge in unlocked:
            self.badges.append(badge.id)
            self.events.append(BadgeUnlockedEvent(
                user_id=self.state.user_id,
                badge_id=badge.id,
                name=badge.name,
                icon=badge.icon,
                xp_reward=badge.xp_reward,
                message=format_badge_unlock_message(badge),
            ))
        return [badge.id for badge in unlocked]

    def create_win(self, **fields) -> Win:
        win = Win(**fields)
        self.wins.append(win)
        self.events.append(WinCreatedEvent(
            user_id=self.state.user_id,
            win_id=win.id,
            description=win.description,
            size=win.size.value,
        ))
        return win

    def record_streak(self, streak: StreakUpdate) -> None:
        self.streak = streak
        if streak.changed:
            self.events.append(StreakUpdatedEvent(
                user_id=self.state.user_id,
                old_streak=streak.old_streak,
                current_streak=streak.current_streak,
                last_active_day=streak.last_active_day,
                reset=streak.reset,
            ))

    def win_context(self, snapshot: AggregateSnapshot, logged: Optional[Win] = None) -> BadgeContext:
        """Win counters including the logged win and every win created so far"""
        new_wins = list(self.wins) + ([logged] if logged else [])
        return BadgeContext(
            total_wins=snapshot.total_wins + len(new_wins),
            has_big_win=snapshot.has_big_win or any(w.size.is_big_or_larger for w in new_wins),
        )

    def finish(self, **extra) -> GamificationOutcome:
        old_level = level_for_xp(self.start_xp)
        new_level = level_for_xp(self.state.total_xp)
        level_change = LevelChangeResult(
            xp_awarded=self.xp_awarded,
            old_total_xp=self.start_xp,
            new_total_xp=self.state.total_xp,
            old_level=old_level,
            new_level=new_level,
            leveled_up=new_level > old_level,
            new_title=title_for_level(new_level),
            source=self.trigger,
        )
        if level_change.leveled_up:
            self.events.append(LevelUpEvent(
                user_id=self.state.user_id,
                old_level=old_level,
                new_level=new_level,
                title=level_change.new_title,
            ))

        return GamificationOutcome(
            trigger=self.trigger,
            state=self.state,
            xp_awarded=self.xp_awarded,
            level_change=level_change,
            streak=self.streak,
            badges_unlocked=self.badges,
            wins_created=self.wins,
            events=self.events,
            **extra
        )


def decide_action_completion(
    state: ProgressState,
    snapshot: AggregateSnapshot,
    completed_at: datetime,
    day_boundary: DayBoundary
) -> GamificationOutcome:
    """
    Decide the effects of one completed action

    Args:
        state: User's current progress
        snapshot: Counters before this completion
        completed_at: When the action was completed
        day_boundary: Maps completed_at to the user's local day and hour
    """
    d = _Decision(state, "action_completed")

    d.award(config.ACTION_XP, source="action", reason="Completed action")

    streak = StreakTracker(d.state).record_activity(day_boundary.local_day(completed_at))
    d.record_streak(streak)
    if streak.continued:
        d.unlock(EventKind.STREAK_UPDATED, BadgeContext(current_streak=streak.current_streak))

    local_time = day_boundary.local_time(completed_at)
    is_weekend = local_time.weekday() >= 5
    d.unlock(EventKind.ACTION_COMPLETED, BadgeContext(
        total_actions=snapshot.total_actions_completed + 1,
        weekend_actions=snapshot.weekend_actions_completed + (1 if is_weekend else 0),
        completed_hour=local_time.hour,
    ))

    return d.finish()


def decide_win_logged(
    state: ProgressState,
    snapshot: AggregateSnapshot,
    win: Win
) -> GamificationOutcome:
    """Decide badge unlocks for a user-authored win (already stored by the caller)"""
    d = _Decision(state, "win_logged")
    d.unlock(EventKind.WIN_LOGGED, d.win_context(snapshot, logged=win))
    return d.finish()


def decide_challenge_completion(
    state: ProgressState,
    snapshot: AggregateSnapshot,
    challenge: Challenge,
    completed_at: datetime,
    reflection: Optional[ChallengeReflection] = None
) -> GamificationOutcome:
    """
    Complete a challenge and decide its rewards

    The returned outcome carries the completed copy of the challenge.
    An illegal transition (already completed, never accepted) yields an
    outcome with applied=False and no effects.
    """
    d = _Decision(state, "challenge_completed")
    challenge = challenge.model_copy(deep=True)

    if not complete_challenge(challenge, completed_at, reflection):
        return d.finish(applied=False, challenge=challenge)

    first_epic = (
        challenge.difficulty == ChallengeDifficulty.EPIC
        and EPIC_CONQUEROR not in d.state.earned_badges
    )

    notes = challenge.reflection.notes.strip()
    d.create_win(
        description=notes or f"Completed: {challenge.title}",
        size=challenge.corresponding_win_size,
        emotion=challenge.reflection.emotion,
        created_at=completed_at,
    )

    if challenge.xp_reward > 0:
        d.award(challenge.xp_reward, source="challenge", reason=challenge.title)

    d.unlock(EventKind.CHALLENGE_COMPLETED, BadgeContext(
        total_challenges=snapshot.total_challenges_completed + 1,
        challenge_category=challenge.category,
        challenge_difficulty=challenge.difficulty,
    ))

    if first_epic:
        d.create_win(
            description=f"Conquered my first Epic challenge: {challenge.title}",
            size=WinSize.BIG,
            emotion=5,
            created_at=completed_at,
        )

    d.unlock(EventKind.WIN_LOGGED, d.win_context(snapshot))

    logger.info(
        f"Challenge completed by user {d.state.user_id}: {challenge.title} "
        f"({challenge.difficulty.value}), {len(d.wins)} win(s) created"
    )
    return d.finish(challenge=challenge)


def decide_interaction(
    state: ProgressState,
    interaction: Interaction,
    relationship: Relationship,
    all_relationships: List[Relationship],
    now: datetime,
    snapshot: Optional[AggregateSnapshot] = None
) -> GamificationOutcome:
    """
    Decide the rewards for a logged relationship interaction

    Args:
        interaction: The interaction just logged
        relationship: The relationship it belongs to
        all_relationships: Every relationship of the user; the interaction is
            counted once whether or not it was already appended
        now: Reference time for relationship health
        snapshot: Win counters, used when a reach-out win is created
    """
    d = _Decision(state, "interaction_logged")
    snapshot = snapshot or AggregateSnapshot()

    relationships = _with_interaction(all_relationships, relationship, interaction)
    total = sum(len(r.interactions) for r in relationships)
    by_category = Counter()
    for r in relationships:
        by_category[r.category.value] += len(r.interactions)

    first_reach_out = (
        total == 1
        and interaction.initiated_by == Initiator.ME
        and FIRST_REACH_OUT not in d.state.earned_badges
    )

    unlocked = d.unlock(EventKind.INTERACTION_LOGGED, BadgeContext(
        first_reach_out=first_reach_out,
        total_interactions=total,
        category_interactions=dict(by_category),
        healthy_relationships=sum(
            1 for r in relationships if r.health_status(now) == HealthStatus.HEALTHY
        ),
        has_weekly_contact=any(
            r.has_weekly_contact(now, weeks=CONSISTENT_CONTACT_WEEKS) for r in relationships
        ),
    ))

    if FIRST_REACH_OUT in unlocked:
        d.create_win(
            description=f"First reach-out to {relationship.name}!",
            size=WinSize.SMALL,
            emotion=5,
            created_at=now,
        )
        d.unlock(EventKind.WIN_LOGGED, d.win_context(snapshot))

    d.award(config.INTERACTION_XP, source="interaction", reason=f"Interaction with {relationship.name}")

    return d.finish()


def _with_interaction(
    all_relationships: List[Relationship],
    relationship: Relationship,
    interaction: Interaction
) -> List[Relationship]:
    relationships = [r.model_copy(deep=True) for r in all_relationships]
    target = next((r for r in relationships if r.id == relationship.id), None)
    if target is None:
        target = relationship.model_copy(deep=True)
        relationships.append(target)
    if all(i.id != interaction.id for i in target.interactions):
        target.interactions.append(interaction)
    return relationships


def decide_goal_progress(
    state: ProgressState,
    goal: Goal,
    previous_progress: float,
    now: datetime,
    snapshot: Optional[AggregateSnapshot] = None
) -> GamificationOutcome:
    """
    Decide milestone rewards after a goal's progress changed

    Args:
        goal: The goal with its current actions
        previous_progress: progress_percentage observed before the change
        snapshot: Win counters, used for the milestone win
    """
    d = _Decision(state, "goal_progress")
    snapshot = snapshot or AggregateSnapshot()

    milestone = check_milestone(previous_progress, goal.progress_percentage)
    if milestone is None:
        return d.finish()

    d.award(milestone.xp_bonus, source="milestone", reason=f"{milestone.display_name}: {goal.title}")
    d.create_win(
        description=f"{milestone.display_name}: {goal.title}",
        size=milestone.win_size,
        emotion=5,
        category=goal.category.value,
        goal_id=goal.id,
        created_at=now,
    )
    d.events.append(MilestoneReachedEvent(
        user_id=d.state.user_id,
        goal_id=goal.id,
        milestone=milestone.name.lower(),
        xp_bonus=milestone.xp_bonus,
        confetti_intensity=milestone.confetti_intensity,
    ))
    d.unlock(EventKind.WIN_LOGGED, d.win_context(snapshot))

    return d.finish(milestone=milestone)
