"""
Gamification engine for Momentum

- XP ledger and levels
- Daily streak tracking
- Badge catalog and unlock evaluation
- Goal milestones
- Challenge templates and lifecycle
- Achievement orchestration (decide_* functions)
"""

from momentum.gamification.xp_system import XPLedger, calculate_level_from_xp, level_for_xp
from momentum.gamification.streak_system import DayBoundary, StreakTracker
from momentum.gamification.achievement_system import evaluate_and_unlock, get_badge_progress, unlock_badge
from momentum.gamification.milestones import MilestoneType, check_milestone
from momentum.gamification.engine import (
    GamificationOutcome,
    decide_action_completion,
    decide_challenge_completion,
    decide_goal_progress,
    decide_interaction,
    decide_win_logged,
)

__all__ = [
    "XPLedger",
    "calculate_level_from_xp",
    "level_for_xp",
    "DayBoundary",
    "StreakTracker",
    "evaluate_and_unlock",
    "get_badge_progress",
    "unlock_badge",
    "MilestoneType",
    "check_milestone",
    "GamificationOutcome",
    "decide_action_completion",
    "decide_challenge_completion",
    "decide_goal_progress",
    "decide_interaction",
    "decide_win_logged",
]
