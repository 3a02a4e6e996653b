"""
Badge Unlock Evaluator

Checks the badges relevant to a trigger against a BadgeContext, unlocks the
ones whose criteria now hold and awards their XP through the XPLedger.

Unlocking is idempotent: a badge already in the user's earned set is skipped
without XP, so re-running an evaluation with the same context changes nothing.
"""

from typing import Any, Dict, List, Optional
import logging

from momentum.exceptions import UnknownBadgeError, enforce_contract
from momentum.gamification.badges import (
    BADGE_CATALOG,
    TRIGGER_BADGES,
    BadgeContext,
    BadgeDefinition,
    EventKind,
    get_badge,
)
from momentum.gamification.xp_system import XPLedger
from momentum.models.challenge import ChallengeDifficulty

logger = logging.getLogger(__name__)


def evaluate_and_unlock(
    trigger: EventKind,
    context: BadgeContext,
    ledger: XPLedger
) -> List[BadgeDefinition]:
    """
    Unlock every badge of the trigger's group whose criteria hold

    Args:
        trigger: Which badge group to check
        context: Counters after the triggering event
        ledger: XP ledger over the user's working state

    Returns:
        Newly unlocked badges, in evaluation order
    """
    newly_unlocked = []
    earned = ledger.state.earned_badges

    for badge_id in TRIGGER_BADGES[trigger]:
        # Skip if already unlocked
        if badge_id in earned:
            continue

        badge = get_badge(badge_id)
        if check_criteria(badge.criteria, context):
            _award(badge, ledger)
            newly_unlocked.append(badge)

    return newly_unlocked


def unlock_badge(badge_id: str, ledger: XPLedger) -> Optional[BadgeDefinition]:
    """
    Unlock a single badge by id

    Returns:
        The badge if it was newly unlocked, None if already earned or unknown
    """
    badge = get_badge(badge_id)
    if badge is None:
        enforce_contract(UnknownBadgeError(
            badge_id,
            user_id=ledger.state.user_id,
            operation="unlock_badge",
        ))
        return None

    if badge_id in ledger.state.earned_badges:
        return None

    _award(badge, ledger)
    return badge


def _award(badge: BadgeDefinition, ledger: XPLedger) -> None:
    ledger.state.earned_badges.add(badge.id)
    ledger.add_xp(badge.xp_reward, source="badge", reason=badge.name)
    logger.info(
        f"User {ledger.state.user_id} unlocked badge: {badge.id} "
        f"({badge.name}) +{badge.xp_reward} XP"
    )


# ============================================
# Criteria Checks
# ============================================

# Criteria type -> BadgeContext counter it thresholds
_COUNTERS = {
    "action_count": "total_actions",
    "weekend_action_count": "weekend_actions",
    "streak": "current_streak",
    "win_count": "total_wins",
    "challenge_count": "total_challenges",
    "interaction_count": "total_interactions",
    "healthy_relationship_count": "healthy_relationships",
}


def check_criteria(criteria: Dict[str, Any], context: BadgeContext) -> bool:
    """Check one badge's criteria against the context"""
    criteria_type = criteria["type"]

    if criteria_type == "any_of":
        return any(check_criteria(c, context) for c in criteria["criteria"])

    elif _is_counter(criteria):
        return _current_value(criteria, context) >= criteria["value"]

    elif criteria_type == "completed_before_hour":
        return context.completed_hour is not None and context.completed_hour < criteria["value"]

    elif criteria_type == "completed_from_hour":
        return context.completed_hour is not None and context.completed_hour >= criteria["value"]

    elif criteria_type == "big_win":
        return context.has_big_win

    elif criteria_type == "epic_challenge":
        return context.challenge_difficulty == ChallengeDifficulty.EPIC

    elif criteria_type == "challenge_category":
        return context.challenge_category == criteria["category"]

    elif criteria_type == "first_reach_out":
        return context.first_reach_out

    elif criteria_type == "weekly_contact":
        return context.has_weekly_contact

    logger.warning(f"Unknown badge criteria type: {criteria_type}")
    return False


def _is_counter(criteria: Dict[str, Any]) -> bool:
    return criteria["type"] in _COUNTERS or criteria["type"] == "category_interaction_count"


def _current_value(criteria: Dict[str, Any], context: BadgeContext) -> int:
    if criteria["type"] == "category_interaction_count":
        return context.category_interactions.get(criteria["category"], 0)
    return getattr(context, _COUNTERS[criteria["type"]])


# ============================================
# Progress & Display
# ============================================

def get_badge_progress(earned_badges: set, context: BadgeContext) -> Dict[str, Any]:
    """
    Get earned badges and progress toward locked ones

    Returns:
        {
            'earned': [badge dicts],
            'locked': [badge dicts with 'progress'],
            'total_earned': int,
            'total_badges': int,
            'total_xp_from_badges': int
        }
    """
    earned = []
    locked = []

    for badge in BADGE_CATALOG:
        data = {
            "id": badge.id,
            "name": badge.name,
            "description": badge.description,
            "icon": badge.icon,
            "tier": badge.tier.value,
            "xp_reward": badge.xp_reward,
        }
        if badge.id in earned_badges:
            earned.append(data)
        else:
            data["progress"] = _calculate_badge_progress(badge, context)
            locked.append(data)

    # Closest to completion first
    locked.sort(key=lambda b: b["progress"]["percentage"], reverse=True)

    return {
        "earned": earned,
        "locked": locked,
        "total_earned": len(earned),
        "total_badges": len(BADGE_CATALOG),
        "total_xp_from_badges": sum(b["xp_reward"] for b in earned),
    }


def _calculate_badge_progress(badge: BadgeDefinition, context: BadgeContext) -> Dict[str, Any]:
    """
    Calculate progress toward a badge

    Returns:
        {
            'current': int,
            'required': int,
            'percentage': int,
            'description': str
        }
    """
    criteria = badge.criteria

    if criteria["type"] == "any_of":
        counters = [c for c in criteria["criteria"] if _is_counter(c)]
        criteria = counters[0] if counters else criteria

    if _is_counter(criteria):
        required = criteria["value"]
        current = min(_current_value(criteria, context), required)
    else:
        # One-off conditions are either met or not
        required = 1
        current = 0

    percentage = min(100, int(current / required * 100)) if required > 0 else 0

    return {
        "current": current,
        "required": required,
        "percentage": percentage,
        "description": f"{current}/{required}",
    }


def format_badge_unlock_message(badge: BadgeDefinition) -> str:
    """Celebration text for a newly unlocked badge"""
    return f"""🎉 BADGE UNLOCKED! 🎉

{badge.icon} {badge.name}

{badge.description}

⭐ +{badge.xp_reward} XP Bonus!"""
