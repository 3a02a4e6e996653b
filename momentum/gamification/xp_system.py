"""
XP and Leveling System

Manages XP awards and level derivation for a single user's ProgressState.

Leveling Curve:
- Flat 500 XP per level, level = floor(total_xp / 500) + 1

Level Titles:
- 1-5 Dreamer, 6-10 Starter, 11-20 Mover, 21-35 Achiever,
  36-50 Champion, 51-75 Legend, 76+ Icon

XP Award Rules:
- Action completion: 25 XP
- Relationship interaction: 15 XP
- Challenge completion: challenge xp_reward
- Goal milestones: 50-300 XP
- Badge unlocks: 100-2000 XP
"""

from typing import Dict, Any, Optional
import logging

from pydantic import BaseModel

from momentum.exceptions import InvalidXPAmountError, enforce_contract
from momentum.models.progress import ProgressState

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 500

# (highest level in band, title)
LEVEL_TITLES = [
    (5, "Dreamer"),
    (10, "Starter"),
    (20, "Mover"),
    (35, "Achiever"),
    (50, "Champion"),
    (75, "Legend"),
]
TOP_LEVEL_TITLE = "Icon"


def level_for_xp(total_xp: int) -> int:
    return max(0, total_xp) // XP_PER_LEVEL + 1


def title_for_level(level: int) -> str:
    for max_level, title in LEVEL_TITLES:
        if level <= max_level:
            return title
    return TOP_LEVEL_TITLE


def calculate_level_from_xp(total_xp: int) -> Dict[str, Any]:
    """
    Calculate level and title from total XP

    Returns:
        {
            'current_level': int,
            'level_title': str,
            'xp_in_current_level': int,
            'xp_to_next_level': int,
            'level_progress': float (0-1)
        }
    """
    level = level_for_xp(total_xp)
    xp_in_level = max(0, total_xp) - (level - 1) * XP_PER_LEVEL

    return {
        "current_level": level,
        "level_title": title_for_level(level),
        "xp_in_current_level": xp_in_level,
        "xp_to_next_level": XP_PER_LEVEL - xp_in_level,
        "level_progress": xp_in_level / XP_PER_LEVEL,
    }


class LevelChangeResult(BaseModel):
    """Outcome of a single XP award"""
    xp_awarded: int
    old_total_xp: int
    new_total_xp: int
    old_level: int
    new_level: int
    leveled_up: bool
    new_title: str
    source: str


class XPLedger:
    """
    Adds XP to a ProgressState and reports level changes.

    The ledger mutates the state it wraps; callers hand it a working copy.
    """

    def __init__(self, state: ProgressState):
        self.state = state

    def add_xp(self, amount: int, source: str, reason: Optional[str] = None) -> LevelChangeResult:
        """
        Award XP and check for level up

        Args:
            amount: Positive XP amount
            source: What produced the XP (action, badge, challenge, milestone, interaction)
            reason: Human-readable description for logs

        Returns:
            LevelChangeResult; a rejected amount yields xp_awarded=0
        """
        old_total = self.state.total_xp
        old_level = level_for_xp(old_total)

        if amount <= 0:
            enforce_contract(InvalidXPAmountError(
                amount,
                user_id=self.state.user_id,
                operation="add_xp",
            ))
            return LevelChangeResult(
                xp_awarded=0,
                old_total_xp=old_total,
                new_total_xp=old_total,
                old_level=old_level,
                new_level=old_level,
                leveled_up=False,
                new_title=title_for_level(old_level),
                source=source,
            )

        self.state.total_xp = old_total + amount
        new_level = level_for_xp(self.state.total_xp)

        logger.info(
            f"Awarded {amount} XP to user {self.state.user_id} for {source}"
            f"{f' ({reason})' if reason else ''}. Total: {self.state.total_xp} XP, Level: {new_level}"
        )
        if new_level > old_level:
            logger.info(f"User {self.state.user_id} leveled up from {old_level} to {new_level}!")

        return LevelChangeResult(
            xp_awarded=amount,
            old_total_xp=old_total,
            new_total_xp=self.state.total_xp,
            old_level=old_level,
            new_level=new_level,
            leveled_up=new_level > old_level,
            new_title=title_for_level(new_level),
            source=source,
        )

    def current_level(self) -> int:
        return level_for_xp(self.state.total_xp)

    def xp_to_next_level(self) -> int:
        return calculate_level_from_xp(self.state.total_xp)["xp_to_next_level"]

    def level_progress_fraction(self) -> float:
        return calculate_level_from_xp(self.state.total_xp)["level_progress"]

    def level_title(self) -> str:
        return title_for_level(self.current_level())
