"""
Goal Milestone Detection

A goal's progress is the fraction of its actions completed. Crossing 25%,
50%, 75% or 100% between two observations is a milestone.

When one update crosses several thresholds (0.10 -> 0.80) only the highest
one is reported; the lower ones are not replayed.
"""

from enum import Enum
from typing import Optional
import logging
import math

from momentum.models.win import WinSize

logger = logging.getLogger(__name__)

# Float noise tolerance: 3/4 computed as 0.7499999999 still counts as 75%
_EPSILON = 1e-9


class MilestoneType(Enum):
    """Goal progress thresholds"""
    QUARTER = 0.25
    HALF = 0.5
    THREE_QUARTER = 0.75
    COMPLETE = 1.0

    @property
    def threshold(self) -> float:
        return self.value

    @property
    def display_name(self) -> str:
        return {
            MilestoneType.QUARTER: "25% Complete",
            MilestoneType.HALF: "Halfway There",
            MilestoneType.THREE_QUARTER: "75% Complete",
            MilestoneType.COMPLETE: "Goal Complete",
        }[self]

    @property
    def message(self) -> str:
        return {
            MilestoneType.QUARTER: "You're building momentum!",
            MilestoneType.HALF: "You're halfway to your goal!",
            MilestoneType.THREE_QUARTER: "The finish line is in sight!",
            MilestoneType.COMPLETE: "You did it! Time to celebrate!",
        }[self]

    @property
    def xp_bonus(self) -> int:
        return {
            MilestoneType.QUARTER: 50,
            MilestoneType.HALF: 100,
            MilestoneType.THREE_QUARTER: 150,
            MilestoneType.COMPLETE: 300,
        }[self]

    @property
    def confetti_intensity(self) -> int:
        return {
            MilestoneType.QUARTER: 30,
            MilestoneType.HALF: 50,
            MilestoneType.THREE_QUARTER: 75,
            MilestoneType.COMPLETE: 100,
        }[self]

    @property
    def win_size(self) -> WinSize:
        """Size of the win logged when the milestone is reached"""
        return {
            MilestoneType.QUARTER: WinSize.SMALL,
            MilestoneType.HALF: WinSize.MEDIUM,
            MilestoneType.THREE_QUARTER: WinSize.BIG,
            MilestoneType.COMPLETE: WinSize.MASSIVE,
        }[self]


def clamp_progress(value: float) -> float:
    """Clamp a progress fraction into [0, 1]; NaN counts as no progress"""
    if value is None or math.isnan(value):
        return 0.0
    if value < 0.0 or value > 1.0:
        logger.debug(f"Clamping out-of-range progress value {value}")
    return min(1.0, max(0.0, value))


def check_milestone(previous_progress: float, current_progress: float) -> Optional[MilestoneType]:
    """
    Check whether the goal just crossed a milestone threshold

    Args:
        previous_progress: Last observed progress fraction
        current_progress: Progress fraction now

    Returns:
        The highest threshold with previous < threshold <= current, or None
    """
    previous = clamp_progress(previous_progress)
    current = clamp_progress(current_progress)

    for milestone in reversed(list(MilestoneType)):
        threshold = milestone.threshold - _EPSILON
        if previous < threshold <= current:
            return milestone

    return None
