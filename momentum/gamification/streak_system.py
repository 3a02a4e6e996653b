"""
Daily Streak Tracking

Tracks the number of consecutive calendar days with at least one completed
action. Day boundaries come from a DayBoundary (the user's local midnight).

Transitions for record_activity(today):
- no previous activity: streak starts at 1
- same day: no change
- next day: streak + 1 (the only transition that checks streak badges)
- gap of two or more days: streak resets to 1
"""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo
import logging

from pydantic import BaseModel

from momentum.models.progress import ProgressState

logger = logging.getLogger(__name__)


class DayBoundary:
    """Maps timestamps onto the user's calendar days"""

    def __init__(self, timezone_name: str = "UTC"):
        self.tz = ZoneInfo(timezone_name)

    def local_day(self, moment: datetime) -> date:
        """Naive datetimes are taken to be local already"""
        if moment.tzinfo is None:
            return moment.date()
        return moment.astimezone(self.tz).date()

    def local_time(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment
        return moment.astimezone(self.tz)


def days_between(earlier: date, later: date) -> int:
    """Whole calendar days from earlier to later"""
    return (later - earlier).days


class StreakUpdate(BaseModel):
    """Result of recording one day of activity"""
    old_streak: int
    current_streak: int
    last_active_day: date
    started: bool = False
    continued: bool = False
    reset: bool = False
    message: str = ""

    @property
    def changed(self) -> bool:
        return self.started or self.continued or self.reset


class StreakTracker:
    """Applies the streak state machine to a ProgressState"""

    def __init__(self, state: ProgressState):
        self.state = state

    def record_activity(self, today: date) -> StreakUpdate:
        """
        Record a qualifying activity on `today`

        Args:
            today: The user's local calendar day of the activity

        Returns:
            StreakUpdate describing the transition taken
        """
        old_streak = self.state.current_streak
        last_day: Optional[date] = self.state.last_active_day

        # If this is the first activity
        if last_day is None:
            self.state.current_streak = 1
            self.state.last_active_day = today
            return StreakUpdate(
                old_streak=old_streak,
                current_streak=1,
                last_active_day=today,
                started=True,
                message="Streak started! Day 1",
            )

        gap = days_between(last_day, today)

        # Same day, or a day we have already moved past
        if gap <= 0:
            if gap < 0:
                logger.warning(
                    f"Ignoring activity for user {self.state.user_id} on {today}: "
                    f"earlier than last active day {last_day}"
                )
            return StreakUpdate(
                old_streak=old_streak,
                current_streak=old_streak,
                last_active_day=last_day,
                message=f"Streak continues! Day {old_streak}",
            )

        # Next day (continuing streak)
        if gap == 1:
            self.state.current_streak = old_streak + 1
            self.state.last_active_day = today
            return StreakUpdate(
                old_streak=old_streak,
                current_streak=self.state.current_streak,
                last_active_day=today,
                continued=True,
                message=f"Streak continues! Day {self.state.current_streak}",
            )

        # Streak broken, reset
        self.state.current_streak = 1
        self.state.last_active_day = today
        logger.info(
            f"User {self.state.user_id} streak broken. "
            f"Was {old_streak}, gap was {gap} days"
        )
        return StreakUpdate(
            old_streak=old_streak,
            current_streak=1,
            last_active_day=today,
            reset=True,
            message=f"Streak reset. Previous: {old_streak} days. Starting fresh! Day 1",
        )
