"""
Gamification Events

Events describe what the UI layer may celebrate (badge unlocked, level up,
streak change, milestone, auto-created win). The engine only emits them;
the EventDispatcher hands them to registered listeners after the triggering
write has been persisted.
"""

import inspect
import logging
from datetime import date
from typing import Awaitable, Callable, List, Literal, Optional, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class BadgeUnlockedEvent(BaseModel):
    kind: Literal["badge_unlocked"] = "badge_unlocked"
    user_id: str
    badge_id: str
    name: str
    icon: str
    xp_reward: int
    message: str


class LevelUpEvent(BaseModel):
    kind: Literal["level_up"] = "level_up"
    user_id: str
    old_level: int
    new_level: int
    title: str


class StreakUpdatedEvent(BaseModel):
    kind: Literal["streak_updated"] = "streak_updated"
    user_id: str
    old_streak: int
    current_streak: int
    last_active_day: date
    reset: bool


class MilestoneReachedEvent(BaseModel):
    kind: Literal["milestone_reached"] = "milestone_reached"
    user_id: str
    goal_id: str
    milestone: str
    xp_bonus: int
    confetti_intensity: int


class WinCreatedEvent(BaseModel):
    kind: Literal["win_created"] = "win_created"
    user_id: str
    win_id: str
    description: str
    size: str


GamificationEvent = Union[
    BadgeUnlockedEvent,
    LevelUpEvent,
    StreakUpdatedEvent,
    MilestoneReachedEvent,
    WinCreatedEvent,
]

Listener = Callable[[GamificationEvent], Optional[Awaitable[None]]]


class EventDispatcher:
    """Delivers events to listeners; a failing listener never affects the others"""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def dispatch(self, events: List[GamificationEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                try:
                    result = listener(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    logger.error(
                        f"Event listener failed for {event.kind} (user {event.user_id}): {e}",
                        exc_info=True
                    )
