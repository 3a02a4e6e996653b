"""Domain models for the progress engine"""
from momentum.models.progress import ProgressState, AggregateSnapshot
from momentum.models.win import Win, WinSize
from momentum.models.goal import Goal, GoalCategory, MicroAction, ActionType
from momentum.models.challenge import (
    Challenge,
    ChallengeCategory,
    ChallengeDifficulty,
    ChallengeDuration,
    ChallengeReflection,
)
from momentum.models.relationship import (
    ContactGoal,
    HealthStatus,
    Initiator,
    Interaction,
    InteractionType,
    Relationship,
    RelationshipCategory,
)

__all__ = [
    "ProgressState",
    "AggregateSnapshot",
    "Win",
    "WinSize",
    "Goal",
    "GoalCategory",
    "MicroAction",
    "ActionType",
    "Challenge",
    "ChallengeCategory",
    "ChallengeDifficulty",
    "ChallengeDuration",
    "ChallengeReflection",
    "ContactGoal",
    "HealthStatus",
    "Initiator",
    "Interaction",
    "InteractionType",
    "Relationship",
    "RelationshipCategory",
]
