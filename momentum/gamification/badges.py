"""
Badge Catalog

Static badge definitions. Each badge carries an XP reward and unlock
criteria expressed over the counters in a BadgeContext. Criteria are
threshold based and counts only grow, so a badge that is not yet earned
and whose criteria hold is newly unlocked.

Criteria types:
- action_count, weekend_action_count, streak, win_count, challenge_count,
  interaction_count, healthy_relationship_count: counter >= value
- category_interaction_count: interactions with relationships of `category` >= value
- completed_before_hour / completed_from_hour: local hour of the completion
- big_win, epic_challenge, first_reach_out, weekly_contact: flags
- challenge_category: completed challenge is in `category`
- any_of: any nested criteria holds
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from momentum import config
from momentum.models.challenge import ChallengeCategory, ChallengeDifficulty


class EventKind(str, Enum):
    """Triggers that can unlock badges"""
    ACTION_COMPLETED = "action_completed"
    STREAK_UPDATED = "streak_updated"
    WIN_LOGGED = "win_logged"
    CHALLENGE_COMPLETED = "challenge_completed"
    INTERACTION_LOGGED = "interaction_logged"


class BadgeTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


@dataclass(frozen=True)
class BadgeDefinition:
    """Badge definition"""
    id: str
    name: str
    description: str
    icon: str
    tier: BadgeTier
    xp_reward: int
    criteria: Dict[str, Any]


class BadgeContext(BaseModel):
    """Counters a badge's criteria are checked against"""
    total_actions: int = 0
    weekend_actions: int = 0
    completed_hour: Optional[int] = None
    current_streak: int = 0
    total_wins: int = 0
    has_big_win: bool = False
    total_challenges: int = 0
    challenge_category: Optional[ChallengeCategory] = None
    challenge_difficulty: Optional[ChallengeDifficulty] = None
    first_reach_out: bool = False
    total_interactions: int = 0
    category_interactions: Dict[str, int] = {}
    healthy_relationships: int = 0
    has_weekly_contact: bool = False


def _badge(id, name, description, icon, tier, xp_reward, **criteria) -> BadgeDefinition:
    return BadgeDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        tier=tier,
        xp_reward=xp_reward,
        criteria=criteria,
    )


BADGE_CATALOG: List[BadgeDefinition] = [
    # ========== STREAK BADGES ==========
    _badge("weekWarrior", "Week Warrior", "7-day streak", "7️⃣", BadgeTier.SILVER, 250,
           type="streak", value=7),
    _badge("monthlyMaster", "Monthly Master", "30-day streak", "📅", BadgeTier.GOLD, 500,
           type="streak", value=30),
    _badge("hundredDayHero", "100 Day Hero", "100-day streak", "💯", BadgeTier.PLATINUM, 1000,
           type="streak", value=100),
    _badge("consistencyChamp", "Consistency Champ", "Complete actions 30 days in a row", "👑",
           BadgeTier.PLATINUM, 1000, type="streak", value=30),

    # ========== ACTION BADGES ==========
    _badge("firstStep", "First Step", "Complete your first action", "👟", BadgeTier.BRONZE, 100,
           type="action_count", value=1),
    _badge("actionTaker", "Action Taker", "Complete 10 actions", "⚡", BadgeTier.BRONZE, 250,
           type="action_count", value=10),
    _badge("doer", "Doer", "Complete 50 actions", "✅", BadgeTier.SILVER, 500,
           type="action_count", value=50),
    _badge("achiever", "Achiever", "Complete 100 actions", "⭐", BadgeTier.GOLD, 1000,
           type="action_count", value=100),
    _badge("unstoppable", "Unstoppable", "Complete 500 actions", "🔥", BadgeTier.PLATINUM, 2000,
           type="action_count", value=500),

    # ========== WIN BADGES ==========
    _badge("firstWin", "First Win", "Log your first win", "🏆", BadgeTier.BRONZE, 100,
           type="win_count", value=1),
    _badge("winStreak", "Win Streak", "Log 10 wins", "🥇", BadgeTier.SILVER, 250,
           type="win_count", value=10),
    _badge("bigWinner", "Big Winner", "Log a Big win", "👑", BadgeTier.GOLD, 500,
           type="big_win"),
    _badge("victoryLap", "Victory Lap", "Log 50 wins", "🏅", BadgeTier.PLATINUM, 1000,
           type="win_count", value=50),

    # ========== CHALLENGE BADGES ==========
    _badge("challengeAccepted", "Challenge Accepted", "Complete first challenge", "🚩",
           BadgeTier.BRONZE, 100, type="challenge_count", value=1),
    _badge("challengeChamp", "Challenge Champ", "Complete 10 challenges", "🏁",
           BadgeTier.SILVER, 500, type="challenge_count", value=10),
    _badge("epicConqueror", "Epic Conqueror", "Complete an Epic challenge", "🏔️",
           BadgeTier.GOLD, 1000, type="epic_challenge"),

    # ========== CATEGORY BADGES ==========
    _badge("mindsetMaster", "Mindset Master", "Complete a mindset challenge", "🧠",
           BadgeTier.GOLD, 300, type="challenge_category", category=ChallengeCategory.MINDSET),
    _badge("fitnessFreak", "Fitness Freak", "Complete a fitness challenge", "🏃",
           BadgeTier.GOLD, 300, type="challenge_category", category=ChallengeCategory.FITNESS),
    _badge("socialButterfly", "Social Butterfly",
           "Complete a social challenge or log 20 relationship interactions", "🦋",
           BadgeTier.GOLD, 300, type="any_of", criteria=[
               {"type": "challenge_category", "category": ChallengeCategory.SOCIAL},
               {"type": "interaction_count", "value": 20},
           ]),
    _badge("growthGuru", "Growth Guru", "Complete a growth challenge", "📈",
           BadgeTier.GOLD, 300, type="challenge_category", category=ChallengeCategory.GROWTH),
    _badge("adventurer", "Adventurer", "Complete an adventure challenge", "🗺️",
           BadgeTier.GOLD, 300, type="challenge_category", category=ChallengeCategory.ADVENTURE),
    _badge("creator", "Creator", "Complete a creativity challenge", "🎨",
           BadgeTier.GOLD, 300, type="challenge_category", category=ChallengeCategory.CREATIVITY),

    # ========== SPECIAL BADGES ==========
    _badge("earlyBird", "Early Bird", f"Complete an action before {config.EARLY_BIRD_HOUR}am", "🌅",
           BadgeTier.BRONZE, 100, type="completed_before_hour", value=config.EARLY_BIRD_HOUR),
    _badge("nightOwl", "Night Owl", f"Complete an action after {config.NIGHT_OWL_HOUR - 12}pm", "🦉",
           BadgeTier.BRONZE, 100, type="completed_from_hour", value=config.NIGHT_OWL_HOUR),
    _badge("weekendWarrior", "Weekend Warrior", "Complete 5 actions on a weekend", "☀️",
           BadgeTier.GOLD, 500, type="weekend_action_count", value=5),

    # ========== RELATIONSHIP BADGES ==========
    _badge("firstReachOut", "First Reach Out", "Make your first outreach", "👋",
           BadgeTier.BRONZE, 100, type="first_reach_out"),
    _badge("mentorConnection", "Mentor Connection", "Log 5 interactions with mentors", "🎓",
           BadgeTier.GOLD, 500, type="category_interaction_count", category="mentor", value=5),
    _badge("innerCircle", "Inner Circle", "Maintain 5 healthy relationships", "💞",
           BadgeTier.GOLD, 500, type="healthy_relationship_count", value=5),
    _badge("consistentConnector", "Consistent Connector", "Weekly contact with someone for 1 month",
           "🔗", BadgeTier.PLATINUM, 1000, type="weekly_contact"),
    _badge("relationshipBuilder", "Relationship Builder", "Log 50 total interactions", "🤝",
           BadgeTier.PLATINUM, 1000, type="interaction_count", value=50),
]

BADGES_BY_ID: Dict[str, BadgeDefinition] = {badge.id: badge for badge in BADGE_CATALOG}

# Badges checked per trigger, in evaluation order
TRIGGER_BADGES: Dict[EventKind, List[str]] = {
    EventKind.STREAK_UPDATED: [
        "weekWarrior", "monthlyMaster", "hundredDayHero", "consistencyChamp",
    ],
    EventKind.ACTION_COMPLETED: [
        "earlyBird", "nightOwl",
        "firstStep", "actionTaker", "doer", "achiever", "unstoppable",
        "weekendWarrior",
    ],
    EventKind.WIN_LOGGED: [
        "firstWin", "winStreak", "victoryLap", "bigWinner",
    ],
    EventKind.CHALLENGE_COMPLETED: [
        "challengeAccepted", "challengeChamp", "epicConqueror",
        "mindsetMaster", "fitnessFreak", "socialButterfly",
        "growthGuru", "adventurer", "creator",
    ],
    EventKind.INTERACTION_LOGGED: [
        "firstReachOut", "socialButterfly", "relationshipBuilder",
        "mentorConnection", "innerCircle", "consistentConnector",
    ],
}

EPIC_CONQUEROR = "epicConqueror"
FIRST_REACH_OUT = "firstReachOut"


def get_badge(badge_id: str) -> Optional[BadgeDefinition]:
    return BADGES_BY_ID.get(badge_id)
