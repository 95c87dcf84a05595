"""
Achievement Unlocks

Rule-based badges checked after every habit completion.
A rule compares one user metric against a target; a badge is earned once
per user, keyed by its title.
"""
import logging
import operator
from typing import List

from sprout.models.schemas import AchievementIcon, AchievementRecord, UserRecord
from sprout.storage.base import RecordStore, RecordKind

logger = logging.getLogger(__name__)


OPERATORS = {
    "gte": operator.ge,
}

ACHIEVEMENT_RULES = [
    {
        "title": "First Sprout",
        "description": "Complete your first habit",
        "icon": AchievementIcon.LEAF,
        "metric": "total_habits_completed",
        "operator": "gte",
        "target": 1,
        "xp": 50,
    },
    {
        "title": "Health Warrior",
        "description": "Keep a 7-day completion streak",
        "icon": AchievementIcon.FIRE,
        "metric": "current_streak",
        "operator": "gte",
        "target": 7,
        "xp": 200,
    },
    {
        "title": "Green Thumb",
        "description": "Reach Level 3 in plant growth",
        "icon": AchievementIcon.LEAF,
        "metric": "level",
        "operator": "gte",
        "target": 3,
        "xp": 150,
    },
    {
        "title": "Monthly Master",
        "description": "Keep a 30-day streak",
        "icon": AchievementIcon.STAR,
        "metric": "current_streak",
        "operator": "gte",
        "target": 30,
        "xp": 500,
    },
    {
        "title": "Centurion",
        "description": "Complete 100 habits",
        "icon": AchievementIcon.TROPHY,
        "metric": "total_habits_completed",
        "operator": "gte",
        "target": 100,
        "xp": 300,
    },
    {
        "title": "Full Bloom",
        "description": "Reach the Flower stage",
        "icon": AchievementIcon.TARGET,
        "metric": "level",
        "operator": "gte",
        "target": 8,
        "xp": 400,
    },
]


def rule_satisfied(rule: dict, user: UserRecord) -> bool:
    value = getattr(user, rule["metric"], None)
    if value is None:
        return False
    return OPERATORS[rule["operator"]](value, rule["target"])


def unlock_achievements(store: RecordStore, user: UserRecord) -> List[AchievementRecord]:
    """
    Append every newly satisfied badge for a user.

    Evaluated once against the given user state; XP granted by the badges
    themselves does not trigger a second pass.

    Returns:
        Achievements created by this call, possibly empty.
    """
    earned_titles = {a.title for a in store.list(RecordKind.ACHIEVEMENT, user_id=user.id)}
    unlocked = []

    for rule in ACHIEVEMENT_RULES:
        if rule["title"] in earned_titles:
            continue
        if not rule_satisfied(rule, user):
            continue

        achievement = store.create(RecordKind.ACHIEVEMENT, {
            "user_id": user.id,
            "title": rule["title"],
            "description": rule["description"],
            "icon": rule["icon"],
            "xp_reward": rule["xp"],
        })
        unlocked.append(achievement)
        logger.info(f"User {user.id} unlocked achievement '{achievement.title}'")

    return unlocked


def create_achievement(store: RecordStore, user_id: int, fields: dict) -> AchievementRecord:
    """Append a manually awarded achievement. Achievements are never updated."""
    return store.create(RecordKind.ACHIEVEMENT, {**fields, "user_id": user_id})
