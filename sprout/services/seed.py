"""
Demo Data

Populates an empty store with the single demo user and their records.
Derived fields (levels, category progress) are computed from the seeded
values, not hardcoded.
"""
import logging
from datetime import timedelta

from sprout.models.schemas import (
    AchievementIcon,
    CategoryColor,
    CategoryIcon,
    GoalType,
    RewardIcon,
    RewardTier,
)
from sprout.services.progression import PLANT_LEVELS, level_fields
from sprout.storage.base import RecordStore, RecordKind, utcnow

logger = logging.getLogger(__name__)


DEMO_CATEGORIES = [
    {"name": "Health", "icon": CategoryIcon.HEART, "color": CategoryColor.RED, "xp": 780, "streak": 5},
    {"name": "Finance", "icon": CategoryIcon.DOLLAR_SIGN, "color": CategoryColor.AMBER, "xp": 450, "streak": 12},
    {"name": "Family", "icon": CategoryIcon.HOME, "color": CategoryColor.ORANGE, "xp": 920, "streak": 3},
    {"name": "Personal Dev", "icon": CategoryIcon.BRAIN, "color": CategoryColor.PURPLE, "xp": 1200, "streak": 8},
]

# (category index, title, xp reward, completed today)
DEMO_HABITS = [
    (0, "Drink 8 glasses of water", 50, True),
    (0, "Complete 30-min workout", 100, False),
    (3, "Read for 20 minutes", 75, True),
    (1, "Track daily expenses", 25, False),
]


def seed_demo_data(store: RecordStore) -> bool:
    """
    Seed the demo user, categories, habits, achievements, goals and rewards.

    Does nothing when any user already exists.

    Returns:
        True if data was written.
    """
    if store.list(RecordKind.USER):
        logger.info("Store already has users, skipping demo seed")
        return False

    now = utcnow()
    today = now.date()
    yesterday = today - timedelta(days=1)

    with store.transaction():
        user = store.create(RecordKind.USER, {
            "username": "demo",
            **level_fields(2850),
            "coins": 1250,
            "current_streak": 7,
            "total_habits_completed": 156,
            "badges_earned": 2,
            "last_completed_date": today,
        })

        categories = [
            store.create(RecordKind.CATEGORY, {
                **demo,
                "level": PLANT_LEVELS.resolve(demo["xp"]).current.level,
                "last_completed_date": yesterday,
            })
            for demo in DEMO_CATEGORIES
        ]

        for index, title, xp_reward, done in DEMO_HABITS:
            store.create(RecordKind.HABIT, {
                "user_id": user.id,
                "category_id": categories[index].id,
                "title": title,
                "xp_reward": xp_reward,
                "is_completed": done,
                "completed_at": now if done else None,
                "last_credited_on": today if done else None,
            })

        for category in categories:
            habits = store.list(RecordKind.HABIT, user_id=user.id, category_id=category.id)
            done = [h for h in habits if h.is_completed]
            changes = {"progress": round(len(done) / len(habits) * 100) if habits else 0}
            if done:
                changes["last_completed_date"] = today
            store.update(RecordKind.CATEGORY, category.id, changes)

        store.create(RecordKind.ACHIEVEMENT, {
            "user_id": user.id,
            "title": "Health Warrior",
            "description": "Keep a 7-day completion streak",
            "icon": AchievementIcon.FIRE,
            "xp_reward": 200,
        })
        store.create(RecordKind.ACHIEVEMENT, {
            "user_id": user.id,
            "title": "Green Thumb",
            "description": "Reach Level 3 in plant growth",
            "icon": AchievementIcon.LEAF,
            "xp_reward": 150,
            "earned_at": now - timedelta(hours=2),
        })

        store.create(RecordKind.GOAL, {
            "user_id": user.id,
            "category_id": categories[1].id,
            "title": "Emergency Fund Goal",
            "description": "Save $10,000 for emergency fund",
            "type": GoalType.LONG_TERM,
            "target_value": 10000,
            "current_value": 3200,
        })
        store.create(RecordKind.GOAL, {
            "user_id": user.id,
            "category_id": categories[0].id,
            "title": "30-Day Fitness Challenge",
            "description": "Complete workout 30 days in a row",
            "type": GoalType.SHORT_TERM,
            "target_value": 30,
            "current_value": 18,
        })

        store.create(RecordKind.REWARD, {
            "user_id": user.id,
            "title": "Coffee Date",
            "description": "100 coins • Personal Dev reward",
            "icon": RewardIcon.COFFEE,
            "coin_cost": 100,
            "tier": RewardTier.SILVER,
        })
        store.create(RecordKind.REWARD, {
            "user_id": user.id,
            "title": "New Gear",
            "description": "250 coins • Health milestone",
            "icon": RewardIcon.DUMBBELL,
            "coin_cost": 250,
            "tier": RewardTier.GOLD,
        })

    logger.info(f"Seeded demo user {user.id} with {len(categories)} categories")
    return True
