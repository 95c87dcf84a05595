"""
Habit Service

Habit creation, listing, and the completion transaction that keeps the
habit, the user's progression, the category summary and the achievements
consistent with each other.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sprout.config import settings
from sprout.errors import NotFoundError
from sprout.models.schemas import (
    AchievementRecord,
    CategoryRecord,
    HabitRecord,
    UserRecord,
)
from sprout.services.achievements import unlock_achievements
from sprout.services.progression import PLANT_LEVELS, apply_xp, next_streak
from sprout.storage.base import RecordStore, RecordKind, utcnow

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Everything one completion toggle changed."""
    habit: HabitRecord
    user: Optional[UserRecord] = None
    xp_awarded: int = 0
    coins_awarded: int = 0
    level_up: bool = False
    achievements: List[AchievementRecord] = field(default_factory=list)


def create_habit(store: RecordStore, user_id: int, fields: dict) -> HabitRecord:
    """
    Create a habit for a user.

    The category id is stored as given; a dangling id is accepted.
    """
    habit = store.create(RecordKind.HABIT, {
        **fields,
        "user_id": user_id,
        "is_completed": False,
        "completed_at": None,
        "last_credited_on": None,
    })
    logger.info(f"Created habit {habit.id} '{habit.title}' for user {user_id}")
    return habit


def list_habits(store: RecordStore, user_id: int, category_id: Optional[int] = None) -> List[HabitRecord]:
    if category_id is None:
        return store.list(RecordKind.HABIT, user_id=user_id)
    return store.list(RecordKind.HABIT, user_id=user_id, category_id=category_id)


def habit_summary(store: RecordStore, user_id: int) -> dict:
    """Completed/total counts for the daily checklist."""
    habits = list_habits(store, user_id)
    completed = sum(1 for h in habits if h.is_completed)
    total = len(habits)
    rate = round(completed / total * 100, 1) if total else 0.0
    return {"completed": completed, "total": total, "completion_rate": rate}


def coins_for(xp_reward: int) -> int:
    return xp_reward // settings.XP_PER_COIN


def _category_progress(store: RecordStore, user_id: int, category_id: int) -> int:
    habits = list_habits(store, user_id, category_id)
    if not habits:
        return 0
    completed = sum(1 for h in habits if h.is_completed)
    return round(completed / len(habits) * 100)


def _find_category(store: RecordStore, category_id: int) -> Optional[CategoryRecord]:
    try:
        return store.get(RecordKind.CATEGORY, category_id)
    except NotFoundError:
        logger.warning(f"Category {category_id} does not exist, summary not updated")
        return None


def _credit_category(store: RecordStore, habit: HabitRecord, now: datetime) -> None:
    category = _find_category(store, habit.category_id)
    if category is None:
        return

    xp = category.xp + habit.xp_reward
    store.update(RecordKind.CATEGORY, category.id, {
        "xp": xp,
        "level": PLANT_LEVELS.resolve(xp).current.level,
        "streak": next_streak(category.streak, category.last_completed_date, now.date()),
        "last_completed_date": now.date(),
        "progress": _category_progress(store, habit.user_id, category.id),
    })


def _refresh_category_progress(store: RecordStore, habit: HabitRecord) -> None:
    category = _find_category(store, habit.category_id)
    if category is None:
        return
    store.update(RecordKind.CATEGORY, category.id, {
        "progress": _category_progress(store, habit.user_id, category.id),
    })


def set_habit_completion(
    store: RecordStore,
    habit_id: int,
    completed: bool,
    now: Optional[datetime] = None,
) -> CompletionResult:
    """
    Toggle a habit's completion state - the main progression entry point.

    On incomplete -> complete, in one transaction:
    1. Stamps the habit completed
    2. Grants XP and coins, bumps the completion counter and streak
    3. Credits the category summary
    4. Unlocks achievements and grants their XP
    5. Re-resolves the user's plant level

    On complete -> incomplete only the habit (and the category progress
    share) change; XP, coins, counters and badges already granted stay.
    Re-completing a habit on a day it already granted XP only restores the
    completed state. Setting the state the habit already has changes nothing.

    Args:
        store: Record store.
        habit_id: Habit to toggle.
        completed: Target completion state.
        now: Override timestamp for testing.

    Returns:
        CompletionResult with the updated habit and what was awarded.

    Raises:
        NotFoundError: If the habit (or its owner, on completion) is missing.
    """
    if now is None:
        now = utcnow()

    with store.transaction():
        habit = store.get(RecordKind.HABIT, habit_id)

        if habit.is_completed == completed:
            return CompletionResult(habit=habit)

        if not completed:
            habit = store.update(RecordKind.HABIT, habit_id, {
                "is_completed": False,
                "completed_at": None,
            })
            _refresh_category_progress(store, habit)
            logger.info(f"Habit {habit_id} marked incomplete, granted XP is kept")
            return CompletionResult(habit=habit)

        already_credited = habit.last_credited_on == now.date()
        habit = store.update(RecordKind.HABIT, habit_id, {
            "is_completed": True,
            "completed_at": now,
            "last_credited_on": now.date(),
        })

        if already_credited:
            _refresh_category_progress(store, habit)
            logger.info(f"Habit {habit_id} re-completed on {now.date()}, already credited today")
            return CompletionResult(habit=habit)

        user = store.get(RecordKind.USER, habit.user_id)
        coins = coins_for(habit.xp_reward)
        user, level_up = apply_xp(store, user.id, habit.xp_reward, {
            "coins": user.coins + coins,
            "total_habits_completed": user.total_habits_completed + 1,
            "current_streak": next_streak(user.current_streak, user.last_completed_date, now.date()),
            "last_completed_date": now.date(),
        })

        _credit_category(store, habit, now)

        achievements = unlock_achievements(store, user)
        badge_xp = sum(a.xp_reward for a in achievements)
        if achievements:
            user, badge_level_up = apply_xp(store, user.id, badge_xp, {
                "badges_earned": user.badges_earned + len(achievements),
            })
            level_up = level_up or badge_level_up

    logger.info(
        f"Habit {habit_id} completed by user {user.id}: "
        f"+{habit.xp_reward} XP, +{coins} coins, {len(achievements)} new badges"
    )
    return CompletionResult(
        habit=habit,
        user=user,
        xp_awarded=habit.xp_reward + badge_xp,
        coins_awarded=coins,
        level_up=level_up,
        achievements=achievements,
    )
