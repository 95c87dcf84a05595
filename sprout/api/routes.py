"""
API Routes for Sprout Backend

Endpoints:
- GET /health: Health check
- GET /api/user, PATCH /api/user/xp, GET /api/user/progression
- GET /api/categories, GET /api/categories/{id}/habits
- GET|POST /api/habits, GET /api/habits/summary
- PATCH /api/habits/{id}, PATCH /api/habits/{id}/complete
- GET|POST /api/achievements
- GET|POST /api/goals, PATCH /api/goals/{id}
- GET|POST /api/rewards, PATCH /api/rewards/{id}/claim

Each route maps to one service call; errors are translated by the
handlers in sprout.errors.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from sprout.api.dependencies import get_store, get_current_user_id
from sprout.config import settings
from sprout.models.schemas import (
    AchievementCreateRequest,
    AchievementRecord,
    CategoryRecord,
    GoalCreateRequest,
    GoalRecord,
    GoalUpdateRequest,
    HabitCreateRequest,
    HabitRecord,
    HabitSummaryResponse,
    HabitUpdateRequest,
    HealthResponse,
    ProgressionResponse,
    ProgressionTierResponse,
    RewardCreateRequest,
    RewardRecord,
    UserRecord,
    XpUpdateRequest,
)
from sprout.services import achievements, goals, habits, rewards
from sprout.services.progression import apply_xp, get_progression
from sprout.storage.base import RecordStore, RecordKind

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(store: RecordStore = Depends(get_store)) -> HealthResponse:
    """Health check for warm-up pings."""
    return HealthResponse(
        status="healthy",
        version=settings.API_VERSION,
        storage_backend=store.name,
    )


# ============================================
# User & progression
# ============================================

@router.get("/api/user", response_model=UserRecord)
async def get_user(
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> UserRecord:
    return store.get(RecordKind.USER, user_id)


@router.patch("/api/user/xp", response_model=UserRecord)
async def add_user_xp(
    request: XpUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> UserRecord:
    """
    Add an XP delta to the user's cumulative XP.

    Level and level name are re-resolved from the new total.
    """
    user, _ = apply_xp(store, user_id, int(request.xp))
    return user


@router.get("/api/user/progression", response_model=ProgressionResponse)
async def get_user_progression(
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> ProgressionResponse:
    """
    Plant growth state resolved on the server.

    Includes current and next tier, percent toward the next tier and the
    XP still missing.
    """
    user, snapshot = get_progression(store, user_id)
    return ProgressionResponse(
        xp=user.xp,
        level=snapshot.current.level,
        level_name=snapshot.current.name,
        current=ProgressionTierResponse.model_validate(snapshot.current),
        next=ProgressionTierResponse.model_validate(snapshot.next),
        progress_percent=round(snapshot.progress_percent, 1),
        xp_to_next=snapshot.xp_to_next,
    )


# ============================================
# Categories
# ============================================

@router.get("/api/categories", response_model=List[CategoryRecord])
async def list_categories(store: RecordStore = Depends(get_store)) -> List[CategoryRecord]:
    return store.list(RecordKind.CATEGORY)


@router.get("/api/categories/{category_id}/habits", response_model=List[HabitRecord])
async def list_category_habits(
    category_id: int,
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> List[HabitRecord]:
    store.get(RecordKind.CATEGORY, category_id)
    return habits.list_habits(store, user_id, category_id)


# ============================================
# Habits
# ============================================

@router.get("/api/habits", response_model=List[HabitRecord])
async def list_habits(
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> List[HabitRecord]:
    return habits.list_habits(store, user_id)


@router.post("/api/habits", response_model=HabitRecord)
async def create_habit(
    request: HabitCreateRequest,
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> HabitRecord:
    return habits.create_habit(store, user_id, request.model_dump())


@router.get("/api/habits/summary", response_model=HabitSummaryResponse)
async def get_habit_summary(
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> HabitSummaryResponse:
    return HabitSummaryResponse(**habits.habit_summary(store, user_id))


@router.patch("/api/habits/{habit_id}/complete", response_model=HabitRecord)
async def complete_habit(
    habit_id: int,
    store: RecordStore = Depends(get_store),
) -> HabitRecord:
    """Mark a habit completed regardless of its current state."""
    return habits.set_habit_completion(store, habit_id, True).habit


@router.patch("/api/habits/{habit_id}", response_model=HabitRecord)
async def update_habit(
    habit_id: int,
    request: HabitUpdateRequest,
    store: RecordStore = Depends(get_store),
) -> HabitRecord:
    """
    Toggle a habit's completion.

    Completing grants XP, coins, streak and badges; un-completing keeps
    them. Without isCompleted the habit is returned unchanged.
    """
    if request.is_completed is None:
        return store.get(RecordKind.HABIT, habit_id)
    return habits.set_habit_completion(store, habit_id, request.is_completed).habit


# ============================================
# Achievements (append-only)
# ============================================

@router.get("/api/achievements", response_model=List[AchievementRecord])
async def list_achievements(
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> List[AchievementRecord]:
    return store.list(RecordKind.ACHIEVEMENT, user_id=user_id)


@router.post("/api/achievements", response_model=AchievementRecord)
async def create_achievement(
    request: AchievementCreateRequest,
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> AchievementRecord:
    return achievements.create_achievement(store, user_id, request.model_dump())


# ============================================
# Goals
# ============================================

@router.get("/api/goals", response_model=List[GoalRecord])
async def list_goals(
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> List[GoalRecord]:
    return goals.list_goals(store, user_id)


@router.post("/api/goals", response_model=GoalRecord)
async def create_goal(
    request: GoalCreateRequest,
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> GoalRecord:
    return goals.create_goal(store, user_id, request.model_dump())


@router.patch("/api/goals/{goal_id}", response_model=GoalRecord)
async def update_goal(
    goal_id: int,
    request: GoalUpdateRequest,
    store: RecordStore = Depends(get_store),
) -> GoalRecord:
    return goals.update_goal(
        store,
        goal_id,
        current_value=request.current_value,
        is_completed=request.is_completed,
    )


# ============================================
# Rewards
# ============================================

@router.get("/api/rewards", response_model=List[RewardRecord])
async def list_rewards(
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> List[RewardRecord]:
    return rewards.list_rewards(store, user_id)


@router.post("/api/rewards", response_model=RewardRecord)
async def create_reward(
    request: RewardCreateRequest,
    user_id: int = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> RewardRecord:
    return rewards.create_reward(store, user_id, request.model_dump())


@router.patch("/api/rewards/{reward_id}/claim", response_model=RewardRecord)
async def claim_reward(
    reward_id: int,
    store: RecordStore = Depends(get_store),
) -> RewardRecord:
    return rewards.claim_reward(store, reward_id)
