from enum import Enum
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, computed_field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================
# Closed enumerations
# ============================================

class CategoryIcon(str, Enum):
    HEART = "heart"
    DOLLAR_SIGN = "dollar-sign"
    HOME = "home"
    BRAIN = "brain"
    ACTIVITY = "activity"
    WALLET = "wallet"
    USERS = "users"
    BOOK = "book"


class CategoryColor(str, Enum):
    RED = "red"
    AMBER = "amber"
    ORANGE = "orange"
    PURPLE = "purple"
    GREEN = "green"
    BLUE = "blue"


class AchievementIcon(str, Enum):
    FIRE = "fire"
    LEAF = "leaf"
    STAR = "star"
    TROPHY = "trophy"
    TARGET = "target"


class RewardIcon(str, Enum):
    COFFEE = "coffee"
    DUMBBELL = "dumbbell"
    GIFT = "gift"
    STAR = "star"
    TROPHY = "trophy"


class GoalType(str, Enum):
    SHORT_TERM = "short-term"
    LONG_TERM = "long-term"


class RewardTier(str, Enum):
    """Informational only; nothing checks the balance against the tier."""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


# ============================================
# Stored records
# ============================================

class UserRecord(CamelModel):
    """Single progression state per user."""
    id: int
    username: str
    level: int = Field(1, ge=1)
    level_name: str = "Seed"
    xp: int = Field(0, ge=0)
    coins: int = Field(0, ge=0)
    current_streak: int = Field(0, ge=0)
    total_habits_completed: int = Field(0, ge=0)
    badges_earned: int = Field(0, ge=0)
    last_completed_date: Optional[date] = None
    created_at: datetime


class CategoryRecord(CamelModel):
    """
    Life category grouping habits and goals.

    The summary fields (level, xp, progress, streak) are maintained by the
    habit completion transaction, never set from request bodies.
    """
    id: int
    name: str
    icon: CategoryIcon
    color: CategoryColor
    level: int = Field(1, ge=1)
    xp: int = Field(0, ge=0)
    progress: int = Field(0, ge=0, le=100)
    streak: int = Field(0, ge=0)
    last_completed_date: Optional[date] = None


class HabitRecord(CamelModel):
    id: int
    user_id: int
    category_id: int
    title: str
    description: Optional[str] = None
    xp_reward: int = Field(50, gt=0)
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    # Day the habit last granted XP; a habit credits at most once per day
    last_credited_on: Optional[date] = None
    created_at: datetime


class AchievementRecord(CamelModel):
    id: int
    user_id: int
    title: str
    description: str
    icon: AchievementIcon
    xp_reward: int = Field(..., ge=0)
    earned_at: datetime


class GoalRecord(CamelModel):
    id: int
    user_id: int
    category_id: Optional[int] = None
    title: str
    description: str
    type: GoalType
    target_value: int = Field(..., gt=0)
    current_value: int = Field(0, ge=0)
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: datetime

    @computed_field(alias="progressPercent")
    @property
    def progress_percent(self) -> float:
        """Share of the target reached, capped at 100."""
        return min(100.0, round(self.current_value / self.target_value * 100, 1))


class RewardRecord(CamelModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    icon: RewardIcon
    coin_cost: int = Field(..., ge=0)
    tier: RewardTier
    is_available: bool = True
    is_claimed: bool = False
    claimed_at: Optional[datetime] = None
    created_at: datetime


# ============================================
# Request bodies
# ============================================

class HabitCreateRequest(CamelModel):
    """Request body for POST /api/habits."""
    category_id: int = Field(..., description="Category the habit belongs to")
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    xp_reward: int = Field(50, gt=0, description="XP granted on completion")


class HabitUpdateRequest(CamelModel):
    """Request body for PATCH /api/habits/{id}."""
    is_completed: Optional[StrictBool] = None


class XpUpdateRequest(CamelModel):
    """Request body for PATCH /api/user/xp."""
    xp: float = Field(..., strict=True, ge=0, allow_inf_nan=False, description="XP delta to add")


class AchievementCreateRequest(CamelModel):
    title: str = Field(..., min_length=1)
    description: str
    icon: AchievementIcon
    xp_reward: int = Field(..., ge=0)


class GoalCreateRequest(CamelModel):
    category_id: Optional[int] = None
    title: str = Field(..., min_length=1)
    description: str
    type: GoalType
    target_value: int = Field(..., gt=0)
    current_value: int = Field(0, ge=0)


class GoalUpdateRequest(CamelModel):
    """Request body for PATCH /api/goals/{id}."""
    current_value: Optional[int] = Field(None, strict=True, ge=0)
    is_completed: Optional[StrictBool] = None


class RewardCreateRequest(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    icon: RewardIcon
    coin_cost: int = Field(..., ge=0)
    tier: RewardTier
    is_available: bool = True


# ============================================
# Derived responses
# ============================================

class ProgressionTierResponse(CamelModel):
    level: int
    name: str
    xp_required: int
    description: str


class ProgressionResponse(CamelModel):
    """Server-side plant growth state for GET /api/user/progression."""
    xp: int
    level: int
    level_name: str
    current: ProgressionTierResponse
    next: ProgressionTierResponse
    progress_percent: float = Field(..., ge=0.0, le=100.0)
    xp_to_next: int = Field(..., ge=0)


class HabitSummaryResponse(CamelModel):
    """Daily checklist totals."""
    completed: int
    total: int
    completion_rate: float


class HealthResponse(CamelModel):
    """Response body for /health endpoint."""
    status: str
    version: str
    storage_backend: str

