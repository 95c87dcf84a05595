"""
Database ORM Models

SQLAlchemy models backing the SQL record store:
- User: single progression state
- Category: life category with cached summary
- Habit, Achievement, Goal, Reward: user-owned records

Foreign keys are plain integers, as in the in-memory store: nothing cascades
and a dangling category id is accepted.
"""
from sqlalchemy import (
    Column, String, Integer, Boolean, Date, DateTime, Text,
    CheckConstraint, Index
)

from sprout.database import Base
from sprout.storage.base import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True)

    # Progression
    level = Column(Integer, nullable=False, default=1)
    level_name = Column(String, nullable=False, default="Seed")
    xp = Column(Integer, nullable=False, default=0)
    coins = Column(Integer, nullable=False, default=0)

    # Counters
    current_streak = Column(Integer, nullable=False, default=0)
    total_habits_completed = Column(Integer, nullable=False, default=0)
    badges_earned = Column(Integer, nullable=False, default=0)
    last_completed_date = Column(Date, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("level >= 1", name="check_user_level"),
        CheckConstraint("xp >= 0 AND coins >= 0", name="check_user_balances"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<User {self.username} L{self.level} XP:{self.xp}>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    color = Column(String, nullable=False)

    # Cached summary
    level = Column(Integer, nullable=False, default=1)
    xp = Column(Integer, nullable=False, default=0)
    progress = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=0)
    last_completed_date = Column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="check_category_progress"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Category {self.name} L{self.level}>"


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    category_id = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    xp_reward = Column(Integer, nullable=False, default=50)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    last_credited_on = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("idx_habits_user_category", "user_id", "category_id"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Habit {self.title} completed={self.is_completed}>"


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String, nullable=False)
    xp_reward = Column(Integer, nullable=False)
    earned_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("idx_achievements_user", "user_id"),
        {"sqlite_autoincrement": True},
    )


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    category_id = Column(Integer, nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    type = Column(String, nullable=False)  # 'short-term', 'long-term'
    target_value = Column(Integer, nullable=False)
    current_value = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("type IN ('short-term', 'long-term')", name="check_goal_type"),
        Index("idx_goals_user", "user_id"),
        {"sqlite_autoincrement": True},
    )


class Reward(Base):
    __tablename__ = "rewards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, nullable=False)
    coin_cost = Column(Integer, nullable=False)
    tier = Column(String, nullable=False)  # 'bronze', 'silver', 'gold'
    is_available = Column(Boolean, nullable=False, default=True)
    is_claimed = Column(Boolean, nullable=False, default=False)
    claimed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("tier IN ('bronze', 'silver', 'gold')", name="check_reward_tier"),
        Index("idx_rewards_user", "user_id"),
        {"sqlite_autoincrement": True},
    )
