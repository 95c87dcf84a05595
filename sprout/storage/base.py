"""
Record Store Interface

Key-value storage per record kind with owner filtering.
Backends: MemoryRecordStore (demo, tests) and SqlRecordStore (SQLAlchemy).
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, List, Type

from pydantic import BaseModel

from sprout.models.schemas import (
    UserRecord,
    CategoryRecord,
    HabitRecord,
    AchievementRecord,
    GoalRecord,
    RewardRecord,
)


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every backend stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RecordKind(str, Enum):
    USER = "user"
    CATEGORY = "category"
    HABIT = "habit"
    ACHIEVEMENT = "achievement"
    GOAL = "goal"
    REWARD = "reward"


RECORD_TYPES: dict[RecordKind, Type[BaseModel]] = {
    RecordKind.USER: UserRecord,
    RecordKind.CATEGORY: CategoryRecord,
    RecordKind.HABIT: HabitRecord,
    RecordKind.ACHIEVEMENT: AchievementRecord,
    RecordKind.GOAL: GoalRecord,
    RecordKind.REWARD: RewardRecord,
}

# Server-generated timestamp filled on create
CREATION_TIMESTAMPS: dict[RecordKind, str] = {
    RecordKind.USER: "created_at",
    RecordKind.HABIT: "created_at",
    RecordKind.ACHIEVEMENT: "earned_at",
    RecordKind.GOAL: "created_at",
    RecordKind.REWARD: "created_at",
}


class RecordStore(ABC):
    """
    Storage contract shared by all backends.

    Records go in and come out as the pydantic models in RECORD_TYPES.
    Missing ids raise NotFoundError; callers never get None back.
    """

    name: str = "abstract"

    @abstractmethod
    def create(self, kind: RecordKind, fields: dict[str, Any]) -> BaseModel:
        """Assign an id, fill the creation timestamp, and store the record."""

    @abstractmethod
    def get(self, kind: RecordKind, record_id: int) -> BaseModel:
        """Fetch one record or raise NotFoundError."""

    @abstractmethod
    def list(self, kind: RecordKind, **filters: Any) -> List[BaseModel]:
        """Records matching every filter exactly, in insertion order."""

    @abstractmethod
    def update(self, kind: RecordKind, record_id: int, changes: dict[str, Any]) -> BaseModel:
        """Shallow-merge changes into a record or raise NotFoundError."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator["RecordStore"]:
        """All-or-nothing scope for the enclosed calls."""

    def close(self) -> None:
        pass

    def _prepare_fields(self, kind: RecordKind, fields: dict[str, Any]) -> dict[str, Any]:
        values = dict(fields)
        values.pop("id", None)
        timestamp_field = CREATION_TIMESTAMPS.get(kind)
        if timestamp_field and values.get(timestamp_field) is None:
            values[timestamp_field] = utcnow()
        return values
