"""
Progression Service

Plant growth tiers, XP-to-level resolution, and the XP/streak bookkeeping
shared by every operation that grants experience.
This is the core game logic for Sprout.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Tuple

from sprout.models.schemas import UserRecord
from sprout.storage.base import RecordStore, RecordKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlantLevel:
    """One milestone of the plant avatar."""
    level: int
    name: str
    xp_required: int
    description: str


@dataclass(frozen=True)
class ProgressionSnapshot:
    """Result of resolving a cumulative XP value against the table."""
    xp: int
    current: PlantLevel
    next: PlantLevel
    progress_percent: float

    @property
    def is_max_level(self) -> bool:
        return self.current == self.next

    @property
    def xp_to_next(self) -> int:
        return max(0, self.next.xp_required - self.xp)


class ProgressionTable:
    """
    Ordered tiers with strictly increasing XP thresholds.

    Tier i owns the half-open XP interval [xp_required_i, xp_required_i+1);
    the last tier owns everything above its threshold.
    """

    def __init__(self, tiers: Sequence[PlantLevel]):
        if not tiers:
            raise ValueError("Progression table needs at least one tier")
        if tiers[0].xp_required != 0:
            raise ValueError("First tier must start at 0 XP")
        for previous, tier in zip(tiers, tiers[1:]):
            if tier.xp_required <= previous.xp_required:
                raise ValueError(
                    f"Tier {tier.name} threshold {tier.xp_required} must exceed "
                    f"{previous.name} threshold {previous.xp_required}"
                )
        self.tiers: Tuple[PlantLevel, ...] = tuple(tiers)

    def __len__(self) -> int:
        return len(self.tiers)

    def __iter__(self):
        return iter(self.tiers)

    def resolve(self, xp: int) -> ProgressionSnapshot:
        """
        Resolve cumulative XP into current tier, next tier and progress.

        Args:
            xp: Cumulative experience, must be >= 0.

        Returns:
            ProgressionSnapshot; progress is 100 at the terminal tier.
        """
        if xp < 0:
            raise ValueError(f"XP cannot be negative: {xp}")

        index = 0
        for i, tier in enumerate(self.tiers):
            if tier.xp_required <= xp:
                index = i
            else:
                break

        current = self.tiers[index]
        if index + 1 < len(self.tiers):
            next_tier = self.tiers[index + 1]
            span = next_tier.xp_required - current.xp_required
            progress = (xp - current.xp_required) / span * 100
        else:
            next_tier = current
            progress = 100.0

        return ProgressionSnapshot(
            xp=xp,
            current=current,
            next=next_tier,
            progress_percent=progress,
        )


PLANT_LEVELS = ProgressionTable([
    PlantLevel(1, "Seed", 0, "A tiny seed waiting to sprout"),
    PlantLevel(2, "Sprout", 500, "First signs of life emerge"),
    PlantLevel(3, "Root", 1200, "Building a strong foundation"),
    PlantLevel(4, "Shoot", 2000, "Reaching for the light"),
    PlantLevel(5, "Leaf", 3000, "Producing energy from sunlight"),
    PlantLevel(6, "Stem", 4200, "Growing strong and tall"),
    PlantLevel(7, "Bud", 5600, "Preparing to bloom"),
    PlantLevel(8, "Flower", 7200, "Beautiful blossoms appear"),
    PlantLevel(9, "Fruit", 9000, "Bearing the fruits of labor"),
    PlantLevel(10, "Spore", 11000, "Ready to spread new life"),
])


def level_fields(xp: int, table: ProgressionTable = PLANT_LEVELS) -> dict:
    """Stored level columns derived from XP."""
    current = table.resolve(xp).current
    return {"xp": xp, "level": current.level, "level_name": current.name}


def next_streak(streak: int, last_date: Optional[date], today: date) -> int:
    """
    Streak after a completion on `today`.

    Same day keeps the streak, the following day extends it, any gap
    (or a first completion) restarts it at 1.
    """
    if last_date is None:
        return 1

    days_since = (today - last_date).days
    if days_since <= 0:
        return max(streak, 1)
    elif days_since == 1:
        return streak + 1
    else:
        return 1


def apply_xp(
    store: RecordStore,
    user_id: int,
    xp_delta: int,
    extra_changes: Optional[dict] = None,
) -> Tuple[UserRecord, bool]:
    """
    Add XP to a user and re-resolve the stored level.

    Every XP change goes through here so level and level_name never drift
    from the XP they are derived from.

    Args:
        store: Record store.
        user_id: Owner of the progression state.
        xp_delta: XP to add (>= 0).
        extra_changes: Other user fields to write in the same update.

    Returns:
        Tuple of (updated user, whether the level went up).
    """
    if xp_delta < 0:
        raise ValueError(f"XP delta cannot be negative: {xp_delta}")

    user = store.get(RecordKind.USER, user_id)
    old_level = user.level

    changes = dict(extra_changes or {})
    changes.update(level_fields(user.xp + xp_delta))
    updated = store.update(RecordKind.USER, user_id, changes)

    level_up = updated.level > old_level
    if level_up:
        logger.info(f"User {user_id} grew to level {updated.level} ({updated.level_name})")
    return updated, level_up


def get_progression(store: RecordStore, user_id: int) -> Tuple[UserRecord, ProgressionSnapshot]:
    """Current user plus the resolver output for their XP."""
    user = store.get(RecordKind.USER, user_id)
    return user, PLANT_LEVELS.resolve(user.xp)
