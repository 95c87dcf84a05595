"""
Goal Service

Goals move toward their target through explicit updates. Reaching the
target does not complete a goal; the caller sets is_completed.
"""
import logging
from typing import List, Optional

from sprout.models.schemas import GoalRecord
from sprout.storage.base import RecordStore, RecordKind, utcnow

logger = logging.getLogger(__name__)


def create_goal(store: RecordStore, user_id: int, fields: dict) -> GoalRecord:
    goal = store.create(RecordKind.GOAL, {
        **fields,
        "user_id": user_id,
        "is_completed": False,
        "completed_at": None,
    })
    logger.info(f"Created {goal.type.value} goal {goal.id} for user {user_id}")
    return goal


def list_goals(store: RecordStore, user_id: int) -> List[GoalRecord]:
    return store.list(RecordKind.GOAL, user_id=user_id)


def update_goal(
    store: RecordStore,
    goal_id: int,
    current_value: Optional[int] = None,
    is_completed: Optional[bool] = None,
) -> GoalRecord:
    """
    Update a goal's progress and/or completion flag.

    Omitted arguments leave the field alone. Marking a goal completed
    stamps completed_at (kept if it was already completed); un-completing
    clears it.
    """
    changes = {}
    if current_value is not None:
        changes["current_value"] = current_value

    if is_completed is not None:
        goal = store.get(RecordKind.GOAL, goal_id)
        if is_completed and not goal.is_completed:
            changes.update(is_completed=True, completed_at=utcnow())
        elif not is_completed:
            changes.update(is_completed=False, completed_at=None)

    goal = store.update(RecordKind.GOAL, goal_id, changes)
    if changes:
        logger.info(f"Goal {goal_id} updated: {goal.current_value}/{goal.target_value}")
    return goal
