"""
SQL Record Store

SQLAlchemy-backed implementation of the record store contract.
One instance wraps one session; outside a transaction every write commits.
"""
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, List

from pydantic import BaseModel
from sqlalchemy.orm import Session

from sprout.errors import NotFoundError
from sprout.models import db_models
from sprout.storage.base import RecordStore, RecordKind, RECORD_TYPES

logger = logging.getLogger(__name__)


ORM_MODELS = {
    RecordKind.USER: db_models.User,
    RecordKind.CATEGORY: db_models.Category,
    RecordKind.HABIT: db_models.Habit,
    RecordKind.ACHIEVEMENT: db_models.Achievement,
    RecordKind.GOAL: db_models.Goal,
    RecordKind.REWARD: db_models.Reward,
}


def _column_values(record: BaseModel) -> dict[str, Any]:
    values = {}
    for field in type(record).model_fields:
        value = getattr(record, field)
        values[field] = value.value if isinstance(value, Enum) else value
    return values


class SqlRecordStore(RecordStore):
    """
    Record store over a SQLAlchemy session.

    Rows are validated through the same pydantic records as the memory
    backend before they are written, so both backends accept and reject
    the same data.
    """

    name = "sql"

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    def _to_record(self, kind: RecordKind, row) -> BaseModel:
        return RECORD_TYPES[kind].model_validate(row)

    def _row(self, kind: RecordKind, record_id: int):
        row = self.db.get(ORM_MODELS[kind], record_id)
        if row is None:
            raise NotFoundError(kind.value, record_id)
        return row

    def _commit(self) -> None:
        if self._depth == 0:
            self.db.commit()
        else:
            self.db.flush()

    def create(self, kind: RecordKind, fields: dict[str, Any]) -> BaseModel:
        # id=0 is a placeholder so the record validates before the row exists
        draft = RECORD_TYPES[kind].model_validate({**self._prepare_fields(kind, fields), "id": 0})
        values = _column_values(draft)
        values.pop("id")
        row = ORM_MODELS[kind](**values)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return self._to_record(kind, row)

    def get(self, kind: RecordKind, record_id: int) -> BaseModel:
        return self._to_record(kind, self._row(kind, record_id))

    def list(self, kind: RecordKind, **filters: Any) -> List[BaseModel]:
        model = ORM_MODELS[kind]
        rows = self.db.query(model).filter_by(**filters).order_by(model.id).all()
        return [self._to_record(kind, row) for row in rows]

    def update(self, kind: RecordKind, record_id: int, changes: dict[str, Any]) -> BaseModel:
        row = self._row(kind, record_id)
        current = self._to_record(kind, row)
        updated = RECORD_TYPES[kind].model_validate(
            {**current.model_dump(), **changes, "id": record_id}
        )
        for field, value in _column_values(updated).items():
            if field != "id":
                setattr(row, field, value)
        self._commit()
        return updated

    @contextmanager
    def transaction(self) -> Iterator["SqlRecordStore"]:
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            self.db.rollback()
            logger.warning("Transaction rolled back")
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                self.db.commit()

    def close(self) -> None:
        self.db.close()
