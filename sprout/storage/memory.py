"""
In-Memory Record Store

Dict per record kind with monotonic per-kind id counters.
Process-local: everything is gone on restart.
"""
import copy
import logging
from contextlib import contextmanager
from threading import RLock
from typing import Any, Iterator, List

from pydantic import BaseModel

from sprout.errors import NotFoundError
from sprout.storage.base import RecordStore, RecordKind, RECORD_TYPES

logger = logging.getLogger(__name__)


class MemoryRecordStore(RecordStore):
    """
    Thread-safe map-backed store.

    A single re-entrant lock guards every call; transaction() holds it for
    the whole block and restores a snapshot if the block raises.
    """

    name = "memory"

    def __init__(self):
        self._lock = RLock()
        self._records: dict[RecordKind, dict[int, BaseModel]] = {kind: {} for kind in RecordKind}
        self._next_ids: dict[RecordKind, int] = {kind: 1 for kind in RecordKind}

    def create(self, kind: RecordKind, fields: dict[str, Any]) -> BaseModel:
        with self._lock:
            record_id = self._next_ids[kind]
            record = RECORD_TYPES[kind].model_validate(
                {**self._prepare_fields(kind, fields), "id": record_id}
            )
            # Counter only advances once validation passed
            self._next_ids[kind] = record_id + 1
            self._records[kind][record_id] = record
            return record

    def get(self, kind: RecordKind, record_id: int) -> BaseModel:
        with self._lock:
            record = self._records[kind].get(record_id)
            if record is None:
                raise NotFoundError(kind.value, record_id)
            return record

    def list(self, kind: RecordKind, **filters: Any) -> List[BaseModel]:
        with self._lock:
            return [
                record
                for record in self._records[kind].values()
                if all(getattr(record, field) == value for field, value in filters.items())
            ]

    def update(self, kind: RecordKind, record_id: int, changes: dict[str, Any]) -> BaseModel:
        with self._lock:
            current = self.get(kind, record_id)
            values = {**current.model_dump(), **changes, "id": record_id}
            updated = RECORD_TYPES[kind].model_validate(values)
            self._records[kind][record_id] = updated
            return updated

    @contextmanager
    def transaction(self) -> Iterator["MemoryRecordStore"]:
        with self._lock:
            # Records are replaced, never mutated, so a shallow copy per kind is enough
            records = {kind: dict(table) for kind, table in self._records.items()}
            next_ids = copy.copy(self._next_ids)
            try:
                yield self
            except Exception:
                self._records = records
                self._next_ids = next_ids
                logger.warning("Transaction rolled back")
                raise


# Global instance shared across requests
memory_store = MemoryRecordStore()
