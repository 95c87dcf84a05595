"""
API Dependencies

FastAPI dependencies for store access and the acting user.
"""
import logging
from typing import Iterator

from sprout.config import settings
from sprout.database import SessionLocal
from sprout.storage.base import RecordStore
from sprout.storage.memory import memory_store
from sprout.storage.sql import SqlRecordStore

logger = logging.getLogger(__name__)


def get_store() -> Iterator[RecordStore]:
    """
    Dependency that provides the record store.

    The memory backend is one process-wide instance; the SQL backend gets
    a fresh session per request, closed after the response.
    """
    if settings.STORAGE_BACKEND == "sql":
        store = SqlRecordStore(SessionLocal())
        try:
            yield store
        finally:
            store.close()
    else:
        yield memory_store


async def get_current_user_id() -> int:
    """
    Dependency resolving the acting user.

    There are no accounts yet: every request acts as the configured
    demo user. Services always receive the id explicitly.
    """
    return settings.DEFAULT_USER_ID
