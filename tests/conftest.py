"""Pytest fixtures for store, service and API tests."""
from collections.abc import Generator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sprout.api.dependencies import get_store
from sprout.database import Base, init_db, make_engine
from sprout.main import create_app
from sprout.models.schemas import CategoryColor, CategoryIcon
from sprout.services.seed import seed_demo_data
from sprout.storage.base import RecordKind, RecordStore
from sprout.storage.memory import MemoryRecordStore
from sprout.storage.sql import SqlRecordStore


@pytest.fixture()
def memory_store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture()
def sql_store() -> Generator[SqlRecordStore, None, None]:
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    store = SqlRecordStore(TestingSessionLocal())
    try:
        yield store
    finally:
        store.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request) -> RecordStore:
    """Runs the test once per storage backend."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 5, 10, 9, 30)


@pytest.fixture()
def player(store):
    """A fresh level-1 user with one category and one 100 XP habit."""
    user = store.create(RecordKind.USER, {"username": "tester"})
    category = store.create(RecordKind.CATEGORY, {
        "name": "Health",
        "icon": CategoryIcon.HEART,
        "color": CategoryColor.RED,
    })
    habit = store.create(RecordKind.HABIT, {
        "user_id": user.id,
        "category_id": category.id,
        "title": "Morning run",
        "xp_reward": 100,
    })
    return user, category, habit


@pytest.fixture()
def seeded_store(memory_store) -> MemoryRecordStore:
    seed_demo_data(memory_store)
    return memory_store


@pytest.fixture()
def client(seeded_store) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_store() -> Generator[RecordStore, None, None]:
        yield seeded_store

    app.dependency_overrides[get_store] = override_get_store
    with TestClient(app) as test_client:
        yield test_client
