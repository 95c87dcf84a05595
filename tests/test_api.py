"""HTTP tests against the seeded demo data."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sprout import database
from sprout.api import dependencies
from sprout.api.dependencies import get_store
from sprout.config import settings
from sprout.database import Base, make_engine
from sprout.main import create_app
from sprout.storage.memory import MemoryRecordStore


# ============================================
# Service info
# ============================================

def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "version": settings.API_VERSION,
        "storageBackend": "memory",
    }


def test_root_reports_storage_ready(client) -> None:
    data = client.get("/").json()
    assert data["status"] == "running"
    assert data["storage_ready"] is True


# ============================================
# User & progression
# ============================================

def test_get_user_uses_camel_case(client) -> None:
    data = client.get("/api/user").json()

    assert data["username"] == "demo"
    assert data["xp"] == 2850
    assert data["level"] == 4
    assert data["levelName"] == "Shoot"
    assert data["currentStreak"] == 7
    assert data["totalHabitsCompleted"] == 156
    assert "level_name" not in data


def test_add_xp_re_resolves_level(client) -> None:
    response = client.patch("/api/user/xp", json={"xp": 200})

    assert response.status_code == 200
    data = response.json()
    assert data["xp"] == 3050
    assert data["level"] == 5
    assert data["levelName"] == "Leaf"


def test_add_xp_truncates_fraction(client) -> None:
    data = client.patch("/api/user/xp", json={"xp": 12.7}).json()
    assert data["xp"] == 2862


@pytest.mark.parametrize("body", [{"xp": "abc"}, {"xp": "10"}, {"xp": -5}, {}])
def test_add_xp_rejects_invalid_body(client, body) -> None:
    response = client.patch("/api/user/xp", json=body)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "xp"
    assert client.get("/api/user").json()["xp"] == 2850


def test_progression(client) -> None:
    data = client.get("/api/user/progression").json()

    assert data["xp"] == 2850
    assert data["levelName"] == "Shoot"
    assert data["current"] == {
        "level": 4,
        "name": "Shoot",
        "xpRequired": 2000,
        "description": "Reaching for the light",
    }
    assert data["next"]["name"] == "Leaf"
    assert data["progressPercent"] == 85.0
    assert data["xpToNext"] == 150


# ============================================
# Categories
# ============================================

def test_list_categories(client) -> None:
    data = client.get("/api/categories").json()

    assert [c["name"] for c in data] == ["Health", "Finance", "Family", "Personal Dev"]
    health = data[0]
    assert health["icon"] == "heart"
    assert health["color"] == "red"
    assert health["progress"] == 50


def test_category_habits(client) -> None:
    data = client.get("/api/categories/1/habits").json()
    assert [h["title"] for h in data] == ["Drink 8 glasses of water", "Complete 30-min workout"]


def test_category_habits_unknown_category(client) -> None:
    response = client.get("/api/categories/999/habits")

    assert response.status_code == 404
    assert response.json()["message"] == "Category not found"


# ============================================
# Habits
# ============================================

def test_list_habits(client) -> None:
    data = client.get("/api/habits").json()

    assert len(data) == 4
    assert data[0]["isCompleted"] is True
    assert data[1]["xpReward"] == 100


def test_habit_summary(client) -> None:
    assert client.get("/api/habits/summary").json() == {
        "completed": 2,
        "total": 4,
        "completionRate": 50.0,
    }


def test_create_habit_starts_incomplete(client) -> None:
    response = client.post("/api/habits", json={
        "categoryId": 2,
        "title": "Check budget",
        "xpReward": 30,
        "isCompleted": True,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == 5
    assert data["userId"] == 1
    assert data["isCompleted"] is False
    assert data["completedAt"] is None
    assert data["createdAt"] is not None


def test_create_habit_defaults_xp_reward(client) -> None:
    data = client.post("/api/habits", json={"categoryId": 1, "title": "Stretch"}).json()
    assert data["xpReward"] == 50


def test_create_habit_accepts_unknown_category(client) -> None:
    response = client.post("/api/habits", json={"categoryId": 999, "title": "Orphan"})

    assert response.status_code == 200
    assert response.json()["categoryId"] == 999


def test_create_habit_missing_title(client) -> None:
    response = client.post("/api/habits", json={"categoryId": 1})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request data"
    assert "title" in [e["field"] for e in body["errors"]]


def test_completing_habit_grants_rewards(client) -> None:
    response = client.patch("/api/habits/2", json={"isCompleted": True})

    assert response.status_code == 200
    assert response.json()["isCompleted"] is True
    assert response.json()["completedAt"] is not None

    user = client.get("/api/user").json()
    # 100 habit XP plus First Sprout (50) and Centurion (300)
    assert user["xp"] == 3300
    assert user["level"] == 5
    assert user["levelName"] == "Leaf"
    assert user["coins"] == 1270
    assert user["totalHabitsCompleted"] == 157
    assert user["badgesEarned"] == 4
    assert user["currentStreak"] == 7

    titles = [a["title"] for a in client.get("/api/achievements").json()]
    assert titles == ["Health Warrior", "Green Thumb", "First Sprout", "Centurion"]


def test_uncompleting_habit_keeps_xp(client) -> None:
    client.patch("/api/habits/2", json={"isCompleted": True})
    response = client.patch("/api/habits/2", json={"isCompleted": False})

    assert response.status_code == 200
    assert response.json()["isCompleted"] is False
    assert response.json()["completedAt"] is None
    assert client.get("/api/user").json()["xp"] == 3300


def test_complete_endpoint(client) -> None:
    response = client.patch("/api/habits/4/complete")

    assert response.status_code == 200
    assert response.json()["isCompleted"] is True
    assert client.get("/api/user").json()["totalHabitsCompleted"] == 157


def test_update_habit_without_flag_returns_it_unchanged(client) -> None:
    response = client.patch("/api/habits/2", json={})

    assert response.status_code == 200
    assert response.json()["isCompleted"] is False
    assert client.get("/api/user").json()["xp"] == 2850


def test_update_habit_rejects_non_boolean(client) -> None:
    response = client.patch("/api/habits/2", json={"isCompleted": "yes"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "isCompleted"


@pytest.mark.parametrize("path", ["/api/habits/999", "/api/habits/999/complete"])
def test_toggle_unknown_habit(client, path) -> None:
    response = client.patch(path, json={"isCompleted": True})

    assert response.status_code == 404
    assert response.json()["message"] == "Habit not found"


# ============================================
# Achievements
# ============================================

def test_list_achievements(client) -> None:
    data = client.get("/api/achievements").json()

    assert [a["title"] for a in data] == ["Health Warrior", "Green Thumb"]
    assert data[0]["icon"] == "fire"
    assert data[0]["earnedAt"] is not None


def test_create_achievement(client) -> None:
    response = client.post("/api/achievements", json={
        "title": "Early Bird",
        "description": "Finish a habit before 7am",
        "icon": "star",
        "xpReward": 25,
    })

    assert response.status_code == 200
    assert response.json()["id"] == 3
    assert len(client.get("/api/achievements").json()) == 3


def test_create_achievement_rejects_unknown_icon(client) -> None:
    response = client.post("/api/achievements", json={
        "title": "Odd",
        "description": "Bad icon",
        "icon": "rocket",
        "xpReward": 10,
    })

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "icon"


def test_achievements_cannot_be_updated(client) -> None:
    response = client.patch("/api/achievements", json={"title": "Renamed"})
    assert response.status_code == 405


# ============================================
# Goals
# ============================================

def test_list_goals(client) -> None:
    data = client.get("/api/goals").json()

    assert [g["title"] for g in data] == ["Emergency Fund Goal", "30-Day Fitness Challenge"]
    assert data[0]["type"] == "long-term"
    assert data[0]["progressPercent"] == 32.0


def test_create_goal(client) -> None:
    response = client.post("/api/goals", json={
        "title": "Read 12 books",
        "description": "One a month",
        "type": "long-term",
        "targetValue": 12,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["currentValue"] == 0
    assert data["isCompleted"] is False
    assert data["categoryId"] is None


def test_create_goal_rejects_unknown_type(client) -> None:
    response = client.post("/api/goals", json={
        "title": "Someday",
        "description": "Maybe",
        "type": "someday",
        "targetValue": 1,
    })
    assert response.status_code == 400


def test_goal_reaching_target_stays_open(client) -> None:
    data = client.patch("/api/goals/1", json={"currentValue": 10000}).json()

    assert data["currentValue"] == 10000
    assert data["isCompleted"] is False
    assert data["progressPercent"] == 100


def test_goal_completion_flag(client) -> None:
    data = client.patch("/api/goals/2", json={"isCompleted": True}).json()

    assert data["isCompleted"] is True
    assert data["completedAt"] is not None


def test_update_unknown_goal(client) -> None:
    response = client.patch("/api/goals/999", json={"currentValue": 1})

    assert response.status_code == 404
    assert response.json()["message"] == "Goal not found"


# ============================================
# Rewards
# ============================================

def test_list_rewards(client) -> None:
    data = client.get("/api/rewards").json()

    assert [r["title"] for r in data] == ["Coffee Date", "New Gear"]
    assert data[1]["tier"] == "gold"
    assert data[1]["coinCost"] == 250


def test_claim_reward_twice(client) -> None:
    first = client.patch("/api/rewards/1/claim")
    second = client.patch("/api/rewards/1/claim")

    assert first.status_code == 200
    assert first.json()["isClaimed"] is True
    assert second.json()["claimedAt"] == first.json()["claimedAt"]
    assert client.get("/api/user").json()["coins"] == 1250


def test_claim_unknown_reward(client) -> None:
    response = client.patch("/api/rewards/999/claim")

    assert response.status_code == 404
    assert response.json()["message"] == "Reward not found"


def test_create_reward_rejects_unknown_tier(client) -> None:
    response = client.post("/api/rewards", json={
        "title": "Yacht",
        "icon": "gift",
        "coinCost": 100000,
        "tier": "platinum",
    })

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "tier"


def test_create_reward(client) -> None:
    response = client.post("/api/rewards", json={
        "title": "Movie night",
        "icon": "star",
        "coinCost": 80,
        "tier": "bronze",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["isAvailable"] is True
    assert data["isClaimed"] is False


# ============================================
# Unexpected failures
# ============================================

class BrokenStore(MemoryRecordStore):
    def list(self, kind, **filters):
        raise RuntimeError("disk on fire")


def test_unexpected_error_returns_generic_500() -> None:
    app = create_app()

    def override_get_store():
        yield BrokenStore()

    app.dependency_overrides[get_store] = override_get_store
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/habits")

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


@pytest.mark.parametrize("raw", [b'{"xp": Infinity}', b'{"xp": 1e400}', b'{"xp": NaN}'])
def test_add_xp_rejects_non_finite_numbers(client, raw) -> None:
    response = client.patch(
        "/api/user/xp",
        content=raw,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "xp"
    assert client.get("/api/user").json()["xp"] == 2850


# ============================================
# SQL backend through the app
# ============================================

@pytest.fixture()
def sql_client(monkeypatch):
    """App configured for the SQL backend on a private in-memory database."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    monkeypatch.setattr(settings, "STORAGE_BACKEND", "sql")
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(dependencies, "SessionLocal", TestingSessionLocal)

    with TestClient(create_app()) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def test_sql_backend_creates_tables_and_seeds_on_startup(sql_client) -> None:
    assert sql_client.get("/").json()["storage_ready"] is True
    assert sql_client.get("/health").json()["storageBackend"] == "sql"

    user = sql_client.get("/api/user").json()
    assert user["username"] == "demo"
    assert user["levelName"] == "Shoot"
    assert len(sql_client.get("/api/habits").json()) == 4


def test_sql_backend_persists_completion_across_requests(sql_client) -> None:
    response = sql_client.patch("/api/habits/2", json={"isCompleted": True})
    assert response.status_code == 200

    user = sql_client.get("/api/user").json()
    assert user["xp"] == 3300
    assert user["coins"] == 1270
    titles = [a["title"] for a in sql_client.get("/api/achievements").json()]
    assert titles[-2:] == ["First Sprout", "Centurion"]
