from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # API
    API_TITLE: str = "Sprout Habit Backend"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    # Storage
    STORAGE_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite:///./sprout.db"
    SEED_DEMO_DATA: bool = True

    # Single demo user until real accounts exist
    DEFAULT_USER_ID: int = 1

    # Economy
    XP_PER_COIN: int = 5
    DEDUCT_COINS_ON_CLAIM: bool = False

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
