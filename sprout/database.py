"""
Database Configuration

SQLAlchemy engine and session factory for the SQL record store.
SQLite by default; any SQLAlchemy URL works.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from sprout.config import settings


def make_engine(url: str, **kwargs):
    """Create an engine, letting SQLite connections cross request threads."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=False, **kwargs)


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Shared by every ORM model in sprout.models.db_models
Base = declarative_base()


def init_db(bind=None):
    """
    Create any missing tables.

    Args:
        bind: Engine to create them on, defaults to the configured one.
    """
    from sprout.models import db_models  # noqa: F401 registers the tables
    Base.metadata.create_all(bind=bind or engine)
