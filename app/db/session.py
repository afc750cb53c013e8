"""
Database session management. SQLAlchemy 2.x style.
"""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings


def _engine_kwargs(database_url: str, debug: bool, connect_timeout: int) -> dict[str, Any]:
    """Return create_engine kwargs for the configured backend.

    SQLite (local runs and the test suite) shares one connection across threads;
    Postgres gets a pre-pinged pool pinned to UTC.
    """
    if database_url.startswith("sqlite"):
        return {
            "echo": debug,
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "echo": debug,
        "connect_args": {
            "connect_timeout": connect_timeout,
            "options": "-c timezone=UTC",
        },
    }


settings = get_settings()
engine = create_engine(
    settings.database_url,
    **_engine_kwargs(settings.database_url, settings.debug, settings.db_connect_timeout),
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


def check_db_connection() -> None:
    """
    Verify database connectivity. Raises if unreachable.
    Call during application startup.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
