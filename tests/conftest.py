"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.test_constants import (
    TEST_EMAIL,
    TEST_EMAIL_OTHER,
    TEST_INTERNAL_JOB_TOKEN,
    TEST_PASSWORD,
    TEST_SECRET_KEY,
)

# Force an in-memory DB and no LLM key when pytest runs; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LLM_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ.setdefault("SECRET_KEY", TEST_SECRET_KEY)
os.environ.setdefault("INTERNAL_JOB_TOKEN", TEST_INTERNAL_JOB_TOKEN)


@pytest.fixture(autouse=True)
def _clear_llm_provider_cache() -> None:
    """Providers are cached per role; tests must not share patched clients."""
    from app.llm.router import clear_provider_cache

    clear_provider_cache()
    yield
    clear_provider_cache()


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from app.main import app

    return TestClient(app)


@pytest.fixture
def client_with_db(db: Session) -> TestClient:
    """TestClient with get_db overridden to use the test db session."""
    from app.db.session import get_db
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def db() -> Session:
    """Database session on a fresh schema. Tables are dropped after each test."""
    import app.models  # noqa: F401
    from app.db.session import Base, engine

    Base.metadata.create_all(engine)
    session = Session(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


# ── Domain fixtures ─────────────────────────────────────────────────


@pytest.fixture
def user(db: Session):
    from app.services.auth import create_user

    return create_user(db, TEST_EMAIL, TEST_PASSWORD, name="Pat Manager")


@pytest.fixture
def other_user(db: Session):
    from app.services.auth import create_user

    return create_user(db, TEST_EMAIL_OTHER, TEST_PASSWORD)


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    from app.services.auth import create_access_token

    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def partner(db: Session, user):
    from app.models import Partner

    p = Partner(
        user_id=user.id,
        name="Acme",
        domain="acme.com",
        rss_url="https://acme.com/feed",
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture
def objective(db: Session, user):
    from app.models import Objective

    o = Objective(user_id=user.id, type="marketplace", detail="AWS listing", priority=1)
    db.add(o)
    db.commit()
    return o
