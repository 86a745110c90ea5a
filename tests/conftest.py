"""
CampaignHub — Shared pytest fixtures.
"""

from __future__ import annotations

import os
import secrets
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ─── Environment setup (before any app imports) ───────────────────────────────

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", secrets.token_hex(32))
os.environ.setdefault("ENVIRONMENT", "development")

# ─── App imports (after env is set) ───────────────────────────────────────────

from campaignhub.database import Base  # noqa: E402
from campaignhub.models import rbac, users  # noqa: E402,F401
from campaignhub.models.rbac import Role  # noqa: E402
from campaignhub.services.seeding import seed_rbac  # noqa: E402

ALL_ACTIONS = ["CREATE", "READ", "UPDATE", "DELETE", "LIST", "EXPORT", "IMPORT"]

# ─────────────────────────────────────────────────────────────────────────────
# DATABASE FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


def _make_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session — fresh for every test function."""
    engine = _make_engine()
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture(scope="function")
def seeded_session(db_session: Session) -> Session:
    """Session with canonical resources, actions and default roles loaded."""
    seed_rbac(db_session)
    return db_session


@pytest.fixture(scope="function")
def owner_role(seeded_session: Session) -> Role:
    """A role holding every action through the ALL fallback."""
    role = Role(name="OWNER", description="Everything", permissions={"ALL": ALL_ACTIONS})
    seeded_session.add(role)
    seeded_session.commit()
    return role


# ─────────────────────────────────────────────────────────────────────────────
# FASTAPI CLIENT FIXTURE
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="function")
def client(seeded_session: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with overridden DB dependency."""
    from campaignhub.database import get_db
    from campaignhub.main import app

    def override_get_db():
        try:
            yield seeded_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# ─────────────────────────────────────────────────────────────────────────────
# JWT TOKEN FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


def make_token(role, sub: str = "user_001", **extra) -> str:
    from campaignhub.core.security import create_access_token

    extra.setdefault("email", f"{sub}@campaignhub.io")
    extra.setdefault("type", "user")
    return create_access_token(sub, role, extra=extra)


def auth_headers(role, sub: str = "user_001", **extra) -> dict:
    return {"Authorization": f"Bearer {make_token(role, sub, **extra)}"}


@pytest.fixture(scope="session")
def superadmin_headers() -> dict:
    return auth_headers("SUPERADMIN", "superadmin_001")


@pytest.fixture(scope="session")
def user_headers() -> dict:
    return auth_headers("USER", "user_001", organizationId="org_001")


@pytest.fixture(scope="session")
def owner_headers() -> dict:
    return auth_headers("OWNER", "owner_001")
