import os
import secrets
import sys
from pathlib import Path
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure project root on sys.path so 'adexchange' resolves without an install
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from adexchange.main import app  # type: ignore
from adexchange.database import Base  # type: ignore
from adexchange.api import deps  # type: ignore
"""Pytest fixtures and factories.

Important: SQLAlchemy relationship configuration requires all model modules to be imported
before Base.metadata.create_all(), otherwise back_populates targets might not exist yet.
"""
from adexchange.models.db import User, Website, ClickLock, DailyStats, DailyBreakdown  # noqa: F401
from adexchange.models.db.enums import WebsiteStatus
from adexchange.utils.ratelimiter import rate_limiter

# File-based SQLite so concurrent settlement threads each get their own connection.
# The busy timeout lets a second writer wait for the first to commit.
TEST_DB_FILE = "test_adexchange.db"
SQLALCHEMY_TEST_URL = f"sqlite+pysqlite:///./{TEST_DB_FILE}"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Background view recording opens sessions through adexchange.database.SessionLocal
import adexchange.database as _app_database  # noqa: E402
_app_database.SessionLocal = TestingSessionLocal  # type: ignore


@pytest.fixture(scope="session", autouse=True)
def create_test_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    try:
        os.remove(TEST_DB_FILE)
    except OSError:
        pass


@pytest.fixture(autouse=True)
def _isolate_test_state(create_test_db):
    """Empty every table and the in-memory rate limiter before each test."""
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


# Override dependency
def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


app.dependency_overrides[deps.get_db] = _override_get_db


@pytest.fixture()
def client():
    return TestClient(app, follow_redirects=False)


# ---------- Data factory helpers ----------

@pytest.fixture()
def user_factory(db_session):
    def _create(credits: int = 0, *, email: str | None = None, is_admin: bool = False, is_owner: bool = False, **fields):
        if email is None:
            email = f"{secrets.token_hex(4)}@example.com"
        u = User(
            email=email,
            api_key=f"rk_{secrets.token_hex(12)}",
            credits=credits,
            is_admin=is_admin,
            is_owner=is_owner,
            **fields,
        )
        db_session.add(u)
        db_session.commit()
        db_session.refresh(u)
        return u
    return _create


@pytest.fixture()
def website_factory(db_session):
    def _create(
        owner: User,
        domain: str | None = None,
        *,
        category: str = "Technology",
        active: bool = True,
        has_credits: bool | None = None,
        show_ads: bool = True,
        status: WebsiteStatus = WebsiteStatus.APPROVED,
        **fields,
    ):
        if domain is None:
            domain = f"site-{secrets.token_hex(4)}.com"
        w = Website(
            user_id=owner.id,
            domain=domain,
            category=category,
            active=active,
            has_credits=(owner.credits > 0) if has_credits is None else has_credits,
            show_ads=show_ads,
            status=status,
            **fields,
        )
        db_session.add(w)
        db_session.commit()
        db_session.refresh(w)
        return w
    return _create


@pytest.fixture()
def auth_header(user_factory):
    user = user_factory(credits=50)
    return {"Authorization": f"Bearer {user.api_key}"}, user


@pytest.fixture()
def admin_header(user_factory):
    admin = user_factory(is_admin=True)
    return {"Authorization": f"Bearer {admin.api_key}"}, admin


@pytest.fixture()
def owner_header(user_factory):
    owner = user_factory(is_owner=True)
    return {"Authorization": f"Bearer {owner.api_key}"}, owner
