"""
Shared fixtures: in-memory SQLite database, API client and sample users.

Settings are read at import time, so the environment is pinned before any
workforce module is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ORG_TIMEZONE"] = "Europe/Helsinki"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
import pytz  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import workforce.models  # noqa: E402,F401
from workforce.core.database import Base, get_db  # noqa: E402
from workforce.core.security import create_access_token  # noqa: E402
from workforce.main import app  # noqa: E402
from workforce.models import ClockLog, User, UserRole  # noqa: E402
from workforce.services.segmentation import as_utc  # noqa: E402

HELSINKI = pytz.timezone("Europe/Helsinki")

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def local(year, month, day, hour=0, minute=0):
    """Aware datetime on the Helsinki wall clock."""
    return HELSINKI.localize(datetime(year, month, day, hour, minute))


def shift(clock_in, clock_out, log_id=None):
    """Plain clock log record for the pure payroll functions."""
    return SimpleNamespace(id=log_id, clock_in=clock_in, clock_out=clock_out)


def auth_headers(user):
    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def tz():
    return HELSINKI


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _user(db, email, role, **kwargs):
    user = User(email=email, hashed_password="not-a-real-hash", role=role, **kwargs)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return _user(db, "admin@test.fi", UserRole.ADMIN.value, full_name="Admin User")


@pytest.fixture
def supervisor(db):
    return _user(db, "super@test.fi", UserRole.SUPERVISOR.value, full_name="Sanna Supervisor")


@pytest.fixture
def other_supervisor(db):
    return _user(db, "other.super@test.fi", UserRole.SUPERVISOR.value, full_name="Olli Supervisor")


@pytest.fixture
def cleaner(db, supervisor):
    return _user(
        db, "cleaner@test.fi", UserRole.EMPLOYEE.value,
        full_name="Kalle Cleaner", supervisor_id=supervisor.id,
    )


@pytest.fixture
def add_log(db):
    """Insert a clock log directly, bypassing the clock-in flow."""
    def _add(worker, clock_in, clock_out=None, **kwargs):
        log = ClockLog(
            employee_id=worker.id,
            clock_in=as_utc(clock_in),
            clock_out=as_utc(clock_out) if clock_out else None,
            **kwargs,
        )
        db.add(log)
        db.commit()
        db.refresh(log)
        return log
    return _add
