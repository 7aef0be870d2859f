import os
import tempfile
from datetime import date, time, timedelta

import pytest

_tmp_dir = tempfile.mkdtemp(prefix="quickcourt-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["IDP_JWT_SECRET"] = "test-secret"
os.environ["IDP_JWT_ALGORITHMS"] = "HS256"
os.environ["UPSTREAM_RETRY_DELAY_SECONDS"] = "0"

from fastapi.testclient import TestClient  # noqa: E402

from quickcourt import models  # noqa: E402,F401
from quickcourt.database import Base, SessionLocal, engine  # noqa: E402
from quickcourt.main import app  # noqa: E402
from quickcourt.models.admin_settings import AdminSettings  # noqa: E402
from quickcourt.models.enums import UserRole  # noqa: E402
from tests.factories import create_court, create_user, create_venue  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    db.add(AdminSettings())
    db.commit()
    db.close()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def player(db):
    return create_user(db, "player")


@pytest.fixture
def other_player(db):
    return create_user(db, "rival")


@pytest.fixture
def owner(db):
    return create_user(db, "owner", UserRole.FACILITY_OWNER)


@pytest.fixture
def admin(db):
    return create_user(db, "admin", UserRole.ADMIN)


@pytest.fixture
def venue(db, owner):
    return create_venue(db, owner)


@pytest.fixture
def court(db, venue):
    return create_court(db, venue)


@pytest.fixture
def tomorrow() -> date:
    return date.today() + timedelta(days=1)


@pytest.fixture
def ten_am() -> time:
    return time(10, 0)
