"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "local")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from opsdesk.main import app
from opsdesk.db.base import Base
from opsdesk.core.deps import get_db
from opsdesk.services.user_service import create_user

# Import all models to ensure they're registered with Base.metadata
from opsdesk.models import (
    User,
    AuditLog,
    AttendanceRecord,
    Task,
    TaskNote,
    TaskArchive,
    TaskArchiveNote,
)  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alice(db):
    return create_user(db, "alice@example.com", PASSWORD, "Alice")


@pytest.fixture
def bob(db):
    return create_user(db, "bob@example.com", PASSWORD, "Bob")


def get_auth_headers(client, email, password=PASSWORD):
    """Log in and return the bearer header"""
    response = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def alice_headers(client, alice):
    return get_auth_headers(client, alice.email)


@pytest.fixture
def bob_headers(client, bob):
    return get_auth_headers(client, bob.email)


@pytest.fixture
def session_pair(tmp_path):
    """Two independent sessions on one file-backed SQLite database, for interleaving writers"""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'shared.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    SharedSession = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    first, second = SharedSession(), SharedSession()
    try:
        yield first, second
    finally:
        first.close()
        second.close()
        file_engine.dispose()
