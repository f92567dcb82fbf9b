"""
Shared pytest fixtures.

Uses a throwaway SQLite database so no Postgres is required for tests.
Every test works with its own freshly generated user ids, so no table
truncation is needed between tests.

The test engine takes the write lock at BEGIN, like the app's engine, so a
session that has read something holds the lock until it commits, rolls back
or closes.
"""
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.db.base import Base, get_db, serialize_sqlite_writers
from app.main import app
from app.models.user import User

SQLITE_URL = "sqlite:///./test_postora.db"


def make_test_engine(timeout: float = 5.0):
    return serialize_sqlite_writers(
        create_engine(
            SQLITE_URL,
            connect_args={"check_same_thread": False, "timeout": timeout},
        )
    )


engine = make_test_engine()
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def impatient_sessions():
    """Session factory whose writers give up on a held lock after 0.2 s."""
    fast_engine = make_test_engine(timeout=0.2)
    yield sessionmaker(autocommit=False, autoflush=False, bind=fast_engine)
    fast_engine.dispose()


@pytest.fixture()
def new_user_id():
    return f"u-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def make_user(db):
    """Insert a bare user row and return its id."""
    def _make(username: str | None = None) -> str:
        uid = f"u-{uuid.uuid4().hex[:12]}"
        db.add(User(id=uid, username=username))
        db.commit()
        return uid
    return _make
