"""
Pytest configuration and fixtures
"""
import itertools
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Settings are read at import time, so the test environment goes in first
_scratch_dir = Path(tempfile.mkdtemp(prefix="rewear-tests-"))
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DB_DRIVER"] = "sqlite"
os.environ["DB_NAME"] = str(_scratch_dir / "unused.db")
os.environ["LOG_TO_CONSOLE"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["INITIAL_POINTS"] = "100"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import Session, sessionmaker

from rewear.config import settings
from rewear.database import build_engine, get_db
from rewear.main import app
from rewear.models.base import Base
from rewear.models.user import User
from rewear.schemas.item import ItemCreate
from rewear.schemas.user import UserCreate
from rewear.services import items as item_service
from rewear.services import users as user_service


@pytest.fixture(scope="function")
def engine(tmp_path):
    """A fresh file-backed SQLite database per test"""
    engine = build_engine(f"sqlite:///{tmp_path / 'rewear-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def other_db(session_factory) -> Session:
    """A second session, standing in for a concurrent request"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(points=None, **overrides) -> User:
        n = next(counter)
        data = {
            "email": f"user{n}@example.com",
            "first_name": f"User{n}",
            "last_name": "Tester",
        }
        data.update(overrides)
        user = user_service.create_user(db, UserCreate(**data))
        if points is not None:
            db.query(User).filter(User.id == user.id).update({User.points: points})
            db.commit()
            db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_item(db):
    counter = itertools.count(1)

    def _make(owner: User, **overrides):
        n = next(counter)
        data = {
            "title": f"Denim jacket {n}",
            "description": "Classic blue denim jacket",
            "category": "outerwear",
            "condition": "gently used",
            "size": "M",
            "tags": ["denim", "casual"],
            "image_urls": [f"https://img.example.com/{n}.jpg"],
            "points_value": 30,
        }
        data.update(overrides)
        return item_service.create_item(db, owner.id, ItemCreate(**data))

    return _make


def make_token(user_id: int, expires_in: timedelta = timedelta(minutes=30)) -> str:
    payload = {"sub": str(user_id), "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {make_token(user.id)}"}

    return _headers


@pytest.fixture(scope="function")
def client(session_factory):
    """Test client with the database dependency pointed at the test database"""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
