"""
Shared fixtures: an in-memory SQLite database per test, a TestClient wired
to it through dependency overrides, and factories for signed-up users.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from skillswap.core.database_client import get_db
from skillswap.core.initialise_db import ensure_admin
from skillswap.main import app
from skillswap.models.base import Base

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signup(client):
    """Sign up a user and return {"id", "token", "headers", "user"}."""

    def _signup(name="Alice Example", email="alice@example.com", password=DEFAULT_PASSWORD):
        response = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        data = response.json()
        return {
            "id": data["user"]["id"],
            "token": data["token"],
            "headers": auth_headers(data["token"]),
            "user": data["user"],
        }

    return _signup


@pytest.fixture
def make_user(client, signup):
    """Sign up a user and complete profile setup with the given skills."""

    def _make_user(name, email, offered=("Guitar",), wanted=("Spanish",),
                   location="Berlin", is_public=True):
        account = signup(name=name, email=email)
        response = client.put(
            "/api/users/profile/setup",
            headers=account["headers"],
            json={
                "location": location,
                "skillsOffered": [{"skill": s, "description": f"I teach {s}"} for s in offered],
                "skillsWanted": [{"skill": s} for s in wanted],
                "availability": {"weekends": True, "evenings": True},
                "isPublic": is_public,
            },
        )
        assert response.status_code == 200, response.text
        account["user"] = response.json()["user"]
        return account

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("Alice Example", "alice@example.com", offered=("Guitar", "Cooking"), wanted=("Spanish",))


@pytest.fixture
def bob(make_user):
    return make_user("Bob Example", "bob@example.com", offered=("Spanish",), wanted=("Guitar",), location="Madrid")


@pytest.fixture
def carol(make_user):
    return make_user("Carol Example", "carol@example.com", offered=("Chess",), wanted=("Cooking",), location="Paris")


@pytest.fixture
def admin(client, session_factory):
    db = session_factory()
    try:
        ensure_admin(db, "admin@example.com", DEFAULT_PASSWORD, name="Site Admin")
    finally:
        db.close()
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": DEFAULT_PASSWORD})
    assert response.status_code == 200, response.text
    data = response.json()
    return {"id": data["user"]["id"], "headers": auth_headers(data["token"])}
