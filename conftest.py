"""Shared pytest fixtures: an in-memory database and an API client."""

import os

# Must be set before anything imports app.database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALGORITHM", "HS256")

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app import models  # noqa: F401
from app.services.identity import IdentityStore


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    identities = IdentityStore(db)

    def _make_user(username):
        return identities.register(username, f"{username}@example.com", "secret123")

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def client():
    from main import app
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user over the API and return (user json, auth headers)"""

    def _register(username, password="secret123"):
        response = client.post("/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register
