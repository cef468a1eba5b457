"""
Shared fixtures: every test gets a fresh app over an in-memory SQLite
database, a TestClient that keeps the session cookie, and a raw SQLAlchemy
session for repository-level tests.
"""
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from services import credentials


@pytest.fixture()
def app():
    settings = Settings(database_url="sqlite://", session_secret="test-secret", api_key="test-key", bcrypt_rounds=4)
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db(app):
    with app.state.SessionLocal() as session:
        yield session


# ── Helpers ───────────────────────────────────────────────────

def make_user(db, email="alice@example.com", password="s3cret"):
    return credentials.register(db, email, password, rounds=4)


def login(client, email="alice@example.com", password="s3cret"):
    return client.post("/login", data={"email": email, "password": password}, follow_redirects=False)


@pytest.fixture()
def user(db):
    return make_user(db)


@pytest.fixture()
def logged_in(client, user):
    res = login(client)
    assert res.status_code == 302
    return client
