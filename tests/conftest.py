"""Pytest configuration and fixtures."""

import os

# Must be set before salon_app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

from salon_app import models  # noqa: F401
from salon_app.db import get_session
from salon_app.main import app

PASSWORD = "correct-horse"


@pytest.fixture
def engine():
    """In-memory SQLite shared across the test's connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, email, role="owner"):
    resp = client.post("/users", json={"email": email, "password": PASSWORD, "role": role})
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/login", data={"username": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def owner_headers(client):
    return register_and_login(client, "owner@salon.test")


@pytest.fixture
def salon(client, owner_headers):
    """A Ho Chi Minh City salon with one 30-minute service and one staff member."""
    resp = client.post(
        "/salons",
        json={"name": "Lotus Nails", "slug": "lotus-nails", "timezone": "Asia/Ho_Chi_Minh"},
        headers=owner_headers,
    )
    assert resp.status_code == 201, resp.text
    salon = resp.json()

    resp = client.post(
        f"/salons/{salon['id']}/services",
        json={"name": "Manicure", "duration": 30, "price": 15},
        headers=owner_headers,
    )
    assert resp.status_code == 201, resp.text
    service = resp.json()

    resp = client.post(
        f"/salons/{salon['id']}/staff",
        json={"name": "Test Staff", "phone": "0900000001", "priority_order": 1},
        headers=owner_headers,
    )
    assert resp.status_code == 201, resp.text
    staff = resp.json()

    return {"salon": salon, "service": service, "staff": staff}


@pytest.fixture
def login(client):
    """Register a user and return bearer headers for them."""
    def _login(email, role="owner"):
        return register_and_login(client, email, role)
    return _login
