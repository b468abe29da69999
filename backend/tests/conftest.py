import os

# The app module builds its engine at import time; keep it off any real database.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timegrid.api.deps import get_db
from timegrid.db.base import Base
from timegrid.main import app
from timegrid.services.rate_limit import clear_rate_limiter
import timegrid.models  # noqa: F401


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    clear_rate_limiter()

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
    clear_rate_limiter()


def register_user(client, payload):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    return response.json()


def login_user(client, email, password):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


@pytest.fixture()
def admin_headers(client):
    register_user(
        client,
        {"name": "Admin User", "email": "admin@example.com", "password": "password123", "role": "admin"},
    )
    token = login_user(client, "admin@example.com", "password123")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def school(client, admin_headers):
    """Two teachers, two subjects and two year groups, created through the API."""

    def post(path, payload):
        response = client.post(path, json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return {
        "alice": post("/api/teachers", {"name": "Alice Baker", "email": "alice@example.com", "color": "#ef4444"}),
        "bob": post("/api/teachers", {"name": "Bob Carter", "email": "bob@example.com", "color": "#22c55e"}),
        "maths": post("/api/subjects", {"name": "Maths", "color": "#3b82f6", "type": "MAIN"}),
        "art": post("/api/subjects", {"name": "Art", "color": "#f59e0b", "type": "ELECTIVE"}),
        "year7": post("/api/year-groups", {"name": "Year 7", "sort_order": 7}),
        "year8": post("/api/year-groups", {"name": "Year 8", "sort_order": 8}),
    }
