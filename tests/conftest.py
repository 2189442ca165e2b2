"""
Shared fixtures: a throwaway SQLite database, a TestClient and helpers
for creating users, categories and items through the API.
"""
import asyncio
import os
import tempfile

_workdir = tempfile.mkdtemp(prefix="housetreasure-tests-")

# Settings are read at import time, so the environment has to be ready first
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_workdir}/test.db"
os.environ["REDIS_ENABLED"] = "false"
os.environ["METRICS_ENABLED"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["UPLOAD_DIR"] = os.path.join(_workdir, "uploads")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.core.database import AsyncSessionLocal, Base, engine
from app.main import app
from app.models.user import User, UserRole

PASSWORD = "password123"


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_database():
    """Every test starts from empty tables."""
    asyncio.run(_reset_schema())
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def promote_to_admin(user_id: int) -> None:
    async def _promote():
        async with AsyncSessionLocal() as session:
            user = await session.get(User, user_id)
            user.role = UserRole.ADMIN
            await session.commit()

    asyncio.run(_promote())


def register(client, username: str, **extra) -> dict:
    payload = {
        "email": f"{username}@example.com",
        "username": username,
        "password": PASSWORD,
        **extra,
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def make_user(client):
    """Factory: register and log in a user, returning (user, headers)."""
    def _make(username: str, **extra):
        user = register(client, username, **extra)
        return user, login(client, user["email"])

    return _make


@pytest.fixture
def seller(make_user):
    return make_user("seller")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer")


@pytest.fixture
def admin(make_user):
    user, headers = make_user("admin")
    promote_to_admin(user["id"])
    return user, headers


@pytest.fixture
def category(client, admin):
    _, headers = admin
    response = client.post(
        "/api/categories/",
        json={"name": "Furniture", "slug": "furniture"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def make_item(client, category):
    """Factory: create a listing as the given user."""
    def _make(headers: dict, **overrides):
        payload = {
            "title": "Wooden dining table",
            "description": "Solid oak, seats six",
            "price": 150000,
            "category_id": category["id"],
            "condition": "good",
            "location": "Kigali",
            **overrides,
        }
        response = client.post("/api/items/", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def item(seller, make_item):
    _, headers = seller
    return make_item(headers)
