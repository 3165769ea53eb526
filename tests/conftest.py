import asyncio
import os
import tempfile
from pathlib import Path

import pytest

# Point the app at a throwaway SQLite database before anything imports the engine
_TMP_DIR = tempfile.mkdtemp(prefix="inventory-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ.setdefault("JWT_SECRET", "test-secret")

from fastapi import HTTPException  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from core.auth import current_active_superuser, current_active_user  # noqa: E402
from db.database import async_session_maker, create_db_and_tables, drop_db_and_tables  # noqa: E402
from db.users import User  # noqa: E402
from main import app  # noqa: E402


async def _create_user(email: str, first_name: str, last_name: str, superuser: bool) -> User:
    async with async_session_maker() as session:
        user = User(
            email=email,
            hashed_password="not-used",
            first_name=first_name,
            last_name=last_name,
            is_active=True,
            is_superuser=superuser,
            is_verified=True,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture()
def db():
    asyncio.run(create_db_and_tables())
    yield
    asyncio.run(drop_db_and_tables())


@pytest.fixture()
def admin(db) -> User:
    return asyncio.run(_create_user("admin@example.com", "Ada", "Admin", superuser=True))


@pytest.fixture()
def member(db) -> User:
    return asyncio.run(_create_user("member@example.com", "Max", "Member", superuser=False))


@pytest.fixture()
def client(admin, member):
    app.dependency_overrides[current_active_user] = lambda: admin
    app.dependency_overrides[current_active_superuser] = lambda: admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def member_client(admin, member):
    def _forbidden():
        raise HTTPException(status_code=403, detail="Forbidden")

    app.dependency_overrides[current_active_user] = lambda: member
    app.dependency_overrides[current_active_superuser] = _forbidden
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def category(client):
    resp = client.post("/inventory/categories/", json={"name": "Laptops", "description": "Loaners"})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def storage(client):
    resp = client.post("/locations/", json={"name": "Storage Room", "capacity": 100})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def front_desk(client):
    resp = client.post("/locations/", json={"name": "Front Desk", "capacity": 10})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def make_item(client, category, storage):
    def _make(**overrides):
        payload = {
            "category_id": category["id"],
            "name": "Laptop 01",
            "holder_location_id": storage["id"],
        }
        payload.update(overrides)
        resp = client.post("/inventory/items", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
