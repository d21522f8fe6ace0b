"""Shared fixtures: in-memory Motor database, ASGI HTTP client, task factory."""

import itertools
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app import app as notifydo_app
from config.database import database
from models.task import Task
from services.auth_service import create_email_index
from services.task_service import create_task_indexes


@pytest_asyncio.fixture
async def db():
    """Point the application's Database at a fresh mongomock-motor client."""
    await database.connect(client=AsyncMongoMockClient())
    await create_email_index()
    await create_task_indexes()
    yield database.get_database()
    database.client = None
    database.db = None


@pytest_asyncio.fixture
async def app(db):
    """The FastAPI app wired to the in-memory database (lifespan is not run)."""
    return notifydo_app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient talking to the app in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def register(client):
    """Register a user over HTTP and return the response body (includes the token)."""

    async def _register(name="Ada", email="ada@example.com", password="secret123") -> dict:
        resp = await client.post(
            "/api/users",
            json={"name": name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return bearer


@pytest.fixture
def make_task():
    """Factory for client-side Task objects with increasing creation times."""
    counter = itertools.count()
    base = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)

    def _make(title: str = "Task", **fields) -> Task:
        n = next(counter)
        created = fields.pop("created_at", base + timedelta(minutes=n))
        return Task(
            id=fields.pop("id", f"task-{n}"),
            title=title,
            user_id=fields.pop("user_id", "user-1"),
            created_at=created,
            updated_at=fields.pop("updated_at", created),
            **fields,
        )

    return _make
