"""Test fixtures — in-memory datastore, HTTP clients, SQLite engine.

Learn: API tests never touch PostgreSQL. The app's get_store dependency
is overridden with a MemoryDatastore seeded with two users (one admin,
one not) and two visited paths. The relational backend is tested
separately against an in-memory SQLite database via aiosqlite.

The signing secret must be in the environment before visitlog.config
is first imported, because Settings refuses to load without it.
"""

import os

os.environ.setdefault(
    "VISITLOG_JWT_SECRET", "keyForTesting-0123456789abcdef0123456789abcdef"
)

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from visitlog.auth.jwt import create_token
from visitlog.db.models import Base
from visitlog.main import app
from visitlog.schemas.visit import UserRead, VisitedPathRead
from visitlog.store import get_store
from visitlog.store.memory import MemoryDatastore

JOHN = UserRead(id=91461, email="johndoe@example.com", name="John Doe", is_admin=False)
JANE = UserRead(id=914611345, email="janedoe@example.com", name="Jane Doe", is_admin=True)


def bearer(email: str) -> dict:
    """Authorization header carrying a valid token for email."""
    return {"Authorization": f"Bearer {create_token(email)}"}


@pytest.fixture()
def store():
    """Datastore with John (user), Jane (admin) and two visits."""
    return MemoryDatastore(
        users=[JANE, JOHN],
        visited_paths=[
            VisitedPathRead(
                path="/path2",
                date=datetime(2018, 11, 16, tzinfo=timezone.utc),
                user_id=JOHN.id,
            ),
            VisitedPathRead(
                path="/path1",
                date=datetime(2018, 11, 17, tzinfo=timezone.utc),
                user_id=JANE.id,
            ),
        ],
    )


@pytest.fixture()
def empty_store():
    """Datastore with no users — provisioning is in bootstrap mode."""
    return MemoryDatastore()


async def _client_for(datastore):
    app.dependency_overrides[get_store] = lambda: datastore
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(store):
    """HTTP client for the app backed by the seeded store.

    Learn: Unlike overriding the auth dependency, overriding only the
    store means every request goes through the real token validation.
    Tests attach identity with the bearer() helper.
    """
    async for ac in _client_for(store):
        yield ac


@pytest_asyncio.fixture()
async def bootstrap_client(empty_store):
    """HTTP client for the app backed by an empty store."""
    async for ac in _client_for(empty_store):
        yield ac


@pytest_asyncio.fixture()
async def sqlite_engine():
    """Fresh in-memory SQLite database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://", echo=False, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()
