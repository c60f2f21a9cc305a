"""Test fixtures — in-memory stores behind the real app.

Learn: Testing pattern for FastAPI + swappable stores:

1. Each test gets a fresh MemoryDatabase (function-scoped) — no
   cross-test pollution and no PostgreSQL required.
2. The app's store providers (get_user_store, get_token_store,
   get_workout_store) are overridden to return memory stores over it.
3. Authentication is NOT mocked: tests register, log in, and send real
   bearer tokens through the real gate.

bcrypt rounds drop to the minimum (4) so hashing doesn't dominate runtime.

The PostgreSQL store tests use `pg_session` instead: a real connection
whose outer transaction is rolled back after each test. They skip when
no database answers at FITLOG_DATABASE_URL.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from fitlog.config import settings
from fitlog.db.engine import get_db
from fitlog.db.models import Base
from fitlog.main import app
from fitlog.stores import get_token_store, get_user_store, get_workout_store
from fitlog.stores.memory import (
    MemoryDatabase,
    MemoryTokenStore,
    MemoryUserStore,
    MemoryWorkoutStore,
)

DEFAULT_PASSWORD = "password1234"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture()
def memory_db():
    return MemoryDatabase()


@pytest.fixture()
def user_store(memory_db):
    return MemoryUserStore(memory_db)


@pytest.fixture()
def token_store(memory_db):
    return MemoryTokenStore(memory_db)


@pytest.fixture()
def workout_store(memory_db):
    return MemoryWorkoutStore(memory_db)


@pytest.fixture()
def db_session():
    """Stand-in AsyncSession for routes that talk to the DB directly (health)."""
    session = AsyncMock()
    session.execute.return_value = None
    return session


@pytest_asyncio.fixture()
async def client(user_store, token_store, workout_store, db_session):
    """HTTP client with every store dependency pointed at memory stores."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_token_store] = lambda: token_store
    app.dependency_overrides[get_workout_store] = lambda: workout_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def login(client):
    """Factory: register a user (if needed) and return bearer headers.

        headers = await login("alice_runner")
    """

    async def _login(username: str, password: str = DEFAULT_PASSWORD) -> dict:
        r = await client.post(
            "/api/v1/users",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
            },
        )
        assert r.status_code in (201, 409)

        r = await client.post(
            "/api/v1/tokens/authentication",
            json={"username": username, "password": password},
        )
        assert r.status_code == 201
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _login


@pytest_asyncio.fixture()
async def pg_session():
    """Per-test PostgreSQL session with automatic rollback via savepoints.

    join_transaction_mode="create_savepoint" turns every session.commit()
    (and every transaction() scope in the stores) into a SAVEPOINT. The
    schema is created inside the outer transaction, so it vanishes with
    the test data.
    """
    engine = create_async_engine(
        settings.database_url, echo=False, connect_args={"timeout": 5}
    )
    try:
        conn = await engine.connect()
    except (OSError, asyncio.TimeoutError, SQLAlchemyError) as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {e}")

    trans = await conn.begin()
    await conn.run_sync(Base.metadata.create_all)
    session = AsyncSession(
        bind=conn,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        await session.close()
        await trans.rollback()
        await conn.close()
        await engine.dispose()
