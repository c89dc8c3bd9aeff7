"""Shared fixtures: per-test SQLite database, sessions and an HTTP client.

Each test gets its own file-backed SQLite database under ``tmp_path`` rather
than ``:memory:``: separate sessions then hold separate connections, so the
redemption race tests exercise real database locking.
"""

import os

# Settings are read at import time; never pick up a developer's .env secrets
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./tripcrew-test.db")

import pytest
from httpx import ASGITransport, AsyncClient

from tripcrew.core.database import build_engine, build_session_factory, get_db
from tripcrew.core.init_db import init_db
from tripcrew.core.security import create_access_token
from tripcrew.main import app
from tripcrew.models import Trip
from tripcrew.services.access.membership_store import MembershipStore


@pytest.fixture
async def test_engine(tmp_path):
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tripcrew.db'}",
        connect_args={"timeout": 30},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_session_factory(test_engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """FastAPI test client with the DB dependency pointed at the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


def bearer(principal_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(principal_id)}"}


@pytest.fixture
def auth():
    return bearer


@pytest.fixture
async def trip(session_factory):
    """Trip owned by alice with no memberships.

    Created in its own session so rollbacks in the test's session never
    expire it.
    """
    async with session_factory() as session:
        trip = Trip(title="Serra da Mantiqueira", owner_id="alice")
        session.add(trip)
        await session.commit()
        await session.refresh(trip)
    return trip


@pytest.fixture
async def shared_trip(session_factory, trip):
    """alice's trip with bob as viewer and carol as admin."""
    async with session_factory() as session:
        store = MembershipStore(session)
        await store.upsert(trip.id, "bob", "viewer")
        await store.upsert(trip.id, "carol", "admin")
        await session.commit()
    return trip
