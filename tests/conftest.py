"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production models carry no
PostgreSQL-only column types, so the real metadata is created as-is.
"""

import itertools
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tripfare.domain.entities import Vehicle
from tripfare.domain.enums import ACOption, CarSize, FuelType
from tripfare.infrastructure import models  # noqa: F401  (registers tables)
from tripfare.infrastructure.database import Base
from tripfare.infrastructure.stores import InMemoryTripStore
from tripfare.services.lifecycle import TripLifecycle


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> str:
        self.current += timedelta(seconds=1)
        return self.current.isoformat()


class SequentialIds:
    def __init__(self, prefix: str = "id"):
        self._counter = itertools.count(1)
        self.prefix = prefix

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """One private in-memory database per test."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def vehicle() -> Vehicle:
    return Vehicle(
        id="veh-1",
        name="Swift Dzire",
        car_size=CarSize.SEDAN,
        fuel_type=FuelType.DIESEL,
        ac_option=ACOption.AC,
        min_km_per_day=250.0,
        rate_per_km=12.0,
        created_at="2026-09-01T00:00:00+00:00",
        updated_at="2026-09-01T00:00:00+00:00",
    )


@pytest.fixture
def store() -> InMemoryTripStore:
    return InMemoryTripStore()


@pytest.fixture
def lifecycle(store, clock, ids) -> TripLifecycle:
    return TripLifecycle(store, clock=clock, id_factory=ids, tz=timezone.utc)
