"""FastAPI dependency injection helpers."""

from typing import Optional

import redis.asyncio as aioredis
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tripfare.config import settings
from tripfare.infrastructure.database import async_session_factory
from tripfare.infrastructure.geocoding import NominatimClient, RequestThrottle
from tripfare.infrastructure.locks import TripLocks
from tripfare.infrastructure.repositories import TripRepository, VehicleRepository
from tripfare.infrastructure.retry import RetryConfig
from tripfare.infrastructure.routing import OSRMClient
from tripfare.services.lifecycle import TripLifecycle
from tripfare.services.vehicles import VehicleRegistry

_redis_pool = aioredis.ConnectionPool.from_url(
    settings.redis_url, decode_responses=True
)

# One throttle per process: Nominatim allows one request per second
_nominatim_throttle = RequestThrottle(settings.nominatim_min_interval_seconds)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_trip_locks() -> Optional[TripLocks]:
    """Per-trip Redis locks backed by the shared connection pool."""
    client = aioredis.Redis(connection_pool=_redis_pool)
    return TripLocks(client, ttl_seconds=settings.trip_lock_ttl_seconds)


async def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    locks: Optional[TripLocks] = Depends(get_trip_locks),
) -> TripLifecycle:
    """Commits each write before the trip's lock is released."""
    return TripLifecycle(
        TripRepository(db), lock_factory=locks, tz=settings.tz, commit=db.commit
    )


async def get_vehicle_registry(
    db: AsyncSession = Depends(get_db),
) -> VehicleRegistry:
    return VehicleRegistry(VehicleRepository(db))


def get_osrm_client() -> OSRMClient:
    return OSRMClient(
        settings.osrm_base_url,
        timeout=settings.routing_timeout_seconds,
        retry=RetryConfig(
            max_attempts=settings.routing_max_attempts,
            base_delay=settings.routing_backoff_seconds,
        ),
    )


def get_nominatim_client() -> NominatimClient:
    return NominatimClient(
        settings.nominatim_base_url,
        user_agent=settings.nominatim_user_agent,
        throttle=_nominatim_throttle,
        timeout=settings.routing_timeout_seconds,
    )
