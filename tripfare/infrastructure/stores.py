"""
Trip storage contract and the non-SQL implementations.

``TripStore`` is what the lifecycle service needs from persistence.  The SQL
implementation lives in ``repositories.TripRepository``; ``InMemoryTripStore``
backs tests and scripts, and ``CachedTripStore`` is a read-through cache that
can wrap either.
"""

from __future__ import annotations

from typing import Optional, Protocol

from tripfare.domain.entities import Trip
from tripfare.domain.enums import TripStatus
from tripfare.domain.exceptions import ConcurrentModification


class TripStore(Protocol):
    async def get_all(self) -> list[Trip]: ...

    async def get_by_id(self, trip_id: str) -> Optional[Trip]: ...

    async def get_by_status(self, status: TripStatus) -> list[Trip]: ...

    async def save(
        self, trip: Trip, expected_updated_at: Optional[str] = None
    ) -> None: ...

    async def delete_by_id(self, trip_id: str) -> None: ...


def _newest_first(trips: list[Trip]) -> list[Trip]:
    return sorted(trips, key=lambda t: t.created_at, reverse=True)


class InMemoryTripStore:
    """Dict-backed store with the same optimistic-concurrency rule as SQL."""

    def __init__(self, trips: Optional[list[Trip]] = None):
        self._trips: dict[str, Trip] = {t.id: t for t in trips or []}

    async def get_all(self) -> list[Trip]:
        return _newest_first(list(self._trips.values()))

    async def get_by_id(self, trip_id: str) -> Optional[Trip]:
        return self._trips.get(trip_id)

    async def get_by_status(self, status: TripStatus) -> list[Trip]:
        return [t for t in await self.get_all() if t.status == status]

    async def save(self, trip: Trip, expected_updated_at: Optional[str] = None) -> None:
        current = self._trips.get(trip.id)
        if expected_updated_at is not None and (
            current is None or current.updated_at != expected_updated_at
        ):
            # A deleted row is a concurrent change too
            raise ConcurrentModification(
                f"Trip {trip.id} was modified concurrently", {"trip_id": trip.id}
            )
        self._trips[trip.id] = trip

    async def delete_by_id(self, trip_id: str) -> None:
        self._trips.pop(trip_id, None)


class CachedTripStore:
    """
    Read-through cache over another ``TripStore``.

    The first ``get_all`` loads the backing store; afterwards reads are
    served from memory and every successful write is published to the cache.
    """

    def __init__(self, backend: TripStore):
        self._backend = backend
        self._cache: Optional[dict[str, Trip]] = None

    async def _loaded(self) -> dict[str, Trip]:
        if self._cache is None:
            self._cache = {t.id: t for t in await self._backend.get_all()}
        return self._cache

    async def get_all(self) -> list[Trip]:
        return _newest_first(list((await self._loaded()).values()))

    async def get_by_id(self, trip_id: str) -> Optional[Trip]:
        return (await self._loaded()).get(trip_id)

    async def get_by_status(self, status: TripStatus) -> list[Trip]:
        return [t for t in await self.get_all() if t.status == status]

    async def save(self, trip: Trip, expected_updated_at: Optional[str] = None) -> None:
        await self._backend.save(trip, expected_updated_at)
        (await self._loaded())[trip.id] = trip

    async def delete_by_id(self, trip_id: str) -> None:
        await self._backend.delete_by_id(trip_id)
        (await self._loaded()).pop(trip_id, None)

    def invalidate(self) -> None:
        self._cache = None
