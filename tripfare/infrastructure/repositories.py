"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and speaks in
domain entities only.  Every row read goes through the record schemas in
``schemas``; a row that fails validation is skipped with a warning.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DriverSettingsModel, RecentPlaceModel, TripModel, VehicleModel
from .schemas import (
    dump,
    load_valid,
    parse_driver_settings,
    parse_place,
    parse_trip,
    parse_vehicle,
)
from tripfare.domain.entities import DriverSettings, Place, Trip, Vehicle
from tripfare.domain.enums import TripStatus
from tripfare.domain.exceptions import ConcurrentModification


class TripRepository:
    """SQL implementation of ``stores.TripStore``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all(self) -> list[Trip]:
        result = await self.session.execute(
            select(TripModel.payload).order_by(TripModel.created_at.desc())
        )
        return load_valid(result.scalars().all(), parse_trip)

    async def get_by_id(self, trip_id: str) -> Optional[Trip]:
        row = await self.session.get(TripModel, trip_id)
        if row is None:
            return None
        trips = load_valid([row.payload], parse_trip)
        return trips[0] if trips else None

    async def get_by_status(self, status: TripStatus) -> list[Trip]:
        result = await self.session.execute(
            select(TripModel.payload)
            .where(TripModel.status == status.value)
            .order_by(TripModel.created_at.desc())
        )
        return load_valid(result.scalars().all(), parse_trip)

    async def save(self, trip: Trip, expected_updated_at: Optional[str] = None) -> None:
        """
        Insert or update *trip*.

        With *expected_updated_at* the update is a compare-and-swap: it only
        applies if the stored row still carries that timestamp.
        """
        values = {
            "status": trip.status.value,
            "vehicle_id": trip.vehicle_id,
            "customer_name": trip.customer_name,
            "proposed_start_date": trip.proposed_start_date,
            "actual_end_time": trip.actual_end_time,
            "payload": dump(trip),
            "created_at": trip.created_at,
            "updated_at": trip.updated_at,
        }

        if expected_updated_at is None:
            existing = await self.session.get(TripModel, trip.id)
            if existing is None:
                self.session.add(TripModel(id=trip.id, **values))
            else:
                for key, value in values.items():
                    setattr(existing, key, value)
            await self.session.flush()
            return

        result = await self.session.execute(
            update(TripModel)
            .where(TripModel.id == trip.id)
            .where(TripModel.updated_at == expected_updated_at)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise ConcurrentModification(
                f"Trip {trip.id} was modified concurrently", {"trip_id": trip.id}
            )

    async def delete_by_id(self, trip_id: str) -> None:
        await self.session.execute(delete(TripModel).where(TripModel.id == trip_id))

    async def count_by_status(self) -> dict[str, int]:
        result = await self.session.execute(
            select(TripModel.status, func.count()).group_by(TripModel.status)
        )
        return {status: count for status, count in result.all()}


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _payload(row: VehicleModel) -> dict:
        return {
            "id": row.id,
            "name": row.name,
            "car_size": row.car_size,
            "fuel_type": row.fuel_type,
            "ac_option": row.ac_option,
            "min_km_per_day": row.min_km_per_day,
            "rate_per_km": row.rate_per_km,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }

    async def get_all(self) -> list[Vehicle]:
        result = await self.session.execute(
            select(VehicleModel).order_by(VehicleModel.created_at)
        )
        return load_valid(
            (self._payload(r) for r in result.scalars().all()), parse_vehicle
        )

    async def get_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        row = await self.session.get(VehicleModel, vehicle_id)
        if row is None:
            return None
        vehicles = load_valid([self._payload(row)], parse_vehicle)
        return vehicles[0] if vehicles else None

    async def save(self, vehicle: Vehicle) -> None:
        values = dump(vehicle)
        existing = await self.session.get(VehicleModel, vehicle.id)
        if existing is None:
            self.session.add(VehicleModel(**values))
        else:
            for key, value in values.items():
                setattr(existing, key, value)
        await self.session.flush()

    async def delete_by_id(self, vehicle_id: str) -> None:
        await self.session.execute(
            delete(VehicleModel).where(VehicleModel.id == vehicle_id)
        )


class RecentPlaceRepository:
    """Most-recent-first list of searched places, de-duplicated by id."""

    def __init__(self, session: AsyncSession, limit: int = 10):
        self.session = session
        self.limit = limit

    async def get_all(self) -> list[Place]:
        result = await self.session.execute(
            select(RecentPlaceModel).order_by(RecentPlaceModel.position.desc())
        )
        return load_valid(
            (
                {
                    "id": r.id,
                    "display_name": r.display_name,
                    "short_name": r.short_name,
                    "coordinates": {"latitude": r.latitude, "longitude": r.longitude},
                    "type": r.type,
                }
                for r in result.scalars().all()
            ),
            parse_place,
        )

    async def add(self, place: Place) -> None:
        top = await self.session.execute(select(func.max(RecentPlaceModel.position)))
        position = (top.scalar() or 0) + 1

        values = {
            "display_name": place.display_name,
            "short_name": place.short_name,
            "latitude": place.coordinates.latitude,
            "longitude": place.coordinates.longitude,
            "type": place.type,
            "position": position,
        }
        existing = await self.session.get(RecentPlaceModel, place.id)
        if existing is None:
            self.session.add(RecentPlaceModel(id=place.id, **values))
        else:
            for key, value in values.items():
                setattr(existing, key, value)
        await self.session.flush()

        # Keep only the newest ``limit`` entries
        keep = (
            select(RecentPlaceModel.id)
            .order_by(RecentPlaceModel.position.desc())
            .limit(self.limit)
        )
        await self.session.execute(
            delete(RecentPlaceModel).where(RecentPlaceModel.id.not_in(keep))
        )

    async def clear(self) -> None:
        await self.session.execute(delete(RecentPlaceModel))


class DriverSettingsRepository:
    SINGLETON_ID = 1

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self) -> DriverSettings:
        row = await self.session.get(DriverSettingsModel, self.SINGLETON_ID)
        if row is None:
            return DriverSettings()
        found = load_valid(
            [
                {
                    "name": row.name,
                    "phone": row.phone,
                    "default_bata_per_day": row.default_bata_per_day,
                }
            ],
            parse_driver_settings,
        )
        return found[0] if found else DriverSettings()

    async def save(self, driver_settings: DriverSettings) -> None:
        values = dump(driver_settings)
        row = await self.session.get(DriverSettingsModel, self.SINGLETON_ID)
        if row is None:
            self.session.add(DriverSettingsModel(id=self.SINGLETON_ID, **values))
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await self.session.flush()
