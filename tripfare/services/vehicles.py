"""Vehicle registry: the driver's cars and their default fare basis."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from tripfare.domain.dates import utc_now_iso
from tripfare.domain.entities import Vehicle
from tripfare.domain.enums import ACOption, CarSize, FuelType
from tripfare.domain.exceptions import VehicleNotFound
from tripfare.infrastructure.repositories import VehicleRepository
from tripfare.services.lifecycle import Clock, IdFactory, new_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VehicleData:
    name: str
    car_size: CarSize
    fuel_type: FuelType
    ac_option: ACOption
    min_km_per_day: float
    rate_per_km: float


class VehicleRegistry:
    def __init__(
        self,
        repo: VehicleRepository,
        clock: Clock = utc_now_iso,
        id_factory: IdFactory = new_id,
    ):
        self.repo = repo
        self.clock = clock
        self.id_factory = id_factory

    async def list_vehicles(self) -> list[Vehicle]:
        return await self.repo.get_all()

    async def get_vehicle(self, vehicle_id: str) -> Vehicle:
        vehicle = await self.repo.get_by_id(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(vehicle_id)
        return vehicle

    async def add_vehicle(self, data: VehicleData) -> Vehicle:
        now = self.clock()
        vehicle = Vehicle(
            id=self.id_factory(),
            name=data.name,
            car_size=data.car_size,
            fuel_type=data.fuel_type,
            ac_option=data.ac_option,
            min_km_per_day=data.min_km_per_day,
            rate_per_km=data.rate_per_km,
            created_at=now,
            updated_at=now,
        )
        await self.repo.save(vehicle)
        logger.info("Vehicle %s added (%s)", vehicle.id, vehicle.name)
        return vehicle

    async def update_vehicle(self, vehicle_id: str, data: VehicleData) -> Vehicle:
        """Edit the live record.  Trips keep the snapshot they were priced with."""
        existing = await self.get_vehicle(vehicle_id)
        updated = replace(
            existing,
            name=data.name,
            car_size=data.car_size,
            fuel_type=data.fuel_type,
            ac_option=data.ac_option,
            min_km_per_day=data.min_km_per_day,
            rate_per_km=data.rate_per_km,
            updated_at=self.clock(),
        )
        await self.repo.save(updated)
        return updated

    async def delete_vehicle(self, vehicle_id: str) -> None:
        await self.repo.delete_by_id(vehicle_id)
        logger.info("Vehicle %s deleted", vehicle_id)
