"""
Seed script -- populates the database with sample data for local development.

Run after migrations:
    python seed.py

Creates:
  - 4 sample vehicles
  - driver settings
  - 5 sample trips (one in every lifecycle status)
"""

import asyncio

from sqlalchemy import func, select

from tripfare.config import settings
from tripfare.domain.entities import DriverSettings
from tripfare.domain.enums import ACOption, CarSize, FuelType, TripStatus
from tripfare.domain.forms import TripProposalForm
from tripfare.infrastructure.database import async_session_factory, engine
from tripfare.infrastructure.models import VehicleModel
from tripfare.infrastructure.repositories import (
    DriverSettingsRepository,
    TripRepository,
    VehicleRepository,
)
from tripfare.services.lifecycle import TripConfirmation, TripEnd, TripLifecycle, TripStart
from tripfare.services.vehicles import VehicleData, VehicleRegistry


VEHICLES = [
    VehicleData("Swift Dzire", CarSize.SEDAN, FuelType.DIESEL, ACOption.AC, 250, 12),
    VehicleData("Innova Crysta", CarSize.SUV, FuelType.DIESEL, ACOption.AC, 300, 18),
    VehicleData("WagonR", CarSize.HATCHBACK, FuelType.CNG, ACOption.NON_AC, 200, 9),
    VehicleData("Tempo Traveller", CarSize.MUV, FuelType.DIESEL, ACOption.AC, 300, 24),
]

# (customer, start date, days, distance km, target status)
TRIPS = [
    ("Aarav Sharma", "2026-10-02", "2", 420.0, TripStatus.COMPLETED),
    ("Priya Patel", "2026-10-10", "3", 910.0, TripStatus.ACTIVE),
    ("Rohan Mehta", "2026-10-21", "1", 180.0, TripStatus.CONFIRMED),
    ("Sneha Gupta", "2026-10-25", "4", 1250.0, TripStatus.PROPOSED),
    ("Vikram Singh", "2026-10-05", "1", 150.0, TripStatus.CANCELLED),
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(VehicleModel))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Driver settings ───────────────────────────────────────────
        await DriverSettingsRepository(session).save(
            DriverSettings(
                name="Ramesh Kumar",
                phone="+91 98765 43210",
                default_bata_per_day=settings.default_bata_per_day,
            )
        )
        print("  Saved driver settings")

        # ── Vehicles ──────────────────────────────────────────────────
        registry = VehicleRegistry(VehicleRepository(session))
        vehicles = [await registry.add_vehicle(v) for v in VEHICLES]
        print(f"  Created {len(vehicles)} vehicles")

        # ── Trips ─────────────────────────────────────────────────────
        lifecycle = TripLifecycle(TripRepository(session), tz=settings.tz)
        for i, (customer, start_date, days, distance, target) in enumerate(TRIPS):
            vehicle = vehicles[i % len(vehicles)]
            trip = await lifecycle.create_proposal(
                TripProposalForm(
                    customer_name=customer,
                    proposed_start_date=start_date,
                    number_of_days=days,
                    bata_per_day=str(settings.default_bata_per_day),
                    estimated_tolls="450",
                ),
                vehicle,
                route=None,
                estimated_distance_km=distance,
                is_round_trip=True,
            )

            if target == TripStatus.CANCELLED:
                await lifecycle.cancel_trip(trip.id)
                continue
            if target == TripStatus.PROPOSED:
                continue

            start_time = f"{start_date}T06:00:00+05:30"
            await lifecycle.confirm_trip(trip.id, TripConfirmation(start_time))
            if target == TripStatus.CONFIRMED:
                continue

            await lifecycle.start_trip(trip.id, TripStart(45210.0, start_time))
            await lifecycle.add_toll_entry(trip.id, 215.0, "Khalapur Toll Plaza")
            await lifecycle.add_advance_payment(trip.id, 2000.0, "Fuel")
            if target == TripStatus.ACTIVE:
                continue

            await lifecycle.complete_trip(
                trip.id, TripEnd(45210.0 + distance + 18, "2026-10-03T21:30:00+05:30")
            )
        print(f"  Created {len(TRIPS)} trips")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
