"""
Repository tests against in-memory SQLite.

Covers the SQL trip store (including validate-on-read and the
``updated_at`` compare-and-swap), vehicles, recent places and settings.
"""

from dataclasses import replace
from datetime import timezone

import pytest
from sqlalchemy import update

from tripfare.domain.entities import Coordinates, DriverSettings, Place
from tripfare.domain.enums import TripStatus
from tripfare.domain.exceptions import ConcurrentModification
from tripfare.domain.forms import TripProposalForm
from tripfare.infrastructure.models import TripModel
from tripfare.infrastructure.repositories import (
    DriverSettingsRepository,
    RecentPlaceRepository,
    TripRepository,
    VehicleRepository,
)
from tripfare.services.lifecycle import TripConfirmation, TripLifecycle


def _form(name="Meera Nair") -> TripProposalForm:
    return TripProposalForm(
        customer_name=name,
        proposed_start_date="2026-10-20",
        number_of_days="2",
        bata_per_day="300",
    )


@pytest.fixture
def sql_lifecycle(db_session, clock, ids):
    return TripLifecycle(TripRepository(db_session), clock=clock, id_factory=ids, tz=timezone.utc)


class TestTripRepository:
    @pytest.mark.asyncio
    async def test_round_trips_through_json_payload(self, sql_lifecycle, db_session, vehicle):
        trip = await sql_lifecycle.create_proposal(_form(), vehicle, None, 420.0, False)
        await db_session.commit()

        loaded = await TripRepository(db_session).get_by_id(trip.id)
        assert loaded == trip

    @pytest.mark.asyncio
    async def test_filters_by_status(self, sql_lifecycle, db_session, vehicle):
        a = await sql_lifecycle.create_proposal(_form("A"), vehicle, None, 100.0, False)
        b = await sql_lifecycle.create_proposal(_form("B"), vehicle, None, 100.0, False)
        await sql_lifecycle.confirm_trip(b.id, TripConfirmation("2026-10-20T06:00:00+00:00"))

        repo = TripRepository(db_session)
        assert [t.id for t in await repo.get_all()] == [b.id, a.id]
        assert [t.id for t in await repo.get_by_status(TripStatus.CONFIRMED)] == [b.id]
        assert await repo.count_by_status() == {"proposed": 1, "confirmed": 1}

    @pytest.mark.asyncio
    async def test_invalid_record_is_skipped(self, sql_lifecycle, db_session, vehicle):
        good = await sql_lifecycle.create_proposal(_form("Good"), vehicle, None, 100.0, False)
        bad = await sql_lifecycle.create_proposal(_form("Bad"), vehicle, None, 100.0, False)

        corrupted = {**(await db_session.get(TripModel, bad.id)).payload, "number_of_days": 0}
        await db_session.execute(
            update(TripModel).where(TripModel.id == bad.id).values(payload=corrupted)
        )

        repo = TripRepository(db_session)
        assert [t.id for t in await repo.get_all()] == [good.id]
        assert await repo.get_by_id(bad.id) is None

    @pytest.mark.asyncio
    async def test_stale_update_rejected(self, sql_lifecycle, db_session, vehicle):
        trip = await sql_lifecycle.create_proposal(_form(), vehicle, None, 100.0, False)
        confirmed = await sql_lifecycle.confirm_trip(
            trip.id, TripConfirmation("2026-10-20T06:00:00+00:00")
        )

        repo = TripRepository(db_session)
        with pytest.raises(ConcurrentModification):
            await repo.save(
                trip.with_changes(notes="stale", updated_at="2026-10-09T00:00:00+00:00"),
                expected_updated_at=trip.updated_at,
            )
        assert (await repo.get_by_id(trip.id)).status == confirmed.status

    @pytest.mark.asyncio
    async def test_delete(self, sql_lifecycle, db_session, vehicle):
        trip = await sql_lifecycle.create_proposal(_form(), vehicle, None, 100.0, False)
        repo = TripRepository(db_session)
        await repo.delete_by_id(trip.id)
        assert await repo.get_by_id(trip.id) is None


class TestVehicleRepository:
    @pytest.mark.asyncio
    async def test_save_update_delete(self, db_session, vehicle):
        repo = VehicleRepository(db_session)
        await repo.save(vehicle)
        assert await repo.get_by_id(vehicle.id) == vehicle

        cheaper = replace(vehicle, rate_per_km=11.0)
        await repo.save(cheaper)
        assert [v.rate_per_km for v in await repo.get_all()] == [11.0]

        await repo.delete_by_id(vehicle.id)
        assert await repo.get_all() == []


def _place(i: int) -> Place:
    return Place(f"place-{i}", f"Place {i}, India", f"Place {i}", Coordinates(19.0, 72.8), "city")


class TestRecentPlaces:
    @pytest.mark.asyncio
    async def test_newest_first_without_duplicates(self, db_session):
        repo = RecentPlaceRepository(db_session, limit=10)
        for i in (1, 2, 3):
            await repo.add(_place(i))
        await repo.add(_place(1))

        assert [p.id for p in await repo.get_all()] == ["place-1", "place-3", "place-2"]

    @pytest.mark.asyncio
    async def test_capped_at_limit(self, db_session):
        repo = RecentPlaceRepository(db_session, limit=3)
        for i in range(5):
            await repo.add(_place(i))

        assert [p.id for p in await repo.get_all()] == ["place-4", "place-3", "place-2"]

    @pytest.mark.asyncio
    async def test_clear(self, db_session):
        repo = RecentPlaceRepository(db_session)
        await repo.add(_place(1))
        await repo.clear()
        assert await repo.get_all() == []


class TestDriverSettings:
    @pytest.mark.asyncio
    async def test_defaults_until_saved(self, db_session):
        repo = DriverSettingsRepository(db_session)
        assert await repo.get() == DriverSettings()

        saved = DriverSettings(name="Ramesh", phone="98200 00000", default_bata_per_day=400.0)
        await repo.save(saved)
        assert await repo.get() == saved
