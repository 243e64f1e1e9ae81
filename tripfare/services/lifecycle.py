"""
Trip Lifecycle Service
======================

State machine
-------------
::

    (none)    --create_proposal-->      PROPOSED
    PROPOSED  --update_proposal-->      PROPOSED   (re-estimate)
    PROPOSED  --confirm_trip-->         CONFIRMED
    CONFIRMED --start_trip-->           ACTIVE
    ACTIVE    --add_toll_entry-->       ACTIVE
    ACTIVE    --add_advance_payment-->  ACTIVE
    ACTIVE    --complete_trip-->        COMPLETED
    any non-terminal --cancel_trip-->   CANCELLED

Every mutating operation
------------------------
1. loads the trip (``TripNotFound`` if absent),
2. checks the required status (``InvalidTripState``) and input invariants
   (``InvalidTripInput``),
3. builds a new immutable ``Trip`` with a fresh ``updated_at``,
4. persists it with a compare-and-swap on the previous ``updated_at``,
5. returns it.

All checks run before the single write, so a failed call leaves storage
untouched.  Numeric inputs must be finite; NaN and infinities are rejected
with ``InvalidTripInput``.

When a lock factory is supplied, steps 1-4 run under a per-trip lock.  When
a ``commit`` hook is supplied it runs right after the write, still inside
the lock, so the next writer always reads committed state.

Fare basis: the per-trip override when set, else the vehicle snapshot taken
at proposal time.  The live vehicle record is never consulted after that.
"""

from __future__ import annotations

import logging
import math
import uuid
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass
from datetime import tzinfo
from typing import Awaitable, Callable, Optional

from tripfare.domain.dates import calendar_days_spanned, utc_now_iso
from tripfare.domain.entities import (
    AdvancePayment,
    OdometerReading,
    Route,
    TollEntry,
    Trip,
    Vehicle,
)
from tripfare.domain.enums import OdometerType, TripStatus
from tripfare.domain.exceptions import InvalidTripInput, TripNotFound
from tripfare.domain.fare import FareInput, ActualFareInput, calculate_actual_fare, calculate_fare
from tripfare.domain.forms import TripProposalForm, parse_trip_form
from tripfare.infrastructure.stores import TripStore

logger = logging.getLogger(__name__)

Clock = Callable[[], str]
IdFactory = Callable[[], str]
LockFactory = Callable[[str], AbstractAsyncContextManager]
CommitHook = Callable[[], Awaitable[None]]


def new_id() -> str:
    return str(uuid.uuid4())


# ── Operation inputs ──────────────────────────────────────────────────


@dataclass(frozen=True)
class TripConfirmation:
    confirmed_start_time: str
    confirmed_end_time: Optional[str] = None


@dataclass(frozen=True)
class TripStart:
    odometer_start: float
    actual_start_time: str


@dataclass(frozen=True)
class TripEnd:
    odometer_end: float
    actual_end_time: str


@dataclass(frozen=True)
class ProposalUpdate:
    """Fields left as ``None`` keep the trip's current value."""

    number_of_days: Optional[int] = None
    bata_per_day: Optional[float] = None
    estimated_tolls: Optional[float] = None
    discount: Optional[float] = None
    notes: Optional[str] = None


# ── Service ───────────────────────────────────────────────────────────


class TripLifecycle:
    """Stateless service advancing trips through their lifecycle."""

    def __init__(
        self,
        store: TripStore,
        clock: Clock = utc_now_iso,
        id_factory: IdFactory = new_id,
        lock_factory: Optional[LockFactory] = None,
        tz: Optional[tzinfo] = None,
        commit: Optional[CommitHook] = None,
    ):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self.lock_factory = lock_factory
        self.tz = tz
        self.commit = commit

    # ── Queries ───────────────────────────────────────────────────────

    async def get_trip(self, trip_id: str) -> Trip:
        trip = await self.store.get_by_id(trip_id)
        if trip is None:
            raise TripNotFound(trip_id)
        return trip

    async def list_trips(self) -> list[Trip]:
        return await self.store.get_all()

    async def get_trips_by_status(self, status: TripStatus) -> list[Trip]:
        return await self.store.get_by_status(status)

    # ── Internals ─────────────────────────────────────────────────────

    def _lock(self, trip_id: str) -> AbstractAsyncContextManager:
        if self.lock_factory is None:
            return nullcontext()
        return self.lock_factory(trip_id)

    async def _commit(self) -> None:
        if self.commit is not None:
            await self.commit()

    async def _persist(self, previous: Trip, updated: Trip, action: str) -> Trip:
        await self.store.save(updated, expected_updated_at=previous.updated_at)
        await self._commit()
        logger.info(
            "Trip %s %s (%s -> %s)",
            updated.id, action, previous.status.value, updated.status.value,
        )
        return updated

    # ── Transitions ───────────────────────────────────────────────────

    async def create_proposal(
        self,
        form: TripProposalForm,
        vehicle: Vehicle,
        route: Optional[Route],
        estimated_distance_km: float,
        is_round_trip: bool,
    ) -> Trip:
        """Price a new trip from the proposal form and store it as PROPOSED."""
        _require_finite(estimated_distance_km=estimated_distance_km)
        if estimated_distance_km < 0:
            raise InvalidTripInput("Estimated distance cannot be negative")
        parsed = parse_trip_form(form)
        now = self.clock()

        rate_per_km = parsed.rate_per_km_override or vehicle.rate_per_km
        min_km_per_day = parsed.min_km_per_day_override or vehicle.min_km_per_day

        breakdown = calculate_fare(
            FareInput(
                rate_per_km=rate_per_km,
                min_km_per_day=min_km_per_day,
                total_distance_km=estimated_distance_km,
                number_of_days=parsed.number_of_days,
                bata_per_day=parsed.bata_per_day,
                estimated_tolls=parsed.estimated_tolls,
                discount=parsed.discount,
            )
        )

        start = route.start_waypoint if route else None
        end = route.end_waypoint if route else None
        start_name = start.place.short_name if start else None
        end_name = end.place.short_name if end else None

        trip = Trip(
            id=self.id_factory(),
            customer_name=parsed.customer_name,
            customer_phone=parsed.customer_phone,
            vehicle_id=vehicle.id,
            vehicle_snapshot=vehicle,
            status=TripStatus.PROPOSED,
            route=route,
            start_location_name=start_name,
            end_location_name=start_name if is_round_trip else end_name,
            is_round_trip=is_round_trip,
            proposed_start_date=parsed.proposed_start_date,
            number_of_days=parsed.number_of_days,
            bata_per_day=parsed.bata_per_day,
            discount=parsed.discount,
            rate_per_km_override=parsed.rate_per_km_override,
            min_km_per_day_override=parsed.min_km_per_day_override,
            estimated_distance_km=estimated_distance_km,
            estimated_tolls=parsed.estimated_tolls,
            estimated_fare_breakdown=breakdown,
            notes=parsed.notes,
            created_at=now,
            updated_at=now,
        )

        await self.store.save(trip)
        await self._commit()
        logger.info(
            "Trip %s proposed for %s (estimate %.2f)",
            trip.id, trip.customer_name, breakdown.grand_total,
        )
        return trip

    async def update_proposal(self, trip_id: str, updates: ProposalUpdate) -> Trip:
        """Merge *updates* over a PROPOSED trip and re-run the estimate."""
        async with self._lock(trip_id):
            trip = await self.get_trip(trip_id)
            trip.require_status(TripStatus.PROPOSED, action="edit")

            number_of_days = _pick(updates.number_of_days, trip.number_of_days)
            bata_per_day = _pick(updates.bata_per_day, trip.bata_per_day)
            estimated_tolls = _pick(updates.estimated_tolls, trip.estimated_tolls)
            discount = _pick(updates.discount, trip.discount)

            _require_finite(
                bata_per_day=bata_per_day,
                estimated_tolls=estimated_tolls,
                discount=discount,
            )
            if number_of_days < 1:
                raise InvalidTripInput("number_of_days must be at least 1")
            if min(bata_per_day, estimated_tolls, discount) < 0:
                raise InvalidTripInput("Bata, tolls and discount cannot be negative")

            breakdown = calculate_fare(
                FareInput(
                    rate_per_km=trip.effective_rate_per_km,
                    min_km_per_day=trip.effective_min_km_per_day,
                    total_distance_km=trip.estimated_distance_km,
                    number_of_days=number_of_days,
                    bata_per_day=bata_per_day,
                    estimated_tolls=estimated_tolls,
                    discount=discount,
                )
            )

            updated = trip.with_changes(
                number_of_days=number_of_days,
                bata_per_day=bata_per_day,
                estimated_tolls=estimated_tolls,
                discount=discount,
                notes=_pick(updates.notes, trip.notes),
                estimated_fare_breakdown=breakdown,
                updated_at=self.clock(),
            )
            return await self._persist(trip, updated, "re-estimated")

    async def confirm_trip(self, trip_id: str, data: TripConfirmation) -> Trip:
        async with self._lock(trip_id):
            trip = await self.get_trip(trip_id)
            trip.require_status(TripStatus.PROPOSED, action="confirm")

            updated = trip.transition_to(
                TripStatus.CONFIRMED,
                confirmed_start_time=data.confirmed_start_time,
                confirmed_end_time=data.confirmed_end_time,
                updated_at=self.clock(),
            )
            return await self._persist(trip, updated, "confirmed")

    async def start_trip(self, trip_id: str, data: TripStart) -> Trip:
        async with self._lock(trip_id):
            trip = await self.get_trip(trip_id)
            trip.require_status(TripStatus.CONFIRMED, action="start")
            _require_finite(odometer_start=data.odometer_start)
            if data.odometer_start < 0:
                raise InvalidTripInput("Odometer reading cannot be negative")

            updated = trip.transition_to(
                TripStatus.ACTIVE,
                actual_start_time=data.actual_start_time,
                odometer_start=OdometerReading(
                    value=data.odometer_start,
                    timestamp=data.actual_start_time,
                    type=OdometerType.START,
                ),
                updated_at=self.clock(),
            )
            return await self._persist(trip, updated, "started")

    async def add_toll_entry(self, trip_id: str, amount: float, location: str) -> Trip:
        """Append a toll to an ACTIVE trip.  Fares are not recomputed here."""
        async with self._lock(trip_id):
            trip = await self.get_trip(trip_id)
            trip.require_status(TripStatus.ACTIVE, action="add a toll to")
            _require_finite(amount=amount)
            if amount <= 0:
                raise InvalidTripInput("Toll amount must be positive")

            now = self.clock()
            entry = TollEntry(
                id=self.id_factory(), amount=amount, location=location, timestamp=now
            )
            updated = trip.with_changes(
                toll_entries=trip.toll_entries + (entry,), updated_at=now
            )
            return await self._persist(trip, updated, "toll added")

    async def add_advance_payment(self, trip_id: str, amount: float, reason: str) -> Trip:
        """Record an advance on an ACTIVE trip.  Ledger only, no fare change."""
        async with self._lock(trip_id):
            trip = await self.get_trip(trip_id)
            trip.require_status(TripStatus.ACTIVE, action="add an advance to")
            _require_finite(amount=amount)
            if amount <= 0:
                raise InvalidTripInput("Advance amount must be positive")

            now = self.clock()
            payment = AdvancePayment(
                id=self.id_factory(), amount=amount, reason=reason, timestamp=now
            )
            updated = trip.with_changes(
                advance_payments=trip.advance_payments + (payment,), updated_at=now
            )
            return await self._persist(trip, updated, "advance added")

    async def complete_trip(self, trip_id: str, data: TripEnd) -> Trip:
        """Close an ACTIVE trip and compute the actual fare from the odometer."""
        async with self._lock(trip_id):
            trip = await self.get_trip(trip_id)
            trip.require_status(TripStatus.ACTIVE, action="complete")
            _require_finite(odometer_end=data.odometer_end)

            start_reading = trip.odometer_start.value if trip.odometer_start else 0.0
            if data.odometer_end < start_reading:
                raise InvalidTripInput(
                    f"End odometer ({data.odometer_end}) is below start ({start_reading})",
                    {"odometer_start": start_reading, "odometer_end": data.odometer_end},
                )

            actual_distance_km = data.odometer_end - start_reading
            actual_days = calendar_days_spanned(
                trip.actual_start_time, data.actual_end_time, self.tz
            )
            if actual_days is None:
                actual_days = trip.number_of_days

            breakdown = calculate_actual_fare(
                ActualFareInput(
                    rate_per_km=trip.effective_rate_per_km,
                    min_km_per_day=trip.effective_min_km_per_day,
                    actual_distance_km=actual_distance_km,
                    actual_days=actual_days,
                    bata_per_day=trip.bata_per_day,
                    actual_tolls=trip.total_tolls,
                    discount=trip.discount,
                )
            )

            updated = trip.transition_to(
                TripStatus.COMPLETED,
                actual_end_time=data.actual_end_time,
                odometer_end=OdometerReading(
                    value=data.odometer_end,
                    timestamp=data.actual_end_time,
                    type=OdometerType.END,
                ),
                actual_distance_km=actual_distance_km,
                actual_days=actual_days,
                actual_fare_breakdown=breakdown,
                updated_at=self.clock(),
            )
            return await self._persist(trip, updated, "completed")

    async def cancel_trip(self, trip_id: str) -> Trip:
        async with self._lock(trip_id):
            trip = await self.get_trip(trip_id)
            updated = trip.transition_to(TripStatus.CANCELLED, updated_at=self.clock())
            return await self._persist(trip, updated, "cancelled")

    async def delete_trip(self, trip_id: str) -> None:
        """Remove a trip regardless of status; status policy is the caller's."""
        async with self._lock(trip_id):
            await self.store.delete_by_id(trip_id)
            await self._commit()
        logger.info("Trip %s deleted", trip_id)


def _pick(value, current):
    return current if value is None else value


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidTripInput(
                f"{name} must be a finite number", {name: str(value)}
            )
