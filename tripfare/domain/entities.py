"""
Domain entities with business logic.

Patterns used
-------------
- **Immutable aggregate** ``Trip``: every change produces a new value via
  ``dataclasses.replace``; nothing is mutated in place.
- **State Pattern** on ``Trip``: ``transition_to`` enforces the lifecycle
  (PROPOSED -> CONFIRMED -> ACTIVE -> COMPLETED, or CANCELLED before
  completion).
- **Snapshot**: a ``Vehicle`` copy is embedded at proposal time so later edits
  to the live vehicle never change an existing trip's fare basis.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from .enums import ACOption, CarSize, FuelType, OdometerType, TripStatus, TRIP_TRANSITIONS
from .exceptions import InvalidTripState
from .fare import FareBreakdown


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Place:
    id: str
    display_name: str
    short_name: str
    coordinates: Coordinates
    type: str


@dataclass(frozen=True)
class Waypoint:
    id: str
    place: Place
    order: int
    is_start: bool
    is_end: bool


@dataclass(frozen=True)
class RouteSegment:
    from_waypoint: Waypoint
    to_waypoint: Waypoint
    distance_km: float
    duration_minutes: float


@dataclass(frozen=True)
class Route:
    waypoints: tuple[Waypoint, ...]
    segments: tuple[RouteSegment, ...]
    total_distance_km: float
    total_duration_minutes: float

    @property
    def start_waypoint(self) -> Optional[Waypoint]:
        return next((w for w in self.waypoints if w.is_start), None)

    @property
    def end_waypoint(self) -> Optional[Waypoint]:
        return next((w for w in self.waypoints if w.is_end), None)


@dataclass(frozen=True)
class OdometerReading:
    value: float
    timestamp: str
    type: OdometerType


@dataclass(frozen=True)
class TollEntry:
    id: str
    amount: float
    location: str
    timestamp: str


@dataclass(frozen=True)
class AdvancePayment:
    id: str
    amount: float
    reason: str
    timestamp: str


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Vehicle:
    id: str
    name: str
    car_size: CarSize
    fuel_type: FuelType
    ac_option: ACOption
    min_km_per_day: float
    rate_per_km: float
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class DriverSettings:
    name: str = ""
    phone: str = ""
    default_bata_per_day: float = 500.0


@dataclass(frozen=True)
class Trip:
    id: str
    customer_name: str
    vehicle_id: str
    vehicle_snapshot: Vehicle
    status: TripStatus
    is_round_trip: bool
    proposed_start_date: str
    number_of_days: int
    bata_per_day: float
    estimated_distance_km: float
    estimated_tolls: float
    estimated_fare_breakdown: FareBreakdown
    created_at: str
    updated_at: str
    discount: float = 0.0
    customer_phone: Optional[str] = None
    route: Optional[Route] = None
    start_location_name: Optional[str] = None
    end_location_name: Optional[str] = None
    confirmed_start_time: Optional[str] = None
    confirmed_end_time: Optional[str] = None
    actual_start_time: Optional[str] = None
    actual_end_time: Optional[str] = None
    rate_per_km_override: Optional[float] = None
    min_km_per_day_override: Optional[float] = None
    actual_distance_km: Optional[float] = None
    actual_days: Optional[int] = None
    odometer_start: Optional[OdometerReading] = None
    odometer_end: Optional[OdometerReading] = None
    toll_entries: tuple[TollEntry, ...] = ()
    advance_payments: tuple[AdvancePayment, ...] = ()
    actual_fare_breakdown: Optional[FareBreakdown] = None
    notes: Optional[str] = None

    # Fare basis: per-trip override, else the frozen vehicle snapshot
    @property
    def effective_rate_per_km(self) -> float:
        if self.rate_per_km_override is not None:
            return self.rate_per_km_override
        return self.vehicle_snapshot.rate_per_km

    @property
    def effective_min_km_per_day(self) -> float:
        if self.min_km_per_day_override is not None:
            return self.min_km_per_day_override
        return self.vehicle_snapshot.min_km_per_day

    @property
    def total_tolls(self) -> float:
        return sum(t.amount for t in self.toll_entries)

    @property
    def total_advances(self) -> float:
        return sum(p.amount for p in self.advance_payments)

    @property
    def is_terminal(self) -> bool:
        return not TRIP_TRANSITIONS.get(self.status)

    def require_status(self, *allowed: TripStatus, action: str) -> None:
        """Raise ``InvalidTripState`` unless the trip is in one of *allowed*."""
        if self.status not in allowed:
            expected = " or ".join(s.value for s in allowed)
            raise InvalidTripState(
                f"Cannot {action} trip in status {self.status.value} "
                f"(requires {expected})",
                {"trip_id": self.id, "status": self.status.value},
            )

    def transition_to(self, new_status: TripStatus, **changes: Any) -> Trip:
        """Return a copy in *new_status* if the transition is legal, else raise."""
        allowed = TRIP_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidTripState(
                f"Cannot transition from {self.status.value} to {new_status.value}",
                {"trip_id": self.id, "status": self.status.value},
            )
        return replace(self, status=new_status, **changes)

    def with_changes(self, **changes: Any) -> Trip:
        """Return a copy with *changes* applied, status untouched."""
        return replace(self, **changes)
