"""
Persisted record schemas  (validated on every read).

Each stored Trip / Vehicle / Place / DriverSettings document is checked
against these pydantic models before it is trusted.  Repositories drop a
record that fails validation with a warning instead of failing the whole
read (see ``load_valid``).
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Iterable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from tripfare.domain.entities import DriverSettings, Place, Trip, Vehicle
from tripfare.domain.enums import ACOption, CarSize, FuelType, OdometerType, TripStatus
from tripfare.domain.exceptions import RecordValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Record(BaseModel):
    # Stored JSON has no NaN or Infinity
    model_config = ConfigDict(from_attributes=True, allow_inf_nan=False)


# ── Vehicle ───────────────────────────────────────────────────────────


class VehicleRecord(_Record):
    id: str
    name: str
    car_size: CarSize
    fuel_type: FuelType
    ac_option: ACOption
    min_km_per_day: float = Field(..., gt=0)
    rate_per_km: float = Field(..., gt=0)
    created_at: str
    updated_at: str


# ── Location ──────────────────────────────────────────────────────────


class CoordinatesRecord(_Record):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PlaceRecord(_Record):
    id: str
    display_name: str
    short_name: str
    coordinates: CoordinatesRecord
    type: str


class WaypointRecord(_Record):
    id: str
    place: PlaceRecord
    order: int
    is_start: bool
    is_end: bool


class RouteSegmentRecord(_Record):
    from_waypoint: WaypointRecord
    to_waypoint: WaypointRecord
    distance_km: float
    duration_minutes: float


class RouteRecord(_Record):
    waypoints: list[WaypointRecord]
    segments: list[RouteSegmentRecord]
    total_distance_km: float
    total_duration_minutes: float


# ── Fare ──────────────────────────────────────────────────────────────


class FareBreakdownRecord(_Record):
    actual_distance: float
    chargeable_distance: float
    distance_charges: float
    total_bata: float
    total_tolls: float
    subtotal: float
    discount: float = 0.0
    grand_total: float


# ── Trip ──────────────────────────────────────────────────────────────


class TollEntryRecord(_Record):
    id: str
    amount: float
    location: str
    timestamp: str


class AdvancePaymentRecord(_Record):
    id: str
    amount: float
    reason: str
    timestamp: str


class OdometerReadingRecord(_Record):
    value: float
    timestamp: str
    type: OdometerType


class TripRecord(_Record):
    id: str
    customer_name: str
    customer_phone: Optional[str] = None
    vehicle_id: str
    vehicle_snapshot: VehicleRecord
    status: TripStatus
    route: Optional[RouteRecord] = None
    start_location_name: Optional[str] = None
    end_location_name: Optional[str] = None
    is_round_trip: bool
    proposed_start_date: str
    confirmed_start_time: Optional[str] = None
    confirmed_end_time: Optional[str] = None
    actual_start_time: Optional[str] = None
    actual_end_time: Optional[str] = None
    number_of_days: int = Field(..., ge=1)
    bata_per_day: float = Field(..., ge=0)
    discount: float = Field(0.0, ge=0)
    rate_per_km_override: Optional[float] = Field(None, gt=0)
    min_km_per_day_override: Optional[float] = Field(None, gt=0)
    estimated_distance_km: float = Field(..., ge=0)
    estimated_tolls: float = Field(..., ge=0)
    estimated_fare_breakdown: FareBreakdownRecord
    actual_distance_km: Optional[float] = None
    actual_days: Optional[int] = None
    odometer_start: Optional[OdometerReadingRecord] = None
    odometer_end: Optional[OdometerReadingRecord] = None
    toll_entries: list[TollEntryRecord] = []
    advance_payments: list[AdvancePaymentRecord] = []
    actual_fare_breakdown: Optional[FareBreakdownRecord] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str


# ── Driver settings ───────────────────────────────────────────────────


class DriverSettingsRecord(_Record):
    name: str = ""
    phone: str = ""
    default_bata_per_day: float = Field(500.0, ge=0)


# ── Record <-> entity conversion ──────────────────────────────────────

_trip_adapter = TypeAdapter(Trip)
_vehicle_adapter = TypeAdapter(Vehicle)
_place_adapter = TypeAdapter(Place)
_settings_adapter = TypeAdapter(DriverSettings)


def _parse(record_cls: type[_Record], adapter: TypeAdapter, payload: dict):
    try:
        record = record_cls.model_validate(payload)
    except ValidationError as exc:
        raise RecordValidationError(
            f"Invalid {record_cls.__name__}: {exc.error_count()} error(s)",
            {"id": payload.get("id") if isinstance(payload, dict) else None},
        ) from exc
    return adapter.validate_python(record.model_dump())


def parse_trip(payload: dict) -> Trip:
    return _parse(TripRecord, _trip_adapter, payload)


def parse_vehicle(payload: dict) -> Vehicle:
    return _parse(VehicleRecord, _vehicle_adapter, payload)


def parse_place(payload: dict) -> Place:
    return _parse(PlaceRecord, _place_adapter, payload)


def parse_driver_settings(payload: dict) -> DriverSettings:
    return _parse(DriverSettingsRecord, _settings_adapter, payload)


@lru_cache(maxsize=None)
def _adapter_for(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


def dump(entity) -> dict:
    """JSON-safe dict for any domain entity (enums as values, tuples as lists)."""
    return _adapter_for(type(entity)).dump_python(entity, mode="json")


def load_valid(payloads: Iterable[dict], parse: Callable[[dict], T]) -> list[T]:
    """Parse every payload, skipping (and logging) the ones that fail validation."""
    valid: list[T] = []
    for payload in payloads:
        try:
            valid.append(parse(payload))
        except RecordValidationError as exc:
            logger.warning("Skipping stored record: %s (%s)", exc.message, exc.details)
    return valid


def to_entity(cls: type[T], record: BaseModel) -> T:
    """Build a domain entity from an already-validated record."""
    return _adapter_for(cls).validate_python(record.model_dump())
