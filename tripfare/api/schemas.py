"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from tripfare.domain.enums import ACOption, CarSize, FuelType
from tripfare.infrastructure.schemas import (
    DriverSettingsRecord,
    FareBreakdownRecord,
    PlaceRecord,
    RouteRecord,
    TripRecord,
    VehicleRecord,
    WaypointRecord,
)

# Form fields arrive as text from the app but plain numbers are accepted too
FormNumber = Optional[Union[float, str]]


# ── Requests ──────────────────────────────────────────────────────────


class _Request(BaseModel):
    # JSON bodies may carry NaN / Infinity literals; none of our numbers can
    model_config = ConfigDict(allow_inf_nan=False)


class TripProposalRequest(_Request):
    customer_name: str = Field(..., min_length=1, max_length=120)
    customer_phone: Optional[str] = Field(None, max_length=40)
    vehicle_id: str
    proposed_start_date: str
    number_of_days: FormNumber = None
    bata_per_day: FormNumber = None
    estimated_tolls: FormNumber = None
    discount: FormNumber = None
    rate_per_km_override: FormNumber = None
    min_km_per_day_override: FormNumber = None
    notes: Optional[str] = None
    route: Optional[RouteRecord] = None
    estimated_distance_km: Optional[float] = Field(
        None,
        ge=0,
        description="Defaults to the route's total distance when a route is given.",
    )
    is_round_trip: bool = False


class ProposalUpdateRequest(_Request):
    number_of_days: Optional[int] = Field(None, ge=1)
    bata_per_day: Optional[float] = Field(None, ge=0)
    estimated_tolls: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class TripConfirmRequest(_Request):
    confirmed_start_time: str
    confirmed_end_time: Optional[str] = None


class TripStartRequest(_Request):
    odometer_start: float
    actual_start_time: str


class TripCompleteRequest(_Request):
    odometer_end: float
    actual_end_time: str


class TollEntryRequest(_Request):
    amount: float
    location: str = Field("", max_length=255)


class AdvancePaymentRequest(_Request):
    amount: float
    reason: str = Field("", max_length=255)


class VehicleRequest(_Request):
    name: str = Field(..., min_length=1, max_length=120)
    car_size: CarSize
    fuel_type: FuelType
    ac_option: ACOption
    min_km_per_day: float = Field(..., gt=0)
    rate_per_km: float = Field(..., gt=0)


class FareCalculationRequest(_Request):
    vehicle_id: Optional[str] = Field(
        None, description="Use this vehicle's rates unless explicit rates are given."
    )
    rate_per_km: Optional[float] = Field(None, gt=0)
    min_km_per_day: Optional[float] = Field(None, gt=0)
    total_distance_km: float = Field(..., ge=0)
    number_of_days: int = Field(1, ge=1)
    bata_per_day: Optional[float] = Field(None, ge=0)
    estimated_tolls: float = Field(0.0, ge=0)
    discount: float = Field(0.0, ge=0)


class RouteRequest(_Request):
    waypoints: list[WaypointRecord] = Field(..., min_length=2)


class DriverSettingsUpdate(_Request):
    name: Optional[str] = None
    phone: Optional[str] = None
    default_bata_per_day: Optional[float] = Field(None, ge=0)


# ── Responses ─────────────────────────────────────────────────────────


class TripResponse(TripRecord):
    pass


class VehicleResponse(VehicleRecord):
    pass


class PlaceResponse(PlaceRecord):
    pass


class RouteResponse(RouteRecord):
    pass


class FareBreakdownResponse(FareBreakdownRecord):
    pass


class DriverSettingsResponse(DriverSettingsRecord):
    pass


class PaymentSummaryResponse(BaseModel):
    fare_total: float
    total_advances: float
    balance_due: float
    is_final: bool
    is_refund: bool

    model_config = {"from_attributes": True}


class PeriodEarningsResponse(BaseModel):
    total_earnings: float
    trip_count: int
    total_distance: float

    model_config = {"from_attributes": True}


class AllTimeEarningsResponse(PeriodEarningsResponse):
    pending_amount: float


class EarningsSummaryResponse(BaseModel):
    today: PeriodEarningsResponse
    this_week: PeriodEarningsResponse
    this_month: PeriodEarningsResponse
    all_time: AllTimeEarningsResponse

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    details: dict[str, Any] = {}
