"""
Fare calculator endpoint
========================

POST /api/v1/fare/calculate -- stateless quote, nothing is stored

Rates come from the request, else from ``vehicle_id``, else from the
configured defaults.  Bata falls back to the driver's default bata.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tripfare.api.dependencies import get_db, get_vehicle_registry
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import FareBreakdownResponse, FareCalculationRequest
from tripfare.config import settings
from tripfare.domain.fare import FareInput, calculate_fare
from tripfare.infrastructure.repositories import DriverSettingsRepository
from tripfare.services.vehicles import VehicleRegistry

router = APIRouter(prefix="/fare", tags=["fare"])


@router.post(
    "/calculate",
    response_model=FareBreakdownResponse,
    summary="Calculate a fare breakdown",
)
@limiter.limit(RATE_LIMIT)
async def calculate(
    request: Request,
    body: FareCalculationRequest,
    db: AsyncSession = Depends(get_db),
    vehicles: VehicleRegistry = Depends(get_vehicle_registry),
):
    rate_per_km = settings.default_rate_per_km
    min_km_per_day = settings.default_min_km_per_day
    if body.vehicle_id:
        vehicle = await vehicles.get_vehicle(body.vehicle_id)
        rate_per_km, min_km_per_day = vehicle.rate_per_km, vehicle.min_km_per_day

    bata_per_day = body.bata_per_day
    if bata_per_day is None:
        bata_per_day = (await DriverSettingsRepository(db).get()).default_bata_per_day

    breakdown = calculate_fare(
        FareInput(
            rate_per_km=body.rate_per_km or rate_per_km,
            min_km_per_day=body.min_km_per_day or min_km_per_day,
            total_distance_km=body.total_distance_km,
            number_of_days=body.number_of_days,
            bata_per_day=bata_per_day,
            estimated_tolls=body.estimated_tolls,
            discount=body.discount,
        )
    )
    return FareBreakdownResponse.model_validate(breakdown)
