"""
Vehicle endpoints
=================

GET    /api/v1/vehicles               -- list the registry
POST   /api/v1/vehicles               -- add a vehicle (201)
GET    /api/v1/vehicles/{vehicle_id}  -- fetch one vehicle
PUT    /api/v1/vehicles/{vehicle_id}  -- edit (existing trips keep their snapshot)
DELETE /api/v1/vehicles/{vehicle_id}  -- remove
"""

from fastapi import APIRouter, Depends, Request, Response

from tripfare.api.dependencies import get_vehicle_registry
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import VehicleRequest, VehicleResponse
from tripfare.services.vehicles import VehicleData, VehicleRegistry

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


def _data(body: VehicleRequest) -> VehicleData:
    return VehicleData(**body.model_dump())


@router.get("", response_model=list[VehicleResponse], summary="List vehicles")
@limiter.limit(RATE_LIMIT)
async def list_vehicles(
    request: Request,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    return [VehicleResponse.model_validate(v) for v in await registry.list_vehicles()]


@router.post("", status_code=201, response_model=VehicleResponse, summary="Add a vehicle")
@limiter.limit(RATE_LIMIT)
async def add_vehicle(
    request: Request,
    body: VehicleRequest,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    return VehicleResponse.model_validate(await registry.add_vehicle(_data(body)))


@router.get("/{vehicle_id}", response_model=VehicleResponse, summary="Get a vehicle")
@limiter.limit(RATE_LIMIT)
async def get_vehicle(
    request: Request,
    vehicle_id: str,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    return VehicleResponse.model_validate(await registry.get_vehicle(vehicle_id))


@router.put("/{vehicle_id}", response_model=VehicleResponse, summary="Edit a vehicle")
@limiter.limit(RATE_LIMIT)
async def update_vehicle(
    request: Request,
    vehicle_id: str,
    body: VehicleRequest,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    vehicle = await registry.update_vehicle(vehicle_id, _data(body))
    return VehicleResponse.model_validate(vehicle)


@router.delete("/{vehicle_id}", status_code=204, summary="Delete a vehicle")
@limiter.limit(RATE_LIMIT)
async def delete_vehicle(
    request: Request,
    vehicle_id: str,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    await registry.delete_vehicle(vehicle_id)
    return Response(status_code=204)
