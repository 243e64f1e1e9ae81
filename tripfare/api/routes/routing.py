"""
Route endpoint
==============

POST /api/v1/routes -- road route through ordered waypoints (via OSRM)

The returned route can be passed verbatim as ``route`` when creating a trip.
"""

from fastapi import APIRouter, Depends, Request

from tripfare.api.dependencies import get_osrm_client
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import RouteRequest, RouteResponse
from tripfare.domain.entities import Waypoint
from tripfare.infrastructure.routing import OSRMClient
from tripfare.infrastructure.schemas import to_entity

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("", response_model=RouteResponse, summary="Calculate a route")
@limiter.limit(RATE_LIMIT)
async def calculate_route(
    request: Request,
    body: RouteRequest,
    osrm: OSRMClient = Depends(get_osrm_client),
):
    waypoints = [to_entity(Waypoint, w) for w in body.waypoints]
    route = await osrm.calculate_route(waypoints)
    return RouteResponse.model_validate(route)
