"""
Trip endpoints
==============

POST   /api/v1/trips                      -- create a proposal (201)
GET    /api/v1/trips?status=...           -- list trips, newest first
GET    /api/v1/trips/{trip_id}            -- fetch one trip
PATCH  /api/v1/trips/{trip_id}/proposal   -- edit a proposal and re-estimate
POST   /api/v1/trips/{trip_id}/confirm    -- proposed  -> confirmed
POST   /api/v1/trips/{trip_id}/start      -- confirmed -> active
POST   /api/v1/trips/{trip_id}/tolls      -- append a toll (active)
POST   /api/v1/trips/{trip_id}/advances   -- append an advance (active)
POST   /api/v1/trips/{trip_id}/complete   -- active -> completed
POST   /api/v1/trips/{trip_id}/cancel     -- any non-terminal -> cancelled
DELETE /api/v1/trips/{trip_id}            -- remove (proposed / cancelled only)
GET    /api/v1/trips/{trip_id}/payment    -- fare vs. advances

Errors from the lifecycle service are mapped to HTTP responses by the
exception handlers registered in ``tripfare.api.app``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from tripfare.api.dependencies import get_lifecycle, get_vehicle_registry
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import (
    AdvancePaymentRequest,
    ErrorResponse,
    PaymentSummaryResponse,
    ProposalUpdateRequest,
    TollEntryRequest,
    TripCompleteRequest,
    TripConfirmRequest,
    TripProposalRequest,
    TripResponse,
    TripStartRequest,
)
from tripfare.domain.earnings import payment_summary
from tripfare.domain.entities import Route
from tripfare.domain.enums import TripStatus
from tripfare.domain.forms import TripProposalForm
from tripfare.infrastructure.schemas import to_entity
from tripfare.services.lifecycle import (
    ProposalUpdate,
    TripConfirmation,
    TripEnd,
    TripLifecycle,
    TripStart,
)
from tripfare.services.vehicles import VehicleRegistry

router = APIRouter(
    prefix="/trips",
    tags=["trips"],
    responses={
        404: {"model": ErrorResponse, "description": "Trip or vehicle not found"},
        409: {"model": ErrorResponse, "description": "Wrong status or concurrent edit"},
    },
)

# Deleting is a caller policy; the lifecycle itself deletes unconditionally
DELETABLE_STATUSES = {TripStatus.PROPOSED, TripStatus.CANCELLED}


@router.post(
    "",
    status_code=201,
    response_model=TripResponse,
    summary="Create a trip proposal",
)
@limiter.limit(RATE_LIMIT)
async def create_trip(
    request: Request,
    body: TripProposalRequest,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
    vehicles: VehicleRegistry = Depends(get_vehicle_registry),
):
    vehicle = await vehicles.get_vehicle(body.vehicle_id)
    route: Optional[Route] = to_entity(Route, body.route) if body.route else None

    distance = body.estimated_distance_km
    if distance is None:
        if route is None:
            raise HTTPException(
                status_code=422,
                detail="estimated_distance_km is required when no route is given",
            )
        distance = route.total_distance_km

    form = TripProposalForm(
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        proposed_start_date=body.proposed_start_date,
        number_of_days=body.number_of_days,
        bata_per_day=body.bata_per_day,
        estimated_tolls=body.estimated_tolls,
        discount=body.discount,
        rate_per_km_override=body.rate_per_km_override,
        min_km_per_day_override=body.min_km_per_day_override,
        notes=body.notes,
    )
    trip = await lifecycle.create_proposal(
        form, vehicle, route, distance, body.is_round_trip
    )
    return TripResponse.model_validate(trip)


@router.get("", response_model=list[TripResponse], summary="List trips")
@limiter.limit(RATE_LIMIT)
async def list_trips(
    request: Request,
    status: Optional[TripStatus] = None,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    if status is None:
        trips = await lifecycle.list_trips()
    else:
        trips = await lifecycle.get_trips_by_status(status)
    return [TripResponse.model_validate(t) for t in trips]


@router.get("/{trip_id}", response_model=TripResponse, summary="Get a trip")
@limiter.limit(RATE_LIMIT)
async def get_trip(
    request: Request,
    trip_id: str,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    return TripResponse.model_validate(await lifecycle.get_trip(trip_id))


@router.patch(
    "/{trip_id}/proposal",
    response_model=TripResponse,
    summary="Edit a proposed trip and recompute its estimate",
)
@limiter.limit(RATE_LIMIT)
async def update_proposal(
    request: Request,
    trip_id: str,
    body: ProposalUpdateRequest,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.update_proposal(
        trip_id, ProposalUpdate(**body.model_dump(exclude_unset=True))
    )
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/confirm", response_model=TripResponse, summary="Confirm a proposal")
@limiter.limit(RATE_LIMIT)
async def confirm_trip(
    request: Request,
    trip_id: str,
    body: TripConfirmRequest,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.confirm_trip(
        trip_id,
        TripConfirmation(
            confirmed_start_time=body.confirmed_start_time,
            confirmed_end_time=body.confirmed_end_time,
        ),
    )
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/start", response_model=TripResponse, summary="Start a confirmed trip")
@limiter.limit(RATE_LIMIT)
async def start_trip(
    request: Request,
    trip_id: str,
    body: TripStartRequest,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.start_trip(
        trip_id,
        TripStart(
            odometer_start=body.odometer_start,
            actual_start_time=body.actual_start_time,
        ),
    )
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/tolls", response_model=TripResponse, summary="Add a toll entry")
@limiter.limit(RATE_LIMIT)
async def add_toll(
    request: Request,
    trip_id: str,
    body: TollEntryRequest,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.add_toll_entry(trip_id, body.amount, body.location)
    return TripResponse.model_validate(trip)


@router.post(
    "/{trip_id}/advances", response_model=TripResponse, summary="Add an advance payment"
)
@limiter.limit(RATE_LIMIT)
async def add_advance(
    request: Request,
    trip_id: str,
    body: AdvancePaymentRequest,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.add_advance_payment(trip_id, body.amount, body.reason)
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/complete", response_model=TripResponse, summary="Complete a trip")
@limiter.limit(RATE_LIMIT)
async def complete_trip(
    request: Request,
    trip_id: str,
    body: TripCompleteRequest,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.complete_trip(
        trip_id,
        TripEnd(odometer_end=body.odometer_end, actual_end_time=body.actual_end_time),
    )
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/cancel", response_model=TripResponse, summary="Cancel a trip")
@limiter.limit(RATE_LIMIT)
async def cancel_trip(
    request: Request,
    trip_id: str,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    return TripResponse.model_validate(await lifecycle.cancel_trip(trip_id))


@router.delete(
    "/{trip_id}",
    status_code=204,
    summary="Delete a trip",
    description="Only proposed or cancelled trips may be deleted.",
)
@limiter.limit(RATE_LIMIT)
async def delete_trip(
    request: Request,
    trip_id: str,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.get_trip(trip_id)
    if trip.status not in DELETABLE_STATUSES:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot delete trip in status {trip.status.value}",
        )
    await lifecycle.delete_trip(trip_id)
    return Response(status_code=204)


@router.get(
    "/{trip_id}/payment",
    response_model=PaymentSummaryResponse,
    summary="Fare total, advances received and balance due",
)
@limiter.limit(RATE_LIMIT)
async def get_payment_summary(
    request: Request,
    trip_id: str,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    trip = await lifecycle.get_trip(trip_id)
    return PaymentSummaryResponse.model_validate(payment_summary(trip))
