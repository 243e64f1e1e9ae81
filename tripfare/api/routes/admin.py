"""
Admin / observability endpoints
===============================

GET /api/v1/admin/trip-counts -- number of stored trips per status
GET /api/v1/admin/health      -- simple health check
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tripfare.api.dependencies import get_db
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import HealthResponse
from tripfare.domain.enums import TripStatus
from tripfare.infrastructure.repositories import TripRepository

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/trip-counts",
    response_model=dict[str, int],
    summary="Count stored trips by status",
)
@limiter.limit(RATE_LIMIT)
async def trip_counts(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    counts = await TripRepository(db).count_by_status()
    return {status.value: counts.get(status.value, 0) for status in TripStatus}


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
