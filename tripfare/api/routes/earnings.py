"""
Earnings endpoint
=================

GET /api/v1/earnings/summary -- today / this week / this month / all time
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from tripfare.api.dependencies import get_lifecycle
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import EarningsSummaryResponse
from tripfare.config import settings
from tripfare.domain.earnings import summarize_earnings
from tripfare.domain.enums import TripStatus
from tripfare.services.lifecycle import TripLifecycle

router = APIRouter(prefix="/earnings", tags=["earnings"])


@router.get(
    "/summary",
    response_model=EarningsSummaryResponse,
    summary="Earnings over completed trips",
)
@limiter.limit(RATE_LIMIT)
async def earnings_summary(
    request: Request,
    lifecycle: TripLifecycle = Depends(get_lifecycle),
):
    completed = await lifecycle.get_trips_by_status(TripStatus.COMPLETED)
    summary = summarize_earnings(
        completed, now=datetime.now(timezone.utc), tz=settings.tz
    )
    return EarningsSummaryResponse.model_validate(summary)
