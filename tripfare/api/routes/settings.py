"""
Driver settings
===============

GET   /api/v1/settings/driver -- current settings (defaults when never saved)
PUT   /api/v1/settings/driver -- replace
PATCH /api/v1/settings/driver -- merge the supplied fields
"""

from dataclasses import replace

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tripfare.api.dependencies import get_db
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import DriverSettingsResponse, DriverSettingsUpdate
from tripfare.domain.entities import DriverSettings
from tripfare.infrastructure.repositories import DriverSettingsRepository
from tripfare.infrastructure.schemas import DriverSettingsRecord, to_entity

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/driver", response_model=DriverSettingsResponse, summary="Driver settings")
@limiter.limit(RATE_LIMIT)
async def get_driver_settings(request: Request, db: AsyncSession = Depends(get_db)):
    current = await DriverSettingsRepository(db).get()
    return DriverSettingsResponse.model_validate(current)


@router.put("/driver", response_model=DriverSettingsResponse, summary="Save driver settings")
@limiter.limit(RATE_LIMIT)
async def save_driver_settings(
    request: Request,
    body: DriverSettingsRecord,
    db: AsyncSession = Depends(get_db),
):
    new_settings = to_entity(DriverSettings, body)
    await DriverSettingsRepository(db).save(new_settings)
    return DriverSettingsResponse.model_validate(new_settings)


@router.patch(
    "/driver", response_model=DriverSettingsResponse, summary="Update driver settings"
)
@limiter.limit(RATE_LIMIT)
async def update_driver_settings(
    request: Request,
    body: DriverSettingsUpdate,
    db: AsyncSession = Depends(get_db),
):
    repo = DriverSettingsRepository(db)
    updated = replace(await repo.get(), **body.model_dump(exclude_unset=True))
    await repo.save(updated)
    return DriverSettingsResponse.model_validate(updated)
