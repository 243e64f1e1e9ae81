"""
Places
======

GET    /api/v1/places/search?q=        -- search one country (Nominatim)
GET    /api/v1/places/reverse?lat=&lon= -- place at a point (404 when none)
GET    /api/v1/places/recent            -- newest first, at most ``recent_places_limit``
POST   /api/v1/places/recent            -- remember a place (moves it to the top)
DELETE /api/v1/places/recent            -- forget all
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tripfare.api.dependencies import get_db, get_nominatim_client
from tripfare.api.middleware import RATE_LIMIT, limiter
from tripfare.api.schemas import PlaceResponse
from tripfare.config import settings
from tripfare.domain.entities import Coordinates, Place
from tripfare.infrastructure.geocoding import NominatimClient
from tripfare.infrastructure.repositories import RecentPlaceRepository
from tripfare.infrastructure.schemas import PlaceRecord, to_entity

router = APIRouter(prefix="/places", tags=["places"])


def _repo(db: AsyncSession) -> RecentPlaceRepository:
    return RecentPlaceRepository(db, limit=settings.recent_places_limit)


@router.get("/recent", response_model=list[PlaceResponse], summary="Recent searches")
@limiter.limit(RATE_LIMIT)
async def list_recent(request: Request, db: AsyncSession = Depends(get_db)):
    return [PlaceResponse.model_validate(p) for p in await _repo(db).get_all()]


@router.post(
    "/recent",
    status_code=201,
    response_model=list[PlaceResponse],
    summary="Remember a searched place",
)
@limiter.limit(RATE_LIMIT)
async def add_recent(
    request: Request,
    body: PlaceRecord,
    db: AsyncSession = Depends(get_db),
):
    repo = _repo(db)
    await repo.add(to_entity(Place, body))
    return [PlaceResponse.model_validate(p) for p in await repo.get_all()]


@router.delete("/recent", status_code=204, summary="Clear recent searches")
@limiter.limit(RATE_LIMIT)
async def clear_recent(request: Request, db: AsyncSession = Depends(get_db)):
    await _repo(db).clear()
    return Response(status_code=204)


@router.get("/search", response_model=list[PlaceResponse], summary="Search places")
@limiter.limit(RATE_LIMIT)
async def search_places(
    request: Request,
    q: str = Query(..., max_length=200),
    nominatim: NominatimClient = Depends(get_nominatim_client),
):
    places = await nominatim.search(
        q,
        country_code=settings.place_search_country,
        limit=settings.place_search_limit,
    )
    return [PlaceResponse.model_validate(p) for p in places]


@router.get("/reverse", response_model=PlaceResponse, summary="Place at coordinates")
@limiter.limit(RATE_LIMIT)
async def reverse_geocode(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    nominatim: NominatimClient = Depends(get_nominatim_client),
):
    place = await nominatim.reverse(Coordinates(lat, lon))
    if place is None:
        raise HTTPException(status_code=404, detail="No place found at these coordinates")
    return PlaceResponse.model_validate(place)
