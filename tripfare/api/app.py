"""
FastAPI application factory.

* Registers routes for trips, vehicles, fares, routing, places, settings,
  earnings and admin.
* Maps domain exceptions onto HTTP status codes.
* Disposes the database engine on shutdown.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
import math

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tripfare.api.middleware import limiter
from tripfare.api.routes import (
    admin,
    earnings,
    fare,
    places,
    routing,
    settings as driver_settings,
    trips,
    vehicles,
)
from tripfare.domain.exceptions import (
    ConcurrentModification,
    GeocodingError,
    InvalidTripInput,
    InvalidTripState,
    NoRouteFound,
    NotFoundError,
    RoutingError,
    TripFareError,
)
from tripfare.infrastructure.database import engine
from tripfare.infrastructure.locks import LockNotAcquired

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Most specific first; the first matching class wins
_STATUS_CODES: list[tuple[type[TripFareError], int]] = [
    (NotFoundError, 404),
    (InvalidTripState, 409),
    (ConcurrentModification, 409),
    (LockNotAcquired, 409),
    (InvalidTripInput, 422),
    (NoRouteFound, 422),
    (RoutingError, 502),
    (GeocodingError, 502),
]


def status_code_for(exc: TripFareError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 400


async def _trip_fare_error_handler(request: Request, exc: TripFareError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "details": exc.details},
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    # Rejected NaN / Infinity inputs are echoed back as strings
    errors = jsonable_encoder(
        exc.errors(), custom_encoder={float: lambda v: v if math.isfinite(v) else str(v)}
    )
    return JSONResponse(status_code=422, content={"detail": errors})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release pooled DB connections on shutdown."""
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Trip Fare API",
        description=(
            "Prices outstation taxi trips by distance and days, and tracks "
            "each trip from proposal through completion with odometer "
            "readings, tolls and advance payments."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(TripFareError, _trip_fare_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    # Routers
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(vehicles.router, prefix="/api/v1")
    app.include_router(fare.router, prefix="/api/v1")
    app.include_router(routing.router, prefix="/api/v1")
    app.include_router(places.router, prefix="/api/v1")
    app.include_router(driver_settings.router, prefix="/api/v1")
    app.include_router(earnings.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
