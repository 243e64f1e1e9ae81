"""Exception hierarchy shared by the domain, the services and the API layer."""

from __future__ import annotations

from typing import Any


class TripFareError(Exception):
    """Base exception for all trip / fare errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(TripFareError):
    """Requested entity does not exist."""


class TripNotFound(NotFoundError):
    def __init__(self, trip_id: str):
        super().__init__(f"Trip not found: {trip_id}", {"trip_id": trip_id})
        self.trip_id = trip_id


class VehicleNotFound(NotFoundError):
    def __init__(self, vehicle_id: str):
        super().__init__(
            f"Vehicle not found: {vehicle_id}", {"vehicle_id": vehicle_id}
        )
        self.vehicle_id = vehicle_id


class InvalidTripState(TripFareError):
    """Raised when an operation's precondition status does not match."""


class InvalidTripInput(TripFareError):
    """Raised when lifecycle input breaks a trip invariant (e.g. odometer)."""


class ConcurrentModification(TripFareError):
    """Raised when a trip changed underneath a writer (stale ``updated_at``)."""


class RecordValidationError(TripFareError):
    """A persisted record failed schema validation on read."""


class RoutingError(TripFareError):
    """Base for route / distance lookup failures."""


class TransientRoutingError(RoutingError):
    """Routing failure that may succeed on retry (timeout, 5xx, network)."""


class NoRouteFound(RoutingError):
    """The routing service found no route between the waypoints."""


class GeocodingError(TripFareError):
    """Place search / reverse geocoding failed."""


class TransientGeocodingError(GeocodingError):
    """Geocoding failure that may succeed on retry (timeout, 5xx, network)."""
