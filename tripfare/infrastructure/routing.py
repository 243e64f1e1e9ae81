"""
OSRM routing client.

Turns an ordered waypoint list into a ``Route`` with per-leg segments.  The
lifecycle never calls this directly: callers fetch a route, then pass it and
its ``total_distance_km`` into ``create_proposal``.

Timeouts, network errors and 5xx responses are transient and retried with
exponential backoff; 4xx responses and "no route" are permanent.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from .retry import RetryConfig, with_retry
from tripfare.domain.entities import Coordinates, Route, RouteSegment, Waypoint
from tripfare.domain.exceptions import NoRouteFound, RoutingError, TransientRoutingError

logger = logging.getLogger(__name__)


class OSRMClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retry: Optional[RetryConfig] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry = retry or RetryConfig()

    async def _fetch_route(self, coordinates: Sequence[Coordinates]) -> dict:
        # OSRM wants lon,lat pairs separated by ';'
        coords = ";".join(f"{c.longitude},{c.latitude}" for c in coordinates)
        url = f"{self.base_url}/route/v1/driving/{coords}"
        params = {"overview": "false", "steps": "false"}

        async def attempt() -> dict:
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
            except httpx.TimeoutException as e:
                raise TransientRoutingError(
                    f"Request timed out after {self.timeout}s"
                ) from e
            except httpx.TransportError as e:
                raise TransientRoutingError(f"Network error: {e}") from e

            if response.status_code >= 500:
                raise TransientRoutingError(f"OSRM server error: {response.status_code}")
            if response.status_code >= 400:
                data = _json_or_empty(response)
                if data.get("code") == "NoRoute":
                    raise NoRouteFound("No route found between waypoints")
                raise RoutingError(
                    f"OSRM request rejected: HTTP {response.status_code}",
                    {"status": response.status_code},
                )

            data = _json_or_empty(response)
            if data.get("code") != "Ok" or not data.get("routes"):
                raise NoRouteFound("No route found between waypoints")
            return data["routes"][0]

        return await with_retry(attempt, self.retry, operation_name="OSRM route")

    async def calculate_route(self, waypoints: Sequence[Waypoint]) -> Route:
        """Route through *waypoints* in order.  Needs at least two."""
        if len(waypoints) < 2:
            raise RoutingError("At least 2 waypoints required")

        ordered = sorted(waypoints, key=lambda w: w.order)
        route = await self._fetch_route([w.place.coordinates for w in ordered])

        segments = tuple(
            RouteSegment(
                from_waypoint=ordered[i],
                to_waypoint=ordered[i + 1],
                distance_km=float(leg["distance"]) / 1000,
                duration_minutes=float(leg["duration"]) / 60,
            )
            for i, leg in enumerate(route.get("legs", [])[: len(ordered) - 1])
        )
        result = Route(
            waypoints=tuple(ordered),
            segments=segments,
            total_distance_km=float(route["distance"]) / 1000,
            total_duration_minutes=float(route["duration"]) / 60,
        )
        logger.info(
            "Route through %d waypoints: %.1f km", len(ordered), result.total_distance_km
        )
        return result

    async def get_distance_between(
        self, start: Coordinates, end: Coordinates
    ) -> tuple[float, float]:
        """Return ``(distance_km, duration_minutes)`` between two points."""
        route = await self._fetch_route([start, end])
        return float(route["distance"]) / 1000, float(route["duration"]) / 60


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
