"""
Nominatim place search client.

Forward search (restricted to one country) and reverse geocoding, both
returning ``Place`` entities ready to be used as waypoints or remembered as
recent searches.

Nominatim's usage policy allows one request per second, so every request
first waits on a shared ``RequestThrottle``.  Timeouts, network errors and
5xx responses are retried like OSRM calls.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

import httpx

from .retry import RetryConfig, with_retry
from tripfare.domain.entities import Coordinates, Place
from tripfare.domain.exceptions import GeocodingError, TransientGeocodingError

logger = logging.getLogger(__name__)


class RequestThrottle:
    """Spaces calls at least ``min_interval`` seconds apart."""

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep=asyncio.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        async with self._lock:
            if self._last is not None:
                remaining = self.min_interval - (self._clock() - self._last)
                if remaining > 0:
                    await self._sleep(remaining)
            self._last = self._clock()


def extract_short_name(result: dict) -> str:
    """``"City, State"`` from the address parts, else the first two name parts."""
    address = result.get("address") or {}
    city = address.get("city") or address.get("town") or address.get("village")
    state = address.get("state")
    if city and state:
        return f"{city}, {state}"
    if city or state:
        return city or state
    return ",".join(result.get("display_name", "").split(",")[:2]).strip()


def _to_place(result: dict, coordinates: Optional[Coordinates] = None) -> Place:
    return Place(
        id=str(result["place_id"]),
        display_name=result["display_name"],
        short_name=extract_short_name(result),
        coordinates=coordinates
        or Coordinates(float(result["lat"]), float(result["lon"])),
        type=result.get("type", ""),
    )


class NominatimClient:
    def __init__(
        self,
        base_url: str,
        user_agent: str,
        throttle: Optional[RequestThrottle] = None,
        timeout: float = 10.0,
        retry: Optional[RetryConfig] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.throttle = throttle or RequestThrottle(0.0)
        self.timeout = timeout
        self.retry = retry or RetryConfig(
            retryable_exceptions=(TransientGeocodingError,)
        )

    async def _get(self, path: str, params: dict) -> httpx.Response:
        url = f"{self.base_url}/{path}"
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        async def attempt() -> httpx.Response:
            await self.throttle.wait()
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, headers=headers)
            except httpx.TimeoutException as e:
                raise TransientGeocodingError(
                    f"Request timed out after {self.timeout}s"
                ) from e
            except httpx.TransportError as e:
                raise TransientGeocodingError(f"Network error: {e}") from e

            if response.status_code >= 500:
                raise TransientGeocodingError(
                    f"Nominatim server error: {response.status_code}"
                )
            return response

        return await with_retry(attempt, self.retry, operation_name=f"Nominatim {path}")

    async def search(
        self, query: str, country_code: str = "in", limit: int = 8
    ) -> list[Place]:
        """Places matching *query*; an empty query returns no results."""
        if not query.strip():
            return []

        response = await self._get(
            "search",
            {
                "q": query,
                "format": "json",
                "addressdetails": "1",
                "limit": str(limit),
                "countrycodes": country_code,
            },
        )
        if response.status_code >= 400:
            raise GeocodingError(
                f"Nominatim search failed: HTTP {response.status_code}",
                {"status": response.status_code},
            )

        try:
            results = response.json()
        except ValueError as e:
            raise GeocodingError("Nominatim returned invalid JSON") from e

        places = []
        for result in results if isinstance(results, list) else []:
            try:
                places.append(_to_place(result))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed Nominatim result: %r", result)
        logger.info("Place search %r: %d results", query, len(places))
        return places

    async def reverse(self, coordinates: Coordinates) -> Optional[Place]:
        """The place at *coordinates*, or ``None`` when nothing is found there."""
        response = await self._get(
            "reverse",
            {
                "lat": str(coordinates.latitude),
                "lon": str(coordinates.longitude),
                "format": "json",
                "addressdetails": "1",
            },
        )
        if response.status_code >= 400:
            return None
        try:
            result = response.json()
            # Nominatim answers 200 {"error": ...} for open sea and the like
            if not isinstance(result, dict) or "error" in result:
                return None
            return _to_place(result, coordinates)
        except (KeyError, TypeError, ValueError):
            logger.warning("Unusable reverse geocoding result at %s", coordinates)
            return None
