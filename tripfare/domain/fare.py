"""
Fare Engine
===========

Formula
-------
Chargeable_Distance = max(Distance, Min_KM_Per_Day x Days)
Grand_Total = Chargeable_Distance x Rate_Per_KM + Bata_Per_Day x Days + Tolls - Discount

* The minimum daily distance protects driver earnings on short trips.
* **Bata** is the per-day driver allowance, paid regardless of distance.
* No rounding and no validation happen here; callers parse and check input
  (see ``tripfare.domain.forms``) and format for display.

Complexity: O(1) per calculation.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FareInput:
    rate_per_km: float
    min_km_per_day: float
    total_distance_km: float
    number_of_days: int
    bata_per_day: float
    estimated_tolls: float
    discount: float = 0.0


@dataclass(frozen=True)
class ActualFareInput:
    rate_per_km: float
    min_km_per_day: float
    actual_distance_km: float
    actual_days: int
    bata_per_day: float
    actual_tolls: float
    discount: float = 0.0


@dataclass(frozen=True)
class FareBreakdown:
    actual_distance: float
    chargeable_distance: float
    distance_charges: float
    total_bata: float
    total_tolls: float
    subtotal: float
    discount: float
    grand_total: float


def calculate_fare(fare: FareInput) -> FareBreakdown:
    """Compute the full breakdown for *fare*.  Pure and deterministic."""
    minimum_chargeable_distance = fare.min_km_per_day * fare.number_of_days
    chargeable_distance = max(fare.total_distance_km, minimum_chargeable_distance)

    distance_charges = chargeable_distance * fare.rate_per_km
    total_bata = fare.bata_per_day * fare.number_of_days

    subtotal = distance_charges + total_bata + fare.estimated_tolls
    grand_total = subtotal - fare.discount

    return FareBreakdown(
        actual_distance=fare.total_distance_km,
        chargeable_distance=chargeable_distance,
        distance_charges=distance_charges,
        total_bata=total_bata,
        total_tolls=fare.estimated_tolls,
        subtotal=subtotal,
        discount=fare.discount,
        grand_total=grand_total,
    )


def calculate_actual_fare(fare: ActualFareInput) -> FareBreakdown:
    return calculate_fare(
        FareInput(
            rate_per_km=fare.rate_per_km,
            min_km_per_day=fare.min_km_per_day,
            total_distance_km=fare.actual_distance_km,
            number_of_days=fare.actual_days,
            bata_per_day=fare.bata_per_day,
            estimated_tolls=fare.actual_tolls,
            discount=fare.discount,
        )
    )
