"""
Derived earnings views over the trip collection.

These are pure reductions over completed trips; they hold no state of their
own.  A trip counts towards a period when its ``actual_end_time`` falls on or
after the period's local start (today, this week starting Sunday, this month).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo
from typing import Iterable, Optional

from .dates import parse_iso
from .entities import Trip
from .enums import TripStatus
from .fare import FareBreakdown


@dataclass(frozen=True)
class PeriodEarnings:
    total_earnings: float = 0.0
    trip_count: int = 0
    total_distance: float = 0.0


@dataclass(frozen=True)
class AllTimeEarnings(PeriodEarnings):
    pending_amount: float = 0.0


@dataclass(frozen=True)
class EarningsSummary:
    today: PeriodEarnings
    this_week: PeriodEarnings
    this_month: PeriodEarnings
    all_time: AllTimeEarnings


@dataclass(frozen=True)
class PaymentSummary:
    fare_total: float
    total_advances: float
    balance_due: float
    is_final: bool

    @property
    def is_refund(self) -> bool:
        return self.balance_due < 0


def _earnings(trip: Trip) -> float:
    return trip.actual_fare_breakdown.grand_total if trip.actual_fare_breakdown else 0.0


def _period(trips: list[Trip], since: datetime) -> PeriodEarnings:
    total = 0.0
    count = 0
    distance = 0.0
    for trip in trips:
        ended = parse_iso(trip.actual_end_time)
        if ended is None:
            continue
        if ended.tzinfo is None:
            ended = ended.replace(tzinfo=since.tzinfo)
        elif since.tzinfo is None:
            ended = ended.replace(tzinfo=None)
        if ended < since:
            continue
        total += _earnings(trip)
        count += 1
        distance += trip.actual_distance_km or 0.0
    return PeriodEarnings(total_earnings=total, trip_count=count, total_distance=distance)


def summarize_earnings(
    trips: Iterable[Trip], now: datetime, tz: Optional[tzinfo] = None
) -> EarningsSummary:
    """Earnings for today, this week, this month and all time as of *now*."""
    completed = [t for t in trips if t.status == TripStatus.COMPLETED]

    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    start_of_today = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    # isoweekday: Monday=1 .. Sunday=7; weeks start on Sunday
    start_of_week = start_of_today - timedelta(days=now.isoweekday() % 7)
    start_of_month = start_of_today.replace(day=1)

    total = 0.0
    distance = 0.0
    pending = 0.0
    for trip in completed:
        earned = _earnings(trip)
        total += earned
        distance += trip.actual_distance_km or 0.0
        pending += max(0.0, earned - trip.total_advances)

    return EarningsSummary(
        today=_period(completed, start_of_today),
        this_week=_period(completed, start_of_week),
        this_month=_period(completed, start_of_month),
        all_time=AllTimeEarnings(
            total_earnings=total,
            trip_count=len(completed),
            total_distance=distance,
            pending_amount=pending,
        ),
    )


def payment_summary(trip: Trip) -> PaymentSummary:
    """Fare vs. advances received.  Uses the actual fare once completed."""
    breakdown: FareBreakdown = trip.actual_fare_breakdown or trip.estimated_fare_breakdown
    advances = trip.total_advances
    return PaymentSummary(
        fare_total=breakdown.grand_total,
        total_advances=advances,
        balance_due=breakdown.grand_total - advances,
        is_final=trip.actual_fare_breakdown is not None,
    )
