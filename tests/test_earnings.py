"""Unit tests for earnings and payment summaries."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from tripfare.domain.earnings import payment_summary, summarize_earnings
from tripfare.domain.entities import AdvancePayment, Trip
from tripfare.domain.enums import TripStatus
from tripfare.domain.fare import FareInput, calculate_fare


def _breakdown(distance: float):
    return calculate_fare(FareInput(10.0, 0.0, distance, 1, 0.0, 0.0))


def _trip(vehicle, trip_id, ended=None, distance=100.0, status=TripStatus.COMPLETED, advances=()):
    trip = Trip(
        id=trip_id,
        customer_name="Customer",
        vehicle_id=vehicle.id,
        vehicle_snapshot=vehicle,
        status=status,
        is_round_trip=False,
        proposed_start_date="2026-10-01",
        number_of_days=1,
        bata_per_day=0.0,
        estimated_distance_km=distance,
        estimated_tolls=0.0,
        estimated_fare_breakdown=_breakdown(distance),
        created_at="2026-10-01T00:00:00+00:00",
        updated_at="2026-10-01T00:00:00+00:00",
        advance_payments=tuple(
            AdvancePayment(f"adv-{i}", amount, "Fuel", "2026-10-01T00:00:00+00:00")
            for i, amount in enumerate(advances)
        ),
    )
    if status == TripStatus.COMPLETED:
        trip = replace(
            trip,
            actual_end_time=ended,
            actual_distance_km=distance,
            actual_fare_breakdown=_breakdown(distance),
        )
    return trip


# Thursday 2026-10-15, noon UTC; the week began Sunday 2026-10-11
NOW = datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc)


class TestSummarizeEarnings:
    def test_buckets_by_period(self, vehicle):
        trips = [
            _trip(vehicle, "today", "2026-10-15T09:00:00+00:00", 100.0),
            _trip(vehicle, "sunday", "2026-10-11T00:30:00+00:00", 200.0),
            _trip(vehicle, "month", "2026-10-02T10:00:00+00:00", 300.0),
            _trip(vehicle, "last-month", "2026-09-30T10:00:00+00:00", 400.0),
        ]
        summary = summarize_earnings(trips, NOW, timezone.utc)

        assert summary.today.trip_count == 1
        assert summary.today.total_earnings == 1000.0
        assert summary.this_week.trip_count == 2
        assert summary.this_week.total_distance == 300.0
        assert summary.this_month.trip_count == 3
        assert summary.all_time.trip_count == 4
        assert summary.all_time.total_earnings == 10000.0

    def test_only_completed_trips_count(self, vehicle):
        trips = [
            _trip(vehicle, "done", "2026-10-15T09:00:00+00:00"),
            _trip(vehicle, "running", status=TripStatus.ACTIVE),
        ]
        summary = summarize_earnings(trips, NOW, timezone.utc)
        assert summary.all_time.trip_count == 1

    def test_pending_amount_is_unpaid_balance(self, vehicle):
        trips = [
            _trip(vehicle, "part-paid", "2026-10-15T09:00:00+00:00", 100.0, advances=(400.0,)),
            _trip(vehicle, "over-paid", "2026-10-14T09:00:00+00:00", 100.0, advances=(1500.0,)),
        ]
        summary = summarize_earnings(trips, NOW, timezone.utc)
        assert summary.all_time.pending_amount == 600.0

    def test_empty(self):
        summary = summarize_earnings([], NOW, timezone.utc)
        assert summary.all_time.total_earnings == 0.0
        assert summary.today.trip_count == 0


class TestPaymentSummary:
    def test_estimate_before_completion(self, vehicle):
        trip = _trip(vehicle, "t", status=TripStatus.ACTIVE, advances=(300.0, 200.0))
        summary = payment_summary(trip)
        assert summary.fare_total == 1000.0
        assert summary.total_advances == 500.0
        assert summary.balance_due == 500.0
        assert not summary.is_final
        assert not summary.is_refund

    def test_actual_fare_after_completion(self, vehicle):
        trip = _trip(vehicle, "t", "2026-10-15T09:00:00+00:00", 50.0, advances=(800.0,))
        summary = payment_summary(trip)
        assert summary.is_final
        assert summary.balance_due == pytest.approx(-300.0)
        assert summary.is_refund
