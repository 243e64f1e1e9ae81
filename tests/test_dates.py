"""Unit tests for timestamp helpers."""

from datetime import timezone
from zoneinfo import ZoneInfo

import pytest

from tripfare.domain.dates import calendar_days_spanned, parse_iso, utc_now_iso


def test_parse_iso_accepts_z_suffix():
    parsed = parse_iso("2026-10-20T06:00:00Z")
    assert parsed.tzinfo is not None
    assert parsed.utcoffset().total_seconds() == 0


@pytest.mark.parametrize("value", [None, "", "yesterday", "2026-13-45"])
def test_parse_iso_rejects_garbage(value):
    assert parse_iso(value) is None


def test_utc_now_iso_is_parseable():
    assert parse_iso(utc_now_iso()).tzinfo == timezone.utc


@pytest.mark.parametrize(
    "start, end, expected",
    [
        ("2026-10-20T06:00:00+00:00", "2026-10-20T20:00:00+00:00", 1),
        ("2026-10-20T23:00:00+00:00", "2026-10-21T01:00:00+00:00", 2),
        ("2026-10-20T06:00:00+00:00", "2026-10-23T06:00:00+00:00", 4),
        # End before start still counts as one day
        ("2026-10-22T06:00:00+00:00", "2026-10-20T06:00:00+00:00", 1),
    ],
)
def test_calendar_days_spanned(start, end, expected):
    assert calendar_days_spanned(start, end, timezone.utc) == expected


def test_days_follow_local_timezone():
    # 17:00 and 19:00 UTC fall either side of midnight in India
    start, end = "2026-10-20T17:00:00+00:00", "2026-10-20T19:00:00+00:00"
    assert calendar_days_spanned(start, end, timezone.utc) == 1
    assert calendar_days_spanned(start, end, ZoneInfo("Asia/Kolkata")) == 2


def test_missing_timestamp_gives_none():
    assert calendar_days_spanned(None, "2026-10-20T06:00:00+00:00") is None
