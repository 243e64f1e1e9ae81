"""Timestamp helpers.  All timestamps travel through the domain as ISO-8601 strings."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Optional


def utc_now_iso() -> str:
    """Default clock: current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; ``None`` when missing or unparseable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of *moment* as seen in *tz*.  Naive values are taken as-is."""
    if tz is not None and moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.date()


def calendar_days_spanned(
    start_iso: Optional[str],
    end_iso: Optional[str],
    tz: Optional[tzinfo] = None,
) -> Optional[int]:
    """
    Inclusive count of calendar days touched between two timestamps.

    A trip starting at 23:00 and ending at 01:00 the next day spans 2 days.
    Returns ``None`` if either timestamp is missing or unparseable; never
    less than 1.
    """
    start = parse_iso(start_iso)
    end = parse_iso(end_iso)
    if start is None or end is None:
        return None

    diff_days = (local_date(end, tz) - local_date(start, tz)).days
    return max(1, diff_days + 1)
