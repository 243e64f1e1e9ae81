"""
Form input parsing.

Trip proposal forms arrive as free text.  Parsing here is
forgiving: a malformed optional number falls back to its documented default
instead of failing the whole request.  Only leading numeric text is read,
so ``"12 km"`` parses as 12 and ``"2.5"`` days as 2.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional, Union

_FLOAT_PREFIX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^[+-]?\d+")

Numeric = Union[str, int, float, None]

DEFAULT_NUMBER_OF_DAYS = 1
DEFAULT_BATA_PER_DAY = 0.0
DEFAULT_ESTIMATED_TOLLS = 0.0
DEFAULT_DISCOUNT = 0.0


def parse_float(value: Numeric) -> Optional[float]:
    """Leading-number float parse; ``None`` when nothing finite is found."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            return None
    else:
        match = _FLOAT_PREFIX.match(value.strip())
        if not match:
            return None
        # "1e999" overflows to inf
        parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else None


def parse_int(value: Numeric) -> Optional[int]:
    """Leading-digits int parse (fractions truncated); ``None`` when absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    match = _INT_PREFIX.match(value.strip())
    if not match:
        return None
    return int(match.group(0))


def _non_negative(value: Numeric, default: float) -> float:
    parsed = parse_float(value)
    if parsed is None or parsed < 0:
        return default
    return parsed


def _positive_or_none(value: Numeric) -> Optional[float]:
    parsed = parse_float(value)
    if parsed is None or parsed <= 0:
        return None
    return parsed


@dataclass(frozen=True)
class TripProposalForm:
    """Raw proposal form as entered by the driver."""

    customer_name: str
    proposed_start_date: str
    number_of_days: Numeric = None
    bata_per_day: Numeric = None
    estimated_tolls: Numeric = None
    discount: Numeric = None
    customer_phone: Optional[str] = None
    rate_per_km_override: Numeric = None
    min_km_per_day_override: Numeric = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ParsedTripForm:
    customer_name: str
    proposed_start_date: str
    number_of_days: int
    bata_per_day: float
    estimated_tolls: float
    discount: float
    customer_phone: Optional[str] = None
    rate_per_km_override: Optional[float] = None
    min_km_per_day_override: Optional[float] = None
    notes: Optional[str] = None


def parse_trip_form(form: TripProposalForm) -> ParsedTripForm:
    days = parse_int(form.number_of_days)
    if days is None or days < 1:
        days = DEFAULT_NUMBER_OF_DAYS

    return ParsedTripForm(
        customer_name=form.customer_name,
        proposed_start_date=form.proposed_start_date,
        number_of_days=days,
        bata_per_day=_non_negative(form.bata_per_day, DEFAULT_BATA_PER_DAY),
        estimated_tolls=_non_negative(form.estimated_tolls, DEFAULT_ESTIMATED_TOLLS),
        discount=_non_negative(form.discount, DEFAULT_DISCOUNT),
        customer_phone=form.customer_phone or None,
        rate_per_km_override=_positive_or_none(form.rate_per_km_override),
        min_km_per_day_override=_positive_or_none(form.min_km_per_day_override),
        notes=form.notes or None,
    )

