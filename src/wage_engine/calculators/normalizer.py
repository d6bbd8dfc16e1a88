"""Wage normalization: any pay period to canonical hourly cents.

All arithmetic is integer-only. Division truncates toward zero so a
normalized wage is never rounded up.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from wage_engine.errors import (
    InvalidAmountError,
    InvalidHoursError,
    InvalidPeriodError,
    OutOfBoundsError,
)

DEFAULT_HOURS_PER_WEEK = 40
DEFAULT_SHIFT_HOURS = 8
MIN_HOURLY_CENTS = 200  # $2.00/hour
MAX_HOURLY_CENTS = 20000  # $200.00/hour
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12


class WagePeriod(str, Enum):
    """Pay period a submitted amount refers to."""

    HOURLY = "hourly"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    PER_SHIFT = "per_shift"


@dataclass(frozen=True)
class NormalizationBounds:
    """Accepted hourly range and defaults for missing hours."""

    min_hourly_cents: int = MIN_HOURLY_CENTS
    max_hourly_cents: int = MAX_HOURLY_CENTS
    default_hours_per_week: int = DEFAULT_HOURS_PER_WEEK
    default_shift_hours: int = DEFAULT_SHIFT_HOURS


DEFAULT_BOUNDS = NormalizationBounds()


def _div(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero (not floor)."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _positive(field: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidHoursError(field, value)
    return value


def parse_period(period: WagePeriod | str) -> WagePeriod:
    """Coerce a raw period value, raising InvalidPeriodError if unknown."""
    if isinstance(period, WagePeriod):
        return period
    try:
        return WagePeriod(period)
    except ValueError as e:
        raise InvalidPeriodError(period) from e


def to_hourly(
    amount_cents: int,
    period: WagePeriod | str,
    hours_per_week: int | None = None,
    shift_hours: int | None = None,
    bounds: NormalizationBounds = DEFAULT_BOUNDS,
) -> int:
    """Convert an amount to hourly cents without the bounds check."""
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise InvalidAmountError(amount_cents)
    wage_period = parse_period(period)
    hours = _positive(
        "hours_per_week",
        bounds.default_hours_per_week if hours_per_week is None else hours_per_week,
    )
    shift = _positive(
        "shift_hours",
        bounds.default_shift_hours if shift_hours is None else shift_hours,
    )

    if wage_period is WagePeriod.HOURLY:
        return amount_cents
    if wage_period is WagePeriod.WEEKLY:
        return _div(amount_cents, hours)
    if wage_period is WagePeriod.BIWEEKLY:
        return _div(amount_cents, 2 * hours)
    if wage_period is WagePeriod.MONTHLY:
        return _div(amount_cents * MONTHS_PER_YEAR, WEEKS_PER_YEAR * hours)
    if wage_period is WagePeriod.YEARLY:
        return _div(amount_cents, WEEKS_PER_YEAR * hours)
    # WagePeriod.PER_SHIFT
    return _div(amount_cents, shift)


def normalize_to_hourly(
    amount_cents: int,
    period: WagePeriod | str,
    hours_per_week: int | None = None,
    shift_hours: int | None = None,
    bounds: NormalizationBounds = DEFAULT_BOUNDS,
) -> int:
    """Normalize a wage to hourly cents and enforce the accepted range.

    Args:
        amount_cents: Submitted amount in cents for the given period
        period: One of the WagePeriod values
        hours_per_week: Weekly hours; defaults to 40 when None
        shift_hours: Hours per shift for per_shift wages; defaults to 8
        bounds: Accepted range and defaults

    Returns:
        Hourly wage in integer cents

    Raises:
        InvalidPeriodError: period is not recognized
        InvalidHoursError: hours_per_week or shift_hours is not positive
        OutOfBoundsError: result is outside [min_hourly_cents, max_hourly_cents]
    """
    normalized = to_hourly(amount_cents, period, hours_per_week, shift_hours, bounds)

    if normalized < bounds.min_hourly_cents or normalized > bounds.max_hourly_cents:
        raise OutOfBoundsError(normalized, bounds.min_hourly_cents, bounds.max_hourly_cents)

    return normalized
