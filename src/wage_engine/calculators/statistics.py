"""Order-independent summary statistics over integer wages.

Percentiles use the same continuous linear interpolation as SQL
PERCENTILE_CONT so results match database-side aggregates.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable


@dataclass(frozen=True)
class WageSummary:
    """Aggregate view of a set of hourly wages, in cents."""

    count: int = 0
    average_cents: int = 0
    median_cents: int = 0
    min_cents: int = 0
    max_cents: int = 0
    std_deviation_cents: int = 0
    p25: int = 0
    p50: int = 0
    p75: int = 0
    p90: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def round_cents(value: float | Decimal) -> int:
    """Round half away from zero, like SQL ROUND()."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentile(values: Iterable[int], fraction: float) -> float:
    """Continuous percentile of values (0 <= fraction <= 1)."""
    if not 0 <= fraction <= 1:
        raise ValueError(f"Percentile fraction must be within [0, 1], got {fraction}")
    ordered = sorted(values)
    if not ordered:
        raise ValueError("Percentile of an empty population is undefined")

    position = fraction * (len(ordered) - 1)
    lower = math.floor(position)
    upper = math.ceil(position)
    if lower == upper:
        return float(ordered[lower])
    weight = position - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * weight


def median(values: Iterable[int]) -> float:
    return percentile(values, 0.5)


def median_absolute_deviation(values: Iterable[int], center: float | None = None) -> float:
    """Median of absolute deviations from center (the median by default)."""
    population = list(values)
    if center is None:
        center = median(population)
    return median([abs(v - center) for v in population])


def summarize(values: Iterable[int]) -> WageSummary:
    """Summarize wages; an empty population yields an all-zero summary."""
    population = sorted(values)
    if not population:
        return WageSummary()

    count = len(population)
    mean = Decimal(sum(population)) / count
    if count > 1:
        variance = sum((Decimal(v) - mean) ** 2 for v in population) / (count - 1)
        std_dev = variance.sqrt()
    else:
        std_dev = Decimal(0)

    return WageSummary(
        count=count,
        average_cents=round_cents(mean),
        median_cents=round_cents(median(population)),
        min_cents=population[0],
        max_cents=population[-1],
        std_deviation_cents=round_cents(std_dev),
        p25=round_cents(percentile(population, 0.25)),
        p50=round_cents(percentile(population, 0.5)),
        p75=round_cents(percentile(population, 0.75)),
        p90=round_cents(percentile(population, 0.9)),
    )
