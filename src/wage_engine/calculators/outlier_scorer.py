"""Robust outlier scoring of a wage against its peer population.

The reference population is chosen location first, then organization,
then a cold-start bounds check when neither has enough approved
reports. Spread is measured by the median absolute deviation (MAD), so
a handful of extreme wages cannot drag the baseline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from wage_engine.calculators.normalizer import MAX_HOURLY_CENTS, MIN_HOURLY_CENTS
from wage_engine.calculators.statistics import median, median_absolute_deviation

logger = logging.getLogger(__name__)

STRONG_OUTLIER_SCORE = -5
MODERATE_OUTLIER_SCORE = -2
SLIGHT_CONCERN_SCORE = 0
NORMAL_SCORE = 5

MODERATE_MAD_RATIO = 3
SLIGHT_MAD_RATIO = 1.5


class ScoreBasis(str, Enum):
    """Which population a score was computed against."""

    LOCATION = "location"
    ORGANIZATION = "organization"
    GLOBAL = "global"


@dataclass(frozen=True)
class ScoringPolicy:
    """Tunable thresholds for the scorer."""

    min_sample_size: int = 3
    k_mad: int = 6
    min_hourly_cents: int = MIN_HOURLY_CENTS
    max_hourly_cents: int = MAX_HOURLY_CENTS


DEFAULT_POLICY = ScoringPolicy()


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of scoring one candidate wage."""

    sanity_score: int
    basis: ScoreBasis
    population_size: int = 0
    median_cents: float | None = None
    mad_cents: float | None = None

    @property
    def status(self) -> str:
        """approved for non-negative scores, otherwise pending for review."""
        return "approved" if self.sanity_score >= 0 else "pending"

    @property
    def is_approved(self) -> bool:
        return self.sanity_score >= 0


def mad_score(
    candidate_cents: int,
    population: Sequence[int],
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> tuple[int, float, float]:
    """Map a candidate's MAD distance to a banded integer score.

    Returns (score, median, mad).
    """
    center = median(population)
    mad = median_absolute_deviation(population, center)

    if mad == 0:
        # Uniform population: only an exact match is clearly normal
        return (NORMAL_SCORE if candidate_cents == center else SLIGHT_CONCERN_SCORE), center, mad

    ratio = abs(candidate_cents - center) / mad
    if ratio > policy.k_mad:
        score = STRONG_OUTLIER_SCORE
    elif ratio > MODERATE_MAD_RATIO:
        score = MODERATE_OUTLIER_SCORE
    elif ratio > SLIGHT_MAD_RATIO:
        score = SLIGHT_CONCERN_SCORE
    else:
        score = NORMAL_SCORE
    return score, center, mad


def global_bounds_score(candidate_cents: int, policy: ScoringPolicy = DEFAULT_POLICY) -> int:
    """Cold-start score: neutral inside the accepted range, strong outlier outside."""
    if candidate_cents < policy.min_hourly_cents or candidate_cents > policy.max_hourly_cents:
        return STRONG_OUTLIER_SCORE
    return SLIGHT_CONCERN_SCORE


class OutlierScorer:
    """Scores candidate wages against reference populations.

    Pure and deterministic: population order never affects the result.
    """

    def __init__(self, policy: ScoringPolicy = DEFAULT_POLICY):
        self.policy = policy

    def has_enough(self, population: Sequence[int] | None) -> bool:
        return population is not None and len(population) >= self.policy.min_sample_size

    def score(
        self,
        candidate_cents: int,
        location_population: Sequence[int] | None = None,
        organization_population: Sequence[int] | None = None,
    ) -> ScoreResult:
        """Score a candidate using the first population large enough.

        Args:
            candidate_cents: Normalized hourly wage being submitted
            location_population: Approved wages at the same location
            organization_population: Approved wages across the organization

        Returns:
            ScoreResult with the score, its basis and the statistics used
        """
        for basis, population in (
            (ScoreBasis.LOCATION, location_population),
            (ScoreBasis.ORGANIZATION, organization_population),
        ):
            if not self.has_enough(population):
                continue
            score, center, mad = mad_score(candidate_cents, population, self.policy)
            logger.debug(
                "Scored %s cents against %s population (n=%d, median=%s, mad=%s): %d",
                candidate_cents,
                basis.value,
                len(population),
                center,
                mad,
                score,
            )
            return ScoreResult(
                sanity_score=score,
                basis=basis,
                population_size=len(population),
                median_cents=center,
                mad_cents=mad,
            )

        logger.debug("No reference population for %s cents, using global bounds", candidate_cents)
        return ScoreResult(
            sanity_score=global_bounds_score(candidate_cents, self.policy),
            basis=ScoreBasis.GLOBAL,
        )
