"""Pure wage calculations: normalization, statistics and outlier scoring."""

from wage_engine.calculators.normalizer import (
    NormalizationBounds,
    WagePeriod,
    normalize_to_hourly,
)
from wage_engine.calculators.outlier_scorer import OutlierScorer, ScoreBasis, ScoreResult, ScoringPolicy
from wage_engine.calculators.statistics import WageSummary, summarize

__all__ = [
    "NormalizationBounds",
    "WagePeriod",
    "normalize_to_hourly",
    "OutlierScorer",
    "ScoreBasis",
    "ScoreResult",
    "ScoringPolicy",
    "WageSummary",
    "summarize",
]
