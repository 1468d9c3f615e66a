"""Coarse significance bands for small daily-cadence correlations.

A correlation r over n paired days is converted to a t-statistic

    t = r·√(n-2) / √(1-r²)

and |t| is mapped through a banded critical-value table to an approximate
p-value.  The bands are deliberately coarse: with 7-60 samples the goal is a
stable high / medium / low label, not a publishable test.  The exact
two-sided p-value (Student's t, n-2 df) is reported alongside for display and
logging only; classification uses the table.
"""

from __future__ import annotations

import math
from typing import List, NamedTuple, Sequence, Tuple

from scipy import stats as sp_stats

from habit_schema import SignificanceLevel, SignificanceResult


class PValueBand(NamedTuple):
    min_df: int
    thresholds: Tuple[Tuple[float, float], ...]   # (min |t|, p) high -> low
    floor_p: float


class SignificanceRule(NamedTuple):
    level: SignificanceLevel
    min_sample_size: int
    min_coefficient: float
    max_p_value: float
    description: str


# Evaluated top-down; first band whose min_df <= df wins.
P_VALUE_BANDS: List[PValueBand] = [
    PValueBand(30, ((2.75, 0.005), (2.04, 0.03), (1.70, 0.08)), 0.2),
    PValueBand(14, ((2.98, 0.005), (2.14, 0.03), (1.76, 0.08)), 0.2),
    PValueBand(8, ((3.36, 0.005), (2.31, 0.03), (1.86, 0.08)), 0.3),
]
SMALL_SAMPLE_P = 0.5

# Evaluated top-down; first matching rule wins, otherwise LOW.
SIGNIFICANCE_RULES: List[SignificanceRule] = [
    SignificanceRule(SignificanceLevel.HIGH, 30, 0.5, 0.01,
                     "Strong correlation with high confidence"),
    SignificanceRule(SignificanceLevel.MEDIUM, 14, 0.3, 0.05,
                     "Moderate correlation with reasonable confidence"),
]
LOW_DESCRIPTION = "Weak correlation or insufficient data"

MIN_SAMPLE_SIZES = {
    SignificanceLevel.HIGH: 30,
    SignificanceLevel.MEDIUM: 14,
    SignificanceLevel.LOW: 7,
}


def t_statistic(coefficient: float, sample_size: int) -> float:
    if sample_size <= 2:
        return 0.0
    denom_sq = 1.0 - coefficient * coefficient
    if denom_sq <= 0.0:
        return math.copysign(math.inf, coefficient)
    return coefficient * math.sqrt(sample_size - 2) / math.sqrt(denom_sq)


def approximate_p_value(t: float, df: int,
                        bands: Sequence[PValueBand] = P_VALUE_BANDS) -> float:
    abs_t = abs(t)
    for band in bands:
        if df < band.min_df:
            continue
        for min_t, p in band.thresholds:
            if abs_t >= min_t:
                return p
        return band.floor_p
    return SMALL_SAMPLE_P


def exact_p_value(t: float, df: int) -> float:
    """Two-sided Student's t p-value; 1.0 when df is not positive."""
    if df <= 0:
        return 1.0
    if math.isinf(t):
        return 0.0
    return float(2 * sp_stats.t.sf(abs(t), df))


def classify(coefficient: float, sample_size: int, p_value: float,
             rules: Sequence[SignificanceRule] = SIGNIFICANCE_RULES) -> SignificanceRule:
    abs_r = abs(coefficient)
    for rule in rules:
        if (sample_size >= rule.min_sample_size
                and abs_r >= rule.min_coefficient
                and p_value < rule.max_p_value):
            return rule
    return SignificanceRule(SignificanceLevel.LOW, 0, 0.0, 1.0, LOW_DESCRIPTION)


def calculate_significance(coefficient: float, sample_size: int) -> SignificanceResult:
    """Classify a correlation as high / medium / low confidence."""
    df = sample_size - 2
    t = t_statistic(coefficient, sample_size)
    p = approximate_p_value(t, df)
    rule = classify(coefficient, sample_size, p)
    return SignificanceResult(
        level=rule.level,
        p_value=p,
        exact_p_value=exact_p_value(t, df),
        t_statistic=t,
        description=rule.description,
    )


def min_sample_size(level: SignificanceLevel) -> int:
    """Smallest sample that can reach ``level``."""
    return MIN_SAMPLE_SIZES[SignificanceLevel(level)]


def is_sample_sufficient(sample_size: int) -> bool:
    return sample_size >= MIN_SAMPLE_SIZES[SignificanceLevel.LOW]
