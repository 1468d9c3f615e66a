"""
Habit Correlation Engine
========================
Correlates self-reported daily habits with next-morning HRV and ranks the
results for the recommendation layer.

Architecture (per habit in the catalog):
  Layer 0 - Alignment:  join habit entries and readings on calendar date
            (optionally habit day N -> reading day N+1).
  Layer 1 - Pearson:  coefficient over the paired days, skipped below
            7 pairs.
  Layer 2 - Significance:  t-statistic -> banded p-value -> high / medium /
            low confidence.
  Layer 3 - Effect size:  mean HRV with vs. without the habit.  Binary
            habits split on 0/1; numeric habits use a median split
            (value >= sorted[n // 2] counts as "with").

Ranking:  |r| × confidence weight (1.5 / 1.0 / 0.5), stable.

Correlation only.  Nothing here implies that a habit causes an HRV change.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from analytics.calculator import mean, pearson, percentage_diff
from analytics.habit_catalog import HABIT_CATALOG, HabitDefinition
from analytics.series_aligner import align_series
from analytics.significance import calculate_significance
from constants import CONFIDENCE_WEIGHTS, MIN_PAIRED_SAMPLES, SUFFICIENT_DATA_DAYS
from habit_schema import BiometricReading, Correlation, HabitAnalysis, HabitEntry

log = logging.getLogger("correlation_engine")


class CorrelationEngine:
    """
    Runs every catalog habit through alignment, Pearson, significance and
    effect-size layers.  Stateless apart from its configuration; the same
    inputs always produce the same HabitAnalysis.
    """

    def __init__(self, catalog: Optional[Sequence[HabitDefinition]] = None,
                 min_samples: int = MIN_PAIRED_SAMPLES):
        self.catalog = list(catalog) if catalog is not None else list(HABIT_CATALOG)
        self.min_samples = min_samples

    # ─── Main entry ───────────────────────────────────────────

    def analyze_all(self, habits: Sequence[HabitEntry],
                    readings: Sequence[BiometricReading],
                    use_lag: bool = False) -> HabitAnalysis:
        """Correlate every catalog habit; output keeps catalog order."""
        log.info("Correlation engine: %d habit days, %d readings (lag=%s)",
                 len(habits), len(readings), use_lag)

        correlations: List[Correlation] = []
        for definition in self.catalog:
            try:
                result = self.analyze_habit(definition, habits, readings, use_lag)
            except Exception:
                log.exception("Habit %s analysis failed; skipping", definition.key)
                continue
            if result is not None:
                correlations.append(result)

        total_days = len(habits)
        log.info("   %d/%d habits with >= %d paired days",
                 len(correlations), len(self.catalog), self.min_samples)
        return HabitAnalysis(
            correlations=correlations,
            total_days=total_days,
            sufficient_data=total_days >= SUFFICIENT_DATA_DAYS,
        )

    # ─── Single habit ─────────────────────────────────────────

    def analyze_habit(self, definition: HabitDefinition,
                      habits: Sequence[HabitEntry],
                      readings: Sequence[BiometricReading],
                      use_lag: bool = False) -> Optional[Correlation]:
        """Correlation record for one habit, or None below the sample floor."""
        aligned = align_series(habits, readings, definition.extractor, use_lag)
        n = len(aligned)
        if n < self.min_samples:
            log.debug("   %s: %d paired days, need %d", definition.key, n, self.min_samples)
            return None

        x, y = aligned.habit_values, aligned.hrv_values
        coefficient = pearson(x, y)
        significance = calculate_significance(coefficient, n)

        if definition.is_binary:
            avg_with, avg_without = self._binary_split(x, y)
        else:
            avg_with, avg_without = self._median_split(x, y)

        log.debug("   %s: r=%.3f n=%d t=%.2f p~%.3f (exact %.4f) -> %s",
                  definition.key, coefficient, n, significance.t_statistic,
                  significance.p_value, significance.exact_p_value,
                  significance.level.value)

        return Correlation(
            habit_key=definition.key,
            habit_label=definition.label,
            coefficient=round(coefficient, 2),
            avg_value_with_habit=round(avg_with, 1),
            avg_value_without_habit=round(avg_without, 1),
            percentage_diff=round(percentage_diff(avg_with, avg_without), 1),
            sample_size=n,
            significance=significance.level,
        )

    @staticmethod
    def _binary_split(x: np.ndarray, y: np.ndarray):
        """Mean HRV on days with (x == 1) and without (x == 0) the habit."""
        return mean(y[x == 1]), mean(y[x != 1])

    @staticmethod
    def _median_split(x: np.ndarray, y: np.ndarray):
        """Mean HRV for habit values at/above vs. below the sample median.

        The threshold is the upper median, sorted[n // 2], so ties at the
        median land in the "with" group.
        """
        threshold = np.sort(x)[x.size // 2]
        return mean(y[x >= threshold]), mean(y[x < threshold])


# ─── Module-level API ──────────────────────────────────────


def analyze_all_habits(habits: Sequence[HabitEntry],
                       readings: Sequence[BiometricReading],
                       use_lag: bool = False) -> HabitAnalysis:
    """Correlate the full habit catalog against HRV."""
    return CorrelationEngine().analyze_all(habits, readings, use_lag)


def impact_score(correlation: Correlation) -> float:
    """|r| weighted by confidence band."""
    return abs(correlation.coefficient) * CONFIDENCE_WEIGHTS[correlation.significance.value]


def rank_by_impact(correlations: Iterable[Correlation]) -> List[Correlation]:
    """Strongest reliable associations first; ties keep input order."""
    return sorted(correlations, key=impact_score, reverse=True)


def top_habits(correlations: Iterable[Correlation], limit: int = 3) -> List[Correlation]:
    return rank_by_impact(correlations)[:limit]
