"""
Recommendation synthesis.

Turns ranked habit correlations into "do more" / "do less" action items,
weighted by how far the user's current adherence is from the helpful
direction:

    increase:  impact = r × (1 - frequency) × 100   (helps, rarely done)
    decrease:  impact = |r| × frequency × 100       (hurts, often done)
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from constants import (
    DECREASE_FREQUENCY_FLOOR,
    DEFAULT_HABIT_FREQUENCY,
    DEFAULT_MAX_RECOMMENDATIONS,
    DONE_TODAY_FLAGS,
    INCREASE_FREQUENCY_CEILING,
    MIN_PAIRED_SAMPLES,
    WEAK_COEFFICIENT,
)
from habit_schema import (
    Correlation,
    HabitEntry,
    HabitFrequency,
    Recommendation,
    RecommendationAction,
    SignificanceLevel,
)

log = logging.getLogger("recommendation_engine")


# Adherence flag -> predicate over a single day
FREQUENCY_PREDICATES: Dict[str, Callable[[HabitEntry], bool]] = {
    "exercise": lambda e: e.exercise is not None,
    "meditation": lambda e: e.meditation.practiced,
    "alcohol": lambda e: e.alcohol.consumed,
    "cold_exposure": lambda e: e.cold_exposure,
    "high_sleep_quality": lambda e: e.sleep.quality >= 4,
    "low_stress": lambda e: e.stress_level <= 2,
}


def analyze_habit_frequency(habits: Sequence[HabitEntry]) -> Dict[str, HabitFrequency]:
    """Fraction of logged days on which each adherence flag was true."""
    total = len(habits)
    if total == 0:
        return {}
    out: Dict[str, HabitFrequency] = {}
    for key, predicate in FREQUENCY_PREDICATES.items():
        count = sum(1 for e in habits if predicate(e))
        out[key] = HabitFrequency(
            habit_key=key,
            days_with_habit=count,
            total_days=total,
            frequency=count / total,
        )
    return out


def _signed_pct(value: float) -> str:
    pct = round(value)
    return f"+{pct}%" if pct >= 0 else f"{pct}%"


def _is_weak(correlation: Correlation) -> bool:
    return (correlation.significance == SignificanceLevel.LOW
            and abs(correlation.coefficient) < WEAK_COEFFICIENT)


def generate_recommendations(correlations: Sequence[Correlation],
                             habits: Sequence[HabitEntry],
                             max_count: int = DEFAULT_MAX_RECOMMENDATIONS) -> List[Recommendation]:
    """Prioritised increase / decrease items, highest impact first."""
    if not correlations or len(habits) < MIN_PAIRED_SAMPLES:
        return []

    frequencies = analyze_habit_frequency(habits)
    recommendations: List[Recommendation] = []

    for corr in correlations:
        if _is_weak(corr):
            continue

        freq = frequencies.get(corr.habit_key)
        current = freq.frequency if freq is not None else DEFAULT_HABIT_FREQUENCY
        label = corr.habit_label.lower()

        if (corr.coefficient > 0 and corr.percentage_diff > 0
                and current < INCREASE_FREQUENCY_CEILING):
            recommendations.append(Recommendation(
                habit_key=corr.habit_key,
                habit_label=corr.habit_label,
                action=RecommendationAction.INCREASE,
                impact_score=round(corr.coefficient * (1 - current) * 100, 1),
                message=f"Try {label} today",
                expected_impact=f"{_signed_pct(corr.percentage_diff)} HRV on {label} days",
            ))
        elif (corr.coefficient < 0 and corr.percentage_diff < 0
                and current > DECREASE_FREQUENCY_FLOOR):
            recommendations.append(Recommendation(
                habit_key=corr.habit_key,
                habit_label=corr.habit_label,
                action=RecommendationAction.DECREASE,
                impact_score=round(abs(corr.coefficient) * current * 100, 1),
                message=f"Consider reducing {label}",
                expected_impact=f"{_signed_pct(corr.percentage_diff)} HRV impact",
            ))

    recommendations.sort(key=lambda r: r.impact_score, reverse=True)
    log.debug("Recommendations: %d candidates, keeping %d",
              len(recommendations), min(len(recommendations), max_count))
    return recommendations[:max(max_count, 0)]


def _done_today(entry: HabitEntry) -> set:
    done = set()
    for key in DONE_TODAY_FLAGS:
        if FREQUENCY_PREDICATES[key](entry):
            done.add(key)
    return done


def get_todays_focus(recommendations: Sequence[Recommendation],
                     today_habits: Optional[HabitEntry] = None) -> Optional[Recommendation]:
    """Single item to highlight today.

    Highest-impact "increase" not already done today, else the top
    "increase", else the top item, else None.
    """
    if not recommendations:
        return None

    increases = [r for r in recommendations if r.action == RecommendationAction.INCREASE]

    if today_habits is not None:
        done = _done_today(today_habits)
        remaining = [r for r in increases if r.habit_key not in done]
        if remaining:
            return remaining[0]

    if increases:
        return increases[0]
    return recommendations[0]


def generate_weekly_plan(recommendations: Sequence[Recommendation]) -> Dict[int, List[Recommendation]]:
    """Spread "increase" items round-robin over weekdays (0 = Sunday)."""
    plan: Dict[int, List[Recommendation]] = {day: [] for day in range(7)}
    increases = [r for r in recommendations if r.action == RecommendationAction.INCREASE]
    for i, rec in enumerate(increases):
        plan[i % 7].append(rec)
    return plan
