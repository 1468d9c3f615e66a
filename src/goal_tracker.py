"""Percentile-based HRV goals and progress toward them."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

from habit_schema import BiometricReading, GoalTrackerProgress
from hrv_statistics import (
    average,
    benchmark_for,
    classify_trend,
    readings_in_window,
    readings_through,
)

GOAL_PRESETS = [
    {"label": "Average (50th)", "percentile": 50},
    {"label": "Above Average (75th)", "percentile": 75},
    {"label": "Excellent (90th)", "percentile": 90},
]


def percentile_to_target_hrv(percentile: float, age: int, gender: str) -> float:
    """Benchmark RMSSD that corresponds to a population percentile."""
    p25, p50, p75 = benchmark_for(age, gender)
    if percentile <= 25:
        return float(p25)
    if percentile <= 50:
        return p25 + (percentile - 25) / 25 * (p50 - p25)
    if percentile <= 75:
        return p50 + (percentile - 50) / 25 * (p75 - p50)
    return p75 + (percentile - 75) / 25 * (p75 - p50)


def _days_at_goal(readings: Sequence[BiometricReading], target: float) -> int:
    """Consecutive most-recent readings at or above target."""
    streak = 0
    for reading in sorted(readings, key=lambda r: r.date, reverse=True):
        if reading.hrv_ms < target:
            break
        streak += 1
    return streak


def calculate_goal_progress(readings: Sequence[BiometricReading], age: int, gender: str,
                            target_percentile: Optional[float],
                            today: date) -> Optional[GoalTrackerProgress]:
    readings = readings_through(readings, today)
    if not readings or not target_percentile:
        return None

    target = percentile_to_target_hrv(target_percentile, age, gender)
    last_7: List[float] = [r.hrv_ms for r in readings_in_window(readings, 7, today)]
    if not last_7:
        return None
    last_14 = [r.hrv_ms for r in readings_in_window(readings, 14, today)]

    current = average(last_7) or 0.0
    trend = "stable"
    if len(last_14) >= 7:
        trend = classify_trend(current, average(last_14)) or "stable"

    return GoalTrackerProgress(
        current_hrv=round(current),
        target_hrv=round(target),
        progress=round(min(current / target * 100, 100)),
        days_at_goal=_days_at_goal(readings, target),
        trend=trend,
    )
