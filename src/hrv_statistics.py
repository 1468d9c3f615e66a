"""
HRV history statistics and population benchmarks.

All windows are anchored on a caller-supplied ``today``; nothing here reads
the clock.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from constants import AGE_BRACKETS, HRV_BENCHMARKS, OLDEST_BRACKET
from habit_schema import BiometricReading, HrvStatistics, PercentileResult

TREND_THRESHOLD_PCT = 5.0


def average(values: Sequence[float]) -> Optional[float]:
    if len(values) == 0:
        return None
    return float(np.mean(values))


def readings_in_window(readings: Sequence[BiometricReading], days: int,
                       today: date) -> List[BiometricReading]:
    """Readings dated from ``today - days`` through ``today``."""
    cutoff = today - timedelta(days=days)
    return [r for r in readings if cutoff <= r.date <= today]


def readings_through(readings: Sequence[BiometricReading],
                     today: date) -> List[BiometricReading]:
    return [r for r in readings if r.date <= today]


def rolling_average(readings: Sequence[BiometricReading],
                    window_days: int) -> List[Dict[str, object]]:
    """Trailing mean over the last ``window_days`` readings, per reading."""
    if not readings:
        return []
    ordered = sorted(readings, key=lambda r: r.date)
    values = pd.Series([r.hrv_ms for r in ordered], dtype=np.float64)
    rolled = values.rolling(window=max(window_days, 1), min_periods=1).mean().round(1)
    return [
        {"date": r.date, "value": float(v)}
        for r, v in zip(ordered, rolled)
    ]


def classify_trend(recent_avg: Optional[float], baseline_avg: Optional[float]) -> Optional[str]:
    if recent_avg is None or not baseline_avg:
        return None
    change = (recent_avg - baseline_avg) / baseline_avg * 100
    if change >= TREND_THRESHOLD_PCT:
        return "improving"
    if change <= -TREND_THRESHOLD_PCT:
        return "declining"
    return "stable"


def compute_statistics(readings: Sequence[BiometricReading], today: date) -> HrvStatistics:
    """Current value, 7/30-day averages, range and 7-vs-14-day trend."""
    readings = readings_through(readings, today)
    if not readings:
        return HrvStatistics()

    latest = max(readings, key=lambda r: r.date)
    all_values = [r.hrv_ms for r in readings]
    last_7 = [r.hrv_ms for r in readings_in_window(readings, 7, today)]
    last_14 = [r.hrv_ms for r in readings_in_window(readings, 14, today)]
    last_30 = [r.hrv_ms for r in readings_in_window(readings, 30, today)]

    avg_7 = average(last_7)
    avg_30 = average(last_30)
    trend = classify_trend(avg_7, average(last_14)) if last_14 else None

    return HrvStatistics(
        current=latest.hrv_ms,
        average_7_day=round(avg_7) if avg_7 is not None else None,
        average_30_day=round(avg_30) if avg_30 is not None else None,
        min=min(all_values),
        max=max(all_values),
        trend=trend,
    )


def calculate_change(current: float, previous: float) -> Dict[str, object]:
    """Absolute percent change with a direction label."""
    if previous == 0:
        return {"value": 0, "direction": "same"}
    change = (current - previous) / previous * 100
    direction = "up" if change > 0 else "down" if change < 0 else "same"
    return {"value": abs(round(change)), "direction": direction}


# ─── Population benchmarks ─────────────────────────────────


def age_bracket(age: int) -> str:
    for upper, label in AGE_BRACKETS:
        if age < upper:
            return label
    return OLDEST_BRACKET


def benchmark_for(age: int, gender: str) -> Tuple[float, float, float]:
    """(p25, p50, p75) RMSSD for the user's age bracket and gender."""
    table = HRV_BENCHMARKS.get(gender, HRV_BENCHMARKS["other"])
    return table[age_bracket(age)]


def benchmark_percentile(hrv: float, age: int, gender: str) -> PercentileResult:
    """Population percentile by piecewise-linear interpolation of p25/p50/p75."""
    p25, p50, p75 = benchmark_for(age, gender)

    if hrv <= p25:
        percentile = max(1.0, 25 * (hrv / p25))
    elif hrv <= p50:
        percentile = 25 + 25 * ((hrv - p25) / (p50 - p25))
    elif hrv <= p75:
        percentile = 50 + 25 * ((hrv - p50) / (p75 - p50))
    else:
        percentile = min(99.0, 75 + 25 * ((hrv - p75) / p75))

    comparison = "above" if hrv > p50 else "below" if hrv < p50 else "at"
    return PercentileResult(
        percentile=round(percentile),
        bracket=age_bracket(age),
        benchmark_p50=p50,
        comparison=comparison,
    )


def percentile_description(percentile: float) -> str:
    if percentile >= 90:
        return "Excellent"
    if percentile >= 75:
        return "Above Average"
    if percentile >= 50:
        return "Average"
    if percentile >= 25:
        return "Below Average"
    return "Low"
