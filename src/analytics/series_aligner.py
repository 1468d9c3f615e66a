"""Join habit entries and biometric readings on calendar date."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

import numpy as np
import pandas as pd

from habit_schema import BiometricReading, HabitEntry


@dataclass
class AlignedSeries:
    """Same-length habit / HRV vectors; ``dates`` are the habit dates."""

    dates: List[date] = field(default_factory=list)
    habit_values: np.ndarray = field(default_factory=lambda: np.empty(0))
    hrv_values: np.ndarray = field(default_factory=lambda: np.empty(0))

    def __len__(self) -> int:
        return int(self.habit_values.size)


def hrv_by_date(readings: Sequence[BiometricReading]) -> pd.Series:
    """HRV indexed by reading date; a later reading for a date wins."""
    series = pd.Series(
        [r.hrv_ms for r in readings],
        index=pd.Index([r.date for r in readings], dtype=object),
        dtype=np.float64,
    )
    return series[~series.index.duplicated(keep="last")]


def align_series(
    habits: Sequence[HabitEntry],
    readings: Sequence[BiometricReading],
    extractor: Callable[[HabitEntry], Optional[float]],
    use_lag: bool = False,
) -> AlignedSeries:
    """Pair each habit value with the HRV reading of the same day.

    With ``use_lag`` the habit of day N is paired with the reading of day
    N+1 (yesterday's behaviour, today's HRV).  Entries whose extractor
    yields None and dates without a reading are dropped: no interpolation,
    no forward fill.  Habit order is preserved.
    """
    offset = timedelta(days=1 if use_lag else 0)

    rows = []
    for entry in habits:
        value = extractor(entry)
        if value is None:
            continue
        rows.append((entry.date, entry.date + offset, float(value)))

    if not rows or not readings:
        return AlignedSeries()

    frame = pd.DataFrame(rows, columns=["habit_date", "hrv_date", "habit_value"])
    frame["hrv_value"] = frame["hrv_date"].map(hrv_by_date(readings))
    frame = frame.dropna(subset=["hrv_value"])

    return AlignedSeries(
        dates=list(frame["habit_date"]),
        habit_values=frame["habit_value"].to_numpy(dtype=np.float64),
        hrv_values=frame["hrv_value"].to_numpy(dtype=np.float64),
    )
