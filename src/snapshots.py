"""
Date-keyed snapshot helpers.

Readings and habit entries are keyed by calendar date.  These helpers apply
the write semantics of the repositories to in-memory lists so the analysis
core always receives one record per date.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from habit_schema import BiometricReading, HabitEntry


def merge_readings(existing: Iterable[BiometricReading],
                   incoming: Iterable[BiometricReading]) -> Tuple[List[BiometricReading], int]:
    """Upsert readings by date (last write wins).

    Returns the merged list sorted by date and the number of dates that
    were not present before.
    """
    by_date: Dict[date, BiometricReading] = {r.date: r for r in existing}
    added = 0
    for reading in incoming:
        if reading.date not in by_date:
            added += 1
        by_date[reading.date] = reading
    return [by_date[d] for d in sorted(by_date)], added


def merge_habit_entries(existing: Iterable[HabitEntry],
                        incoming: Iterable[HabitEntry]) -> List[HabitEntry]:
    """Upsert habit entries by date.

    A re-logged date keeps the earlier entry's fields and overwrites those
    explicitly set on the newer entry.
    """
    by_date: Dict[date, HabitEntry] = {}
    for entry in existing:
        by_date[entry.date] = entry
    for entry in incoming:
        previous = by_date.get(entry.date)
        if previous is None:
            by_date[entry.date] = entry
            continue
        merged = previous.model_dump()
        merged.update(entry.model_dump(exclude_unset=True))
        by_date[entry.date] = HabitEntry.model_validate(merged)
    return [by_date[d] for d in sorted(by_date)]


def reading_for(readings: Sequence[BiometricReading], day: date) -> Optional[BiometricReading]:
    found = None
    for r in readings:
        if r.date == day:
            found = r
    return found


def habit_entry_for(habits: Sequence[HabitEntry], day: date) -> Optional[HabitEntry]:
    found = None
    for e in habits:
        if e.date == day:
            found = e
    return found
