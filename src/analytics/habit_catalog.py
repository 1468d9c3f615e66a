"""Static catalog of correlatable habits.

Each definition pairs a stable key with an extractor that turns a
HabitEntry into a number, or ``None`` when the entry carries no value for
that habit (e.g. alcohol units on a day without alcohol).  ``None`` means
"skip this day", never zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from habit_schema import HabitEntry, ValueKind

Extractor = Callable[[HabitEntry], Optional[float]]


@dataclass(frozen=True)
class HabitDefinition:
    key: str
    label: str
    value_kind: ValueKind
    extractor: Extractor

    @property
    def is_binary(self) -> bool:
        return self.value_kind == ValueKind.BINARY


def _flag(value: bool) -> float:
    return 1.0 if value else 0.0


def _sleep_hours(e: HabitEntry) -> Optional[float]:
    return e.sleep.hours


def _sleep_quality(e: HabitEntry) -> Optional[float]:
    return float(e.sleep.quality)


def _exercise(e: HabitEntry) -> Optional[float]:
    return _flag(e.exercise is not None)


def _exercise_duration(e: HabitEntry) -> Optional[float]:
    if e.exercise is None:
        return None
    return e.exercise.duration_mins


def _alcohol(e: HabitEntry) -> Optional[float]:
    return _flag(e.alcohol.consumed)


def _alcohol_units(e: HabitEntry) -> Optional[float]:
    if not e.alcohol.consumed:
        return None
    return e.alcohol.units if e.alcohol.units is not None else 0.0


def _meditation(e: HabitEntry) -> Optional[float]:
    return _flag(e.meditation.practiced)


def _meditation_duration(e: HabitEntry) -> Optional[float]:
    if not e.meditation.practiced:
        return None
    return e.meditation.duration_mins if e.meditation.duration_mins is not None else 0.0


def _stress(e: HabitEntry) -> Optional[float]:
    return float(e.stress_level)


def _cold_exposure(e: HabitEntry) -> Optional[float]:
    return _flag(e.cold_exposure)


HABIT_CATALOG: List[HabitDefinition] = [
    HabitDefinition("sleep_hours", "Sleep Duration", ValueKind.NUMERIC, _sleep_hours),
    HabitDefinition("sleep_quality", "Sleep Quality", ValueKind.NUMERIC, _sleep_quality),
    HabitDefinition("exercise", "Exercise", ValueKind.BINARY, _exercise),
    HabitDefinition("exercise_duration", "Exercise Duration", ValueKind.NUMERIC, _exercise_duration),
    HabitDefinition("alcohol", "Alcohol", ValueKind.BINARY, _alcohol),
    HabitDefinition("alcohol_units", "Alcohol Units", ValueKind.NUMERIC, _alcohol_units),
    HabitDefinition("meditation", "Meditation", ValueKind.BINARY, _meditation),
    HabitDefinition("meditation_duration", "Meditation Duration", ValueKind.NUMERIC, _meditation_duration),
    HabitDefinition("stress", "Stress Level", ValueKind.NUMERIC, _stress),
    HabitDefinition("cold_exposure", "Cold Exposure", ValueKind.BINARY, _cold_exposure),
]


def get_definition(key: str) -> Optional[HabitDefinition]:
    for definition in HABIT_CATALOG:
        if definition.key == key:
            return definition
    return None
