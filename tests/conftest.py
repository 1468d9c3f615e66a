"""
Shared test configuration.

Adds both the project root and src/ to sys.path so that flat modules
(correlation_engine, habit_schema, etc.) and the namespace packages
(analytics, pipeline) work with plain `import module_name`.

Also provides small factories for readings and habit entries.
"""

import os
import sys
from datetime import date, timedelta

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

if _src_dir not in sys.path:
    sys.path.insert(1, _src_dir)

from habit_schema import (  # noqa: E402
    AlcoholLog,
    BiometricReading,
    ExerciseLog,
    HabitEntry,
    MeditationLog,
    SleepLog,
)

START = date(2024, 3, 1)


def _reading(day, hrv, recovery=70.0, resting_hr=55.0):
    return BiometricReading(
        date=day,
        hrv_ms=hrv,
        resting_hr=resting_hr,
        recovery_score=recovery,
    )


def _habit(day, sleep_hours=7.0, sleep_quality=3, exercise_mins=None,
           alcohol_units=None, meditation_mins=None, stress=3, cold=False):
    return HabitEntry(
        date=day,
        sleep=SleepLog(hours=sleep_hours, quality=sleep_quality),
        exercise=ExerciseLog(type="run", duration_mins=exercise_mins) if exercise_mins else None,
        alcohol=AlcoholLog(consumed=alcohol_units is not None, units=alcohol_units),
        meditation=MeditationLog(practiced=meditation_mins is not None,
                                 duration_mins=meditation_mins),
        stress_level=stress,
        cold_exposure=cold,
    )


@pytest.fixture
def start_date():
    return START


@pytest.fixture
def make_reading():
    return _reading


@pytest.fixture
def make_habit():
    return _habit


@pytest.fixture
def day():
    """Day offset -> date, counting from a fixed start date."""
    return lambda i: START + timedelta(days=i)
