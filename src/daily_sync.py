"""
Habit HRV Daily Sync
====================
Standalone orchestrator.  Run once a morning to:
  1. Load a normalized JSON snapshot (readings, habits, profiles)
  2. Compute HRV statistics and habit correlations
  3. Rank habits and synthesize recommendations
  4. Run the morning analysis for the chosen date
  5. Print the plan JSON (or the three-bullet summary)

Usage:
    python daily_sync.py --snapshot data.json
    python daily_sync.py --snapshot data.json --date 2024-03-14 --lag
    python daily_sync.py --snapshot data.json --summary
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError

from app_config import HRV_USE_LAG, LOG_LEVEL, MAX_RECOMMENDATIONS
from habit_schema import (
    BiometricReading,
    CamelModel,
    HabitEntry,
    HealthProfile,
    MorningContext,
    UserProfile,
    YesterdayPlanReview,
)
from pipeline.daily_pipeline import DailyPlanPipeline
from snapshots import merge_habit_entries, merge_readings

log = logging.getLogger("daily_sync")


class Snapshot(CamelModel):
    readings: List[BiometricReading] = Field(default_factory=list)
    habits: List[HabitEntry] = Field(default_factory=list)
    user_profile: UserProfile
    health_profile: HealthProfile = Field(default_factory=HealthProfile)
    morning_context: Optional[MorningContext] = None
    yesterday_plan_review: Optional[YesterdayPlanReview] = None


def load_snapshot(path: Path) -> Snapshot:
    """Parse a snapshot file and collapse duplicate dates."""
    with open(path, "r", encoding="utf-8") as fh:
        raw = json.load(fh)
    snapshot = Snapshot.model_validate(raw)
    readings, _ = merge_readings([], snapshot.readings)
    habits = merge_habit_entries([], snapshot.habits)
    log.info("Loaded %s: %d readings, %d habit days", path, len(readings), len(habits))
    return snapshot.model_copy(update={"readings": readings, "habits": habits})


def run_daily_sync(snapshot: Snapshot, today: date, use_lag: bool = False) -> Dict[str, Any]:
    pipeline = DailyPlanPipeline(
        readings=snapshot.readings,
        habits=snapshot.habits,
        user_profile=snapshot.user_profile,
        health_profile=snapshot.health_profile,
        use_lag=use_lag,
        max_recommendations=MAX_RECOMMENDATIONS,
    )
    return pipeline.run(
        today=today,
        morning_context=snapshot.morning_context,
        yesterday_review=snapshot.yesterday_plan_review,
    )


# ═══════════════════════════════════════════════════════════════
#  CLI
# ═══════════════════════════════════════════════════════════════

def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(description="Habit HRV Daily Sync")
    parser.add_argument("--snapshot", type=Path, required=True,
                        help="Path to a JSON snapshot of readings, habits and profiles")
    parser.add_argument("--date", type=date.fromisoformat, default=None,
                        help="Plan date YYYY-MM-DD (default: today)")
    parser.add_argument("--lag", action=argparse.BooleanOptionalAction, default=HRV_USE_LAG,
                        help="Pair habit day N with the reading of day N+1 (--no-lag for same day)")
    parser.add_argument("--summary", action="store_true",
                        help="Print the three-bullet summary instead of JSON")
    args = parser.parse_args(argv)

    try:
        snapshot = load_snapshot(args.snapshot)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        log.error("Could not load snapshot %s: %s", args.snapshot, e)
        sys.exit(1)

    result = run_daily_sync(snapshot, args.date or date.today(), use_lag=args.lag)

    if args.summary:
        print(result["summary"])
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))

    sys.exit(0 if result["analysisStatus"] != "failed" else 1)


if __name__ == "__main__":
    main()
