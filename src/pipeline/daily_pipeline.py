"""Daily plan orchestration with explicit health signaling."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from constants import DEFAULT_MAX_RECOMMENDATIONS, NEUTRAL_RECOVERY_SCORE, NEUTRAL_SLEEP_HOURS
from correlation_engine import analyze_all_habits, rank_by_impact
from habit_schema import (
    BiometricReading,
    DailyAnalysis,
    HabitAnalysis,
    HabitEntry,
    HealthProfile,
    HistoricalContext,
    HrvStatistics,
    MorningAnalysisRequest,
    MorningContext,
    Recommendation,
    TodayBiometrics,
    UserProfile,
    YesterdayPlanReview,
)
from hrv_statistics import compute_statistics
from pipeline.morning_analysis import generate_morning_analysis
from pipeline.summary_builder import build_concise_summary
from recommendation_engine import generate_recommendations, get_todays_focus
from snapshots import habit_entry_for, reading_for

log = logging.getLogger("daily_pipeline")


class DailyPlanPipeline:
    """Statistics -> correlations -> recommendations -> morning analysis."""

    def __init__(self, readings: Sequence[BiometricReading], habits: Sequence[HabitEntry],
                 user_profile: UserProfile, health_profile: Optional[HealthProfile] = None,
                 use_lag: bool = False,
                 max_recommendations: int = DEFAULT_MAX_RECOMMENDATIONS):
        self.readings = list(readings)
        self.habits = list(habits)
        self.user_profile = user_profile
        self.health_profile = health_profile or HealthProfile()
        self.use_lag = use_lag
        self.max_recommendations = max_recommendations

    def run(self, today: date,
            morning_context: Optional[MorningContext] = None,
            yesterday_review: Optional[YesterdayPlanReview] = None,
            sleep_hours: Optional[float] = None) -> Dict[str, Any]:
        """Execute the full daily pipeline and return a JSON-ready result."""
        status: Dict[str, Any] = {
            "analysis_status": "unknown",
            "degraded_reasons": [],
            "has_reading": False,
        }

        log.info("=" * 60)
        log.info("  DAILY PLAN STARTED")
        log.info("  Date: %s", today)
        log.info("=" * 60)

        statistics = HrvStatistics()
        habit_analysis = HabitAnalysis()
        recommendations: List[Recommendation] = []
        todays_focus: Optional[Recommendation] = None
        analysis: Optional[DailyAnalysis] = None

        try:
            log.info("Step 1/5: Computing HRV statistics...")
            statistics = compute_statistics(self.readings, today)

            log.info("Step 2/5: Correlating habits with HRV...")
            habit_analysis = analyze_all_habits(self.habits, self.readings, self.use_lag)
            ranked = rank_by_impact(habit_analysis.correlations)
            habit_analysis = habit_analysis.model_copy(update={"correlations": ranked})
            if not habit_analysis.sufficient_data:
                status["degraded_reasons"].append("insufficient_habit_history")

            log.info("Step 3/5: Generating recommendations...")
            today_entry = habit_entry_for(self.habits, today)
            recommendations = generate_recommendations(ranked, self.habits,
                                                       self.max_recommendations)
            todays_focus = get_todays_focus(recommendations, today_entry)

            reading = reading_for(self.readings, today)
            if reading is None:
                log.error("No biometric reading for %s; skipping morning analysis", today)
                status["degraded_reasons"].append("no_reading_for_today")
            else:
                status["has_reading"] = True
                log.info("Step 4/5: Running morning analysis...")
                biometrics = self._today_biometrics(reading, today_entry, sleep_hours,
                                                    status["degraded_reasons"])
                request = MorningAnalysisRequest(
                    date=today,
                    today_biometrics=biometrics,
                    morning_context=morning_context,
                    yesterday_plan_review=yesterday_review,
                    habit_data=today_entry,
                    historical=self._historical_context(statistics, reading, ranked),
                    user_profile=self.user_profile,
                    health_profile=self.health_profile,
                )
                analysis = generate_morning_analysis(request)

        except Exception as e:
            status["analysis_status"] = "failed"
            status["degraded_reasons"].append("pipeline_exception")
            log.exception("Pipeline failed: %s", e)

        log.info("Step 5/5: Building summary...")
        summary = build_concise_summary(analysis)

        status["analysis_status"] = self.overall_status(status)
        if status["analysis_status"] == "degraded":
            log.warning(
                "Daily plan degraded: %s",
                ", ".join(status["degraded_reasons"]) or "no details",
            )
        self._print_summary(habit_analysis, analysis, status)

        return {
            "date": today.isoformat(),
            "analysisStatus": status["analysis_status"],
            "degradedReasons": list(status["degraded_reasons"]),
            "statistics": statistics.to_json_dict(),
            "habitAnalysis": habit_analysis.to_json_dict(),
            "recommendations": [r.to_json_dict() for r in recommendations],
            "todaysFocus": todays_focus.to_json_dict() if todays_focus else None,
            "analysis": analysis.to_json_dict() if analysis else None,
            "summary": summary,
        }

    @staticmethod
    def _today_biometrics(reading: BiometricReading, entry: Optional[HabitEntry],
                          sleep_hours: Optional[float],
                          reasons: List[str]) -> TodayBiometrics:
        recovery = reading.recovery_score
        if recovery is None:
            recovery = NEUTRAL_RECOVERY_SCORE
            reasons.append("missing_recovery_score")

        quality = None
        if sleep_hours is None and entry is not None:
            sleep_hours = entry.sleep.hours
            quality = entry.sleep.quality
        if sleep_hours is None:
            sleep_hours = NEUTRAL_SLEEP_HOURS
            reasons.append("missing_sleep_log")

        return TodayBiometrics(
            hrv=reading.hrv_ms,
            recovery_score=recovery,
            sleep_hours=sleep_hours,
            sleep_quality=quality,
            resting_hr=reading.resting_hr,
        )

    @staticmethod
    def _historical_context(statistics: HrvStatistics, reading: BiometricReading,
                            ranked) -> HistoricalContext:
        avg_7 = statistics.average_7_day
        return HistoricalContext(
            avg_7_day=avg_7 if avg_7 is not None else reading.hrv_ms,
            avg_30_day=statistics.average_30_day,
            trend=statistics.trend,
            correlations=ranked,
        )

    @staticmethod
    def overall_status(status: Dict[str, Any]) -> str:
        if not status.get("has_reading", False):
            return "failed"
        if status.get("analysis_status") == "failed":
            return "failed"
        if status.get("degraded_reasons"):
            return "degraded"
        return "success"

    @staticmethod
    def _print_summary(habit_analysis: HabitAnalysis, analysis: Optional[DailyAnalysis],
                       status: Dict[str, Any]) -> None:
        log.info("PLAN SUMMARY:")
        log.info("  Habit days:    %d", habit_analysis.total_days)
        log.info("  Correlations:  %d", len(habit_analysis.correlations))
        if analysis is not None:
            log.info("  Focus area:    %s", analysis.focus_area.value)
            log.info("  Plan items:    %d", len(analysis.recommendations))
        reasons = status.get("degraded_reasons") or []
        if reasons:
            log.info("  Degraded reasons: %s", ", ".join(reasons))
        log.info("  Overall status: %s", status.get("analysis_status"))
