"""
Morning analysis engine.

Six pure stages, each with a declared input and output, composed by
``generate_morning_analysis``:

  1. assess_status            biometrics + history + profile -> StatusAssessment
  2. learn_from_previous_day  yesterday's plan review        -> [str]
  3. correlation_insights     ranked correlations            -> [str]
  4. assess_goal_progress     biometrics + health profile    -> GoalProgress | None
  5. decide_focus_area        biometrics + history           -> FocusDecision
  6. build_plan_items         focus + health profile         -> [PlanItem]

No stage reads the clock, storage or the network; the request carries
everything, including the date.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from constants import (
    END_OF_DAY_HRV_DELTA,
    GOAL_MS_PER_WEEK,
    GOAL_ON_TRACK_RATIO,
    HRV_DEVIATION_MS,
    RECOVERY_STATE_BANDS,
    STRONG_CORRELATION,
)
from habit_schema import (
    Correlation,
    DailyAnalysis,
    FocusArea,
    GoalProgress,
    HealthProfile,
    HistoricalContext,
    HrvStatus,
    MorningAnalysisRequest,
    PlanItem,
    TodayBiometrics,
    UserProfile,
    YesterdayPlanReview,
)

log = logging.getLogger("morning_analysis")


# Percentile heuristic: RMSSD baseline at age 40, shifted 0.5 ms per year.
PERCENTILE_BASELINE_MS = {"male": 60.0, "female": 65.0}
PERCENTILE_DEFAULT_BASELINE_MS = 65.0
PERCENTILE_REFERENCE_AGE = 40
PERCENTILE_MS_PER_YEAR = 0.5


@dataclass(frozen=True)
class StatusAssessment:
    percentile: int
    vs_seven_day: float
    state: str
    insights: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FocusDecision:
    area: FocusArea
    reasoning: str


FOCUS_REASONING: Dict[FocusArea, str] = {
    FocusArea.RECOVERY: (
        "Your body needs extra recovery today. Focus on stress management, "
        "sleep, and gentle movement."
    ),
    FocusArea.PUSH: (
        "You're well-recovered and ready to challenge yourself. Great day for "
        "higher intensity activities."
    ),
    FocusArea.MAINTENANCE: (
        "You're in a good baseline state. Maintain your routines and avoid "
        "major stressors."
    ),
}

# (priority, category, action, timing, expected impact, mechanism)
PlanTemplate = Tuple[int, str, str, str, str, str]

PLAN_TEMPLATES: Dict[FocusArea, Tuple[PlanTemplate, ...]] = {
    FocusArea.RECOVERY: (
        (1, "Recovery", "Take a 15-minute meditation or breathwork session",
         "Mid-morning (10-11am)", "+3-5ms HRV tomorrow",
         "Meditation activates parasympathetic nervous system, promoting recovery"),
        (1, "Sleep", "Aim for 8+ hours of sleep tonight",
         "Bedtime by 10pm", "+5-8ms HRV",
         "Sleep debt is impacting your recovery - prioritize rest"),
        (2, "Exercise", "Light walk or gentle yoga (30 minutes max)",
         "Afternoon", "Maintain HRV",
         "Gentle movement aids recovery without additional stress"),
        (2, "Stress Management", "Avoid high-stress meetings or decisions",
         "All day", "+2-3ms HRV",
         "Your nervous system needs a break from intense demands"),
    ),
    FocusArea.PUSH: (
        (1, "Exercise", "High-intensity workout or challenging training session",
         "Morning or early afternoon", "Improved fitness, potential -5ms HRV tomorrow",
         "You're well-recovered - perfect time to stress the system for adaptation"),
        (2, "Nutrition", "Increase protein intake (30g+ per meal)",
         "All meals", "Better recovery",
         "Support muscle recovery and adaptation from training"),
        (2, "Hydration", "Drink 3+ liters of water",
         "Throughout day", "Optimal performance",
         "High activity days require extra hydration"),
    ),
    FocusArea.MAINTENANCE: (
        (1, "Exercise", "Moderate cardio or strength training (45-60 minutes)",
         "Morning or afternoon", "Maintain HRV",
         "Continue building fitness while maintaining recovery balance"),
        (2, "Nutrition", "5+ servings of fruits and vegetables",
         "Throughout day", "+1-2ms HRV",
         "Micronutrients support recovery and reduce inflammation"),
        (2, "Sleep", "Aim for 7-8 hours of quality sleep",
         "Consistent bedtime", "Maintain baseline",
         "Consistent sleep maintains your current HRV levels"),
    ),
}


# ─── Stage 1: status ──────────────────────────────────────


def hrv_percentile(hrv: float, age: int, gender: str) -> int:
    """Age/gender-adjusted percentile, clamped to [1, 99].

    baseline = 60 ms (male) / 65 ms (otherwise) at age 40, +0.5 ms per year
    younger and -0.5 ms per year older; percentile = 50 + (hrv - baseline) /
    baseline · 50. The age adjustment is symmetric, so users older than 40
    are compared against a lower baseline.
    """
    base = PERCENTILE_BASELINE_MS.get(gender, PERCENTILE_DEFAULT_BASELINE_MS)
    baseline = base + (PERCENTILE_REFERENCE_AGE - age) * PERCENTILE_MS_PER_YEAR
    percentile = 50 + (hrv - baseline) / baseline * 50
    return max(1, min(99, round(percentile)))


def recovery_state(recovery_score: float) -> str:
    for floor, label in RECOVERY_STATE_BANDS:
        if recovery_score >= floor:
            return label
    return RECOVERY_STATE_BANDS[-1][1]


def assess_status(biometrics: TodayBiometrics, historical: HistoricalContext,
                  user: UserProfile) -> StatusAssessment:
    vs_seven_day = biometrics.hrv - historical.avg_7_day
    insights: List[str] = []

    if vs_seven_day > HRV_DEVIATION_MS:
        insights.append(
            f"Your HRV is {round(vs_seven_day)}ms above your 7-day average - excellent recovery!"
        )
    elif vs_seven_day < -HRV_DEVIATION_MS:
        insights.append(
            f"Your HRV is {round(abs(vs_seven_day))}ms below your 7-day average - "
            "your body needs extra care today"
        )

    if biometrics.sleep_hours < 7:
        insights.append("Sleep debt detected - prioritize early bedtime tonight")
    elif biometrics.sleep_hours >= 8:
        insights.append("Excellent sleep duration - your body had time to recover")

    if historical.trend == "improving":
        insights.append("Your HRV trend is improving over the last 30 days")
    elif historical.trend == "declining":
        insights.append("Your HRV has been declining - time to focus on recovery")

    return StatusAssessment(
        percentile=hrv_percentile(biometrics.hrv, user.age, user.gender),
        vs_seven_day=vs_seven_day,
        state=recovery_state(biometrics.recovery_score),
        insights=insights,
    )


# ─── Stage 2: previous day ────────────────────────────────


def completion_rate(review: YesterdayPlanReview) -> float:
    """Completed / total actions as a percentage; 0 when nothing was planned."""
    if review.total_actions <= 0:
        return 0.0
    return len(review.completed_actions) / review.total_actions * 100


def learn_from_previous_day(review: Optional[YesterdayPlanReview]) -> List[str]:
    if review is None:
        return []

    learnings: List[str] = []
    rate = completion_rate(review)
    if rate >= 70:
        learnings.append(f"Great job! You completed {round(rate)}% of yesterday's plan")
    elif rate >= 40:
        learnings.append(
            f"You completed {round(rate)}% of yesterday's plan - let's aim higher today"
        )
    elif rate > 0:
        learnings.append(
            f"Yesterday was challenging - only {round(rate)}% completed. "
            "Today's plan is adjusted to be more manageable"
        )

    if review.overall_rating >= 4:
        learnings.append("Yesterday felt good - we'll maintain similar recommendations")
    elif review.overall_rating <= 2:
        learnings.append(
            "Yesterday was tough - today's plan focuses on recovery and stress management"
        )
    return learnings


# ─── Stage 3: correlations ────────────────────────────────


def correlation_insights(correlations: Sequence[Correlation]) -> List[str]:
    """Two strongest helpful and two strongest harmful habits as one-liners."""
    by_strength = sorted(correlations, key=lambda c: abs(c.coefficient), reverse=True)
    positive = [c for c in by_strength if c.coefficient > STRONG_CORRELATION][:2]
    negative = [c for c in by_strength if c.coefficient < -STRONG_CORRELATION][:2]

    insights = [
        f"{c.habit_label} shows a +{round(c.percentage_diff)}% impact on your HRV"
        for c in positive
    ]
    insights.extend(
        f"{c.habit_label} shows a {round(c.percentage_diff)}% negative impact on your HRV"
        for c in negative
    )
    return insights


# ─── Stage 4: goal ────────────────────────────────────────


def assess_goal_progress(biometrics: TodayBiometrics,
                         profile: HealthProfile) -> Optional[GoalProgress]:
    if not profile.target_hrv:
        return None

    current = biometrics.hrv
    target = profile.target_hrv
    gap = target - current
    days_to_target = math.ceil(gap / GOAL_MS_PER_WEEK * 7) if gap > 0 else 0
    return GoalProgress(
        current_hrv=current,
        target_hrv=target,
        on_track=gap <= target * GOAL_ON_TRACK_RATIO,
        days_to_target=days_to_target,
    )


# ─── Stage 5: focus ───────────────────────────────────────


def decide_focus_area(biometrics: TodayBiometrics,
                      historical: HistoricalContext) -> FocusDecision:
    """Recovery, then Push, then Maintenance; first match wins."""
    hrv = biometrics.hrv
    avg = historical.avg_7_day

    if hrv < avg or biometrics.recovery_score < 33 or biometrics.sleep_hours < 6:
        area = FocusArea.RECOVERY
    elif hrv > avg and biometrics.recovery_score > 66:
        area = FocusArea.PUSH
    else:
        area = FocusArea.MAINTENANCE
    return FocusDecision(area=area, reasoning=FOCUS_REASONING[area])


# ─── Stage 6: plan ────────────────────────────────────────


def build_plan_items(focus: FocusArea, profile: HealthProfile) -> List[PlanItem]:
    items = [
        PlanItem(
            priority=priority,
            category=category,
            action=action,
            timing=timing,
            expected_impact=impact,
            reasoning=reasoning,
        )
        for priority, category, action, timing, impact, reasoning in PLAN_TEMPLATES[focus]
    ]
    if profile.primary_goal:
        items.append(PlanItem(
            priority=3,
            category="Goal Progress",
            action=f"Work toward: {profile.primary_goal}",
            timing="Daily",
            expected_impact="Progress toward goal",
            reasoning="Aligned with your primary health objective",
        ))
    return items


def estimate_end_of_day_hrv(hrv: float, focus: FocusArea) -> int:
    """Directional estimate only: +5 Recovery, -3 Push, +1 Maintenance."""
    return round(hrv + END_OF_DAY_HRV_DELTA[focus.value])


# ─── Orchestrator ─────────────────────────────────────────


def generate_morning_analysis(request: MorningAnalysisRequest) -> DailyAnalysis:
    """Run all six stages and assemble the DailyAnalysis."""
    bio = request.today_biometrics
    hist = request.historical

    status = assess_status(bio, hist, request.user_profile)
    learnings = learn_from_previous_day(request.yesterday_plan_review)
    corr_insights = correlation_insights(hist.correlations)
    goal = assess_goal_progress(bio, request.health_profile)
    focus = decide_focus_area(bio, hist)
    plan = build_plan_items(focus.area, request.health_profile)

    log.info("Morning analysis %s: hrv=%.1f avg7=%.1f recovery=%.0f sleep=%.1fh -> %s",
             request.date, bio.hrv, hist.avg_7_day, bio.recovery_score,
             bio.sleep_hours, focus.area.value)

    return DailyAnalysis(
        status=HrvStatus(
            hrv_percentile=status.percentile,
            vs_seven_day_avg=status.vs_seven_day,
            recovery_state=status.state,
        ),
        insights=status.insights + corr_insights,
        previous_day_learnings=learnings,
        focus_area=focus.area,
        reasoning=focus.reasoning,
        recommendations=plan,
        goal_progress=goal,
        estimated_end_of_day_hrv=estimate_end_of_day_hrv(bio.hrv, focus.area),
    )
