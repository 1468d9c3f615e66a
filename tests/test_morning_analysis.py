"""
Tests for the six-stage morning analysis engine.

Each stage is exercised on its own, then the orchestrator end to end on the
camelCase wire format.
"""
import sys
import os
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from habit_schema import (
    Correlation,
    FocusArea,
    HealthProfile,
    HistoricalContext,
    MorningAnalysisRequest,
    SignificanceLevel,
    TodayBiometrics,
    UserProfile,
    YesterdayPlanReview,
)
from pipeline.morning_analysis import (
    assess_goal_progress,
    assess_status,
    build_plan_items,
    completion_rate,
    correlation_insights,
    decide_focus_area,
    estimate_end_of_day_hrv,
    generate_morning_analysis,
    hrv_percentile,
    learn_from_previous_day,
    recovery_state,
)


def _bio(hrv, recovery, sleep):
    return TodayBiometrics(hrv=hrv, recovery_score=recovery, sleep_hours=sleep)


def _hist(avg7, trend=None, correlations=()):
    return HistoricalContext(avg_7_day=avg7, trend=trend, correlations=list(correlations))


def _review(done, total, rating):
    return YesterdayPlanReview(
        completed_actions=[f"a{i}" for i in range(done)],
        total_actions=total,
        overall_rating=rating,
    )


def _corr(label, coefficient, pct):
    return Correlation(
        habit_key=label.lower().replace(" ", "_"),
        habit_label=label,
        coefficient=coefficient,
        avg_value_with_habit=55.0,
        avg_value_without_habit=50.0,
        percentage_diff=pct,
        sample_size=20,
        significance=SignificanceLevel.MEDIUM,
    )


def _request(hrv, avg7, recovery, sleep, **extra):
    payload = {
        "date": "2024-03-14",
        "todayBiometrics": {"hrv": hrv, "recoveryScore": recovery, "sleepHours": sleep},
        "historical": {"avg7Day": avg7, "correlations": []},
        "userProfile": {"age": 35, "gender": "male"},
    }
    payload.update(extra)
    return MorningAnalysisRequest.model_validate(payload)


# ─── Stage 1: status ─────────────────────────────────────────


class TestHrvPercentile:

    def test_young_male_below_baseline(self):
        # baseline = 60 + (40 - 30) * 0.5 = 65
        assert hrv_percentile(40, 30, "male") == 31

    def test_at_baseline_is_fifty(self):
        assert hrv_percentile(50, 60, "male") == 50
        assert hrv_percentile(65, 40, "female") == 50

    def test_older_user_gets_lower_baseline(self):
        # baseline = 60 - (70 - 40) * 0.5 = 45
        assert hrv_percentile(45, 70, "male") == 50
        assert hrv_percentile(45, 70, "male") > hrv_percentile(45, 40, "male")

    def test_other_uses_female_baseline(self):
        assert hrv_percentile(60, 40, "other") == hrv_percentile(60, 40, "female")

    def test_clamped(self):
        assert hrv_percentile(0, 40, "male") == 1
        assert hrv_percentile(500, 40, "male") == 99


class TestRecoveryState:

    @pytest.mark.parametrize("score,label", [
        (100, "Well Recovered"),
        (67, "Well Recovered"),
        (66, "Moderately Recovered"),
        (34, "Moderately Recovered"),
        (33, "Needs Recovery"),
        (0, "Needs Recovery"),
    ])
    def test_bands(self, score, label):
        assert recovery_state(score) == label


class TestAssessStatus:

    def test_below_average_and_short_sleep(self):
        status = assess_status(_bio(40, 20, 5), _hist(50), UserProfile(age=35, gender="male"))
        assert status.vs_seven_day == -10
        assert status.state == "Needs Recovery"
        assert status.insights == [
            "Your HRV is 10ms below your 7-day average - your body needs extra care today",
            "Sleep debt detected - prioritize early bedtime tonight",
        ]

    def test_above_average_long_sleep_improving(self):
        status = assess_status(_bio(60, 80, 8), _hist(50, trend="improving"),
                               UserProfile(age=35))
        assert status.insights == [
            "Your HRV is 10ms above your 7-day average - excellent recovery!",
            "Excellent sleep duration - your body had time to recover",
            "Your HRV trend is improving over the last 30 days",
        ]

    def test_small_deviation_no_hrv_insight(self):
        status = assess_status(_bio(53, 50, 7), _hist(50, trend="declining"),
                               UserProfile(age=35))
        assert status.insights == ["Your HRV has been declining - time to focus on recovery"]


# ─── Stage 2: previous day ───────────────────────────────────


class TestPreviousDay:

    def test_none(self):
        assert learn_from_previous_day(None) == []

    def test_completion_rate_zero_total(self):
        assert completion_rate(_review(0, 0, 3)) == 0.0

    def test_great_day(self):
        assert learn_from_previous_day(_review(3, 4, 4)) == [
            "Great job! You completed 75% of yesterday's plan",
            "Yesterday felt good - we'll maintain similar recommendations",
        ]

    def test_middling_day(self):
        assert learn_from_previous_day(_review(2, 4, 3)) == [
            "You completed 50% of yesterday's plan - let's aim higher today",
        ]

    def test_hard_day(self):
        assert learn_from_previous_day(_review(1, 4, 2)) == [
            "Yesterday was challenging - only 25% completed. "
            "Today's plan is adjusted to be more manageable",
            "Yesterday was tough - today's plan focuses on recovery and stress management",
        ]

    def test_nothing_completed_neutral_rating(self):
        assert learn_from_previous_day(_review(0, 4, 3)) == []


# ─── Stage 3: correlations ───────────────────────────────────


class TestCorrelationInsights:

    def test_empty(self):
        assert correlation_insights([]) == []

    def test_top_two_each_direction(self):
        correlations = [
            _corr("Exercise", 0.4, 8.2),
            _corr("Meditation", 0.7, 15.4),
            _corr("Cold Exposure", 0.5, 6.1),
            _corr("Alcohol", -0.6, -12.3),
            _corr("Stress Level", -0.35, -7.8),
            _corr("Alcohol Units", -0.31, -4.2),
            _corr("Sleep Quality", 0.2, 3.0),
        ]
        assert correlation_insights(correlations) == [
            "Meditation shows a +15% impact on your HRV",
            "Cold Exposure shows a +6% impact on your HRV",
            "Alcohol shows a -12% negative impact on your HRV",
            "Stress Level shows a -8% negative impact on your HRV",
        ]

    def test_threshold_is_strict(self):
        assert correlation_insights([_corr("Exercise", 0.3, 5.0)]) == []


# ─── Stage 4: goal ───────────────────────────────────────────


class TestGoalProgress:

    def test_no_target(self):
        assert assess_goal_progress(_bio(50, 50, 7), HealthProfile()) is None

    def test_close_to_target(self):
        goal = assess_goal_progress(_bio(55, 50, 7), HealthProfile(target_hrv=60))
        assert goal.on_track is True
        assert goal.days_to_target == 35

    def test_far_from_target(self):
        goal = assess_goal_progress(_bio(40, 50, 7), HealthProfile(target_hrv=60))
        assert goal.on_track is False
        assert goal.days_to_target == 140

    def test_target_reached(self):
        goal = assess_goal_progress(_bio(65, 50, 7), HealthProfile(target_hrv=60))
        assert goal.on_track is True
        assert goal.days_to_target == 0


# ─── Stage 5: focus ──────────────────────────────────────────


class TestFocusArea:

    def test_recovery_first_match(self):
        assert decide_focus_area(_bio(40, 20, 5), _hist(50)).area == FocusArea.RECOVERY

    def test_recovery_on_short_sleep_alone(self):
        assert decide_focus_area(_bio(60, 80, 5.5), _hist(50)).area == FocusArea.RECOVERY

    def test_recovery_on_low_score_alone(self):
        assert decide_focus_area(_bio(60, 30, 8), _hist(50)).area == FocusArea.RECOVERY

    def test_push(self):
        decision = decide_focus_area(_bio(60, 80, 8), _hist(50))
        assert decision.area == FocusArea.PUSH
        assert decision.reasoning.startswith("You're well-recovered")

    def test_push_needs_score_above_66(self):
        assert decide_focus_area(_bio(60, 66, 8), _hist(50)).area == FocusArea.MAINTENANCE

    def test_maintenance_at_average(self):
        assert decide_focus_area(_bio(50, 50, 7), _hist(50)).area == FocusArea.MAINTENANCE

    @pytest.mark.parametrize("hrv", [30, 50, 70])
    @pytest.mark.parametrize("recovery", [10, 33, 50, 67, 95])
    @pytest.mark.parametrize("sleep", [4, 6, 9])
    def test_always_exactly_one_area(self, hrv, recovery, sleep):
        decision = decide_focus_area(_bio(hrv, recovery, sleep), _hist(50))
        assert decision.area in set(FocusArea)
        assert decision.reasoning


# ─── Stage 6: plan ───────────────────────────────────────────


class TestPlanItems:

    def test_recovery_template(self):
        items = build_plan_items(FocusArea.RECOVERY, HealthProfile())
        assert [i.category for i in items] == ["Recovery", "Sleep", "Exercise", "Stress Management"]
        assert [i.priority for i in items] == [1, 1, 2, 2]
        assert items[0].action == "Take a 15-minute meditation or breathwork session"
        assert items[1].timing == "Bedtime by 10pm"

    def test_push_template(self):
        items = build_plan_items(FocusArea.PUSH, HealthProfile())
        assert [i.category for i in items] == ["Exercise", "Nutrition", "Hydration"]
        assert items[0].action == "High-intensity workout or challenging training session"

    def test_maintenance_template(self):
        items = build_plan_items(FocusArea.MAINTENANCE, HealthProfile())
        assert [i.category for i in items] == ["Exercise", "Nutrition", "Sleep"]

    def test_primary_goal_appended(self):
        items = build_plan_items(FocusArea.PUSH, HealthProfile(primary_goal="Run a marathon"))
        goal = items[-1]
        assert goal.priority == 3
        assert goal.category == "Goal Progress"
        assert goal.action == "Work toward: Run a marathon"

    def test_priorities_in_range(self):
        for area in FocusArea:
            for item in build_plan_items(area, HealthProfile(primary_goal="x")):
                assert 1 <= item.priority <= 3


class TestEndOfDay:

    def test_deltas(self):
        assert estimate_end_of_day_hrv(40, FocusArea.RECOVERY) == 45
        assert estimate_end_of_day_hrv(60, FocusArea.PUSH) == 57
        assert estimate_end_of_day_hrv(50, FocusArea.MAINTENANCE) == 51


# ─── Orchestrator ────────────────────────────────────────────


class TestGenerateMorningAnalysis:

    def test_depleted_morning(self):
        analysis = generate_morning_analysis(_request(40, 50, 20, 5))
        assert analysis.focus_area == FocusArea.RECOVERY
        assert analysis.estimated_end_of_day_hrv == 45
        assert analysis.status.recovery_state == "Needs Recovery"
        assert analysis.goal_progress is None

    def test_fresh_morning(self):
        analysis = generate_morning_analysis(_request(60, 50, 80, 8))
        assert analysis.focus_area == FocusArea.PUSH
        assert analysis.estimated_end_of_day_hrv == 57
        assert analysis.status.vs_seven_day_avg == 10

    def test_wire_output(self):
        analysis = generate_morning_analysis(_request(
            55, 50, 70, 7.5,
            healthProfile={"primaryGoal": "Lower stress", "targetHRV": 60},
            yesterdayPlanReview={"completedActions": ["a", "b", "c"], "totalActions": 4,
                                 "overallRating": 5},
        ))
        payload = analysis.to_json_dict()
        assert payload["focusArea"] == "Push"
        assert payload["estimatedEndOfDayHRV"] == 52
        assert set(payload["status"]) == {"hrvPercentile", "vsSevenDayAvg", "recoveryState"}
        assert payload["goalProgress"] == {
            "currentHRV": 55.0, "targetHRV": 60.0, "onTrack": True, "daysToTarget": 35,
        }
        assert payload["previousDayLearnings"][0].startswith("Great job!")
        assert payload["recommendations"][-1]["action"] == "Work toward: Lower stress"

    def test_goal_progress_omitted_without_target(self):
        payload = generate_morning_analysis(_request(50, 50, 50, 7)).to_json_dict()
        assert "goalProgress" not in payload

    def test_correlation_insights_follow_status_insights(self):
        request = _request(60, 50, 80, 8, historical={
            "avg7Day": 50,
            "correlations": [_corr("Meditation", 0.7, 15.4).to_json_dict()],
        })
        analysis = generate_morning_analysis(request)
        assert analysis.insights[-1] == "Meditation shows a +15% impact on your HRV"

    def test_pure(self):
        request = _request(45, 50, 40, 6.5)
        assert generate_morning_analysis(request) == generate_morning_analysis(request)

    def test_request_date_parsed(self):
        assert _request(50, 50, 50, 7).date == date(2024, 3, 14)
