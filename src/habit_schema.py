"""
Habit / biometric data model.

Every record is an immutable pydantic model.  Field names are snake_case in
Python and camelCase on the wire (``hrvMs``, ``restingHR``,
``estimatedEndOfDayHRV`` ...); either spelling is accepted on input.  The
camelCase names and the enum literals are the contract with the presentation
layer and must not drift.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> Dict[str, Any]:
        """Wire representation: camelCase keys, ISO dates, optional fields omitted."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# ─── Enums ─────────────────────────────────────────────────


class SignificanceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ValueKind(str, Enum):
    BINARY = "binary"
    NUMERIC = "numeric"


class RecommendationAction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class FocusArea(str, Enum):
    RECOVERY = "Recovery"
    MAINTENANCE = "Maintenance"
    PUSH = "Push"


Gender = Literal["male", "female", "other"]


# ─── Source records ────────────────────────────────────────


class BiometricReading(CamelModel):
    """One night of biometrics; ``date`` is the unique key."""

    date: dt.date
    hrv_ms: float = Field(ge=0)
    resting_hr: float = Field(alias="restingHR", ge=0)
    recovery_score: Optional[float] = Field(default=None, ge=0, le=100)
    source: str = "manual"


class SleepLog(CamelModel):
    hours: float = Field(ge=0, le=24)
    quality: int = Field(ge=1, le=5)


class ExerciseLog(CamelModel):
    type: str
    duration_mins: float = Field(ge=0)
    intensity: str = "moderate"


class AlcoholLog(CamelModel):
    consumed: bool = False
    units: Optional[float] = Field(default=None, ge=0)


class MeditationLog(CamelModel):
    practiced: bool = False
    duration_mins: Optional[float] = Field(default=None, ge=0)


class HabitEntry(CamelModel):
    """A day's self-reported habits; ``date`` is the unique key."""

    date: dt.date
    sleep: SleepLog
    exercise: Optional[ExerciseLog] = None
    alcohol: AlcoholLog = Field(default_factory=AlcoholLog)
    meditation: MeditationLog = Field(default_factory=MeditationLog)
    stress_level: int = Field(ge=1, le=5)
    cold_exposure: bool = False
    notes: Optional[str] = None


# ─── Derived analysis records ─────────────────────────────


class SignificanceResult(CamelModel):
    level: SignificanceLevel
    p_value: float
    exact_p_value: float
    t_statistic: float
    description: str


class Correlation(CamelModel):
    habit_key: str
    habit_label: str
    coefficient: float = Field(ge=-1, le=1)
    avg_value_with_habit: float
    avg_value_without_habit: float
    percentage_diff: float
    sample_size: int
    significance: SignificanceLevel


class HabitAnalysis(CamelModel):
    correlations: List[Correlation] = Field(default_factory=list)
    total_days: int = 0
    sufficient_data: bool = False


class HabitFrequency(CamelModel):
    habit_key: str
    days_with_habit: int
    total_days: int
    frequency: float


class Recommendation(CamelModel):
    habit_key: str
    habit_label: str
    action: RecommendationAction
    impact_score: float
    message: str
    expected_impact: str


# ─── Statistics / goals ───────────────────────────────────


class HrvStatistics(CamelModel):
    current: Optional[float] = None
    average_7_day: Optional[float] = Field(default=None, alias="average7Day")
    average_30_day: Optional[float] = Field(default=None, alias="average30Day")
    min: Optional[float] = None
    max: Optional[float] = None
    trend: Optional[Literal["improving", "declining", "stable"]] = None


class PercentileResult(CamelModel):
    percentile: int
    bracket: str
    benchmark_p50: float
    comparison: Literal["above", "below", "at"]


class GoalTrackerProgress(CamelModel):
    current_hrv: int = Field(alias="currentHRV")
    target_hrv: int = Field(alias="targetHRV")
    progress: int
    days_at_goal: int
    trend: Literal["improving", "declining", "stable"]


# ─── Morning analysis request ─────────────────────────────


class TodayBiometrics(CamelModel):
    hrv: float = Field(ge=0)
    recovery_score: float = Field(ge=0, le=100)
    sleep_hours: float = Field(ge=0, le=24)
    sleep_quality: Optional[float] = None
    resting_hr: Optional[float] = Field(default=None, alias="restingHR")
    yesterday_strain: Optional[float] = None


class HistoricalContext(CamelModel):
    avg_7_day: float = Field(alias="avg7Day")
    avg_30_day: Optional[float] = Field(default=None, alias="avg30Day")
    trend: Optional[str] = None
    correlations: List[Correlation] = Field(default_factory=list)


class UserProfile(CamelModel):
    id: Optional[str] = None
    age: int = Field(ge=0, le=120)
    gender: Gender = "other"


class HealthProfile(CamelModel):
    """Goal profile; free-text fields are quoted verbatim, never parsed."""

    primary_goal: str = ""
    target_hrv: Optional[float] = Field(default=None, alias="targetHRV", gt=0)
    secondary_goals: List[str] = Field(default_factory=list)
    injuries: List[str] = Field(default_factory=list)
    conditions: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)
    stress_triggers: List[str] = Field(default_factory=list)


class MorningContext(CamelModel):
    sleep_rating: int = Field(ge=1, le=5)
    energy_level: int = Field(ge=1, le=5)
    notes: str = ""


class YesterdayPlanReview(CamelModel):
    plan_id: Optional[str] = None
    completed_actions: List[str] = Field(default_factory=list)
    total_actions: int = Field(ge=0)
    overall_rating: int = Field(ge=1, le=5)
    notes: str = ""


class MorningAnalysisRequest(CamelModel):
    date: dt.date
    today_biometrics: TodayBiometrics
    morning_context: Optional[MorningContext] = None
    yesterday_plan_review: Optional[YesterdayPlanReview] = None
    habit_data: Optional[HabitEntry] = None
    historical: HistoricalContext
    user_profile: UserProfile
    health_profile: HealthProfile = Field(default_factory=HealthProfile)


# ─── Morning analysis output ──────────────────────────────


class PlanItem(CamelModel):
    priority: int = Field(ge=1, le=3)
    category: str
    action: str
    timing: str
    expected_impact: str
    reasoning: str


class HrvStatus(CamelModel):
    hrv_percentile: int
    vs_seven_day_avg: float
    recovery_state: str


class GoalProgress(CamelModel):
    current_hrv: float = Field(alias="currentHRV")
    target_hrv: float = Field(alias="targetHRV")
    on_track: bool
    days_to_target: int


class DailyAnalysis(CamelModel):
    status: HrvStatus
    insights: List[str] = Field(default_factory=list)
    previous_day_learnings: List[str] = Field(default_factory=list)
    focus_area: FocusArea
    reasoning: str
    recommendations: List[PlanItem] = Field(default_factory=list)
    goal_progress: Optional[GoalProgress] = None
    estimated_end_of_day_hrv: int = Field(alias="estimatedEndOfDayHRV")
