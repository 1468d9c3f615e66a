"""
FastAPI backend contract for the habit/HRV frontend.

Every handler is a thin wrapper: validate the body with the habit_schema
models, call the analysis core, return camelCase JSON.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app_config import (
    FRONTEND_ORIGINS,
    HRV_USE_LAG,
    MAX_RECOMMENDATIONS,
    MORNING_ANALYSIS_RATE_LIMIT,
    RATE_LIMIT_ENABLED,
)
from correlation_engine import analyze_all_habits, rank_by_impact, top_habits
from habit_schema import (
    BiometricReading,
    CamelModel,
    Correlation,
    HabitEntry,
    HealthProfile,
    MorningAnalysisRequest,
    MorningContext,
    UserProfile,
    YesterdayPlanReview,
)
from pipeline.daily_pipeline import DailyPlanPipeline
from pipeline.morning_analysis import generate_morning_analysis
from recommendation_engine import generate_recommendations, get_todays_focus

log = logging.getLogger("api")

_limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


# ─── App setup ─────────────────────────────────────────────

app = FastAPI(title="Habit HRV API", version="1.0.0")
app.state.limiter = _limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=FRONTEND_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


class AnalyzeRequest(CamelModel):
    habits: List[HabitEntry] = Field(default_factory=list)
    readings: List[BiometricReading] = Field(default_factory=list)
    use_lag: Optional[bool] = None


class RecommendationRequest(CamelModel):
    correlations: List[Correlation] = Field(default_factory=list)
    habits: List[HabitEntry] = Field(default_factory=list)
    max_count: int = Field(default=MAX_RECOMMENDATIONS, ge=0)
    today_habits: Optional[HabitEntry] = None


class DailyPlanRequest(CamelModel):
    today: date
    readings: List[BiometricReading] = Field(default_factory=list)
    habits: List[HabitEntry] = Field(default_factory=list)
    user_profile: UserProfile
    health_profile: HealthProfile = Field(default_factory=HealthProfile)
    morning_context: Optional[MorningContext] = None
    yesterday_plan_review: Optional[YesterdayPlanReview] = None
    use_lag: Optional[bool] = None


def _use_lag(requested: Optional[bool]) -> bool:
    return HRV_USE_LAG if requested is None else requested


# ─── Routes ────────────────────────────────────────────────

@app.get("/")
def root() -> Dict[str, Any]:
    return {"service": "habit-hrv-api", "status": "ok"}


@app.get("/health-check")
def health_check() -> JSONResponse:
    return JSONResponse({"status": "Online", "message": "Online"})


@app.post("/api/v1/correlations/analyze")
def correlations_analyze(body: AnalyzeRequest) -> Dict[str, Any]:
    try:
        analysis = analyze_all_habits(body.habits, body.readings, _use_lag(body.use_lag))
        ranked = rank_by_impact(analysis.correlations)
        return {
            "correlations": [c.to_json_dict() for c in ranked],
            "totalDays": analysis.total_days,
            "sufficientData": analysis.sufficient_data,
            "topHabits": [c.to_json_dict() for c in top_habits(ranked)],
        }
    except Exception as e:
        log.exception("Correlation analysis failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/v1/recommendations")
def recommendations(body: RecommendationRequest) -> Dict[str, Any]:
    try:
        recs = generate_recommendations(body.correlations, body.habits, body.max_count)
        focus = get_todays_focus(recs, body.today_habits)
        return {
            "recommendations": [r.to_json_dict() for r in recs],
            "todaysFocus": focus.to_json_dict() if focus else None,
        }
    except Exception as e:
        log.exception("Recommendation synthesis failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/v1/morning-analysis")
@_limiter.limit(MORNING_ANALYSIS_RATE_LIMIT)
def morning_analysis(body: MorningAnalysisRequest, request: Request) -> Dict[str, Any]:
    try:
        analysis = generate_morning_analysis(body)
        return {"analysis": analysis.to_json_dict()}
    except Exception as e:
        log.exception("Morning analysis failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/v1/daily-plan")
def daily_plan(body: DailyPlanRequest) -> Dict[str, Any]:
    try:
        pipeline = DailyPlanPipeline(
            readings=body.readings,
            habits=body.habits,
            user_profile=body.user_profile,
            health_profile=body.health_profile,
            use_lag=_use_lag(body.use_lag),
            max_recommendations=MAX_RECOMMENDATIONS,
        )
        return pipeline.run(
            today=body.today,
            morning_context=body.morning_context,
            yesterday_review=body.yesterday_plan_review,
        )
    except Exception as e:
        log.exception("Daily plan failed")
        raise HTTPException(status_code=500, detail=str(e))
