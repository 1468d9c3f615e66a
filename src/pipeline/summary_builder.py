"""Helpers for building concise plan text for UI cards and CLI output."""

from __future__ import annotations

from typing import Optional

from habit_schema import DailyAnalysis

BULLET_LIMIT = 280


def clip(s: str, limit: int = 260) -> str:
    s = s.replace("\n", " ").strip()
    if len(s) <= limit:
        return s
    return s[: limit - 3].rstrip() + "..."


def bullet(label: str, value: str) -> str:
    prefix = f"- {label}: "
    allowed = max(48, BULLET_LIMIT - len(prefix))
    return prefix + clip(value, allowed)


def _status_line(analysis: DailyAnalysis) -> str:
    status = analysis.status
    delta = round(status.vs_seven_day_avg)
    if delta > 0:
        vs = f"HRV is {delta}ms above your 7-day average"
    elif delta < 0:
        vs = f"HRV is {abs(delta)}ms below your 7-day average"
    else:
        vs = "HRV is in line with your 7-day average"
    return f"{vs} ({status.recovery_state}, {status.hrv_percentile}th percentile)."


def build_concise_summary(analysis: Optional[DailyAnalysis]) -> str:
    """Create a strict 3-bullet, human-friendly summary of a day's plan."""
    if analysis is None:
        return (
            "- What changed: Insufficient data in this run.\n"
            "- Why it matters: Without a reading for today, training decisions should stay conservative.\n"
            "- Next 24-48h: Keep effort moderate and reassess after tomorrow's sync."
        )

    what_changed = _status_line(analysis)
    extra = [line for line in analysis.insights if "7-day average" not in line]
    if extra:
        what_changed = f"{what_changed} {extra[0]}"

    why_it_matters = analysis.reasoning
    for line in analysis.previous_day_learnings:
        low = line.lower()
        if any(t in low for t in ("recovery", "stress", "challenging", "tough")):
            why_it_matters = f"{why_it_matters} {line}"
            break

    top = [item for item in analysis.recommendations if item.priority == 1]
    actions = "; ".join(f"{item.action} ({item.timing})" for item in top)
    next_24_48h = f"{analysis.focus_area.value} day: {actions}" if actions else (
        f"{analysis.focus_area.value} day: keep routines steady and reassess after the next daily run."
    )

    return (
        f"{bullet('What changed', what_changed)}\n"
        f"{bullet('Why it matters', why_it_matters)}\n"
        f"{bullet('Next 24-48h', next_24_48h)}"
    )
