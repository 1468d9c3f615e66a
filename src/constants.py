"""
Shared constants used across multiple modules.
Single source of truth for thresholds, weights and benchmark tables.
"""

# Correlation gating
MIN_PAIRED_SAMPLES = 7        # fewer joined days -> habit omitted
SUFFICIENT_DATA_DAYS = 14     # habit history needed before insights are shown

# Ranking weight per significance band
CONFIDENCE_WEIGHTS = {
    "high": 1.5,
    "medium": 1.0,
    "low": 0.5,
}

# Recommendation synthesis
DEFAULT_MAX_RECOMMENDATIONS = 5
DEFAULT_HABIT_FREQUENCY = 0.5      # habits without a tracked adherence flag
INCREASE_FREQUENCY_CEILING = 0.7   # "increase" only below this adherence
DECREASE_FREQUENCY_FLOOR = 0.3     # "decrease" only above this adherence
WEAK_COEFFICIENT = 0.2

# Flags that count as "already done" when picking today's focus
DONE_TODAY_FLAGS = ("exercise", "meditation", "cold_exposure")

# Morning analysis
RECOVERY_STATE_BANDS = [
    (67, "Well Recovered"),
    (34, "Moderately Recovered"),
    (0, "Needs Recovery"),
]
NEUTRAL_RECOVERY_SCORE = 50.0
NEUTRAL_SLEEP_HOURS = 7.0
HRV_DEVIATION_MS = 5
STRONG_CORRELATION = 0.3
GOAL_ON_TRACK_RATIO = 0.10
GOAL_MS_PER_WEEK = 1.0

END_OF_DAY_HRV_DELTA = {
    "Recovery": 5,
    "Push": -3,
    "Maintenance": 1,
}

# Population HRV benchmarks (RMSSD ms): p25 / p50 / p75 by age bracket
AGE_BRACKETS = [
    (26, "18-25"),
    (36, "26-35"),
    (46, "36-45"),
    (56, "46-55"),
    (66, "56-65"),
]
OLDEST_BRACKET = "65+"

HRV_BENCHMARKS = {
    "male": {
        "18-25": (50, 78, 100),
        "26-35": (40, 60, 80),
        "36-45": (35, 48, 65),
        "46-55": (30, 40, 55),
        "56-65": (25, 35, 48),
        "65+": (20, 30, 42),
    },
    "female": {
        "18-25": (45, 70, 90),
        "26-35": (38, 55, 75),
        "36-45": (32, 45, 60),
        "46-55": (28, 38, 52),
        "56-65": (24, 33, 45),
        "65+": (20, 28, 40),
    },
    # average of male and female
    "other": {
        "18-25": (47, 74, 95),
        "26-35": (39, 57, 77),
        "36-45": (33, 46, 62),
        "46-55": (29, 39, 53),
        "56-65": (24, 34, 46),
        "65+": (20, 29, 41),
    },
}
