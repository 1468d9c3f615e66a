"""Configuration loaded from .env"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# HTTP surface
FRONTEND_ORIGINS = [
    o.strip() for o in os.getenv("FRONTEND_ORIGINS", "").split(",") if o.strip()
] or [
    "http://localhost:8081",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
MORNING_ANALYSIS_RATE_LIMIT = os.getenv("MORNING_ANALYSIS_RATE_LIMIT", "10/day")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "1").strip() == "1"

# Analysis defaults
HRV_USE_LAG = os.getenv("HRV_USE_LAG", "0").strip() == "1"
MAX_RECOMMENDATIONS = int(os.getenv("MAX_RECOMMENDATIONS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
