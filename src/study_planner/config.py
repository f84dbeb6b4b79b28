"""Runtime settings and tuning constants."""
import os
from pathlib import Path

DEFAULT_DB_PATH = os.environ.get(
    "STUDY_PLANNER_DB", str(Path.home() / ".study_planner" / "planner.db")
)
LOG_LEVEL = os.environ.get("STUDY_PLANNER_LOG_LEVEL", "WARNING").upper()

# Gamification
POINTS_PER_LEVEL = 100
POINTS_PER_MINUTE = 0.017
CONTINUITY_MINUTES = 60
CONTINUITY_MULTIPLIER = 1.2

# Spaced repetition
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
REVIEW_MINUTES_PER_UNIT = 5

# Session form defaults
DEFAULT_CONCENTRATION = 0.8
DEFAULT_DIFFICULTY = 3

# Achievability assumes this many study hours are available per remaining day
STUDY_HOURS_PER_DAY = 8

# The CLI acts on behalf of a single local user
DEFAULT_USER_ID = os.environ.get("STUDY_PLANNER_USER", "me")
