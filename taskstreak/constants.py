"""
Application constants and environment-driven configuration.
"""
import os

# Task statuses
TASK_STATUS_PENDING = "pending"
TASK_STATUS_COMPLETED = "completed"
TASK_STATUS_DELETED = "deleted"

TASK_STATUSES = (TASK_STATUS_PENDING, TASK_STATUS_COMPLETED, TASK_STATUS_DELETED)

# Difficulty tiers and their base points
DIFFICULTY_EASY = "easy"
DIFFICULTY_MEDIUM = "medium"
DIFFICULTY_DIFFICULT = "difficult"

DIFFICULTY_POINTS = {
    DIFFICULTY_EASY: 50,
    DIFFICULTY_MEDIUM: 70,
    DIFFICULTY_DIFFICULT: 100,
}

# Minimum divisor for the points decay formula (hours)
MIN_HOURS_SINCE_START = 1.0

DEFAULT_DAY_START_TIME = "09:00:00"

# Competition statuses
COMPETITION_STATUS_ACTIVE = "active"
COMPETITION_STATUS_COMPLETED = "completed"
COMPETITION_STATUS_CANCELLED = "cancelled"

DEFAULT_MAX_PARTICIPANTS = 5

# Suggestions
SUGGESTION_LOOKBACK_DAYS = 7
EARLY_COMPLETION_HOUR = 12  # Completions before noon count as early
LATE_COMPLETION_HOUR = 18   # Completions from 18:00 count as late
EASY_SHARE_THRESHOLD = 0.7
DIFFICULT_SHARE_THRESHOLD = 0.5
STREAK_CELEBRATION_THRESHOLD = 3

WEEKLY_STATS_DAYS = 7

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/taskstreak"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

# Database
DEFAULT_DATABASE_URL = "sqlite:///./taskstreak.db"

# CORS
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "TASKSTREAK_CORS_ORIGINS",
        "http://localhost:8081,http://localhost:19006,http://localhost:3000"
    ).split(",")
    if origin.strip()
]

# Scheduler
SCHEDULER_ENABLED = os.getenv("TASKSTREAK_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")
COMPETITION_CHECK_INTERVAL_MINUTES = int(os.getenv("TASKSTREAK_COMPETITION_CHECK_MINUTES", "15"))
