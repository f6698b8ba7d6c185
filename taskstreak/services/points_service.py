"""
Points calculation service.
Converts a task's difficulty and completion time into frozen points.
Does NOT touch the database (receives data via parameters).
"""
import math
from datetime import datetime, time
from typing import Union

from taskstreak.constants import DIFFICULTY_POINTS, MIN_HOURS_SINCE_START
from taskstreak.exceptions import InvalidArgumentException
from taskstreak.services.date_service import DateService


class PointsService:
    """Service for points calculation"""

    @staticmethod
    def base_points(difficulty: str) -> int:
        """
        Get base points for a difficulty tier.

        easy -> 50, medium -> 70, difficult -> 100

        Raises:
            InvalidArgumentException: If the tier is unknown
        """
        try:
            return DIFFICULTY_POINTS[difficulty]
        except (KeyError, TypeError):
            raise InvalidArgumentException(
                "difficulty",
                f"{difficulty!r} is not one of {', '.join(DIFFICULTY_POINTS)}"
            )

    @staticmethod
    def compute_points(
        difficulty: str,
        completed_at: Union[datetime, str],
        day_start_time: Union[str, time]
    ) -> int:
        """
        Calculate points for completing a task.

        Formula: Points = round(Base / max(HoursSinceDayStart, 1))

        Completions before the user's day start count against the previous
        day's boundary. Ties are rounded half up.

        Args:
            difficulty: Task difficulty tier
            completed_at: Completion timestamp
            day_start_time: User's day start time

        Returns:
            Points earned (never negative)
        """
        base = PointsService.base_points(difficulty)
        completed_at = DateService.parse_timestamp(completed_at)
        day_start = DateService.parse_time(day_start_time)

        boundary = DateService.get_day_start_boundary(completed_at, day_start)
        elapsed_hours = (completed_at - boundary).total_seconds() / 3600
        hours_since_start = max(elapsed_hours, MIN_HOURS_SINCE_START)

        return int(math.floor(base / hours_since_start + 0.5))
