"""
Date calculation and manipulation service.
Handles day start time parsing, day-start boundaries and calendar day ranges.
"""
from datetime import datetime, timedelta, date, time
from typing import Union

from taskstreak.exceptions import InvalidArgumentException


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def parse_time(time_value: Union[str, time]) -> time:
        """
        Parse a day start time into a time of day.

        Args:
            time_value: "HH:MM" or "HH:MM:SS" string, or a time object

        Returns:
            Parsed time (no tzinfo)

        Raises:
            InvalidArgumentException: If the value is not an hour/minute pair
        """
        if isinstance(time_value, time):
            return time_value.replace(tzinfo=None)

        if not isinstance(time_value, str):
            raise InvalidArgumentException("day_start_time", f"expected HH:MM, got {time_value!r}")

        parts = time_value.strip().split(":")
        if len(parts) not in (2, 3):
            raise InvalidArgumentException("day_start_time", f"expected HH:MM, got {time_value!r}")

        try:
            hour = int(parts[0])
            minute = int(parts[1])
            second = int(parts[2]) if len(parts) == 3 else 0
            return time(hour, minute, second)
        except ValueError:
            raise InvalidArgumentException("day_start_time", f"expected HH:MM, got {time_value!r}")

    @staticmethod
    def parse_timestamp(value: Union[str, datetime]) -> datetime:
        """
        Coerce an ISO-8601 string or datetime into a datetime.

        Raises:
            InvalidArgumentException: If the value is not a timestamp
        """
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                raise InvalidArgumentException("completed_at", f"malformed timestamp {value!r}")
        raise InvalidArgumentException("completed_at", f"expected a timestamp, got {value!r}")

    @staticmethod
    def to_date(value: Union[date, datetime, str]) -> date:
        """
        Reduce a date, datetime or ISO string to its calendar date.

        Raises:
            InvalidArgumentException: If the value is not a date
        """
        # datetime is a subclass of date, check it first
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value[:10])
            except ValueError:
                raise InvalidArgumentException("date", f"malformed date {value!r}")
        raise InvalidArgumentException("date", f"expected a date, got {value!r}")

    @staticmethod
    def get_day_start_boundary(moment: datetime, day_start: time) -> datetime:
        """
        Get the most recent day start boundary at or before a moment.

        The boundary is built on the moment's calendar date. If that lies after
        the moment, the moment belongs to the previous day's window.

        Example: day_start = 09:00 and moment = 2024-01-02 07:00 gives
        2024-01-01 09:00.

        Args:
            moment: Point in time (naive or aware)
            day_start: User's day start time

        Returns:
            Boundary datetime with the same tzinfo as the moment
        """
        boundary = datetime.combine(moment.date(), day_start, tzinfo=moment.tzinfo)
        if boundary > moment:
            boundary -= timedelta(days=1)
        return boundary

    @staticmethod
    def get_day_range(target_date: date) -> tuple[datetime, datetime]:
        """
        Get datetime range for a full day (midnight to midnight).

        Args:
            target_date: Date to get range for

        Returns:
            Tuple of (day_start, day_end) datetimes
        """
        day_start = datetime.combine(target_date, datetime.min.time())
        day_end = datetime.combine(target_date + timedelta(days=1), datetime.min.time())
        return day_start, day_end

    @staticmethod
    def get_window_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
        """
        Get inclusive datetime bounds covering whole days from start_date to end_date.
        """
        window_start = datetime.combine(start_date, datetime.min.time())
        window_end = datetime.combine(end_date, datetime.max.time())
        return window_start, window_end
