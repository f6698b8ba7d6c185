"""
Streak tracking - pure functions over calendar dates, no DB access.
"""
from datetime import date, datetime
from typing import Iterable, NamedTuple, Optional, Union

from taskstreak.exceptions import InvalidArgumentException, PreconditionFailedException
from taskstreak.services.date_service import DateService

DateLike = Union[date, datetime, str]


class StreakUpdate(NamedTuple):
    current_streak: int
    max_streak: int


class StreakState(NamedTuple):
    current_streak: int
    max_streak: int
    last_task_date: Optional[date]


class StreakService:
    """Service for daily completion streaks"""

    @staticmethod
    def update_streak(
        current_streak: int,
        max_streak: int,
        last_task_date: Optional[DateLike],
        completion_date: DateLike
    ) -> StreakUpdate:
        """
        Advance streak counters for a new completion.

        - No previous completion: streak starts at 1
        - Same calendar day: unchanged
        - Next calendar day: +1
        - Longer gap: resets to 1

        The caller records completion_date as the new last_task_date.

        Raises:
            InvalidArgumentException: Negative counters or unparseable dates
            PreconditionFailedException: completion_date precedes last_task_date
        """
        if current_streak < 0 or max_streak < 0:
            raise InvalidArgumentException(
                "streak", f"counters must be non-negative, got {current_streak}/{max_streak}"
            )

        completion_day = DateService.to_date(completion_date)

        if last_task_date is None:
            new_streak = 1
        else:
            last_day = DateService.to_date(last_task_date)
            days_difference = (completion_day - last_day).days

            if days_difference < 0:
                raise PreconditionFailedException(
                    f"Completion on {completion_day} precedes last task date {last_day}; "
                    "re-derive the streak from ordered history"
                )
            elif days_difference == 0:
                new_streak = current_streak
            elif days_difference == 1:
                new_streak = current_streak + 1
            else:
                new_streak = 1

        return StreakUpdate(new_streak, max(max_streak, new_streak))

    @staticmethod
    def replay(completion_dates: Iterable[DateLike], max_streak: int = 0) -> StreakState:
        """
        Derive streak state forward from completion history.

        Used after a completed task is removed: there is no decrement, the
        state is rebuilt from the remaining completions in chronological order.
        max_streak is carried over and never lowered.

        Args:
            completion_dates: Remaining completion dates, any order
            max_streak: Previously stored maximum streak

        Returns:
            StreakState; (0, max_streak, None) when no completions remain
        """
        days = sorted({DateService.to_date(value) for value in completion_dates})

        current, best, last_day = 0, max_streak, None
        for day in days:
            current, best = StreakService.update_streak(current, best, last_day, day)
            last_day = day

        return StreakState(current, best, last_day)
