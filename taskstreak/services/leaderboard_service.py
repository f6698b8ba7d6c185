"""
Leaderboard aggregation.
Ranks competition participants by points earned inside a date window.
Pure: the caller fetches participants and their completed tasks.
"""
from datetime import datetime
from typing import Iterable, List, Mapping

from taskstreak.exceptions import InvalidArgumentException
from taskstreak.schemas import Participant, CompletedTaskSnapshot, LeaderboardEntry


class LeaderboardService:
    """Service for leaderboard computation"""

    @staticmethod
    def compute_leaderboard(
        participants: Iterable[Participant],
        tasks_by_participant: Mapping[int, Iterable[CompletedTaskSnapshot]],
        window_start: datetime,
        window_end: datetime
    ) -> List[LeaderboardEntry]:
        """
        Compute ranked standings for a competition window.

        Only tasks completed within [window_start, window_end] count.
        Entries are ordered by total points descending; equal totals are
        ordered by ascending user_id so the ranking is deterministic.

        Args:
            participants: Competition participants
            tasks_by_participant: user_id -> completed task snapshots
            window_start: Inclusive window start
            window_end: Inclusive window end

        Returns:
            Entries with contiguous 1-based ranks

        Raises:
            InvalidArgumentException: Reversed window or duplicate participants
        """
        if window_start > window_end:
            raise InvalidArgumentException(
                "window", f"start {window_start} is after end {window_end}"
            )

        totals = []
        seen = set()
        for participant in participants:
            if participant.user_id in seen:
                raise InvalidArgumentException(
                    "participants", f"user {participant.user_id} listed twice"
                )
            seen.add(participant.user_id)

            in_window = [
                task for task in tasks_by_participant.get(participant.user_id, ())
                if task.completed_at is not None
                and window_start <= task.completed_at <= window_end
            ]
            totals.append((
                participant,
                sum(task.points_earned or 0 for task in in_window),
                len(in_window)
            ))

        totals.sort(key=lambda item: (-item[1], item[0].user_id))

        return [
            LeaderboardEntry(
                user_id=participant.user_id,
                username=participant.username,
                total_points=total_points,
                tasks_completed=tasks_completed,
                rank=position + 1
            )
            for position, (participant, total_points, tasks_completed) in enumerate(totals)
        ]
