"""
Productivity suggestions derived from recent completions and streak state.
"""
from typing import List, Sequence

from taskstreak.constants import (
    DIFFICULTY_EASY, DIFFICULTY_DIFFICULT,
    EARLY_COMPLETION_HOUR, LATE_COMPLETION_HOUR,
    EASY_SHARE_THRESHOLD, DIFFICULT_SHARE_THRESHOLD,
    STREAK_CELEBRATION_THRESHOLD
)
from taskstreak.schemas import RecentTaskSnapshot


class SuggestionService:
    """Service for productivity suggestions"""

    @staticmethod
    def generate_suggestions(
        recent_tasks: Sequence[RecentTaskSnapshot],
        current_streak: int,
        max_streak: int
    ) -> List[str]:
        """
        Build suggestions from the last week's completions.

        Args:
            recent_tasks: Tasks completed in the lookback window
            current_streak: User's current streak
            max_streak: User's best streak

        Returns:
            Non-empty list of suggestion strings
        """
        if not recent_tasks:
            return [
                "Start with small, easy tasks to build momentum!",
                "Set your day start time to when you're most productive.",
            ]

        suggestions = []

        # Completion time of day
        hours = [task.completed_at.hour for task in recent_tasks]
        early = sum(1 for hour in hours if hour < EARLY_COMPLETION_HOUR)
        late = sum(1 for hour in hours if hour >= LATE_COMPLETION_HOUR)

        if early > late:
            suggestions.append("Great job completing tasks early! Keep this momentum going.")
        elif late > early:
            suggestions.append("Try completing tasks earlier in the day for bonus points!")

        # Difficulty mix
        total = len(recent_tasks)
        easy_share = sum(1 for t in recent_tasks if t.difficulty == DIFFICULTY_EASY) / total
        difficult_share = sum(1 for t in recent_tasks if t.difficulty == DIFFICULTY_DIFFICULT) / total

        if easy_share > EASY_SHARE_THRESHOLD:
            suggestions.append("Challenge yourself with more medium-difficulty tasks!")
        elif difficult_share > DIFFICULT_SHARE_THRESHOLD:
            suggestions.append(
                "Great work tackling challenging tasks! Don't forget to balance with easier ones."
            )

        # Streak
        if current_streak == 0:
            suggestions.append("Start a new streak today! Every task counts.")
        elif current_streak >= STREAK_CELEBRATION_THRESHOLD:
            suggestions.append(f"Amazing {current_streak}-day streak! Keep it going!")

        if max_streak > 0 and current_streak == max_streak:
            suggestions.append("You're at your personal best streak! Push for a new record!")

        if not suggestions:
            suggestions.append("Mix easy and challenging tasks for optimal productivity.")
            suggestions.append("Complete tasks early in your day for maximum points!")

        return suggestions
