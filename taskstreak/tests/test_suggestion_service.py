"""
Tests for SuggestionService.
"""
from datetime import datetime

from taskstreak.services.suggestion_service import SuggestionService
from taskstreak.schemas import RecentTaskSnapshot


def recent(difficulty, hour):
    return RecentTaskSnapshot(difficulty=difficulty, completed_at=datetime(2024, 1, 2, hour, 0))


class TestGenerateSuggestions:
    """Tests for generate_suggestions function"""

    def test_no_recent_tasks_gives_onboarding_tips(self):
        suggestions = SuggestionService.generate_suggestions([], 0, 0)
        assert len(suggestions) == 2
        assert "small, easy tasks" in suggestions[0]

    def test_early_completions_praised(self):
        tasks = [recent("medium", 8), recent("medium", 9), recent("medium", 20)]
        suggestions = SuggestionService.generate_suggestions(tasks, 1, 2)
        assert any("completing tasks early" in s for s in suggestions)

    def test_late_completions_nudged(self):
        tasks = [recent("medium", 19), recent("medium", 22)]
        suggestions = SuggestionService.generate_suggestions(tasks, 1, 2)
        assert any("earlier in the day" in s for s in suggestions)

    def test_mostly_easy_tasks(self):
        tasks = [recent("easy", 14)] * 4
        suggestions = SuggestionService.generate_suggestions(tasks, 1, 2)
        assert any("medium-difficulty" in s for s in suggestions)

    def test_mostly_difficult_tasks(self):
        tasks = [recent("difficult", 14), recent("difficult", 14), recent("easy", 14)]
        suggestions = SuggestionService.generate_suggestions(tasks, 1, 2)
        assert any("balance with easier" in s for s in suggestions)

    def test_streak_celebrated_and_personal_best(self):
        tasks = [recent("medium", 14)]
        suggestions = SuggestionService.generate_suggestions(tasks, 4, 4)
        assert "Amazing 4-day streak! Keep it going!" in suggestions
        assert any("personal best" in s for s in suggestions)

    def test_zero_streak_encouraged(self):
        tasks = [recent("medium", 14)]
        suggestions = SuggestionService.generate_suggestions(tasks, 0, 3)
        assert any("Start a new streak" in s for s in suggestions)

    def test_fallback_tips(self):
        """Balanced afternoon work with a short streak below the best triggers nothing specific"""
        tasks = [recent("medium", 14), recent("easy", 15)]
        suggestions = SuggestionService.generate_suggestions(tasks, 1, 5)
        assert len(suggestions) == 2
        assert "Mix easy and challenging tasks" in suggestions[0]
