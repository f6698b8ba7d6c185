"""
Tests for UserService.
"""
import pytest
from datetime import datetime

from taskstreak.services.user_service import UserService
from taskstreak.schemas import UserCreate, UserUpdate
from taskstreak.exceptions import UserNotFoundException, PreconditionFailedException
from taskstreak.tests.conftest import create_completed_task


class TestUserProfile:

    def test_create_normalizes_day_start(self, db_session):
        user = UserService(db_session).create_user(
            UserCreate(username="carol", email="carol@example.com", day_start_time="7:30")
        )
        assert user.day_start_time == "07:30:00"
        assert (user.total_points, user.current_streak, user.max_streak) == (0, 0, 0)
        assert user.last_task_date is None

    def test_duplicate_email_rejected(self, db_session, user):
        with pytest.raises(PreconditionFailedException):
            UserService(db_session).create_user(UserCreate(username="other", email=user.email))

    def test_update_day_start(self, db_session, user):
        updated = UserService(db_session).update_user(user.id, UserUpdate(day_start_time="06:00"))
        assert updated.day_start_time == "06:00:00"

    def test_update_to_taken_username_rejected(self, db_session, user, other_user):
        with pytest.raises(PreconditionFailedException):
            UserService(db_session).update_user(user.id, UserUpdate(username=other_user.username))

    def test_missing_user(self, db_session):
        with pytest.raises(UserNotFoundException):
            UserService(db_session).get_user(42)


class TestSuggestions:

    def test_only_last_week_counts(self, db_session, user):
        # A late completion older than a week is ignored
        create_completed_task(db_session, user, datetime(2024, 1, 1, 22), 5)
        create_completed_task(db_session, user, datetime(2024, 1, 14, 8), 70)

        suggestions = UserService(db_session).get_suggestions(user.id, now=datetime(2024, 1, 14, 20))

        assert any("completing tasks early" in s for s in suggestions)
        assert not any("earlier in the day" in s for s in suggestions)
