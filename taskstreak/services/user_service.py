"""
User management service.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from taskstreak.models import User
from taskstreak.schemas import UserCreate, UserUpdate, RecentTaskSnapshot
from taskstreak.repositories.user_repository import UserRepository
from taskstreak.repositories.task_repository import TaskRepository
from taskstreak.services.date_service import DateService
from taskstreak.services.suggestion_service import SuggestionService
from taskstreak.constants import SUGGESTION_LOOKBACK_DAYS
from taskstreak.exceptions import UserNotFoundException, PreconditionFailedException

logger = logging.getLogger("taskstreak.users")


class UserService:
    """Service for user profiles"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()
        self.task_repo = TaskRepository()

    def get_user(self, user_id: int) -> User:
        """Get user by ID or raise UserNotFoundException"""
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def create_user(self, user_data: UserCreate) -> User:
        """Create a new user with zeroed points and streaks"""
        if self.user_repo.find_conflict(self.db, user_data.username, user_data.email):
            raise PreconditionFailedException("Username or email already registered")

        # Normalize day start ("9:00" -> "09:00:00")
        day_start = DateService.parse_time(user_data.day_start_time)
        user = User(
            username=user_data.username,
            email=user_data.email,
            day_start_time=day_start.isoformat()
        )
        user = self.user_repo.create(self.db, user)
        logger.info(f"Created user {user.id} ({user.username})")
        return user

    def update_user(self, user_id: int, user_update: UserUpdate) -> User:
        """Update username, email or day start time"""
        user = self.get_user(user_id)
        update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)

        if self.user_repo.find_conflict(
            self.db, update_data.get("username"), update_data.get("email"), exclude_id=user_id
        ):
            raise PreconditionFailedException("Username or email already registered")

        if "day_start_time" in update_data:
            update_data["day_start_time"] = DateService.parse_time(update_data["day_start_time"]).isoformat()

        for key, value in update_data.items():
            setattr(user, key, value)
        return self.user_repo.update(self.db, user)

    def get_suggestions(self, user_id: int, now: Optional[datetime] = None) -> List[str]:
        """Get productivity suggestions based on the last week of completions"""
        user = self.get_user(user_id)
        now = now or datetime.now()

        recent = self.task_repo.get_completed_in_range(
            self.db, user_id, now - timedelta(days=SUGGESTION_LOOKBACK_DAYS), now, inclusive_end=True
        )
        snapshots = [RecentTaskSnapshot.model_validate(task) for task in recent]

        return SuggestionService.generate_suggestions(
            snapshots, user.current_streak, user.max_streak
        )
