"""
Task management service.
Handles task CRUD and the completion/deletion transactions that apply
points and streak results to the user row.
"""
import logging
from datetime import datetime, date, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from taskstreak.models import Task, User
from taskstreak.schemas import TaskCreate, TaskUpdate
from taskstreak.repositories.task_repository import TaskRepository
from taskstreak.repositories.user_repository import UserRepository
from taskstreak.services.date_service import DateService
from taskstreak.services.points_service import PointsService
from taskstreak.services.streak_service import StreakService
from taskstreak.constants import (
    TASK_STATUSES, TASK_STATUS_PENDING, TASK_STATUS_COMPLETED, TASK_STATUS_DELETED,
    WEEKLY_STATS_DAYS
)
from taskstreak.exceptions import (
    UserNotFoundException, TaskNotFoundException,
    InvalidArgumentException, PreconditionFailedException
)

logger = logging.getLogger("taskstreak.tasks")


class TaskService:
    """Service for task management"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()

    def _require_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def get_task(self, user_id: int, task_id: int) -> Task:
        """Get a user's task or raise TaskNotFoundException"""
        task = self.task_repo.get_by_id(self.db, user_id, task_id)
        if not task:
            raise TaskNotFoundException(task_id)
        return task

    def list_tasks(self, user_id: int, status: Optional[str] = None) -> List[Task]:
        """List a user's tasks, optionally filtered by status"""
        self._require_user(user_id)
        if status is not None and status not in TASK_STATUSES:
            raise InvalidArgumentException("status", f"{status!r} is not one of {', '.join(TASK_STATUSES)}")
        return self.task_repo.get_for_user(self.db, user_id, status)

    def create_task(self, user_id: int, task_data: TaskCreate) -> Task:
        """Create a new pending task"""
        self._require_user(user_id)
        PointsService.base_points(task_data.difficulty)

        task = Task(user_id=user_id, **task_data.model_dump())
        return self.task_repo.create(self.db, task)

    def update_task(self, user_id: int, task_id: int, task_update: TaskUpdate) -> Task:
        """Update a pending task"""
        task = self.get_task(user_id, task_id)
        if task.status != TASK_STATUS_PENDING:
            raise PreconditionFailedException("Cannot edit completed tasks")

        update_data = task_update.model_dump(exclude_unset=True)
        if update_data.get("difficulty") is not None:
            PointsService.base_points(update_data["difficulty"])

        for key, value in update_data.items():
            if key in ("title", "difficulty") and value is None:
                continue
            setattr(task, key, value)
        return self.task_repo.update(self.db, task)

    def complete_task(
        self,
        user_id: int,
        task_id: int,
        reflection_note: str,
        completed_at: Optional[datetime] = None
    ) -> Tuple[Task, int, User]:
        """
        Complete a task, freezing its points and advancing the user's streak.

        Runs in a single transaction. The user row is locked first and the
        task only leaves pending through a guarded update, so a concurrent
        second completion fails instead of awarding points twice.

        Args:
            user_id: Owner of the task
            task_id: Task to complete
            reflection_note: Mandatory reflection on the task
            completed_at: Completion time (defaults to now)

        Returns:
            Tuple of (completed task, points earned, updated user)
        """
        if not reflection_note or not reflection_note.strip():
            raise InvalidArgumentException("reflection_note", "a reflection is required")

        completed_at = completed_at or datetime.now()

        try:
            user = self.user_repo.get_for_update(self.db, user_id)
            if not user:
                raise UserNotFoundException(user_id)

            task = self.get_task(user_id, task_id)
            if task.status == TASK_STATUS_COMPLETED:
                raise PreconditionFailedException("Task is already completed")

            points = PointsService.compute_points(task.difficulty, completed_at, user.day_start_time)
            streak = StreakService.update_streak(
                user.current_streak, user.max_streak, user.last_task_date, completed_at
            )

            if not self.task_repo.mark_completed(
                self.db, task.id, completed_at, points, reflection_note.strip()
            ):
                raise PreconditionFailedException("Task is already completed")

            user.total_points = (user.total_points or 0) + points
            user.current_streak = streak.current_streak
            user.max_streak = streak.max_streak
            user.last_task_date = completed_at.date()

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(task)
        self.db.refresh(user)
        logger.info(
            f"User {user_id} completed task {task_id}: +{points} points, "
            f"streak {user.current_streak} (max {user.max_streak})"
        )
        return task, points, user

    def delete_task(self, user_id: int, task_id: int) -> int:
        """
        Delete a task.

        Pending tasks are removed at no cost. Deleting a completed task takes
        its points back and rebuilds the streak from the remaining
        completions, resetting it when none remain.

        Returns:
            Points removed from the user's total
        """
        try:
            user = self.user_repo.get_for_update(self.db, user_id)
            if not user:
                raise UserNotFoundException(user_id)

            task = self.get_task(user_id, task_id)
            points_lost = 0

            if task.status == TASK_STATUS_COMPLETED:
                points_lost = task.points_earned or 0
                task.status = TASK_STATUS_DELETED
                task.points_earned = None
                self.db.flush()

                remaining = self.task_repo.get_completion_dates(self.db, user_id)
                state = StreakService.replay(remaining, user.max_streak)

                user.total_points = (user.total_points or 0) - points_lost
                user.current_streak = state.current_streak
                user.max_streak = state.max_streak
                user.last_task_date = state.last_task_date
            else:
                task.status = TASK_STATUS_DELETED

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"User {user_id} deleted task {task_id}: -{points_lost} points")
        return points_lost

    def get_daily_stats(self, user_id: int, target_date: date) -> dict:
        """Get points and completed tasks for one calendar day"""
        self._require_user(user_id)
        day_start, day_end = DateService.get_day_range(target_date)
        tasks = self.task_repo.get_completed_in_range(self.db, user_id, day_start, day_end)

        return {
            "date": target_date,
            "total_points": sum(task.points_earned or 0 for task in tasks),
            "tasks_completed": len(tasks),
            "tasks": tasks
        }

    def get_weekly_stats(self, user_id: int, end_date: date) -> List[dict]:
        """Get per-day points for the week ending at end_date, oldest first"""
        self._require_user(user_id)
        start_date = end_date - timedelta(days=WEEKLY_STATS_DAYS - 1)
        range_start, _ = DateService.get_day_range(start_date)
        _, range_end = DateService.get_day_range(end_date)
        tasks = self.task_repo.get_completed_in_range(self.db, user_id, range_start, range_end)

        daily = []
        for offset in range(WEEKLY_STATS_DAYS):
            day = start_date + timedelta(days=offset)
            day_tasks = [task for task in tasks if task.completed_at.date() == day]
            daily.append({
                "date": day,
                "points": sum(task.points_earned or 0 for task in day_tasks),
                "tasks_completed": len(day_tasks)
            })
        return daily
