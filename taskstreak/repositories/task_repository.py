"""
Task repository - Data access layer for Task model.
Handles all database queries related to tasks.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_

from taskstreak.models import Task
from taskstreak.constants import TASK_STATUS_PENDING, TASK_STATUS_COMPLETED, TASK_STATUS_DELETED


class TaskRepository:
    """Repository for Task data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int, task_id: int) -> Optional[Task]:
        """Get a user's task by ID (deleted tasks are not returned)"""
        return db.query(Task).filter(
            and_(
                Task.id == task_id,
                Task.user_id == user_id,
                Task.status != TASK_STATUS_DELETED
            )
        ).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int, status: Optional[str] = None) -> List[Task]:
        """Get a user's tasks, newest first"""
        query = db.query(Task).filter(Task.user_id == user_id)
        if status:
            query = query.filter(Task.status == status)
        else:
            query = query.filter(Task.status != TASK_STATUS_DELETED)
        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

    @staticmethod
    def mark_completed(
        db: Session,
        task_id: int,
        completed_at: datetime,
        points: int,
        reflection_note: str
    ) -> bool:
        """
        Complete a task only if it is still pending (no commit).

        Returns:
            True if exactly this call moved the task out of pending
        """
        updated = db.query(Task).filter(
            and_(
                Task.id == task_id,
                Task.status == TASK_STATUS_PENDING
            )
        ).update(
            {
                Task.status: TASK_STATUS_COMPLETED,
                Task.completed_at: completed_at,
                Task.points_earned: points,
                Task.points_calculated_at: datetime.now(),
                Task.reflection_note: reflection_note,
            },
            synchronize_session=False
        )
        return updated == 1

    @staticmethod
    def get_completion_dates(db: Session, user_id: int) -> List[datetime]:
        """Get completion timestamps of a user's completed tasks"""
        rows = db.query(Task.completed_at).filter(
            and_(
                Task.user_id == user_id,
                Task.status == TASK_STATUS_COMPLETED,
                Task.completed_at.isnot(None)
            )
        ).all()
        return [row.completed_at for row in rows]

    @staticmethod
    def get_completed_in_range(
        db: Session,
        user_id: int,
        range_start: datetime,
        range_end: datetime,
        inclusive_end: bool = False
    ) -> List[Task]:
        """Get a user's completed tasks with completed_at in range"""
        end_clause = Task.completed_at <= range_end if inclusive_end else Task.completed_at < range_end
        return db.query(Task).filter(
            and_(
                Task.user_id == user_id,
                Task.status == TASK_STATUS_COMPLETED,
                Task.completed_at >= range_start,
                end_clause
            )
        ).order_by(Task.completed_at).all()

    @staticmethod
    def get_completed_for_users(
        db: Session,
        user_ids: Iterable[int],
        range_start: datetime,
        range_end: datetime
    ) -> Dict[int, List[Task]]:
        """Get completed tasks within an inclusive range, grouped by user"""
        user_ids = list(user_ids)
        grouped: Dict[int, List[Task]] = {user_id: [] for user_id in user_ids}
        if not user_ids:
            return grouped

        tasks = db.query(Task).filter(
            and_(
                Task.user_id.in_(user_ids),
                Task.status == TASK_STATUS_COMPLETED,
                Task.completed_at >= range_start,
                Task.completed_at <= range_end
            )
        ).all()
        for task in tasks:
            grouped[task.user_id].append(task)
        return grouped

    @staticmethod
    def create(db: Session, task: Task) -> Task:
        """Create new task"""
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def update(db: Session, task: Task) -> Task:
        """Update existing task"""
        db.commit()
        db.refresh(task)
        return task
