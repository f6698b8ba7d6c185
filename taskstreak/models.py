from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey
from datetime import datetime

from taskstreak.database import Base
from taskstreak.constants import (
    TASK_STATUS_PENDING, DIFFICULTY_MEDIUM, DEFAULT_DAY_START_TIME,
    COMPETITION_STATUS_ACTIVE, DEFAULT_MAX_PARTICIPANTS
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False)

    # Reference point for points decay ("HH:MM" or "HH:MM:SS")
    day_start_time = Column(String, default=DEFAULT_DAY_START_TIME, nullable=False)

    # Gamification state, mutated only by completion/deletion
    total_points = Column(Integer, default=0, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)
    max_streak = Column(Integer, default=0, nullable=False)
    last_task_date = Column(Date, nullable=True)  # Date of most recent completed task

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    difficulty = Column(String, default=DIFFICULTY_MEDIUM, nullable=False)  # easy, medium, difficult
    status = Column(String, default=TASK_STATUS_PENDING, nullable=False)  # pending, completed, deleted
    due_date = Column(DateTime, nullable=True)

    # Completion (set once)
    completed_at = Column(DateTime, nullable=True)
    reflection_note = Column(String, nullable=True)
    points_earned = Column(Integer, nullable=True)  # Populated only while completed
    points_calculated_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Competition(Base):
    __tablename__ = "competitions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    status = Column(String, default=COMPETITION_STATUS_ACTIVE, nullable=False)  # active, completed, cancelled
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    max_participants = Column(Integer, default=DEFAULT_MAX_PARTICIPANTS, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Final standings (JSON list), written when the competition closes
    leaderboard = Column(String, nullable=True)
    last_leaderboard_update = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.now)


class CompetitionParticipant(Base):
    __tablename__ = "competition_participants"

    competition_id = Column(Integer, ForeignKey("competitions.id"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    joined_at = Column(DateTime, default=datetime.now)
