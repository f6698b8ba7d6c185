"""
Shared fixtures for TaskStreak tests.

Every test gets its own in-memory SQLite database.
"""
import os
import tempfile

# Configure the app before any taskstreak module reads the environment
os.environ.setdefault("TASKSTREAK_DATABASE_URL", "sqlite://")
os.environ.setdefault("TASKSTREAK_LOG_DIR", os.path.join(tempfile.gettempdir(), "taskstreak-tests"))
os.environ.setdefault("TASKSTREAK_SCHEDULER_ENABLED", "false")

import pytest
from datetime import date, datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskstreak.database import Base
from taskstreak.models import User, Task
from taskstreak.constants import TASK_STATUS_COMPLETED, DIFFICULTY_MEDIUM


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory database"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


def create_user(db, username="alice", day_start_time="09:00:00", **fields) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        day_start_time=day_start_time,
        **fields
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_completed_task(db, user, completed_at: datetime, points: int,
                          difficulty: str = DIFFICULTY_MEDIUM, title: str = "Done") -> Task:
    """Insert a completed task row without touching the user's counters"""
    task = Task(
        user_id=user.id,
        title=title,
        difficulty=difficulty,
        status=TASK_STATUS_COMPLETED,
        completed_at=completed_at,
        points_earned=points,
        reflection_note="done"
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@pytest.fixture
def user(db_session):
    return create_user(db_session, "alice")


@pytest.fixture
def other_user(db_session):
    return create_user(db_session, "bob")
