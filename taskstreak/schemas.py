from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date
from typing import Optional, List

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$"
DIFFICULTY_PATTERN = "^(easy|medium|difficult)$"


# User schemas
class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    day_start_time: str = Field(default="09:00:00", pattern=TIME_PATTERN)


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    day_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)


class UserResponse(UserBase):
    id: int
    total_points: int = 0
    current_streak: int = 0
    max_streak: int = 0
    last_task_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Task schemas
class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    difficulty: str = Field(default="medium", pattern=DIFFICULTY_PATTERN)
    due_date: Optional[datetime] = None


class TaskCreate(TaskBase):
    pass


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    difficulty: Optional[str] = Field(None, pattern=DIFFICULTY_PATTERN)
    due_date: Optional[datetime] = None


class TaskComplete(BaseModel):
    reflection_note: str = Field(..., min_length=1, max_length=2000)


class TaskResponse(TaskBase):
    id: int
    user_id: int
    status: str
    completed_at: Optional[datetime] = None
    reflection_note: Optional[str] = None
    points_earned: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TaskCompletionResponse(BaseModel):
    task: TaskResponse
    points_earned: int
    user: UserResponse


class TaskDeletionResponse(BaseModel):
    task_id: int
    points_lost: int


# Statistics schemas
class DailyStatsResponse(BaseModel):
    date: date
    total_points: int = 0
    tasks_completed: int = 0
    tasks: List[TaskResponse] = []


class DayPointsResponse(BaseModel):
    date: date
    points: int = 0
    tasks_completed: int = 0


# Computation snapshots (immutable values handed to the pure services)
class Participant(BaseModel):
    user_id: int
    username: Optional[str] = None

    class Config:
        frozen = True


class CompletedTaskSnapshot(BaseModel):
    task_id: int
    completed_at: Optional[datetime] = None
    points_earned: Optional[int] = None

    class Config:
        frozen = True


class RecentTaskSnapshot(BaseModel):
    difficulty: str
    completed_at: datetime

    class Config:
        frozen = True
        from_attributes = True


class LeaderboardEntry(BaseModel):
    user_id: int
    username: Optional[str] = None
    total_points: int = 0
    tasks_completed: int = 0
    rank: int

    class Config:
        frozen = True


# Competition schemas
class CompetitionBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    start_date: date
    end_date: date


class CompetitionCreate(CompetitionBase):
    member_ids: List[int] = Field(default_factory=list)

    @field_validator("member_ids")
    @classmethod
    def unique_member_ids(cls, value: List[int]) -> List[int]:
        if len(set(value)) != len(value):
            raise ValueError("member_ids must not contain duplicates")
        return value


class CompetitionResponse(CompetitionBase):
    id: int
    status: str
    max_participants: int
    created_by_id: int
    created_at: datetime
    participant_ids: List[int] = []

    class Config:
        from_attributes = True


class CompetitionDetailResponse(CompetitionResponse):
    leaderboard: List[LeaderboardEntry] = []
    winner_id: Optional[int] = None


class LeaderboardResponse(BaseModel):
    competition_id: int
    status: str
    leaderboard: List[LeaderboardEntry]
    winner_id: Optional[int] = None
