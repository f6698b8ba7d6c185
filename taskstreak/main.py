from fastapi import FastAPI, Depends, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
import os
from pathlib import Path

from taskstreak.database import engine, get_db, Base
from taskstreak import models  # Import all models to register them with Base
from taskstreak.schemas import (
    UserCreate, UserUpdate, UserResponse,
    TaskCreate, TaskUpdate, TaskComplete, TaskResponse,
    TaskCompletionResponse, TaskDeletionResponse,
    DailyStatsResponse, DayPointsResponse,
    CompetitionCreate, CompetitionResponse, CompetitionDetailResponse, LeaderboardResponse
)
from taskstreak.middleware.auth import verify_api_key
from taskstreak.services.user_service import UserService
from taskstreak.services.task_service import TaskService
from taskstreak.services.competition_service import CompetitionService
from taskstreak.services.scheduler_service import start_scheduler, stop_scheduler
from taskstreak.exceptions import (
    TaskStreakException, InvalidArgumentException, PreconditionFailedException,
    NotParticipantException, NotFoundException
)
from taskstreak.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV,
    CORS_ALLOWED_ORIGINS, SCHEDULER_ENABLED
)

LOG_DIR = os.getenv("TASKSTREAK_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("TASKSTREAK_LOG_FILE", "app.log")

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("taskstreak")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="TaskStreak API",
    description="Gamified tasks: time-decayed points, daily streaks and friend leaderboards",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS_CODES = [
    (InvalidArgumentException, status.HTTP_400_BAD_REQUEST),
    (NotParticipantException, status.HTTP_403_FORBIDDEN),
    (NotFoundException, status.HTTP_404_NOT_FOUND),
    (PreconditionFailedException, status.HTTP_409_CONFLICT),
]


@app.exception_handler(TaskStreakException)
async def taskstreak_exception_handler(request: Request, exc: TaskStreakException):
    for exc_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_type):
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    logger.error(f"Unhandled application error on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


@app.on_event("startup")
async def startup_event():
    logger.info(f"TaskStreak API started. Logging to: {log_path}")
    if SCHEDULER_ENABLED:
        start_scheduler()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down TaskStreak API")
    stop_scheduler()


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "TaskStreak API", "status": "active"}


# ===== USER ENDPOINTS =====

@app.post("/api/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """Register a user"""
    return UserService(db).create_user(user)


@app.get("/api/users/{user_id}", response_model=UserResponse, dependencies=[Depends(verify_api_key)])
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Get a user's profile, points and streaks"""
    return UserService(db).get_user(user_id)


@app.put("/api/users/{user_id}", response_model=UserResponse, dependencies=[Depends(verify_api_key)])
def update_user(user_id: int, user_update: UserUpdate, db: Session = Depends(get_db)):
    """Update username, email or day start time"""
    return UserService(db).update_user(user_id, user_update)


@app.get("/api/users/{user_id}/suggestions", dependencies=[Depends(verify_api_key)])
def get_suggestions(user_id: int, db: Session = Depends(get_db)):
    """Get productivity suggestions"""
    return {"suggestions": UserService(db).get_suggestions(user_id)}


@app.get("/api/users/{user_id}/stats/daily", response_model=DailyStatsResponse, dependencies=[Depends(verify_api_key)])
def get_daily_stats(user_id: int, target_date: Optional[date] = None, db: Session = Depends(get_db)):
    """Get points and completions for one day (default today)"""
    return TaskService(db).get_daily_stats(user_id, target_date or date.today())


@app.get("/api/users/{user_id}/stats/weekly", response_model=List[DayPointsResponse], dependencies=[Depends(verify_api_key)])
def get_weekly_stats(user_id: int, end_date: Optional[date] = None, db: Session = Depends(get_db)):
    """Get per-day points for the last 7 days"""
    return TaskService(db).get_weekly_stats(user_id, end_date or date.today())


# ===== TASK ENDPOINTS =====

@app.get("/api/users/{user_id}/tasks", response_model=List[TaskResponse], dependencies=[Depends(verify_api_key)])
def get_tasks(user_id: int, status_filter: Optional[str] = None, db: Session = Depends(get_db)):
    """Get a user's tasks with optional status filtering"""
    return TaskService(db).list_tasks(user_id, status_filter)


@app.post("/api/users/{user_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def create_task(user_id: int, task: TaskCreate, db: Session = Depends(get_db)):
    """Create a new task"""
    return TaskService(db).create_task(user_id, task)


@app.get("/api/users/{user_id}/tasks/{task_id}", response_model=TaskResponse, dependencies=[Depends(verify_api_key)])
def get_task(user_id: int, task_id: int, db: Session = Depends(get_db)):
    """Get a specific task"""
    return TaskService(db).get_task(user_id, task_id)


@app.put("/api/users/{user_id}/tasks/{task_id}", response_model=TaskResponse, dependencies=[Depends(verify_api_key)])
def update_task(user_id: int, task_id: int, task_update: TaskUpdate, db: Session = Depends(get_db)):
    """Update a pending task"""
    return TaskService(db).update_task(user_id, task_id, task_update)


@app.delete("/api/users/{user_id}/tasks/{task_id}", response_model=TaskDeletionResponse, dependencies=[Depends(verify_api_key)])
def delete_task(user_id: int, task_id: int, db: Session = Depends(get_db)):
    """Delete a task, reversing points and streak if it was completed"""
    points_lost = TaskService(db).delete_task(user_id, task_id)
    return {"task_id": task_id, "points_lost": points_lost}


@app.post("/api/users/{user_id}/tasks/{task_id}/complete", response_model=TaskCompletionResponse, dependencies=[Depends(verify_api_key)])
def complete_task(user_id: int, task_id: int, completion: TaskComplete, db: Session = Depends(get_db)):
    """Complete a task and award points"""
    task, points, user = TaskService(db).complete_task(user_id, task_id, completion.reflection_note)
    return {"task": task, "points_earned": points, "user": user}


# ===== COMPETITION ENDPOINTS =====

def _competition_response(service: CompetitionService, competition) -> dict:
    return {
        "id": competition.id,
        "name": competition.name,
        "description": competition.description,
        "start_date": competition.start_date,
        "end_date": competition.end_date,
        "status": competition.status,
        "max_participants": competition.max_participants,
        "created_by_id": competition.created_by_id,
        "created_at": competition.created_at,
        "participant_ids": service.get_participant_ids(competition.id),
    }


@app.get("/api/users/{user_id}/competitions", response_model=List[CompetitionResponse], dependencies=[Depends(verify_api_key)])
def get_competitions(user_id: int, db: Session = Depends(get_db)):
    """Get competitions the user created or joined"""
    service = CompetitionService(db)
    return [_competition_response(service, c) for c in service.list_competitions(user_id)]


@app.post("/api/users/{user_id}/competitions", response_model=CompetitionResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def create_competition(user_id: int, competition: CompetitionCreate, db: Session = Depends(get_db)):
    """Create a competition with up to four invited members"""
    service = CompetitionService(db)
    return _competition_response(service, service.create_competition(user_id, competition))


@app.post("/api/users/{user_id}/competitions/{competition_id}/join", response_model=CompetitionResponse, dependencies=[Depends(verify_api_key)])
def join_competition(user_id: int, competition_id: int, db: Session = Depends(get_db)):
    """Join a competition"""
    service = CompetitionService(db)
    return _competition_response(service, service.join_competition(user_id, competition_id))


@app.get("/api/users/{user_id}/competitions/{competition_id}/leaderboard", response_model=LeaderboardResponse, dependencies=[Depends(verify_api_key)])
def get_leaderboard(user_id: int, competition_id: int, db: Session = Depends(get_db)):
    """Get competition standings (participants only)"""
    service = CompetitionService(db)
    leaderboard = service.get_leaderboard(user_id, competition_id)
    competition = service.get_competition(competition_id)
    return {
        "competition_id": competition_id,
        "status": competition.status,
        "leaderboard": leaderboard,
        "winner_id": service.get_winner(competition_id)
    }


@app.get("/api/users/{user_id}/competitions/{competition_id}", response_model=CompetitionDetailResponse, dependencies=[Depends(verify_api_key)])
def get_competition(user_id: int, competition_id: int, db: Session = Depends(get_db)):
    """Get a competition with its standings (participants only)"""
    service = CompetitionService(db)
    competition = service.get_member_competition(user_id, competition_id)
    response = _competition_response(service, competition)
    response["leaderboard"] = service.get_leaderboard(user_id, competition_id)
    response["winner_id"] = service.get_winner(competition_id)
    return response


@app.post("/api/users/{user_id}/competitions/{competition_id}/end", response_model=CompetitionResponse, dependencies=[Depends(verify_api_key)])
def end_competition(user_id: int, competition_id: int, db: Session = Depends(get_db)):
    """End a competition early (creator only)"""
    service = CompetitionService(db)
    return _competition_response(service, service.end_competition(user_id, competition_id))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("taskstreak.main:app", host="0.0.0.0", port=8000, reload=False)
