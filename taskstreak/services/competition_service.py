"""
Competition service.
Handles the competition lifecycle and feeds participant history into the
leaderboard aggregator.
"""
import json
import logging
from datetime import datetime, date
from typing import List, Optional
from sqlalchemy.orm import Session

from taskstreak.models import Competition
from taskstreak.schemas import (
    CompetitionCreate, Participant, CompletedTaskSnapshot, LeaderboardEntry
)
from taskstreak.repositories.competition_repository import CompetitionRepository
from taskstreak.repositories.task_repository import TaskRepository
from taskstreak.repositories.user_repository import UserRepository
from taskstreak.services.date_service import DateService
from taskstreak.services.leaderboard_service import LeaderboardService
from taskstreak.constants import (
    COMPETITION_STATUS_ACTIVE, COMPETITION_STATUS_COMPLETED, COMPETITION_STATUS_CANCELLED,
    DEFAULT_MAX_PARTICIPANTS
)
from taskstreak.exceptions import (
    UserNotFoundException, CompetitionNotFoundException, NotParticipantException,
    InvalidArgumentException, PreconditionFailedException
)

logger = logging.getLogger("taskstreak.competitions")


class CompetitionService:
    """Service for competitions and leaderboards"""

    def __init__(self, db: Session):
        self.db = db
        self.competition_repo = CompetitionRepository()
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()

    def get_competition(self, competition_id: int) -> Competition:
        """Get competition or raise CompetitionNotFoundException"""
        competition = self.competition_repo.get_by_id(self.db, competition_id)
        if not competition:
            raise CompetitionNotFoundException(competition_id)
        return competition

    def list_competitions(self, user_id: int) -> List[Competition]:
        """Get competitions the user created or joined"""
        if not self.user_repo.get_by_id(self.db, user_id):
            raise UserNotFoundException(user_id)
        return self.competition_repo.get_for_user(self.db, user_id)

    def get_participant_ids(self, competition_id: int) -> List[int]:
        return self.competition_repo.get_participant_ids(self.db, competition_id)

    def create_competition(
        self,
        creator_id: int,
        competition_data: CompetitionCreate,
        today: Optional[date] = None
    ) -> Competition:
        """
        Create a competition with the creator as its first participant.

        Raises:
            InvalidArgumentException: Bad dates, too many or unknown members
        """
        today = today or date.today()
        if not self.user_repo.get_by_id(self.db, creator_id):
            raise UserNotFoundException(creator_id)

        if competition_data.start_date < today:
            raise InvalidArgumentException("start_date", "must not be in the past")
        if competition_data.end_date <= competition_data.start_date:
            raise InvalidArgumentException("end_date", "must be after start date")

        member_ids = [uid for uid in competition_data.member_ids if uid != creator_id]
        if len(member_ids) + 1 > DEFAULT_MAX_PARTICIPANTS:
            raise InvalidArgumentException(
                "member_ids", f"maximum {DEFAULT_MAX_PARTICIPANTS} participants allowed"
            )

        members = self.user_repo.get_by_ids(self.db, member_ids)
        if len(members) != len(member_ids):
            raise InvalidArgumentException("member_ids", "one or more member IDs are invalid")

        try:
            competition = Competition(
                name=competition_data.name,
                description=competition_data.description,
                start_date=competition_data.start_date,
                end_date=competition_data.end_date,
                max_participants=DEFAULT_MAX_PARTICIPANTS,
                created_by_id=creator_id
            )
            self.db.add(competition)
            self.db.flush()

            self.competition_repo.add_participant(self.db, competition.id, creator_id)
            for member in members:
                self.competition_repo.add_participant(self.db, competition.id, member.id)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(competition)
        logger.info(
            f"User {creator_id} created competition {competition.id} "
            f"({competition.start_date} - {competition.end_date}, {len(members) + 1} participants)"
        )
        return competition

    def join_competition(self, user_id: int, competition_id: int, today: Optional[date] = None) -> Competition:
        """Join an active, not yet ended, not full competition"""
        today = today or date.today()
        if not self.user_repo.get_by_id(self.db, user_id):
            raise UserNotFoundException(user_id)

        competition = self.get_competition(competition_id)
        if competition.status != COMPETITION_STATUS_ACTIVE or competition.end_date < today:
            raise PreconditionFailedException("Competition is not active")
        if self.competition_repo.is_participant(self.db, competition_id, user_id):
            raise PreconditionFailedException("Already a member of this competition")

        participant_ids = self.competition_repo.get_participant_ids(self.db, competition_id)
        if len(participant_ids) >= competition.max_participants:
            raise PreconditionFailedException("Competition is full")

        self.competition_repo.add_participant(self.db, competition_id, user_id)
        self.db.commit()
        logger.info(f"User {user_id} joined competition {competition_id}")
        return competition

    def compute_leaderboard(self, competition: Competition) -> List[LeaderboardEntry]:
        """Recompute standings from task history inside the competition window"""
        users = self.competition_repo.get_participants(self.db, competition.id)
        participants = [Participant(user_id=user.id, username=user.username) for user in users]

        window_start, window_end = DateService.get_window_bounds(
            competition.start_date, competition.end_date
        )
        grouped = self.task_repo.get_completed_for_users(
            self.db, [p.user_id for p in participants], window_start, window_end
        )
        tasks_by_participant = {
            user_id: [
                CompletedTaskSnapshot(
                    task_id=task.id,
                    completed_at=task.completed_at,
                    points_earned=task.points_earned
                )
                for task in tasks
            ]
            for user_id, tasks in grouped.items()
        }

        return LeaderboardService.compute_leaderboard(
            participants, tasks_by_participant, window_start, window_end
        )

    def get_member_competition(self, user_id: int, competition_id: int) -> Competition:
        """Get a competition the user takes part in"""
        competition = self.get_competition(competition_id)
        if not self.competition_repo.is_participant(self.db, competition_id, user_id):
            raise NotParticipantException(competition_id, user_id)
        return competition

    def get_leaderboard(self, user_id: int, competition_id: int) -> List[LeaderboardEntry]:
        """
        Get standings; only participants may view them.

        Completed competitions serve their stored final standings, so later
        edits to task history do not change the result.
        """
        competition = self.get_member_competition(user_id, competition_id)
        if competition.status == COMPETITION_STATUS_COMPLETED and competition.leaderboard:
            return self._stored_standings(competition)
        return self.compute_leaderboard(competition)

    @staticmethod
    def _stored_standings(competition: Competition) -> List[LeaderboardEntry]:
        return [LeaderboardEntry.model_validate(entry) for entry in json.loads(competition.leaderboard)]

    def _close(self, competition: Competition, status: str) -> None:
        competition.status = status
        if status == COMPETITION_STATUS_COMPLETED:
            entries = self.compute_leaderboard(competition)
            competition.leaderboard = json.dumps([entry.model_dump() for entry in entries])
            competition.last_leaderboard_update = datetime.now()

    def end_competition(self, user_id: int, competition_id: int, today: Optional[date] = None) -> Competition:
        """
        End a competition early (creator only).

        A competition that has not started yet is cancelled; otherwise its
        window is cut at today and the final standings are stored.
        """
        today = today or date.today()
        competition = self.get_competition(competition_id)

        if competition.created_by_id != user_id:
            raise PreconditionFailedException("Only the creator can end a competition")
        if competition.status != COMPETITION_STATUS_ACTIVE:
            raise PreconditionFailedException("Competition is not active")

        try:
            if today < competition.start_date:
                self._close(competition, COMPETITION_STATUS_CANCELLED)
            else:
                if competition.end_date > today:
                    competition.end_date = today
                self._close(competition, COMPETITION_STATUS_COMPLETED)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(competition)
        logger.info(f"Competition {competition_id} ended by user {user_id} ({competition.status})")
        return competition

    def finalize_expired_competitions(self, today: Optional[date] = None) -> List[Competition]:
        """
        Close active competitions whose end date has passed.

        Returns:
            Competitions closed by this call
        """
        today = today or date.today()
        expired = self.competition_repo.get_expired_active(self.db, today)

        try:
            for competition in expired:
                self._close(competition, COMPETITION_STATUS_COMPLETED)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for competition in expired:
            logger.info(f"Competition {competition.id} finished on {competition.end_date}")
        return expired

    def get_winner(self, competition_id: int) -> Optional[int]:
        """
        Get the winning user ID from final standings.

        None while the competition is not completed, or when nobody earned points.
        """
        competition = self.get_competition(competition_id)
        if competition.status != COMPETITION_STATUS_COMPLETED or not competition.leaderboard:
            return None

        entries = self._stored_standings(competition)
        if not entries or entries[0].total_points == 0:
            return None
        return entries[0].user_id
