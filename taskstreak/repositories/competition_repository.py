"""
Competition repository - Data access layer for competitions and their participants.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, select

from taskstreak.models import Competition, CompetitionParticipant, User
from taskstreak.constants import COMPETITION_STATUS_ACTIVE


class CompetitionRepository:
    """Repository for Competition data access"""

    @staticmethod
    def get_by_id(db: Session, competition_id: int) -> Optional[Competition]:
        """Get competition by ID"""
        return db.query(Competition).filter(Competition.id == competition_id).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> List[Competition]:
        """Get competitions the user created or participates in, newest first"""
        participant_ids = select(CompetitionParticipant.competition_id).where(
            CompetitionParticipant.user_id == user_id
        )
        return db.query(Competition).filter(
            or_(
                Competition.created_by_id == user_id,
                Competition.id.in_(participant_ids)
            )
        ).order_by(Competition.created_at.desc(), Competition.id.desc()).all()

    @staticmethod
    def get_expired_active(db: Session, today: date) -> List[Competition]:
        """Get active competitions whose end date has passed"""
        return db.query(Competition).filter(
            and_(
                Competition.status == COMPETITION_STATUS_ACTIVE,
                Competition.end_date < today
            )
        ).all()

    @staticmethod
    def get_participant_ids(db: Session, competition_id: int) -> List[int]:
        """Get user IDs of participants, ordered by user ID"""
        rows = db.query(CompetitionParticipant.user_id).filter(
            CompetitionParticipant.competition_id == competition_id
        ).order_by(CompetitionParticipant.user_id).all()
        return [row.user_id for row in rows]

    @staticmethod
    def get_participants(db: Session, competition_id: int) -> List[User]:
        """Get participating users"""
        return db.query(User).join(
            CompetitionParticipant, CompetitionParticipant.user_id == User.id
        ).filter(
            CompetitionParticipant.competition_id == competition_id
        ).order_by(User.id).all()

    @staticmethod
    def is_participant(db: Session, competition_id: int, user_id: int) -> bool:
        """Check whether a user participates in a competition"""
        return db.query(CompetitionParticipant).filter(
            and_(
                CompetitionParticipant.competition_id == competition_id,
                CompetitionParticipant.user_id == user_id
            )
        ).first() is not None

    @staticmethod
    def add_participant(db: Session, competition_id: int, user_id: int) -> CompetitionParticipant:
        """Add a participant (no commit)"""
        participant = CompetitionParticipant(competition_id=competition_id, user_id=user_id)
        db.add(participant)
        return participant
