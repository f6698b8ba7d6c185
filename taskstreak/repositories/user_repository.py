"""
User repository - Data access layer for User model.
"""
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import or_

from taskstreak.models import User


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_for_update(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID, locking the row for the current transaction"""
        return db.query(User).filter(User.id == user_id).with_for_update().first()

    @staticmethod
    def get_by_ids(db: Session, user_ids: Iterable[int]) -> List[User]:
        """Get users by IDs"""
        user_ids = list(user_ids)
        if not user_ids:
            return []
        return db.query(User).filter(User.id.in_(user_ids)).order_by(User.id).all()

    @staticmethod
    def find_conflict(
        db: Session,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None
    ) -> Optional[User]:
        """Find another user holding the same username or email"""
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return None

        query = db.query(User).filter(or_(*clauses))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first()

    @staticmethod
    def create(db: Session, user: User) -> User:
        """Create new user"""
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update(db: Session, user: User) -> User:
        """Update existing user"""
        db.commit()
        db.refresh(user)
        return user
