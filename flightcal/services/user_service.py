"""
user_service.py — Account management for the admin panel.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flightcal.auth import hash_password
from flightcal.models.user import User
from flightcal.models.session import Session as UserSession
from flightcal.models.day_record import DayRecord
from flightcal.models.report_viewed import ReportViewed

logger = logging.getLogger(__name__)

USERNAME_MIN = 2
USERNAME_MAX = 50
PASSWORD_MIN = 6


class UserValidationError(ValueError):
    """Bad input for an account operation; rendered as HTTP 400."""


class UserService:
    @staticmethod
    def list_users(db: Session) -> list[dict]:
        users = db.query(User).order_by(User.id).all()
        return [
            {
                "id": u.id,
                "username": u.username,
                "is_admin": bool(u.is_admin),
                "created_at": u.created_at.isoformat() if u.created_at else None,
            }
            for u in users
        ]

    @staticmethod
    def validate_password(password: str | None) -> None:
        if not password or len(password) < PASSWORD_MIN:
            raise UserValidationError(f"Password must be at least {PASSWORD_MIN} characters")

    @staticmethod
    def create(db: Session, username: str, password: str, is_admin: bool = False) -> User:
        if not username or not password:
            raise UserValidationError("Username and password are required")
        if not USERNAME_MIN <= len(username) <= USERNAME_MAX:
            raise UserValidationError(f"Username must be {USERNAME_MIN}-{USERNAME_MAX} characters")
        UserService.validate_password(password)

        # Friendly pre-check; the unique constraint below stays authoritative
        if db.query(User.id).filter(User.username == username).first():
            raise UserValidationError("Username already exists")

        user = User(username=username, password_hash=hash_password(password), is_admin=bool(is_admin))
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise UserValidationError("Username already exists")
        db.refresh(user)
        logger.info(f"Created user {user.id} ({user.username}), admin={user.is_admin}")
        return user

    @staticmethod
    def delete(db: Session, acting_user: User, user_id: int) -> bool:
        """Remove a user and everything they own. Deleting yourself is refused."""
        if user_id == acting_user.id:
            raise UserValidationError("You cannot delete the currently logged-in user")

        # Explicit cleanup: SQLite does not enforce ON DELETE CASCADE by default
        db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
        db.query(DayRecord).filter(DayRecord.user_id == user_id).delete(synchronize_session=False)
        db.query(ReportViewed).filter(ReportViewed.user_id == user_id).delete(synchronize_session=False)
        count = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db.commit()
        if count:
            logger.info(f"User {acting_user.id} deleted user {user_id}")
        return count > 0

    @staticmethod
    def change_password(db: Session, user_id: int, new_password: str) -> bool:
        UserService.validate_password(new_password)
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            return False
        user.password_hash = hash_password(new_password)
        db.commit()
        logger.info(f"Password changed for user {user_id}")
        return True
