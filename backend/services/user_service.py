"""Service for portfolio owners."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import settings
from models import User
from services.exceptions import UnknownUserError

logger = logging.getLogger(__name__)


class UserService:
    """Creates and looks up users."""

    @staticmethod
    def create_user(db: Session, username: str, email: str) -> User:
        """Create a user holding the starting BTC grant.

        Raises:
            ValueError: If the username or email is already taken.
        """
        email = email.strip().lower()
        username = username.strip()
        if not username or not email:
            raise ValueError("Username and email are required")

        existing = (
            db.query(User)
            .filter((func.lower(User.username) == username.lower()) | (User.email == email))
            .first()
        )
        if existing:
            raise ValueError(f"User already exists: {username} / {email}")

        user = User(username=username, email=email, initial_sats=settings.INITIAL_BTC_SATS)
        db.add(user)
        db.flush()
        logger.info(
            "Created user %s (%s) with %d sats", username, user.id[:8], user.initial_sats
        )
        return user

    @staticmethod
    def get_user(db: Session, user_id: str) -> User:
        """Fetch a user by id.

        Raises:
            UnknownUserError: If no such user exists.
        """
        user = db.query(User).filter_by(id=user_id).first()
        if user is None:
            raise UnknownUserError(user_id)
        return user

    @staticmethod
    def find_user(db: Session, identifier: str) -> User | None:
        """Look a user up by id, username or email."""
        return (
            db.query(User)
            .filter(
                (User.id == identifier)
                | (User.username == identifier)
                | (User.email == identifier.strip().lower())
            )
            .first()
        )
