# app/services/identity.py
"""
Identity store: user registration, lookup and credential checks
"""

import logging
import re
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.security import SecurityConfig
from app.database import unit_of_work
from app.errors import AuthenticationError, Conflict, ValidationError
from app.models.user import User
from app.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

_RULES = SecurityConfig.VALIDATION
_USERNAME_RE = re.compile(_RULES['username_pattern'])


class IdentityStore:
    """Holds user credentials and profile fields"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def find(self, identifier: str) -> Optional[User]:
        """Look a user up by username or email"""
        identifier = (identifier or "").strip()
        if not identifier:
            return None
        return self.db.query(User).filter(
            or_(User.username == identifier, User.email == identifier.lower())
        ).first()

    def register(self, username: str, email: str, password: str) -> User:
        username = (username or "").strip()
        email = (email or "").strip().lower()
        self._validate_registration(username, email, password or "")

        existing = self.db.query(User).filter(
            or_(User.username == username, User.email == email)
        ).first()
        if existing:
            raise Conflict("Username or email already exists")

        user = User(username=username, email=email, password_hash=hash_password(password))
        try:
            with unit_of_work(self.db):
                self.db.add(user)
                self.db.flush()
        except IntegrityError:
            # Concurrent registration won the unique constraint
            raise Conflict("Username or email already exists")

        self.db.refresh(user)
        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    def authenticate(self, username: str, password: str) -> User:
        user = self.get_by_username((username or "").strip())
        if not user or not verify_password(password or "", user.password_hash):
            logger.warning("Failed login for username %r", username)
            raise AuthenticationError("Incorrect username or password")
        return user

    def _validate_registration(self, username: str, email: str, password: str) -> None:
        if not (_RULES['username_min_length'] <= len(username) <= _RULES['username_max_length']):
            raise ValidationError(
                f"Username must be between {_RULES['username_min_length']} and "
                f"{_RULES['username_max_length']} characters",
                field="username",
            )
        if not _USERNAME_RE.match(username):
            raise ValidationError(
                "Username can only contain letters, numbers, and underscores",
                field="username",
            )
        if "@" not in email or len(email) > _RULES['email_max_length']:
            raise ValidationError("Please provide a valid email address", field="email")
        if len(password) < SecurityConfig.PASSWORD['min_length']:
            raise ValidationError(
                f"Password must be at least {SecurityConfig.PASSWORD['min_length']} characters long",
                field="password",
            )
