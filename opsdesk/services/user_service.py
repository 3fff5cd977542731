"""
User service - registration, credential checks and the user directory
"""
import logging
from typing import List, Optional

from fastapi import status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from opsdesk.core import constants as codes
from opsdesk.core.errors import AppError, bad_request
from opsdesk.core.security import hash_password, verify_password
from opsdesk.models.user import User

_log = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


def create_user(db: Session, email: str, password: str, name: str) -> User:
    """
    Create a user with a hashed password.

    Raises:
        AppError(EMAIL_TAKEN): a user with this email already exists
    """
    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise bad_request(codes.EMAIL_TAKEN, "User already exists")

    user = User(
        email=email,
        name=name.strip(),
        password_hash=hash_password(password),
        active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise bad_request(codes.EMAIL_TAKEN, "User already exists")
    db.refresh(user)
    _log.info("user registered: user_id=%s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the active user matching the credentials."""
    user = get_user_by_email(db, email)
    if user is None or user.password_hash is None or not verify_password(password, user.password_hash):
        raise AppError(status.HTTP_401_UNAUTHORIZED, codes.INVALID_CREDENTIALS, "Invalid email or password")
    if not user.active:
        raise AppError(status.HTTP_403_FORBIDDEN, codes.INACTIVE_USER, "Account is inactive")
    return user


def list_users(db: Session) -> List[User]:
    """Active users, by name."""
    return db.query(User).filter(User.active.is_(True)).order_by(User.name, User.id).all()
