"""
Database initialization helpers: idempotent user seeding
"""
import csv
import logging
from typing import Iterable, Iterator, List, Tuple

from sqlalchemy.orm import Session

from opsdesk.core.security import validate_password
from opsdesk.models.user import User
from opsdesk.services.user_service import create_user, get_user_by_email

logger = logging.getLogger(__name__)


def read_user_rows(lines: Iterable[str]) -> Iterator[Tuple[str, str]]:
    """
    Parse "email,name" CSV rows. Names may be quoted and contain commas;
    blank lines and lines starting with '#' are skipped. A missing name
    falls back to the email.
    """
    for row in csv.reader(line for line in lines if not line.lstrip().startswith("#")):
        if not row or not row[0].strip():
            continue
        email = row[0].strip()
        name = row[1].strip() if len(row) > 1 else ""
        yield email, name or email


def seed_users(db: Session, users: Iterable[Tuple[str, str, str]]) -> List[User]:
    """
    Create each (email, name, password) user that does not exist yet.

    Returns the users that were created. Existing users are left unchanged.

    Raises:
        ValueError: a password fails validate_password
    """
    created = []
    for email, name, password in users:
        password = validate_password(password)
        if get_user_by_email(db, email) is not None:
            logger.info("User already exists: %s", email)
            continue
        created.append(create_user(db, email, password, name))
        logger.info("Created user: %s", email)
    return created
