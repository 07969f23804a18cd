"""Credential verification: username/password login and bearer token lookup."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filedrop.core.security import burn_password_check, check_password
from filedrop.models import User
from filedrop.services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def _first_exact(session: Session, column, value: str) -> User | None:
    """
    First user (lowest id) whose column equals value exactly.

    Usernames and API keys carry unique indexes, but tables created before
    those existed may hold duplicates; the lowest id wins.
    """
    try:
        candidates = (
            session.query(User).filter(column == value).order_by(User.id).all()
        )
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("User lookup failed: %s", e)
        raise StoreUnavailableError("User lookup failed") from e
    key = column.key
    for user in candidates:
        if getattr(user, key) == value:
            return user
    return None


def verify_password(session: Session, username: str, password: str) -> User | None:
    """
    Return the user if username exists and password matches its stored hash.

    Unknown username, wrong password and an unreadable stored hash all return
    None, and each costs one bcrypt check. Store failures raise
    StoreUnavailableError.
    """
    user = _first_exact(session, User.username, username)
    if user is None:
        burn_password_check(password)
        return None
    try:
        matched = check_password(password, user.hashed_password)
    except (ValueError, TypeError) as e:
        logger.warning("Stored password hash for user id=%s is unreadable: %s", user.id, e)
        burn_password_check(password)
        return None
    return user if matched else None


def resolve_token(session: Session, token: str) -> User | None:
    """
    Return the user whose api_key equals token, or None.

    Store failures raise StoreUnavailableError instead of reading as "no such token".
    """
    if not token:
        return None
    return _first_exact(session, User.api_key, token)
