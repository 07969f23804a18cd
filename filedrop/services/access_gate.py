"""Ban-list check run before any authenticated operation."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filedrop.models import BannedIP
from filedrop.services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def is_origin_banned(session: Session, address: str) -> bool:
    """
    Return True iff some banned_ips row has exactly this address.

    Comparison is exact and case-sensitive: no normalization, no subnet
    matching. Raises StoreUnavailableError if the lookup fails, so a broken
    store never reads as "not banned".
    """
    try:
        candidates = session.query(BannedIP.ip).filter(BannedIP.ip == address).all()
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Ban lookup failed: %s", e)
        raise StoreUnavailableError("Ban list lookup failed") from e
    # Collations on some backends fold case or pad spaces; re-check in Python.
    return any(ip == address for (ip,) in candidates)
