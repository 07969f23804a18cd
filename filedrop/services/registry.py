"""Content registry: record upload metadata and answer per-owner dedup lookups."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from filedrop.models import File, User
from filedrop.schemas.files import NewFile
from filedrop.services.errors import (
    DuplicateContentError,
    IntegrityViolationError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadOutcome:
    """Result of register_upload: the row that holds this content, and whether it pre-existed."""

    file: File
    duplicate: bool


def find_by_owner_and_hash(
    session: Session, owner_id: int, content_hash: str
) -> File | None:
    """Most recent file owned by owner_id with exactly this content hash, or None."""
    try:
        candidates = (
            session.query(File)
            .filter(File.uploaded_by == owner_id, File.file_hash == content_hash)
            .order_by(File.created_at.desc(), File.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Dedup lookup failed for owner id=%s: %s", owner_id, e)
        raise StoreUnavailableError("File lookup failed") from e
    for row in candidates:
        if row.file_hash == content_hash:
            return row
    return None


def _classify_integrity_error(session: Session, new_file: NewFile) -> IntegrityViolationError:
    """Tell a missing owner apart from an (owner, hash) collision after a failed insert."""
    try:
        owner_exists = session.get(User, new_file.uploaded_by) is not None
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Owner lookup failed for user id=%s: %s", new_file.uploaded_by, e)
        raise StoreUnavailableError("Owner lookup failed") from e
    if not owner_exists:
        return IntegrityViolationError(f"User id={new_file.uploaded_by} does not exist")
    existing = find_by_owner_and_hash(session, new_file.uploaded_by, new_file.file_hash)
    if existing is not None:
        return DuplicateContentError(
            f"User id={new_file.uploaded_by} already owns content {new_file.file_hash}",
            existing=existing,
        )
    return IntegrityViolationError("File metadata violates a database constraint")


def record_upload(session: Session, new_file: NewFile) -> File:
    """
    Insert one files row and commit it.

    Does not look for duplicates first; call find_by_owner_and_hash for that.
    Raises IntegrityViolationError when the owner does not exist,
    DuplicateContentError when the owner already has this hash, and
    StoreUnavailableError for connectivity or pool failures. Nothing is
    written on any failure.
    """
    values = new_file.model_dump(exclude_none=True)
    row = File(**values)
    try:
        session.add(row)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        error = _classify_integrity_error(session, new_file)
        logger.info("Upload not recorded: %s", error.message)
        raise error from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Upload insert failed for owner id=%s: %s", new_file.uploaded_by, e)
        raise StoreUnavailableError("Could not record upload") from e
    session.refresh(row)
    return row


def register_upload(
    session: Session,
    new_file: NewFile,
    store_bytes: Callable[[], None],
) -> UploadOutcome:
    """
    Dedup-aware upload: return the owner's existing file for this hash, or store and record a new one.

    store_bytes runs only when no duplicate was found by the pre-check. If a
    concurrent upload wins the insert, the winner's row is returned with
    duplicate=True and the caller should discard what store_bytes wrote.
    """
    existing = find_by_owner_and_hash(session, new_file.uploaded_by, new_file.file_hash)
    if existing is not None:
        return UploadOutcome(file=existing, duplicate=True)
    store_bytes()
    try:
        row = record_upload(session, new_file)
    except DuplicateContentError as e:
        if e.existing is None:
            raise
        return UploadOutcome(file=e.existing, duplicate=True)
    return UploadOutcome(file=row, duplicate=False)
