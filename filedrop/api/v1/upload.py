"""Upload endpoint: gate, authenticate, fingerprint, dedup per owner, store, record."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File as FormFile, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from filedrop.api.v1.auth import get_current_user, require_allowed_origin, store_unavailable
from filedrop.core.config import get_settings
from filedrop.core.database import get_db
from filedrop.models import User
from filedrop.schemas.files import NewFile
from filedrop.schemas.upload import UploadResponse
from filedrop.services.errors import IntegrityViolationError, StoreUnavailableError
from filedrop.services.hashing import content_hash
from filedrop.services.registry import register_upload
from filedrop.services.storage import LocalFileStore, make_stored_name

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_FILETYPE = "application/octet-stream"


def get_file_store() -> LocalFileStore:
    """Dependency: byte store rooted at UPLOAD_DIR."""
    return LocalFileStore(get_settings().UPLOAD_DIR)


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
def upload_file(
    response: Response,
    file: Annotated[UploadFile, FormFile()],
    client_ip: Annotated[str, Depends(require_allowed_origin)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[LocalFileStore, Depends(get_file_store)],
) -> UploadResponse:
    """
    Store a file for the authenticated account.

    Send `multipart/form-data` with a field named `file` and
    `Authorization: Bearer <api_key>`. Content the account already uploaded is
    not stored again: the existing metadata comes back with `duplicate=true`
    and status 200. New content returns 201.
    """
    max_bytes = get_settings().MAX_UPLOAD_BYTES
    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size must not exceed {max_bytes} bytes.",
        )

    original_name = (file.filename or "")[:255]
    new_file = NewFile(
        name=make_stored_name(original_name),
        original_name=original_name,
        filetype=(file.content_type or DEFAULT_FILETYPE)[:64],
        file_hash=content_hash(data),
        uploaded_by=current_user.id,
        uploaded_by_ip=client_ip[:50],
    )

    wrote_bytes = False

    def store_bytes() -> None:
        nonlocal wrote_bytes
        store.save(new_file.name, data)
        wrote_bytes = True

    try:
        outcome = register_upload(db, new_file, store_bytes)
    except StoreUnavailableError as e:
        if wrote_bytes:
            store.delete(new_file.name)
        raise store_unavailable(e) from e
    except IntegrityViolationError as e:
        if wrote_bytes:
            store.delete(new_file.name)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e

    if outcome.duplicate:
        if wrote_bytes:
            store.delete(new_file.name)
        response.status_code = status.HTTP_200_OK
        logger.info(
            "Duplicate upload by user id=%s resolved to file id=%s",
            current_user.id,
            outcome.file.id,
        )
    else:
        logger.info("Stored file id=%s for user id=%s", outcome.file.id, current_user.id)

    record = UploadResponse.model_validate(outcome.file)
    record.duplicate = outcome.duplicate
    return record
