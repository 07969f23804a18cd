"""Login plus the request gates: origin ban check (require_allowed_origin) and API key auth (get_current_user)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filedrop.core.config import get_settings
from filedrop.core.database import get_db
from filedrop.core.security import generate_api_key
from filedrop.models import User
from filedrop.schemas.auth import ApiKeyResponse, CurrentUser, LoginRequest
from filedrop.services.access_gate import is_origin_banned
from filedrop.services.credentials import resolve_token, verify_password
from filedrop.services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

RETRY_AFTER_SEC = "5"


def store_unavailable(e: StoreUnavailableError) -> HTTPException:
    """503 for a store failure; clients may retry."""
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=e.message,
        headers={"Retry-After": RETRY_AFTER_SEC},
    )


def get_client_ip(request: Request) -> str:
    """Caller's network origin: the socket peer, or the first X-Forwarded-For hop when trusted."""
    if get_settings().TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client is None:
        return ""
    return request.client.host


def require_allowed_origin(
    client_ip: Annotated[str, Depends(get_client_ip)],
    db: Annotated[Session, Depends(get_db)],
) -> str:
    """Dependency: reject banned origins with 403 before any credential is looked at."""
    try:
        banned = is_origin_banned(db, client_ip)
    except StoreUnavailableError as e:
        raise store_unavailable(e) from e
    if banned:
        logger.info("Rejected request from banned origin %s", client_ip)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access from this address is not allowed.",
        )
    return client_ip


def get_current_user(
    _origin: Annotated[str, Depends(require_allowed_origin)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Dependency: require a valid Bearer API key and return its account. Raises 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        user = resolve_token(db, credentials.credentials)
    except StoreUnavailableError as e:
        raise store_unavailable(e) from e
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


@router.post("", response_model=ApiKeyResponse)
def login(
    body: LoginRequest,
    _origin: Annotated[str, Depends(require_allowed_origin)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiKeyResponse:
    """
    Authenticate with username and password; returns the account's API key.
    Include it in the Authorization header as: Bearer <api_key>
    An account without a key gets a new one on its first login.
    """
    try:
        user = verify_password(db, body.username, body.password)
    except StoreUnavailableError as e:
        raise store_unavailable(e) from e
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )
    if not user.api_key:
        user.api_key = generate_api_key()
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("Could not store new API key for user id=%s: %s", user.id, e)
            raise store_unavailable(StoreUnavailableError("Could not issue API key")) from e
        logger.info("Issued API key for user id=%s", user.id)
    return ApiKeyResponse(api_key=user.api_key, token_type="bearer")


@router.get("/me", response_model=CurrentUser)
def read_me(current_user: Annotated[User, Depends(get_current_user)]) -> CurrentUser:
    """Return the account the presented API key belongs to."""
    return CurrentUser.model_validate(current_user)
