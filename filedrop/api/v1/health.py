"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from filedrop.core.config import settings
from filedrop.core.database import check_db_connected, get_db
from filedrop.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """
    Return service health status and metadata store connectivity.
    Used by load balancers and monitoring; not gated by the ban list.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
    )
