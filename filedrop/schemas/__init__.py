"""Pydantic request/response schemas."""

from filedrop.schemas.auth import ApiKeyResponse, CurrentUser, LoginRequest
from filedrop.schemas.files import FileRecord, NewFile
from filedrop.schemas.health import HealthResponse
from filedrop.schemas.upload import UploadResponse

__all__ = [
    "ApiKeyResponse",
    "CurrentUser",
    "FileRecord",
    "HealthResponse",
    "LoginRequest",
    "NewFile",
    "UploadResponse",
]
