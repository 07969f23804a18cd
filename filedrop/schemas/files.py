"""Schemas for file metadata passed into and out of the content registry."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NewFile(BaseModel):
    """Fully populated metadata for an upload about to be recorded."""

    name: str = Field(..., min_length=1, max_length=255, description="Stored name")
    original_name: str = Field(..., max_length=255, description="Client-supplied name")
    filetype: str = Field(..., max_length=64, description="Filetype label")
    file_hash: str = Field(..., min_length=1, max_length=255, description="Content hash")
    uploaded_by: int = Field(..., description="Owning user id")
    uploaded_by_ip: str = Field(..., max_length=50, description="Uploader network origin")
    created_at: datetime | None = Field(
        default=None, description="Creation time; the database clock when omitted"
    )


class FileRecord(BaseModel):
    """Stored file metadata as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    original_name: str
    filetype: str
    file_hash: str
    uploaded_by: int
    created_at: datetime
