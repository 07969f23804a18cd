"""Response schema for the upload endpoint."""

from pydantic import Field

from filedrop.schemas.files import FileRecord


class UploadResponse(FileRecord):
    """Metadata of the file holding the uploaded content."""

    duplicate: bool = Field(
        default=False,
        description="True when this account already had the same content; nothing new was stored.",
    )
