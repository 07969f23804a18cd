"""ORM model for uploaded-file metadata."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKeyConstraint,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from filedrop.models.base import Base

OWNER_FOREIGN_KEY_NAME = "files_user_id"
OWNER_HASH_UNIQUE_NAME = "uq_files_owner_hash"


class File(Base):
    """
    Metadata for one stored upload; the bytes live in the file store under `name`.

    (uploaded_by, file_hash) is the dedup key: one row per owner per content hash.
    Rows are never updated or deleted.
    """

    __tablename__ = "files"
    __table_args__ = (
        ForeignKeyConstraint(
            ["uploaded_by"], ["users.id"], name=OWNER_FOREIGN_KEY_NAME
        ),
        UniqueConstraint("uploaded_by", "file_hash", name=OWNER_HASH_UNIQUE_NAME),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    filetype = Column(String(64), nullable=False)
    file_hash = Column(String(255), nullable=False)
    uploaded_by = Column(Integer, nullable=False, index=True)
    uploaded_by_ip = Column(String(50), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
