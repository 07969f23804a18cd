"""ORM model for accounts (password login and API key auth)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from filedrop.models.base import Base


class User(Base):
    """
    Account that owns uploaded files.

    api_key is the account's bearer token; NULL means no active token.
    Rows are created by the admin CLI; request handling only reads them.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    api_key = Column(String(128), nullable=True, unique=True, index=True)
    last_update = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
