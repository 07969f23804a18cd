"""SQLAlchemy ORM models."""

from filedrop.models.banned_ip import BannedIP
from filedrop.models.base import Base
from filedrop.models.file import File
from filedrop.models.user import User

__all__ = ["Base", "BannedIP", "File", "User"]
