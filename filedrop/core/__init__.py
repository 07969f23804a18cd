"""Core app configuration and database."""

from filedrop.core.config import get_settings, settings
from filedrop.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
