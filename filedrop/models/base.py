"""SQLAlchemy declarative Base shared by the users, files and banned_ips models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; Base.metadata is what the schema bootstrap creates."""

    pass
