"""ORM model for the network-origin denylist."""

from sqlalchemy import Column, Integer, String

from filedrop.models.base import Base


class BannedIP(Base):
    """A banned address; any row whose ip equals the caller's origin blocks it."""

    __tablename__ = "banned_ips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ip = Column(String(50), index=True)
