"""SQLAlchemy models."""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from .database import Base


class KeyValueEntry(Base):
    """One persisted collection, stored as JSON text under a fixed key."""
    __tablename__ = "kv_entries"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
