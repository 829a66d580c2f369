"""Persistence models."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from boxdesigner.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class KeyValueEntry(Base):
    """Durable key-value slot; each value is one JSON document."""
    __tablename__ = "kv_entries"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
