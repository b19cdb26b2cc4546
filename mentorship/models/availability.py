"""Availability model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from mentorship.database import Base


class Availability(Base):
    """Represents a time slot a mentor has offered."""
    __tablename__ = "availability"

    id = Column(Integer, primary_key=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(String)
    start_time = Column(String)
    end_time = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
