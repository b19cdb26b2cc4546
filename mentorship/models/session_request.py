"""Session request model definitions."""

import enum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mentorship.database import Base


class SessionStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


RESPONSE_STATUSES = (SessionStatus.ACCEPTED, SessionStatus.REJECTED)


class SessionRequest(Base):
    """A mentee's request for a session with a mentor."""
    __tablename__ = "session_requests"

    id = Column(Integer, primary_key=True, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    topic = Column(String, nullable=False)
    status = Column(
        Enum(SessionStatus, name="session_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=SessionStatus.PENDING,
        index=True,
    )
    feedback = Column(Text)
    rating = Column(Integer)
    mentor_comment = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="check_rating_range"),
    )

    mentor = relationship("User", foreign_keys=[mentor_id])
    mentee = relationship("User", foreign_keys=[mentee_id])
