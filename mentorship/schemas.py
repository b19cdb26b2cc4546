"""Response shapes shared across routers.

Attributes are read from the ORM rows by their Python names and rendered with
the camelCase keys the frontend expects.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from mentorship.models.session_request import SessionStatus
from mentorship.models.user import UserRole


class UserSummary(BaseModel):
    id: int
    name: str | None = None
    email: str

    class Config:
        from_attributes = True


class MentorResponse(UserSummary):
    bio: str | None = None
    skills: list[str] | None = None
    goals: str | None = None
    industry: str | None = None


class MenteeSummary(UserSummary):
    bio: str | None = None
    skills: list[str] | None = None
    goals: str | None = None


class UserResponse(MentorResponse):
    role: UserRole
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")


class RegisteredUserResponse(UserResponse):
    # Registration echoes the stored credential hash back to the client.
    hashed_password: str = Field(serialization_alias="password")


class SessionRequestResponse(BaseModel):
    id: int
    mentor_id: int = Field(serialization_alias="mentorId")
    mentee_id: int = Field(serialization_alias="menteeId")
    topic: str
    status: SessionStatus
    feedback: str | None = None
    rating: int | None = None
    mentor_comment: str | None = Field(default=None, serialization_alias="mentorComment")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")

    class Config:
        from_attributes = True


class ReceivedRequestResponse(SessionRequestResponse):
    mentee: MenteeSummary


class SentRequestResponse(SessionRequestResponse):
    mentor: UserSummary


class MatchResponse(SessionRequestResponse):
    mentor: UserSummary
    mentee: UserSummary


class AvailabilityResponse(BaseModel):
    id: int
    mentor_id: int = Field(serialization_alias="mentorId")
    day: str | None = None
    start_time: str | None = Field(default=None, serialization_alias="startTime")
    end_time: str | None = Field(default=None, serialization_alias="endTime")

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
