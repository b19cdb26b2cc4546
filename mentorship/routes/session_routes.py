import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from mentorship.auth.dependencies import TokenIdentity, get_owned_session, require_role
from mentorship.core import config
from mentorship.core.errors import internal_error
from mentorship.database import get_db
from mentorship.models.session_request import RESPONSE_STATUSES, SessionRequest, SessionStatus
from mentorship.models.user import User, UserRole
from mentorship.schemas import (
    ReceivedRequestResponse,
    SentRequestResponse,
    SessionRequestResponse,
)

router = APIRouter(tags=['sessions'])

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

mentee_only = require_role(UserRole.MENTEE, detail='Access denied. Mentees only.')
mentor_only = require_role(UserRole.MENTOR, detail='Access denied. Mentors only.')
respond_mentor_only = require_role(UserRole.MENTOR, detail='Mentors only')
feedback_mentee_only = require_role(UserRole.MENTEE, detail='Only mentees can submit feedback')
comment_mentor_only = require_role(UserRole.MENTOR, detail='Only mentors can comment')


class CreateSessionRequest(BaseModel):
    mentor_id: int | None = Field(default=None, alias='mentorId')
    topic: str | None = None

    class Config:
        populate_by_name = True


class RespondRequest(BaseModel):
    status: str | None = None


class FeedbackRequest(BaseModel):
    feedback: str | None = None
    # Left untyped so strings, floats and booleans reach the explicit range check.
    rating: Any = None


class MentorCommentRequest(BaseModel):
    mentor_comment: str | None = Field(default=None, alias='mentorComment')

    class Config:
        populate_by_name = True


class SessionEnvelope(BaseModel):
    message: str
    session: SessionRequestResponse


class RequestEnvelope(BaseModel):
    message: str
    request: SessionRequestResponse


class ReceivedRequestList(BaseModel):
    requests: list[ReceivedRequestResponse]


class SentRequestList(BaseModel):
    requests: list[SentRequestResponse]


class MentorSessionList(BaseModel):
    sessions: list[ReceivedRequestResponse]


class MenteeSessionList(BaseModel):
    sessions: list[SentRequestResponse]


def is_valid_rating(rating: Any) -> bool:
    if isinstance(rating, bool) or not isinstance(rating, int):
        return False
    return MIN_RATING <= rating <= MAX_RATING


def ensure_pending(session_request: SessionRequest) -> None:
    if config.ENFORCE_SESSION_STATUS_RULES and session_request.status != SessionStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Session has already been responded to',
        )


def ensure_accepted(session_request: SessionRequest) -> None:
    if config.ENFORCE_SESSION_STATUS_RULES and session_request.status != SessionStatus.ACCEPTED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Session has not been accepted',
        )


def list_owned_sessions(
    db: Session,
    owner_column,
    owner_id: int,
    counterpart: str,
    session_status: SessionStatus | None = None,
) -> list[SessionRequest]:
    query = db.query(SessionRequest).options(joinedload(getattr(SessionRequest, counterpart)))
    query = query.filter(owner_column == owner_id)
    if session_status is not None:
        query = query.filter(SessionRequest.status == session_status)
    return query.order_by(SessionRequest.id.asc()).all()


@router.post('/request-session', response_model=SessionEnvelope, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post('/request', response_model=SessionEnvelope, status_code=status.HTTP_201_CREATED)
def request_session(
    data: CreateSessionRequest,
    identity: TokenIdentity = Depends(mentee_only),
    db: Session = Depends(get_db),
):
    topic = (data.topic or '').strip()
    if not data.mentor_id or not topic:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Mentor ID and topic are required',
        )

    try:
        # The target only has to exist; it is not required to hold the MENTOR role.
        if db.get(User, data.mentor_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Mentor not found')

        session_request = SessionRequest(
            mentor_id=data.mentor_id,
            mentee_id=identity.user_id,
            topic=topic,
            status=SessionStatus.PENDING,
        )
        db.add(session_request)
        db.commit()
        db.refresh(session_request)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to send request', exc) from exc

    logger.info('Mentee %s requested session %s with mentor %s', identity.user_id, session_request.id, data.mentor_id)
    return {'message': 'Session request sent', 'session': session_request}


@router.get('/mentor/requests', response_model=ReceivedRequestList, include_in_schema=False)
@router.get('/requests/received', response_model=ReceivedRequestList)
def list_received_requests(
    identity: TokenIdentity = Depends(mentor_only),
    db: Session = Depends(get_db),
):
    try:
        requests = list_owned_sessions(db, SessionRequest.mentor_id, identity.user_id, 'mentee')
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch session requests', exc) from exc

    return {'requests': requests}


@router.get('/requests/sent', response_model=SentRequestList)
def list_sent_requests(
    identity: TokenIdentity = Depends(mentee_only),
    db: Session = Depends(get_db),
):
    try:
        requests = list_owned_sessions(db, SessionRequest.mentee_id, identity.user_id, 'mentor')
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch sent requests', exc) from exc

    return {'requests': requests}


@router.patch('/mentor/requests/{session_id}', response_model=RequestEnvelope, include_in_schema=False)
@router.put('/requests/{session_id}', response_model=RequestEnvelope)
def respond_to_request(
    session_id: int,
    data: RespondRequest,
    identity: TokenIdentity = Depends(respond_mentor_only),
    db: Session = Depends(get_db),
):
    if data.status not in {response.value for response in RESPONSE_STATUSES}:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Status must be accepted or rejected',
        )

    new_status = SessionStatus(data.status)
    try:
        session_request = get_owned_session(db, session_id, 'mentor', identity)
        ensure_pending(session_request)

        session_request.status = new_status
        db.commit()
        db.refresh(session_request)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to update session status', exc) from exc

    logger.info('Mentor %s marked session %s as %s', identity.user_id, session_id, new_status.value)
    return {'message': f'Session {new_status.value}', 'request': session_request}


@router.post('/sessions/{session_id}/feedback', response_model=SessionEnvelope, include_in_schema=False)
@router.put('/sessions/{session_id}/feedback', response_model=SessionEnvelope)
def submit_feedback(
    session_id: int,
    data: FeedbackRequest,
    identity: TokenIdentity = Depends(feedback_mentee_only),
    db: Session = Depends(get_db),
):
    feedback = (data.feedback or '').strip()
    if not feedback or not is_valid_rating(data.rating):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Feedback and rating ({MIN_RATING}-{MAX_RATING}) are required',
        )

    try:
        session_request = get_owned_session(db, session_id, 'mentee', identity)
        ensure_accepted(session_request)

        session_request.feedback = feedback
        session_request.rating = data.rating
        db.commit()
        db.refresh(session_request)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to submit feedback', exc) from exc

    return {'message': 'Feedback submitted', 'session': session_request}


@router.post('/sessions/{session_id}/comment', response_model=SessionEnvelope)
def add_mentor_comment(
    session_id: int,
    data: MentorCommentRequest,
    identity: TokenIdentity = Depends(comment_mentor_only),
    db: Session = Depends(get_db),
):
    try:
        session_request = get_owned_session(db, session_id, 'mentor', identity)
        ensure_accepted(session_request)

        if data.mentor_comment is not None:
            session_request.mentor_comment = data.mentor_comment
        db.commit()
        db.refresh(session_request)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to add comment', exc) from exc

    return {'message': 'Comment submitted', 'session': session_request}


@router.get('/sessions/mentor', response_model=MentorSessionList)
def list_mentor_sessions(
    identity: TokenIdentity = Depends(mentor_only),
    db: Session = Depends(get_db),
):
    try:
        sessions = list_owned_sessions(
            db, SessionRequest.mentor_id, identity.user_id, 'mentee', SessionStatus.ACCEPTED
        )
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch mentor sessions', exc) from exc

    return {'sessions': sessions}


@router.get('/sessions/mentee', response_model=MenteeSessionList)
def list_mentee_sessions(
    identity: TokenIdentity = Depends(mentee_only),
    db: Session = Depends(get_db),
):
    try:
        sessions = list_owned_sessions(
            db, SessionRequest.mentee_id, identity.user_id, 'mentor', SessionStatus.ACCEPTED
        )
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch mentee sessions', exc) from exc

    return {'sessions': sessions}
