import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from mentorship.auth.dependencies import TokenIdentity, require_role, role_gated_route
from mentorship.core.errors import internal_error
from mentorship.database import get_db
from mentorship.models.session_request import SessionRequest, SessionStatus
from mentorship.models.user import User, UserRole
from mentorship.schemas import MatchResponse, MessageResponse, SessionRequestResponse, UserResponse

admin_only = require_role(UserRole.ADMIN, detail='Admins only')

# Role is checked for every route before the request body is parsed.
router = APIRouter(prefix='/admin', tags=['admin'], route_class=role_gated_route(UserRole.ADMIN, detail='Admins only'))

logger = logging.getLogger(__name__)


class UpdateRoleRequest(BaseModel):
    role: str | None = None


class AssignMatchRequest(BaseModel):
    mentor_id: int | None = Field(default=None, alias='mentorId')
    mentee_id: int | None = Field(default=None, alias='menteeId')
    topic: str | None = None

    class Config:
        populate_by_name = True


class UserListResponse(BaseModel):
    users: list[UserResponse]


class UserEnvelope(BaseModel):
    message: str
    user: UserResponse


class MatchListResponse(BaseModel):
    matches: list[MatchResponse]


class SessionStatsResponse(BaseModel):
    total: int
    accepted: int
    rejected: int
    pending: int


class AssignMatchResponse(BaseModel):
    message: str
    session: SessionRequestResponse


def count_sessions_by_status(db: Session) -> dict[str, int]:
    """Per-status totals from a single grouped query, so the counts share one snapshot."""
    counts = {session_status.value: 0 for session_status in SessionStatus}
    rows = db.query(SessionRequest.status, func.count(SessionRequest.id)).group_by(SessionRequest.status).all()
    for session_status, count in rows:
        counts[SessionStatus(session_status).value] = count
    counts['total'] = sum(count for _, count in rows)
    return counts


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')
    return user


@router.get('/users', response_model=UserListResponse)
def list_users(db: Session = Depends(get_db)):
    try:
        users = db.query(User).order_by(User.id.asc()).all()
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch users', exc) from exc

    return {'users': users}


@router.patch('/users/{user_id}/role', response_model=UserEnvelope, include_in_schema=False)
@router.put('/users/{user_id}/role', response_model=UserEnvelope)
def update_user_role(user_id: int, data: UpdateRoleRequest, db: Session = Depends(get_db)):
    if data.role not in {role.value for role in UserRole}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid role')

    try:
        user = get_user_or_404(db, user_id)
        user.role = UserRole(data.role)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to update role', exc) from exc

    logger.info('User %s role changed to %s', user_id, data.role)
    return {'message': 'User role updated', 'user': user}


@router.delete('/users/{user_id}', response_model=MessageResponse)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    try:
        user = get_user_or_404(db, user_id)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to delete user', exc) from exc

    logger.info('User %s deleted', user_id)
    return {'message': 'User deleted successfully'}


@router.get('/matches', response_model=MatchListResponse)
def list_matches(db: Session = Depends(get_db)):
    try:
        matches = (
            db.query(SessionRequest)
            .options(joinedload(SessionRequest.mentor), joinedload(SessionRequest.mentee))
            .filter(SessionRequest.status == SessionStatus.ACCEPTED)
            .order_by(SessionRequest.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch matches', exc) from exc

    return {'matches': matches}


@router.get('/session-stats', response_model=SessionStatsResponse)
def session_stats(db: Session = Depends(get_db)):
    try:
        return count_sessions_by_status(db)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch session stats', exc) from exc


@router.post('/assign-match', response_model=AssignMatchResponse, status_code=status.HTTP_201_CREATED)
def assign_mentor(
    data: AssignMatchRequest,
    identity: TokenIdentity = Depends(admin_only),
    db: Session = Depends(get_db),
):
    topic = (data.topic or '').strip()
    if not data.mentor_id or not data.mentee_id or not topic:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='mentorId, menteeId, and topic are required',
        )

    try:
        get_user_or_404(db, data.mentor_id)
        get_user_or_404(db, data.mentee_id)

        # Admin matches skip the request/respond flow and start out accepted.
        session_request = SessionRequest(
            mentor_id=data.mentor_id,
            mentee_id=data.mentee_id,
            topic=topic,
            status=SessionStatus.ACCEPTED,
        )
        db.add(session_request)
        db.commit()
        db.refresh(session_request)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to assign mentor', exc) from exc

    logger.info(
        'Admin %s matched mentor %s with mentee %s (session %s)',
        identity.user_id,
        data.mentor_id,
        data.mentee_id,
        session_request.id,
    )
    return {'message': 'Mentor assigned successfully', 'session': session_request}
