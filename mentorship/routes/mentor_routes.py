from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mentorship.core.errors import internal_error
from mentorship.database import get_db
from mentorship.models.user import User, UserRole
from mentorship.schemas import MentorResponse

router = APIRouter(tags=['mentors'])


class MentorListResponse(BaseModel):
    mentors: list[MentorResponse]


class MentorEnvelope(BaseModel):
    mentor: MentorResponse


def has_skill(mentor: User, skill: str) -> bool:
    return skill in (mentor.skills or [])


def filter_mentors(db: Session, skill: str | None = None, industry: str | None = None) -> list[User]:
    """Mentors holding ``skill`` exactly and working in ``industry`` (any case).

    Blank filters are ignored. Skill membership is checked in Python because
    JSON array containment differs between database backends.
    """
    query = db.query(User).filter(User.role == UserRole.MENTOR)

    industry = (industry or '').strip()
    if industry:
        query = query.filter(func.lower(User.industry) == industry.lower())

    mentors = query.order_by(User.id.asc()).all()

    if skill and skill.strip():
        mentors = [mentor for mentor in mentors if has_skill(mentor, skill)]

    return mentors


@router.get('/mentors', response_model=MentorListResponse)
def list_mentors(db: Session = Depends(get_db)):
    try:
        return {'mentors': filter_mentors(db)}
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch mentors', exc) from exc


@router.get('/mentors/filter', response_model=MentorListResponse)
def list_filtered_mentors(
    skill: str | None = Query(default=None),
    industry: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    try:
        return {'mentors': filter_mentors(db, skill=skill, industry=industry)}
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to filter mentors', exc) from exc


@router.get('/mentors/{mentor_id}', response_model=MentorEnvelope)
def get_mentor(mentor_id: int, db: Session = Depends(get_db)):
    try:
        mentor = db.get(User, mentor_id)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch mentor profile', exc) from exc

    if mentor is None or mentor.role != UserRole.MENTOR:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Mentor not found')

    return {'mentor': mentor}
