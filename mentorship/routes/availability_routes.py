import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mentorship.auth.dependencies import TokenIdentity, require_role
from mentorship.core.errors import internal_error
from mentorship.database import get_db
from mentorship.models.availability import Availability
from mentorship.models.user import UserRole
from mentorship.schemas import AvailabilityResponse

router = APIRouter(tags=['availability'])

logger = logging.getLogger(__name__)

mentor_only = require_role(UserRole.MENTOR, detail='Only mentors can set availability')


class CreateAvailabilityRequest(BaseModel):
    day: str | None = None
    start_time: str | None = Field(default=None, alias='startTime')
    end_time: str | None = Field(default=None, alias='endTime')

    class Config:
        populate_by_name = True


class AvailabilityEnvelope(BaseModel):
    message: str
    slot: AvailabilityResponse


@router.post('/mentor/availability', response_model=AvailabilityEnvelope, status_code=status.HTTP_201_CREATED)
def set_availability(
    data: CreateAvailabilityRequest,
    identity: TokenIdentity = Depends(mentor_only),
    db: Session = Depends(get_db),
):
    # Slots are stored as given: overlapping or inverted ranges are accepted.
    try:
        slot = Availability(
            mentor_id=identity.user_id,
            day=data.day,
            start_time=data.start_time,
            end_time=data.end_time,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to set availability', exc) from exc

    logger.info('Mentor %s added availability slot %s', identity.user_id, slot.id)
    return {'message': 'Availability set', 'slot': slot}
