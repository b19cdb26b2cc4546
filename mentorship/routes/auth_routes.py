import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from mentorship.auth import jwt_handler
from mentorship.auth.dependencies import TokenIdentity, get_current_identity
from mentorship.auth.passwords import hash_password, verify_password
from mentorship.core.errors import internal_error
from mentorship.database import get_db
from mentorship.models.user import User, UserRole
from mentorship.schemas import RegisteredUserResponse, UserResponse

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('bio', 'skills', 'goals', 'industry')


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized:
        raise ValueError('Email is required.')
    return normalized


class RegisterRequest(BaseModel):
    name: str | None = None
    email: str
    password: str
    role: UserRole
    bio: str | None = None
    skills: list[str] | None = None
    goals: str | None = None
    industry: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class UpdateProfileRequest(BaseModel):
    bio: str | None = None
    skills: list[str] | None = None
    goals: str | None = None
    industry: str | None = None


class RegisterResponse(BaseModel):
    message: str
    user: RegisteredUserResponse


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class UserEnvelope(BaseModel):
    message: str | None = None
    user: UserResponse


@router.post('/register', response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        existing_user = db.query(User).filter(User.email == data.email).first()
        if existing_user:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='User already exists')

        new_user = User(
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
            role=data.role,
            bio=data.bio,
            skills=data.skills or [],
            goals=data.goals,
            industry=data.industry,
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='User already exists') from exc
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Registration failed', exc) from exc

    logger.info('Registered user %s with role %s', new_user.id, new_user.role.value)
    return {'message': 'User registered successfully', 'user': new_user}


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = db.query(User).filter(User.email == data.email).first()
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Login failed', exc) from exc

    if user is None or not verify_password(data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid credentials')

    token = jwt_handler.create_access_token(user_id=user.id, role=user.role.value)
    return {'token': token, 'user': user}


@router.get('/me', response_model=UserEnvelope, include_in_schema=False)
@router.get('/users/me', response_model=UserEnvelope)
def get_profile(
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        user = db.get(User, identity.user_id)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Something went wrong', exc) from exc

    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

    return {'user': user}


@router.put('/users/me/profile', response_model=UserEnvelope)
def update_profile(
    data: UpdateProfileRequest,
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        user = db.get(User, identity.user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

        # Fields the client omitted are left untouched.
        for field_name, value in data.model_dump(include=set(PROFILE_FIELDS), exclude_unset=True).items():
            setattr(user, field_name, value)

        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to update profile', exc) from exc

    return {'message': 'Profile updated', 'user': user}


@router.get('/users/{user_id}', response_model=UserEnvelope, dependencies=[Depends(get_current_identity)])
def get_user_by_id(user_id: int, db: Session = Depends(get_db)):
    try:
        user = db.get(User, user_id)
    except SQLAlchemyError as exc:
        raise internal_error(db, 'Failed to fetch user', exc) from exc

    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

    return {'user': user}
