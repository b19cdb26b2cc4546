import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('PASSWORD_HASH_ROUNDS', '4')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from mentorship.auth import jwt_handler  # noqa: E402
from mentorship.auth.dependencies import TokenIdentity  # noqa: E402
from mentorship.auth.passwords import hash_password  # noqa: E402
from mentorship.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from mentorship.main import app  # noqa: E402
from mentorship.models.availability import Availability  # noqa: E402, F401
from mentorship.models.session_request import SessionRequest, SessionStatus  # noqa: E402
from mentorship.models.user import User, UserRole  # noqa: E402

DEFAULT_PASSWORD = 'secret123'


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def testing_session_local(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(testing_session_local):
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(testing_session_local):
    def override_get_db():
        session = testing_session_local()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {'value': 0}

    def _make_user(role: UserRole = UserRole.MENTEE, **fields) -> User:
        counter['value'] += 1
        defaults = {
            'name': f'{role.value.title()} {counter["value"]}',
            'email': f'{role.value.lower()}{counter["value"]}@example.com',
            'hashed_password': hash_password(DEFAULT_PASSWORD),
            'skills': [],
        }
        defaults.update(fields)
        user = User(role=role, **defaults)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_session(db):
    def _make_session(mentor: User, mentee: User, status: SessionStatus = SessionStatus.PENDING, **fields):
        session_request = SessionRequest(
            mentor_id=mentor.id,
            mentee_id=mentee.id,
            topic=fields.pop('topic', 'Career planning'),
            status=status,
            **fields,
        )
        db.add(session_request)
        db.commit()
        db.refresh(session_request)
        return session_request

    return _make_session


@pytest.fixture
def identity_for():
    def _identity_for(user: User) -> TokenIdentity:
        return TokenIdentity(user_id=user.id, role=user.role)

    return _identity_for


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = jwt_handler.create_access_token(user_id=user.id, role=user.role.value)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers
