import pytest
from fastapi import HTTPException

from mentorship.models.availability import Availability
from mentorship.models.session_request import SessionRequest, SessionStatus
from mentorship.models.user import User, UserRole
from mentorship.routes.admin_routes import (
    AssignMatchRequest,
    UpdateRoleRequest,
    admin_only,
    assign_mentor,
    delete_user,
    list_matches,
    list_users,
    session_stats,
    update_user_role,
)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.mark.parametrize('role', [UserRole.MENTOR, UserRole.MENTEE])
def test_admin_only_forbids_other_roles(make_user, identity_for, role: UserRole) -> None:
    with pytest.raises(HTTPException) as exception_info:
        admin_only(identity=identity_for(make_user(role)))

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'Admins only'


def test_list_users_returns_every_role(db, admin, make_user) -> None:
    make_user(UserRole.MENTOR)
    make_user(UserRole.MENTEE)

    users = list_users(db=db)['users']

    assert {user.role for user in users} == {UserRole.ADMIN, UserRole.MENTOR, UserRole.MENTEE}


def test_update_user_role_changes_role(db, admin, make_user) -> None:
    user = make_user(UserRole.MENTEE)

    result = update_user_role(user_id=user.id, data=UpdateRoleRequest(role='MENTOR'), db=db)

    assert result['message'] == 'User role updated'
    assert result['user'].role == UserRole.MENTOR


@pytest.mark.parametrize('role', [None, 'mentor', 'OWNER'])
def test_update_user_role_rejects_roles_outside_enum(db, admin, make_user, role) -> None:
    user = make_user(UserRole.MENTEE)

    with pytest.raises(HTTPException) as exception_info:
        update_user_role(user_id=user.id, data=UpdateRoleRequest(role=role), db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Invalid role'


def test_update_user_role_returns_not_found(db, admin) -> None:
    with pytest.raises(HTTPException) as exception_info:
        update_user_role(user_id=999, data=UpdateRoleRequest(role='ADMIN'), db=db)

    assert exception_info.value.status_code == 404


def test_delete_user_removes_row(db, admin, make_user) -> None:
    user = make_user(UserRole.MENTEE)
    user_id = user.id

    result = delete_user(user_id=user_id, db=db)

    assert result == {'message': 'User deleted successfully'}
    assert db.get(User, user_id) is None


@pytest.mark.parametrize('deleted', ['mentor', 'mentee'])
def test_delete_user_cascades_to_sessions_and_availability(db, admin, make_user, make_session, deleted) -> None:
    participants = {'mentor': make_user(UserRole.MENTOR), 'mentee': make_user(UserRole.MENTEE)}
    make_session(participants['mentor'], participants['mentee'], SessionStatus.ACCEPTED)
    db.add(Availability(mentor_id=participants['mentor'].id, day='Monday', start_time='09:00', end_time='10:00'))
    db.commit()

    delete_user(user_id=participants[deleted].id, db=db)

    assert db.query(SessionRequest).count() == 0
    if deleted == 'mentor':
        assert db.query(Availability).count() == 0
    assert list_matches(db=db) == {'matches': []}


def test_delete_user_returns_not_found(db, admin) -> None:
    with pytest.raises(HTTPException) as exception_info:
        delete_user(user_id=999, db=db)

    assert exception_info.value.status_code == 404


def test_list_matches_returns_accepted_sessions_with_participants(db, make_user, make_session) -> None:
    mentor = make_user(UserRole.MENTOR, name='Grace')
    mentee = make_user(UserRole.MENTEE, name='Linus')
    accepted = make_session(mentor, mentee, SessionStatus.ACCEPTED, rating=4, feedback='Solid')
    make_session(mentor, mentee, SessionStatus.PENDING)

    matches = list_matches(db=db)['matches']

    assert [match.id for match in matches] == [accepted.id]
    assert matches[0].mentor.name == 'Grace'
    assert matches[0].mentee.name == 'Linus'
    assert matches[0].rating == 4


def test_session_stats_counts_sum_to_total(db, make_user, make_session) -> None:
    mentor = make_user(UserRole.MENTOR)
    mentee = make_user(UserRole.MENTEE)
    for session_status in (
        SessionStatus.PENDING,
        SessionStatus.PENDING,
        SessionStatus.ACCEPTED,
        SessionStatus.REJECTED,
        SessionStatus.ACCEPTED,
        SessionStatus.ACCEPTED,
    ):
        make_session(mentor, mentee, session_status)

    stats = session_stats(db=db)

    assert stats == {'total': 6, 'accepted': 3, 'rejected': 1, 'pending': 2}
    assert stats['accepted'] + stats['rejected'] + stats['pending'] == stats['total']


def test_session_stats_on_empty_store(db) -> None:
    assert session_stats(db=db) == {'total': 0, 'accepted': 0, 'rejected': 0, 'pending': 0}


def test_assign_mentor_creates_accepted_session(db, admin, make_user, identity_for) -> None:
    mentor = make_user(UserRole.MENTOR)
    mentee = make_user(UserRole.MENTEE)

    result = assign_mentor(
        data=AssignMatchRequest(mentorId=mentor.id, menteeId=mentee.id, topic='Onboarding'),
        identity=identity_for(admin),
        db=db,
    )

    assert result['message'] == 'Mentor assigned successfully'
    assert result['session'].status == SessionStatus.ACCEPTED
    assert result['session'].mentor_id == mentor.id
    assert result['session'].mentee_id == mentee.id


@pytest.mark.parametrize(
    'payload',
    [
        {'menteeId': 2, 'topic': 'Onboarding'},
        {'mentorId': 1, 'topic': 'Onboarding'},
        {'mentorId': 1, 'menteeId': 2},
    ],
)
def test_assign_mentor_requires_all_fields(db, admin, identity_for, payload) -> None:
    with pytest.raises(HTTPException) as exception_info:
        assign_mentor(data=AssignMatchRequest(**payload), identity=identity_for(admin), db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'mentorId, menteeId, and topic are required'
    assert db.query(SessionRequest).count() == 0


def test_assign_mentor_rejects_unknown_users(db, admin, make_user, identity_for) -> None:
    mentor = make_user(UserRole.MENTOR)

    with pytest.raises(HTTPException) as exception_info:
        assign_mentor(
            data=AssignMatchRequest(mentorId=mentor.id, menteeId=999, topic='Onboarding'),
            identity=identity_for(admin),
            db=db,
        )

    assert exception_info.value.status_code == 404
