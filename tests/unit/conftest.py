from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from space_together.domain.entities import (
    AuthUser,
    JoinRole,
    JoinSchoolRequest,
    JoinStatus,
    School,
    User,
    UserRole,
)
from space_together.domain.ids import IdType

NOW = datetime(2025, 3, 1, 12, 0, 0)


def new_id() -> str:
    return IdType.new().as_hex()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions

    uow.users = MagicMock()
    uow.users.find_by_id = AsyncMock(return_value=None)
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.add_school = AsyncMock()

    uow.schools = MagicMock()
    uow.schools.find_by_id = AsyncMock(return_value=None)

    uow.join_requests = MagicMock()
    uow.join_requests.find_by_id = AsyncMock(return_value=None)
    uow.join_requests.find_pending = AsyncMock(return_value=None)
    uow.join_requests.insert = AsyncMock(side_effect=lambda request: request)
    uow.join_requests.transition = AsyncMock()
    uow.join_requests.reopen = AsyncMock(return_value=True)
    uow.join_requests.bulk_transition = AsyncMock()
    uow.join_requests.update_expiration = AsyncMock()
    uow.join_requests.expire_old = AsyncMock()
    uow.join_requests.cleanup_expired = AsyncMock()
    uow.join_requests.delete = AsyncMock()

    school_scope = MagicMock()
    school_scope.database_name = "school_test"
    for name in ("students", "teachers", "school_staff", "classes"):
        repository = MagicMock()
        repository.find_by_id = AsyncMock(return_value=None)
        repository.find_by = AsyncMock(return_value=None)
        repository.count = AsyncMock(return_value=0)
        repository.insert = AsyncMock(side_effect=lambda entity: entity)
        repository.update = AsyncMock()
        setattr(school_scope, name, repository)
    uow.for_school = MagicMock(return_value=school_scope)
    return uow


@pytest.fixture
def staff_actor():
    return AuthUser(id=new_id(), email="staff@school.test", role=UserRole.SCHOOLSTAFF)


@pytest.fixture
def student_actor():
    return AuthUser(id=new_id(), email="pupil@example.com", role=UserRole.STUDENT)


@pytest.fixture
def school():
    school_id = new_id()
    return School(
        id=school_id,
        username="greenhill",
        name="Greenhill Academy",
        database_name=f"school_{school_id}",
    )


@pytest.fixture
def invitee(student_actor):
    return User(id=student_actor.id, name="Pupil One", email=student_actor.email)


@pytest.fixture
def make_request(school, staff_actor):
    def factory(**overrides):
        fields = dict(
            id=new_id(),
            school_id=school.id,
            role=JoinRole.Teacher,
            email="pupil@example.com",
            status=JoinStatus.Pending,
            sent_at=NOW - timedelta(days=1),
            sent_by=staff_actor.id,
            expires_at=NOW + timedelta(days=6),
            created_at=NOW - timedelta(days=1),
        )
        fields.update(overrides)
        return JoinSchoolRequest(**fields)

    return factory
