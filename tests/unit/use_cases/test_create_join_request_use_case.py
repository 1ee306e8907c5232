from datetime import timedelta

import pytest

from space_together.app.use_cases.join_requests import (
    BulkCreateJoinRequestsUseCase,
    CreateJoinRequestUseCase,
    JoinRequestInput,
)
from space_together.domain.entities import JoinRole, JoinStatus, User
from space_together.domain.errors import AppError
from space_together.domain.ids import IdType


def invitation(school, **overrides):
    fields = dict(email="New.Teacher@Example.com", school_id=school.id, role=JoinRole.Teacher)
    fields.update(overrides)
    return JoinRequestInput(**fields)


@pytest.mark.asyncio
async def test_create_join_request_success(mock_uow, clock, now, staff_actor, school):
    """Invitation is stored Pending, lower-cased, expiring in 7 days"""
    # Arrange
    mock_uow.schools.find_by_id.return_value = school
    use_case = CreateJoinRequestUseCase(mock_uow, clock=clock)

    # Act
    result = await use_case.execute(staff_actor, invitation(school))

    # Assert
    assert result.is_ok()
    request = result.value
    assert request.email == "new.teacher@example.com"
    assert request.status == JoinStatus.Pending
    assert request.sent_by == staff_actor.id
    assert request.sent_at == now
    assert request.expires_at == now + timedelta(days=7)
    assert request.invited_user_id is None
    mock_uow.join_requests.find_pending.assert_called_once_with(
        "new.teacher@example.com", school.id
    )
    mock_uow.join_requests.insert.assert_called_once()


@pytest.mark.asyncio
async def test_create_join_request_links_existing_account(mock_uow, clock, staff_actor, school):
    # Arrange
    user = User(id=IdType.new().as_hex(), name="New Teacher", email="new.teacher@example.com")
    mock_uow.schools.find_by_id.return_value = school
    mock_uow.users.get_by_email.return_value = user

    # Act
    result = await CreateJoinRequestUseCase(mock_uow, clock=clock).execute(
        staff_actor, invitation(school)
    )

    # Assert
    assert result.is_ok()
    assert result.value.invited_user_id == user.id


@pytest.mark.asyncio
async def test_create_join_request_forbidden_for_students(mock_uow, student_actor, school):
    result = await CreateJoinRequestUseCase(mock_uow).execute(student_actor, invitation(school))

    assert result.is_err()
    assert result.error.code == "FORBIDDEN"
    mock_uow.join_requests.insert.assert_not_called()


@pytest.mark.asyncio
async def test_create_join_request_school_not_found(mock_uow, staff_actor, school):
    mock_uow.schools.find_by_id.return_value = None

    result = await CreateJoinRequestUseCase(mock_uow).execute(staff_actor, invitation(school))

    assert result.is_err()
    assert result.error.code == "SCHOOL_NOT_FOUND"


@pytest.mark.asyncio
async def test_create_student_request_requires_class(mock_uow, staff_actor, school):
    mock_uow.schools.find_by_id.return_value = school

    result = await CreateJoinRequestUseCase(mock_uow).execute(
        staff_actor, invitation(school, role=JoinRole.Student)
    )

    assert result.is_err()
    assert result.error.code == "CLASS_REQUIRED"


@pytest.mark.asyncio
async def test_create_join_request_rejects_past_expiry(mock_uow, clock, now, staff_actor, school):
    mock_uow.schools.find_by_id.return_value = school

    result = await CreateJoinRequestUseCase(mock_uow, clock=clock).execute(
        staff_actor, invitation(school, expires_at=now - timedelta(minutes=1))
    )

    assert result.is_err()
    assert result.error.code == "ALREADY_EXPIRED"


@pytest.mark.asyncio
async def test_create_join_request_already_member(mock_uow, staff_actor, school):
    # Arrange
    member = User(
        id=IdType.new().as_hex(),
        name="Member",
        email="new.teacher@example.com",
        schools=[school.id],
    )
    mock_uow.schools.find_by_id.return_value = school
    mock_uow.users.get_by_email.return_value = member

    # Act
    result = await CreateJoinRequestUseCase(mock_uow).execute(staff_actor, invitation(school))

    # Assert
    assert result.is_err()
    assert result.error.code == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_create_join_request_duplicate_pending(
    mock_uow, staff_actor, school, make_request
):
    mock_uow.schools.find_by_id.return_value = school
    mock_uow.join_requests.find_pending.return_value = make_request()

    result = await CreateJoinRequestUseCase(mock_uow).execute(staff_actor, invitation(school))

    assert result.is_err()
    assert result.error.code == "DUPLICATE_PENDING"
    mock_uow.join_requests.insert.assert_not_called()


@pytest.mark.asyncio
async def test_create_join_request_index_race_is_duplicate_pending(
    mock_uow, staff_actor, school
):
    """A concurrent create that wins the unique index surfaces as DUPLICATE_PENDING"""
    mock_uow.schools.find_by_id.return_value = school
    mock_uow.join_requests.insert.side_effect = AppError("DUPLICATE_KEY", "Duplicate key")

    result = await CreateJoinRequestUseCase(mock_uow).execute(staff_actor, invitation(school))

    assert result.is_err()
    assert result.error.code == "DUPLICATE_PENDING"


@pytest.mark.asyncio
async def test_create_join_request_store_failure(mock_uow, staff_actor, school):
    mock_uow.schools.find_by_id.side_effect = AppError("STORE_TIMEOUT", "Store timed out")

    result = await CreateJoinRequestUseCase(mock_uow).execute(staff_actor, invitation(school))

    assert result.is_err()
    assert result.error.code == "STORE_TIMEOUT"


@pytest.mark.asyncio
async def test_bulk_create_reports_each_entry(mock_uow, clock, staff_actor, school):
    """One bad entry never stops the others"""
    # Arrange
    mock_uow.schools.find_by_id.return_value = school
    entries = [
        {"email": "a@example.com", "school_id": school.id, "role": "Teacher"},
        {"email": "not-an-email", "school_id": school.id, "role": "Teacher"},
        {"email": "b@example.com", "school_id": school.id, "role": "Student"},
        {"email": "c@example.com", "school_id": school.id, "role": "Staff", "type": "Director"},
    ]

    # Act
    result = await BulkCreateJoinRequestsUseCase(mock_uow, clock=clock).execute(
        staff_actor, entries
    )

    # Assert
    assert result.is_ok()
    response = result.value
    assert [entry.index for entry in response.created] == [0, 3]
    assert [entry.index for entry in response.failed] == [1, 2]
    assert response.failed[0].error["code"] == "VALIDATION_ERROR"
    assert response.failed[0].email == "not-an-email"
    assert response.failed[1].error["code"] == "CLASS_REQUIRED"


@pytest.mark.asyncio
async def test_bulk_create_empty_batch(mock_uow, staff_actor):
    result = await BulkCreateJoinRequestsUseCase(mock_uow).execute(staff_actor, [])

    assert result.is_err()
    assert result.error.code == "EMPTY_BATCH"
