"""
Member provisioning

Accepting a join request creates the invitee's record in the school's own
database: a student, a teacher or a staff member depending on the role.
"""

import logging
import secrets
from datetime import datetime

from space_together.app.services.unit_of_work import SchoolRepositories
from space_together.domain.entities import (
    JoinRole,
    JoinSchoolRequest,
    School,
    SchoolStaff,
    SchoolStaffType,
    Student,
    StudentStatus,
    Teacher,
    TeacherPatch,
    TeacherType,
    User,
    parse_staff_type,
    parse_teacher_type,
)
from space_together.domain.errors import AppError

logger = logging.getLogger(__name__)

JOIN_REQUEST_TAG = "join-request"
HEAD_OF_STUDIES_LIMIT = 5


def registration_number(school: School, now: datetime) -> str:
    return f"{school.username}-{now.year}-{secrets.randbelow(10000):04d}"


async def check_member(scope: SchoolRepositories, request: JoinSchoolRequest) -> None:
    """
    Read-only checks run before the request is claimed.

    Raises:
        AppError: CLASS_NOT_FOUND, DIRECTOR_EXISTS, HEAD_OF_STUDIES_LIMIT or a
                  store error
    """
    if request.role == JoinRole.Student:
        if request.class_id and await scope.classes.find_by_id(request.class_id) is None:
            raise AppError("CLASS_NOT_FOUND", "Class not found in school database")
    elif request.role == JoinRole.Staff:
        staff_type = parse_staff_type(request.type)
        count = await scope.school_staff.count(extra_match={"type": staff_type.value})
        if staff_type == SchoolStaffType.Director and count >= 1:
            raise AppError("DIRECTOR_EXISTS", "This school already has a Director")
        if staff_type == SchoolStaffType.HeadOfStudies and count >= HEAD_OF_STUDIES_LIMIT:
            raise AppError(
                "HEAD_OF_STUDIES_LIMIT",
                f"This school already has {HEAD_OF_STUDIES_LIMIT} HeadOfStudies",
            )


async def provision_member(
    scope: SchoolRepositories,
    request: JoinSchoolRequest,
    user: User,
    school: School,
    now: datetime,
) -> None:
    """
    Create the member record for an accepted request.

    A record already linked to the user is kept as is, so running this twice
    for the same user creates one member.

    Raises:
        AppError: DIRECTOR_EXISTS or a store error
    """
    if request.role == JoinRole.Student:
        await _provision_student(scope, request, user, school, now)
    elif request.role == JoinRole.Teacher:
        await _provision_teacher(scope, request, user, school)
    else:
        await _provision_staff(scope, request, user, school)


async def _linked(repository, scope, user) -> bool:
    existing = await repository.find_by("user_id", user.id)
    if existing is not None:
        logger.info(f"User {user.id} already has member {existing.id} in {scope.database_name}")
    return existing is not None


async def _provision_student(scope, request, user, school, now):
    if await _linked(scope.students, scope, user):
        return

    student = Student(
        user_id=user.id,
        school_id=school.id,
        class_id=request.class_id,
        creator_id=request.sent_by,
        name=user.name,
        email=user.email,
        phone=user.phone,
        gender=user.gender,
        registration_number=registration_number(school, now),
        admission_year=now.year,
        status=StudentStatus.Active,
        is_active=False,
        tags=[JOIN_REQUEST_TAG],
    )
    created = await scope.students.insert(student)
    logger.info(f"Student {created.id} created in {scope.database_name} for user {user.id}")


async def _provision_teacher(scope, request, user, school):
    teacher_type = parse_teacher_type(request.type)
    if await _linked(scope.teachers, scope, user):
        return

    existing = await scope.teachers.find_by("email", user.email)
    if existing is None:
        teacher = Teacher(
            user_id=user.id,
            school_id=school.id,
            creator_id=request.sent_by,
            name=user.name,
            email=user.email,
            phone=user.phone,
            gender=user.gender,
            image=user.image,
            image_id=user.image_id,
            type=teacher_type,
            is_active=False,
            tags=[JOIN_REQUEST_TAG],
        )
        created = await scope.teachers.insert(teacher)
        logger.info(f"Teacher {created.id} created in {scope.database_name} for user {user.id}")
        return

    # Link the existing record and only fill what it is missing
    patch = TeacherPatch(
        user_id=user.id,
        name=user.name if not existing.name.strip() else None,
        phone=user.phone if existing.phone is None else None,
        gender=user.gender if existing.gender is None else None,
        image=user.image if existing.image is None else None,
        image_id=user.image_id if existing.image_id is None else None,
        type=teacher_type if existing.type == TeacherType.Regular else None,
        tags=[JOIN_REQUEST_TAG] if not existing.tags else None,
    )
    await scope.teachers.update(existing.id, patch)
    logger.info(f"Teacher {existing.id} in {scope.database_name} linked to user {user.id}")


async def _provision_staff(scope, request, user, school):
    staff_type = parse_staff_type(request.type)
    if await _linked(scope.school_staff, scope, user):
        return

    staff = SchoolStaff(
        user_id=user.id,
        school_id=school.id,
        creator_id=request.sent_by,
        name=user.name,
        email=user.email,
        type=staff_type,
        is_active=False,
        tags=[JOIN_REQUEST_TAG],
    )
    try:
        created = await scope.school_staff.insert(staff)
    except AppError as exc:
        # Two concurrent Director accepts: the partial unique index decides
        if exc.code == "DUPLICATE_KEY" and staff_type == SchoolStaffType.Director:
            raise AppError("DIRECTOR_EXISTS", "This school already has a Director") from exc
        raise
    logger.info(f"Staff {created.id} created in {scope.database_name} for user {user.id}")
