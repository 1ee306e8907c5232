"""
Create Join Request Use Case

Handles inviting an email address to join a school, one at a time or in bulk.
"""

import logging
from datetime import timedelta
from typing import Any, List

from pydantic import ValidationError

from space_together.app.services.unit_of_work import UnitOfWork
from space_together.app.use_cases.validation import validation_error
from space_together.domain.base import utc_now
from space_together.domain.entities import AuthUser, JoinRole, JoinSchoolRequest, JoinStatus
from space_together.domain.errors import AppError
from space_together.libs.result import Error, Result, Return

from .dtos import BulkCreateEntryResult, BulkCreateJoinRequestsResponse, JoinRequestInput
from .permissions import forbidden

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 7


class CreateJoinRequestUseCase:
    """
    Use case for inviting an email address to join a school.

    Business Rules:
    - Only admins, school staff and teachers can send invitations
    - The school must exist
    - Student invitations must name a class
    - A user that already belongs to the school cannot be invited
    - At most one Pending request per (email, school); the partial unique
      index settles concurrent creates
    - expires_at defaults to 7 days from now and may not be in the past
    """

    def __init__(self, uow: UnitOfWork, ttl_days: int = DEFAULT_TTL_DAYS, clock=utc_now):
        self.uow = uow
        self.ttl_days = ttl_days
        self.clock = clock

    async def execute(self, actor: AuthUser, data: JoinRequestInput) -> Result[JoinSchoolRequest]:
        """
        Execute create join request use case.

        Args:
            actor: Authenticated sender
            data: Invitation to create

        Returns:
            Result with the Pending JoinSchoolRequest, or Error
        """
        if not actor.is_admin_staff_or_teacher:
            return Return.err(forbidden("Only admins, staff and teachers can send join requests"))

        async with self.uow:
            try:
                return await self.create(actor, data, self.clock())
            except AppError as exc:
                return Return.err(exc.error)

    async def create(self, actor: AuthUser, data: JoinRequestInput, now) -> Result[JoinSchoolRequest]:
        school = await self.uow.schools.find_by_id(data.school_id)
        if school is None:
            return Return.err(Error("SCHOOL_NOT_FOUND", "School not found"))

        if data.role == JoinRole.Student and not data.class_id:
            return Return.err(
                Error("CLASS_REQUIRED", "class_id is required when inviting a student")
            )

        if data.expires_at is not None and data.expires_at <= now:
            return Return.err(Error("ALREADY_EXPIRED", "expires_at must be in the future"))
        expires_at = data.expires_at or now + timedelta(days=self.ttl_days)

        # Link the invitation to an existing account when there is one
        invited_user_id = None
        user = await self.uow.users.get_by_email(data.email)
        if user is not None:
            if user.belongs_to(school.id):
                return Return.err(
                    Error("ALREADY_MEMBER", "User is already a member of this school")
                )
            invited_user_id = user.id

        pending = await self.uow.join_requests.find_pending(data.email, school.id)
        if pending is not None:
            return Return.err(duplicate_pending())

        request = JoinSchoolRequest(
            school_id=school.id,
            invited_user_id=invited_user_id,
            class_id=data.class_id,
            role=data.role,
            email=data.email,
            type=data.type,
            message=data.message,
            status=JoinStatus.Pending,
            sent_at=now,
            sent_by=data.sent_by or actor.id,
            expires_at=expires_at,
            created_at=now,
        )
        try:
            created = await self.uow.join_requests.insert(request)
        except AppError as exc:
            if exc.code == "DUPLICATE_KEY":
                return Return.err(duplicate_pending())
            raise

        logger.info(f"Join request {created.id} sent to {created.email} for school {school.id}")
        return Return.ok(created)


class BulkCreateJoinRequestsUseCase:
    """
    Use case for sending many invitations at once.

    Business Rules:
    - Each entry is validated and created on its own
    - A failing entry is reported and never aborts the rest of the batch
    """

    def __init__(self, uow: UnitOfWork, ttl_days: int = DEFAULT_TTL_DAYS, clock=utc_now):
        self.uow = uow
        self.single = CreateJoinRequestUseCase(uow, ttl_days=ttl_days, clock=clock)
        self.clock = clock

    async def execute(
        self, actor: AuthUser, entries: List[Any]
    ) -> Result[BulkCreateJoinRequestsResponse]:
        if not actor.is_admin_staff_or_teacher:
            return Return.err(forbidden("Only admins, staff and teachers can send join requests"))
        if not entries:
            return Return.err(Error("EMPTY_BATCH", "No join requests to create"))

        response = BulkCreateJoinRequestsResponse()
        async with self.uow:
            now = self.clock()
            for index, entry in enumerate(entries):
                email = entry.get("email") if isinstance(entry, dict) else None
                if email is not None:
                    email = str(email)
                try:
                    if not isinstance(entry, dict):
                        raise AppError("VALIDATION_ERROR", "Join request entry must be an object")
                    data = JoinRequestInput.model_validate(entry)
                    result = await self.single.create(actor, data, now)
                except ValidationError as exc:
                    result = Return.err(validation_error(exc, "Invalid join request"))
                except AppError as exc:
                    result = Return.err(exc.error)

                if result.is_ok():
                    created = result.value
                    response.created.append(
                        BulkCreateEntryResult(index=index, email=created.email, request=created)
                    )
                else:
                    error = result.error
                    response.failed.append(
                        BulkCreateEntryResult(
                            index=index,
                            email=email,
                            error={"code": error.code, "message": error.message},
                        )
                    )

        logger.info(
            f"Bulk join requests: {len(response.created)} created, {len(response.failed)} failed"
        )
        return Return.ok(response)


def duplicate_pending() -> Error:
    return Error(
        "DUPLICATE_PENDING",
        "A pending join request already exists for this email and school",
    )

