"""
Respond To Join Request Use Case

Handles accepting, rejecting and cancelling a pending join request.
"""

import logging
from typing import Optional

from space_together.api.utils.jwt import create_school_token
from space_together.app.services.unit_of_work import UnitOfWork
from space_together.domain.base import utc_now
from space_together.domain.entities import (
    RESPONSE_STATUSES,
    AuthUser,
    JoinSchoolRequest,
    JoinStatus,
)
from space_together.domain.errors import AppError
from space_together.libs.result import Error, Result, Return

from .dtos import AcceptJoinRequestResponse
from .permissions import forbidden, is_invitee, is_sender
from .provisioning import check_member, provision_member

logger = logging.getLogger(__name__)


class RespondToJoinRequestUseCase:
    """
    Use case for moving a Pending join request to a response status.

    Business Rules:
    - new_status is Accepted, Rejected or Cancelled
    - Accept/reject: the invitee or an admin, staff member or teacher
    - Cancel: the sender or an admin, staff member or teacher
    - Only Pending requests that have not reached expires_at can change
    - The status change is a single conditional update; a request that
      changed meanwhile is reported as NOT_PENDING or EXPIRED
    - Accepting claims the request first, then provisions the member in the
      school database and adds the school to the user; a failed provisioning
      puts the request back to Pending
    - Accept returns a school token
    """

    def __init__(self, uow: UnitOfWork, clock=utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(
        self,
        actor: AuthUser,
        request_id: str,
        new_status: JoinStatus,
        invited_user_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Result[JoinSchoolRequest]:
        """
        Execute respond use case.

        Args:
            actor: Authenticated caller
            request_id: Join request ID (hex)
            new_status: Accepted, Rejected or Cancelled
            invited_user_id: Account to link on accept (optional)
            message: Response message stored on the request (optional)

        Returns:
            Result with the updated JoinSchoolRequest (AcceptJoinRequestResponse
            on accept), or Error
        """
        if new_status not in RESPONSE_STATUSES:
            return Return.err(
                Error("INVALID_STATUS", "Status must be Accepted, Rejected or Cancelled")
            )

        async with self.uow:
            try:
                return await self._respond(actor, request_id, new_status, invited_user_id, message)
            except AppError as exc:
                return Return.err(exc.error)

    async def _respond(self, actor, request_id, new_status, invited_user_id, message):
        request = await self.uow.join_requests.find_by_id(request_id)
        if request is None:
            return Return.err(Error("NOT_FOUND", "Join request not found"))

        if not self._allowed(actor, request, new_status):
            return Return.err(forbidden(_forbidden_message(new_status)))

        now = self.clock()
        if request.status != JoinStatus.Pending:
            return Return.err(not_pending())
        if request.is_expired_at(now):
            return Return.err(expired())

        if new_status != JoinStatus.Accepted:
            updated = await self.uow.join_requests.transition(
                request.id, new_status, actor.id, now, message=message
            )
            if updated is None:
                return await self._lost_race(request.id, now)
            logger.info(f"Join request {request.id} {new_status.value.lower()} by {actor.id}")
            return Return.ok(updated)

        return await self._accept(actor, request, invited_user_id, message, now)

    async def _accept(self, actor, request, invited_user_id, message, now):
        user_id = (
            invited_user_id
            or request.invited_user_id
            or (actor.id if is_invitee(actor, request) else None)
        )
        if user_id:
            user = await self.uow.users.find_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "Invited user not found"))
        else:
            user = await self.uow.users.get_by_email(request.email)
            if user is None:
                return Return.err(
                    Error(
                        "INVITED_USER_REQUIRED",
                        "No account is registered for this email; invited_user_id is required",
                    )
                )

        school = await self.uow.schools.find_by_id(request.school_id)
        if school is None:
            return Return.err(Error("SCHOOL_NOT_FOUND", "School not found"))
        if not school.database_name:
            return Return.err(
                Error("SCHOOL_DATABASE_MISSING", "School database not configured")
            )

        scope = self.uow.for_school(school.database_name)
        await check_member(scope, request)

        # Claim the request before writing anything else
        updated = await self.uow.join_requests.transition(
            request.id,
            JoinStatus.Accepted,
            actor.id,
            now,
            invited_user_id=user.id,
            message=message,
        )
        if updated is None:
            return await self._lost_race(request.id, now)

        try:
            await provision_member(scope, request, user, school, now)
            await self.uow.users.add_school(user.id, school.id)
        except AppError:
            await self.uow.join_requests.reopen(request, now)
            logger.warning(
                f"Join request {request.id} reopened, provisioning user {user.id} failed"
            )
            raise

        logger.info(f"Join request {request.id} accepted, user {user.id} joined school {school.id}")
        return Return.ok(
            AcceptJoinRequestResponse(
                **updated.model_dump(), school_token=create_school_token(school)
            )
        )

    async def _lost_race(self, request_id: str, now) -> Result:
        current = await self.uow.join_requests.find_by_id(request_id)
        if current is None:
            return Return.err(Error("NOT_FOUND", "Join request not found"))
        if current.status == JoinStatus.Pending and current.is_expired_at(now):
            return Return.err(expired())
        return Return.err(not_pending())

    @staticmethod
    def _allowed(actor: AuthUser, request: JoinSchoolRequest, new_status: JoinStatus) -> bool:
        if actor.is_admin_staff_or_teacher:
            return True
        if new_status == JoinStatus.Cancelled:
            return is_sender(actor, request)
        return is_invitee(actor, request)


def not_pending() -> Error:
    return Error("NOT_PENDING", "Join request is not pending")


def expired() -> Error:
    return Error("EXPIRED", "Join request has expired")


def _forbidden_message(new_status: JoinStatus) -> str:
    if new_status == JoinStatus.Cancelled:
        return "You can only cancel join requests you sent"
    if new_status == JoinStatus.Accepted:
        return "You can only accept your own join requests"
    return "You can only reject your own join requests"
