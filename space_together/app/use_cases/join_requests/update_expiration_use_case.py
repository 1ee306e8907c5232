"""
Update Join Request Expiration Use Case
"""

import logging
from datetime import datetime

from space_together.app.services.unit_of_work import UnitOfWork
from space_together.domain.base import to_naive_utc, utc_now
from space_together.domain.entities import AuthUser, JoinSchoolRequest
from space_together.domain.errors import AppError
from space_together.libs.result import Error, Result, Return

from .permissions import forbidden

logger = logging.getLogger(__name__)


class UpdateJoinRequestExpirationUseCase:
    """
    Use case for moving the expiry of a pending join request.

    Business Rules:
    - Only admins, school staff and teachers can change expiry
    - Only Pending requests can change
    - The new expiry must be in the future
    """

    def __init__(self, uow: UnitOfWork, clock=utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, actor: AuthUser, request_id: str, expires_at: datetime
    ) -> Result[JoinSchoolRequest]:
        if not actor.is_admin_staff_or_teacher:
            return Return.err(forbidden("Only admins, staff and teachers can change expiry"))

        now = self.clock()
        expires_at = to_naive_utc(expires_at)
        if expires_at <= now:
            return Return.err(Error("ALREADY_EXPIRED", "expires_at must be in the future"))

        async with self.uow:
            try:
                request = await self.uow.join_requests.find_by_id(request_id)
                if request is None:
                    return Return.err(Error("NOT_FOUND", "Join request not found"))
                if not request.is_pending:
                    return Return.err(Error("NOT_PENDING", "Join request is not pending"))

                updated = await self.uow.join_requests.update_expiration(
                    request.id, expires_at, now
                )
            except AppError as exc:
                return Return.err(exc.error)

        if updated is None:
            return Return.err(Error("NOT_PENDING", "Join request is not pending"))

        logger.info(f"Join request {request_id} now expires at {expires_at.isoformat()}")
        return Return.ok(updated)
