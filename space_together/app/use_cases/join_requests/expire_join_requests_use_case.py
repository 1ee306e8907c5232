"""
Join Request Expiry Sweeps

Administrative maintenance of expired invitations.
"""

import logging
from datetime import timedelta

from space_together.app.services.unit_of_work import UnitOfWork
from space_together.domain.base import utc_now
from space_together.domain.entities import AuthUser
from space_together.domain.errors import AppError
from space_together.libs.result import Error, Result, Return

from .dtos import CleanupExpiredResponse, ExpireOldResponse
from .permissions import forbidden

logger = logging.getLogger(__name__)


class ExpireOldJoinRequestsUseCase:
    """
    Use case for marking overdue Pending requests as Expired.

    Business Rules:
    - Pending requests with expires_at <= now become Expired
    - Running it twice in a row expires nothing the second time
    """

    def __init__(self, uow: UnitOfWork, clock=utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(self, actor: AuthUser) -> Result[ExpireOldResponse]:
        if not actor.is_admin_staff_or_teacher:
            return Return.err(forbidden("Only admins, staff and teachers can expire requests"))

        async with self.uow:
            try:
                count = await self.uow.join_requests.expire_old(self.clock())
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Expired {count} overdue join request(s)")
        return Return.ok(ExpireOldResponse(expired_count=count))


class CleanupExpiredJoinRequestsUseCase:
    """
    Use case for deleting old Expired requests.

    Business Rules:
    - Deletes only Expired requests last updated at least `days` ago
    - Requests in any other status are never touched
    """

    def __init__(self, uow: UnitOfWork, clock=utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(self, actor: AuthUser, days: int) -> Result[CleanupExpiredResponse]:
        if not actor.is_admin_staff_or_teacher:
            return Return.err(forbidden("Only admins, staff and teachers can clean up requests"))
        if days < 0:
            return Return.err(Error("VALIDATION_ERROR", "days must not be negative"))

        async with self.uow:
            try:
                cutoff = self.clock() - timedelta(days=days)
                count = await self.uow.join_requests.cleanup_expired(cutoff)
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Deleted {count} expired join request(s) older than {days} day(s)")
        return Return.ok(CleanupExpiredResponse(deleted_count=count))
