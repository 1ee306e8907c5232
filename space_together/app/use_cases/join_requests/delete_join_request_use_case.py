"""
Delete Join Request Use Case
"""

import logging

from space_together.app.services.unit_of_work import UnitOfWork
from space_together.domain.entities import AuthUser
from space_together.domain.errors import AppError
from space_together.libs.result import Result, Return

from .dtos import DeleteJoinRequestResponse
from .permissions import forbidden

logger = logging.getLogger(__name__)


class DeleteJoinRequestUseCase:
    """
    Use case for deleting a join request in any status.

    Business Rules:
    - Only admins, school staff and teachers can delete
    - Deleting a missing request is NOT_FOUND
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, actor: AuthUser, request_id: str) -> Result[DeleteJoinRequestResponse]:
        if not actor.is_admin_staff_or_teacher:
            return Return.err(forbidden("Only admins, staff and teachers can delete requests"))

        async with self.uow:
            try:
                await self.uow.join_requests.delete(request_id)
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Join request {request_id} deleted by {actor.id}")
        return Return.ok(DeleteJoinRequestResponse(status="deleted"))
