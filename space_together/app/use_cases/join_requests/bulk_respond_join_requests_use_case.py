"""
Bulk Respond To Join Requests Use Case

Handles applying one response status to many join requests.
"""

import logging
from typing import List

from space_together.app.services.unit_of_work import UnitOfWork
from space_together.domain.base import utc_now
from space_together.domain.entities import RESPONSE_STATUSES, AuthUser, JoinStatus
from space_together.domain.errors import AppError
from space_together.libs.result import Error, Result, Return

from .dtos import BulkRespondResponse
from .permissions import forbidden

logger = logging.getLogger(__name__)


class BulkRespondJoinRequestsUseCase:
    """
    Use case for responding to many join requests at once.

    Business Rules:
    - Only admins, school staff and teachers can respond in bulk
    - Status must be Accepted, Rejected or Cancelled
    - Only Pending requests that have not expired are modified; the rest
      are skipped silently
    - Accepted requests are linked to the account registered for their
      email; requests with no linked or registered account are skipped
    """

    def __init__(self, uow: UnitOfWork, clock=utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(
        self,
        actor: AuthUser,
        request_ids: List[str],
        new_status: JoinStatus,
        return_documents: bool = False,
    ) -> Result[BulkRespondResponse]:
        if not actor.is_admin_staff_or_teacher:
            return Return.err(forbidden("Only admins, staff and teachers can respond in bulk"))
        if new_status not in RESPONSE_STATUSES:
            return Return.err(
                Error("INVALID_STATUS", "Status must be Accepted, Rejected or Cancelled")
            )
        if not request_ids:
            return Return.err(Error("EMPTY_BATCH", "No join requests given"))

        async with self.uow:
            try:
                now = self.clock()
                if new_status == JoinStatus.Accepted:
                    modified, documents = await self._accept_each(actor, request_ids, now)
                else:
                    modified, documents = await self.uow.join_requests.bulk_transition(
                        request_ids, new_status, actor.id, now, return_documents=return_documents
                    )
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(
            f"Bulk {new_status.value} by {actor.id}: {modified} of {len(request_ids)} modified"
        )
        return Return.ok(
            BulkRespondResponse(
                modified_count=modified,
                requests=documents if return_documents else [],
            )
        )

    async def _accept_each(self, actor: AuthUser, request_ids: List[str], now):
        modified = 0
        documents = []
        for request_id in request_ids:
            request = await self.uow.join_requests.find_by_id(request_id)
            if request is None or request.status != JoinStatus.Pending:
                continue

            invited_user_id = request.invited_user_id
            if not invited_user_id:
                user = await self.uow.users.get_by_email(request.email)
                if user is None:
                    logger.warning(f"Skipping join request {request_id}: no account for {request.email}")
                    continue
                invited_user_id = user.id

            updated = await self.uow.join_requests.transition(
                request.id, JoinStatus.Accepted, actor.id, now, invited_user_id=invited_user_id
            )
            if updated is not None:
                modified += 1
                documents.append(updated)
        return modified, documents
