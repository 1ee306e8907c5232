"""
Join Request Query Use Cases

Read-only access to join requests: single fetch, filtered lists, the
caller's own invitations and per-status statistics.
"""

from typing import Optional

from space_together.app.repositories.join_school_request_repository import JoinRequestQuery
from space_together.app.services.unit_of_work import UnitOfWork
from space_together.domain.base import utc_now
from space_together.domain.entities import AuthUser, JoinStatus
from space_together.domain.errors import AppError
from space_together.libs.result import Error, Result, Return

from .dtos import CheckPendingResponse, CountResponse, JoinRequestPage, JoinRequestStatsResponse


class GetJoinRequestUseCase:
    """Fetch one join request, optionally with school, invitee and sender"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, request_id: str, with_relations: bool = False) -> Result:
        async with self.uow:
            try:
                if with_relations:
                    request = await self.uow.join_requests.find_with_relations(request_id)
                else:
                    request = await self.uow.join_requests.find_by_id(request_id)
            except AppError as exc:
                return Return.err(exc.error)

        if request is None:
            return Return.err(Error("NOT_FOUND", "Join request not found"))
        return Return.ok(request)


class QueryJoinRequestsUseCase:
    """
    Filter join requests, newest first.

    Business Rules:
    - email matches case-insensitively as a substring
    - older_than_days keeps requests created at least that many days ago
    """

    def __init__(self, uow: UnitOfWork, clock=utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, query: JoinRequestQuery, with_relations: bool = False
    ) -> Result[JoinRequestPage]:
        async with self.uow:
            try:
                if with_relations:
                    page = await self.uow.join_requests.query_with_relations(query, self.clock())
                else:
                    page = await self.uow.join_requests.query(query, self.clock())
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(to_page(page))


class MyJoinRequestsUseCase:
    """
    Join requests addressed to the caller.

    Business Rules:
    - A request is the caller's when it is linked to the caller's account
      or sent to the caller's email
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        actor: AuthUser,
        pending_only: bool = False,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> Result[JoinRequestPage]:
        match = {
            "$or": [
                {"invited_user_id": actor.id},
                {"email": actor.email.strip().lower()},
            ]
        }
        if pending_only:
            match["status"] = JoinStatus.Pending.value

        async with self.uow:
            try:
                page = await self.uow.join_requests.list(limit=limit, skip=skip, extra_match=match)
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(to_page(page))


class CheckPendingJoinRequestUseCase:
    """Tell whether (email, school) has a Pending request"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, school_id: str, email: str) -> Result[CheckPendingResponse]:
        async with self.uow:
            try:
                pending = await self.uow.join_requests.find_pending(
                    email.strip().lower(), school_id
                )
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(CheckPendingResponse(has_pending=pending is not None, request=pending))


class JoinRequestStatsUseCase:
    """Count join requests per status"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[JoinRequestStatsResponse]:
        async with self.uow:
            try:
                counts = await self.uow.join_requests.stats_by_status()
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(
            JoinRequestStatsResponse(
                total=sum(counts.values()),
                pending=counts.get(JoinStatus.Pending.value, 0),
                accepted=counts.get(JoinStatus.Accepted.value, 0),
                rejected=counts.get(JoinStatus.Rejected.value, 0),
                expired=counts.get(JoinStatus.Expired.value, 0),
                cancelled=counts.get(JoinStatus.Cancelled.value, 0),
            )
        )


class CountJoinRequestsUseCase:
    """Count join requests in one status, optionally for one school"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, status: JoinStatus, school_id: Optional[str] = None
    ) -> Result[CountResponse]:
        async with self.uow:
            try:
                count = await self.uow.join_requests.count_by_status(status, school_id)
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(CountResponse(count=count))


def to_page(page) -> JoinRequestPage:
    return JoinRequestPage(
        items=page.items,
        total=page.total,
        total_pages=page.total_pages,
        current_page=page.current_page,
    )
