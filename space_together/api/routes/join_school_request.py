from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from space_together.api.error import raise_for_error
from space_together.api.utils.events import publish_change
from space_together.api.utils.query import page_limit, parse_enum
from space_together.app.repositories.join_school_request_repository import JoinRequestQuery
from space_together.app.services.event_bus import IEventBus
from space_together.app.services.unit_of_work import UnitOfWork
from space_together.app.use_cases.join_requests import (
    AcceptJoinRequestResponse,
    BulkCreateJoinRequestsResponse,
    BulkCreateJoinRequestsUseCase,
    BulkRespondJoinRequestsUseCase,
    BulkRespondResponse,
    CheckPendingJoinRequestUseCase,
    CheckPendingResponse,
    CleanupExpiredJoinRequestsUseCase,
    CleanupExpiredResponse,
    CountJoinRequestsUseCase,
    CountResponse,
    CreateJoinRequestUseCase,
    DeleteJoinRequestResponse,
    DeleteJoinRequestUseCase,
    ExpireOldJoinRequestsUseCase,
    ExpireOldResponse,
    GetJoinRequestUseCase,
    JoinRequestInput,
    JoinRequestPage,
    JoinRequestStatsResponse,
    JoinRequestStatsUseCase,
    MyJoinRequestsUseCase,
    QueryJoinRequestsUseCase,
    RespondToJoinRequestUseCase,
    UpdateJoinRequestExpirationUseCase,
)
from space_together.depends import get_current_user, get_event_bus, get_unit_of_work
from space_together.domain.catalog import JOIN_SCHOOL_REQUESTS
from space_together.domain.entities import (
    GLOBAL_TOPIC,
    AuthUser,
    ChangeVerb,
    JoinRole,
    JoinSchoolRequest,
    JoinStatus,
)

router = APIRouter(prefix="/join-school-requests", tags=["Join School Requests"])

KIND = JOIN_SCHOOL_REQUESTS.kind


class BulkCreateJoinRequestsRequest(BaseModel):
    """
    Bulk create HTTP request payload

    Entries are validated one by one so a malformed entry is reported
    instead of failing the whole batch.
    """

    requests: List[Any] = Field(..., description="Join requests to create")


class RespondJoinRequestRequest(BaseModel):
    """Accept/reject/cancel HTTP request payload"""

    message: Optional[str] = Field(None, description="Message stored on the request")
    invited_user_id: Optional[str] = Field(
        None, description="Account to link on accept (defaults to the invitee)"
    )


class BulkRespondRequest(BaseModel):
    """Bulk respond HTTP request payload"""

    request_ids: List[str] = Field(..., description="Join request IDs")
    status: str = Field(..., description="Accepted, Rejected or Cancelled")
    return_documents: bool = Field(False, description="Return the updated requests")


class UpdateExpirationRequest(BaseModel):
    """Update expiration HTTP request payload"""

    expires_at: datetime = Field(..., description="New expiry, must be in the future")


def _query(
    email: Optional[str] = None,
    school_id: Optional[str] = None,
    class_id: Optional[str] = None,
    invited_user_id: Optional[str] = None,
    sent_by: Optional[str] = None,
    status: Optional[str] = None,
    role: Optional[str] = None,
    older_than_days: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
) -> JoinRequestQuery:
    return JoinRequestQuery(
        email=email,
        school_id=school_id,
        class_id=class_id,
        invited_user_id=invited_user_id,
        sent_by=sent_by,
        status=parse_enum(JoinStatus, status, "INVALID_STATUS"),
        role=parse_enum(JoinRole, role, "INVALID_ROLE"),
        older_than_days=older_than_days,
        limit=page_limit(limit),
        skip=skip,
    )


async def _run_query(uow: UnitOfWork, query: JoinRequestQuery, with_relations: bool = False):
    use_case = QueryJoinRequestsUseCase(uow)
    result = await use_case.execute(query, with_relations=with_relations)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


# ============================================================================
# Collection reads
# ============================================================================


@router.get("", response_model=JoinRequestPage)
async def list_join_requests(
    query: JoinRequestQuery = Depends(_query),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List join requests, newest first

    Filters: email (case-insensitive substring), school_id, class_id,
    invited_user_id, sent_by, status, role, older_than_days, limit, skip.

    Raises:
        - 400 Bad Request: INVALID_STATUS, INVALID_ROLE, INVALID_ID
        - 401 Unauthorized: AUTH_REQUIRED, INVALID_TOKEN
    """
    return await _run_query(uow, query)


@router.get("/with-relations", response_model=JoinRequestPage)
async def list_join_requests_with_relations(
    query: JoinRequestQuery = Depends(_query),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """List join requests with school, invited user and sender embedded"""
    return await _run_query(uow, query, with_relations=True)


@router.get("/my/requests", response_model=JoinRequestPage)
async def my_join_requests(
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Join requests addressed to the caller, in any status"""
    use_case = MyJoinRequestsUseCase(uow)
    result = await use_case.execute(current_user, limit=page_limit(limit), skip=skip)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/my/pending", response_model=JoinRequestPage)
async def my_pending_join_requests(
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Pending join requests addressed to the caller"""
    use_case = MyJoinRequestsUseCase(uow)
    result = await use_case.execute(
        current_user, pending_only=True, limit=page_limit(limit), skip=skip
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


# ============================================================================
# Statistics
# ============================================================================


@router.get("/stats/summary", response_model=JoinRequestStatsResponse)
async def join_request_stats(
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Count of join requests per status plus the total"""
    use_case = JoinRequestStatsUseCase(uow)
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/stats/count-by-status/{status_value}", response_model=CountResponse)
async def count_join_requests_by_status(
    status_value: str,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Count join requests in one status

    Raises:
        - 400 Bad Request: INVALID_STATUS
    """
    join_status = parse_enum(JoinStatus, status_value, "INVALID_STATUS")

    use_case = CountJoinRequestsUseCase(uow)
    result = await use_case.execute(join_status)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/stats/count-pending/{school_id}", response_model=CountResponse)
async def count_pending_join_requests(
    school_id: str,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Count Pending join requests of one school"""
    use_case = CountJoinRequestsUseCase(uow)
    result = await use_case.execute(JoinStatus.Pending, school_id=school_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/check-pending/{school_id}/{email}", response_model=CheckPendingResponse)
async def check_pending_join_request(
    school_id: str,
    email: str,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Whether (email, school) already has a Pending request"""
    use_case = CheckPendingJoinRequestUseCase(uow)
    result = await use_case.execute(school_id, email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


# ============================================================================
# Filtered reads
# ============================================================================


@router.get("/school/{school_id}", response_model=JoinRequestPage)
async def school_join_requests(
    school_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """All join requests of one school"""
    query = JoinRequestQuery(school_id=school_id, limit=page_limit(limit), skip=skip)
    return await _run_query(uow, query)


@router.get("/school/{school_id}/pending", response_model=JoinRequestPage)
async def school_pending_join_requests(
    school_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Pending join requests of one school"""
    query = JoinRequestQuery(
        school_id=school_id, status=JoinStatus.Pending, limit=page_limit(limit), skip=skip
    )
    return await _run_query(uow, query)


@router.get("/school/{school_id}/class/{class_id}", response_model=JoinRequestPage)
async def school_class_join_requests(
    school_id: str,
    class_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Join requests of one class of one school"""
    query = JoinRequestQuery(
        school_id=school_id, class_id=class_id, limit=page_limit(limit), skip=skip
    )
    return await _run_query(uow, query)


@router.get("/class/{class_id}", response_model=JoinRequestPage)
async def class_join_requests(
    class_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """All join requests naming one class"""
    query = JoinRequestQuery(class_id=class_id, limit=page_limit(limit), skip=skip)
    return await _run_query(uow, query)


@router.get("/class/{class_id}/pending", response_model=JoinRequestPage)
async def class_pending_join_requests(
    class_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Pending join requests naming one class"""
    query = JoinRequestQuery(
        class_id=class_id, status=JoinStatus.Pending, limit=page_limit(limit), skip=skip
    )
    return await _run_query(uow, query)


@router.get("/user/{user_id}", response_model=JoinRequestPage)
async def user_join_requests(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Join requests linked to one user account"""
    query = JoinRequestQuery(invited_user_id=user_id, limit=page_limit(limit), skip=skip)
    return await _run_query(uow, query)


@router.get("/status/{status_value}", response_model=JoinRequestPage)
async def join_requests_by_status(
    status_value: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Join requests in one status

    Raises:
        - 400 Bad Request: INVALID_STATUS
    """
    query = JoinRequestQuery(
        status=parse_enum(JoinStatus, status_value, "INVALID_STATUS"),
        limit=page_limit(limit),
        skip=skip,
    )
    return await _run_query(uow, query)


@router.get("/email/{email}", response_model=JoinRequestPage)
async def join_requests_by_email(
    email: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Join requests sent to an email, with relations embedded"""
    query = JoinRequestQuery(email=email, limit=page_limit(limit), skip=skip)
    return await _run_query(uow, query, with_relations=True)


# ============================================================================
# Commands
# ============================================================================


@router.post("", status_code=status.HTTP_201_CREATED, response_model=JoinSchoolRequest)
async def create_join_request(
    request: JoinRequestInput,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Create Join Request

    Invites an email address to a school. Only admins, school staff and
    teachers can invite.

    Raises:
        - 400 Bad Request: VALIDATION_ERROR, CLASS_REQUIRED, ALREADY_EXPIRED,
                           ALREADY_MEMBER, DUPLICATE_PENDING
        - 401 Unauthorized: AUTH_REQUIRED, INVALID_TOKEN
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: SCHOOL_NOT_FOUND
    """
    use_case = CreateJoinRequestUseCase(uow, ttl_days=ApplicationConfig.JOIN_REQUEST_TTL_DAYS)
    result = await use_case.execute(current_user, request)

    if result.is_err():
        raise_for_error(result.error)

    created = result.value
    publish_change(bus, GLOBAL_TOPIC, KIND, created.id, ChangeVerb.created, created)
    return created


@router.post(
    "/bulk", status_code=status.HTTP_201_CREATED, response_model=BulkCreateJoinRequestsResponse
)
async def bulk_create_join_requests(
    request: BulkCreateJoinRequestsRequest,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Bulk Create Join Requests

    Each entry succeeds or fails on its own; failures are listed with their
    index and error.

    Raises:
        - 400 Bad Request: EMPTY_BATCH
        - 403 Forbidden: FORBIDDEN
    """
    use_case = BulkCreateJoinRequestsUseCase(
        uow, ttl_days=ApplicationConfig.JOIN_REQUEST_TTL_DAYS
    )
    result = await use_case.execute(current_user, request.requests)

    if result.is_err():
        raise_for_error(result.error)

    response = result.value
    if response.created:
        publish_change(
            bus,
            GLOBAL_TOPIC,
            KIND,
            "bulk",
            ChangeVerb.created,
            [entry.request for entry in response.created],
        )
    return response


@router.put("/bulk/respond", response_model=BulkRespondResponse)
async def bulk_respond_join_requests(
    request: BulkRespondRequest,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Bulk Respond To Join Requests

    Applies one status to many requests. Only Pending, unexpired requests
    change; the rest are skipped.

    Raises:
        - 400 Bad Request: INVALID_STATUS, EMPTY_BATCH
        - 403 Forbidden: FORBIDDEN
    """
    new_status = parse_enum(JoinStatus, request.status, "INVALID_STATUS")

    use_case = BulkRespondJoinRequestsUseCase(uow)
    result = await use_case.execute(
        current_user, request.request_ids, new_status, request.return_documents
    )

    if result.is_err():
        raise_for_error(result.error)

    response = result.value
    if response.modified_count:
        publish_change(
            bus,
            GLOBAL_TOPIC,
            KIND,
            "bulk",
            ChangeVerb.updated,
            {"status": new_status.value, "modified_count": response.modified_count},
        )
    return response


async def _respond(
    request_id: str,
    new_status: JoinStatus,
    body: Optional[RespondJoinRequestRequest],
    current_user: AuthUser,
    uow: UnitOfWork,
    bus: IEventBus,
):
    body = body or RespondJoinRequestRequest()
    use_case = RespondToJoinRequestUseCase(uow)
    result = await use_case.execute(
        current_user,
        request_id,
        new_status,
        invited_user_id=body.invited_user_id,
        message=body.message,
    )

    if result.is_err():
        raise_for_error(result.error)

    updated = result.value
    publish_change(bus, GLOBAL_TOPIC, KIND, updated.id, ChangeVerb.updated, updated)
    return updated


@router.put("/{request_id}/accept", response_model=AcceptJoinRequestResponse)
async def accept_join_request(
    request_id: str,
    body: Optional[RespondJoinRequestRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Accept Join Request

    The invitee (or an admin, staff member or teacher) accepts. The invitee is
    added to the school's database and the response carries a school token.

    Raises:
        - 400 Bad Request: NOT_PENDING, EXPIRED, INVITED_USER_REQUIRED,
                           DIRECTOR_EXISTS, HEAD_OF_STUDIES_LIMIT,
                           SCHOOL_DATABASE_MISSING
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: NOT_FOUND, SCHOOL_NOT_FOUND, USER_NOT_FOUND, CLASS_NOT_FOUND
    """
    return await _respond(request_id, JoinStatus.Accepted, body, current_user, uow, bus)


@router.put("/{request_id}/reject", response_model=JoinSchoolRequest)
async def reject_join_request(
    request_id: str,
    body: Optional[RespondJoinRequestRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Reject Join Request

    Raises:
        - 400 Bad Request: NOT_PENDING, EXPIRED
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: NOT_FOUND
    """
    return await _respond(request_id, JoinStatus.Rejected, body, current_user, uow, bus)


@router.put("/{request_id}/cancel", response_model=JoinSchoolRequest)
async def cancel_join_request(
    request_id: str,
    body: Optional[RespondJoinRequestRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Cancel Join Request

    The sender (or an admin, staff member or teacher) withdraws an invitation.

    Raises:
        - 400 Bad Request: NOT_PENDING, EXPIRED
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: NOT_FOUND
    """
    return await _respond(request_id, JoinStatus.Cancelled, body, current_user, uow, bus)


@router.put("/{request_id}/expiration", response_model=JoinSchoolRequest)
async def update_join_request_expiration(
    request_id: str,
    request: UpdateExpirationRequest,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Update Join Request Expiration

    Raises:
        - 400 Bad Request: NOT_PENDING, ALREADY_EXPIRED
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: NOT_FOUND
    """
    use_case = UpdateJoinRequestExpirationUseCase(uow)
    result = await use_case.execute(current_user, request_id, request.expires_at)

    if result.is_err():
        raise_for_error(result.error)

    updated = result.value
    publish_change(bus, GLOBAL_TOPIC, KIND, updated.id, ChangeVerb.updated, updated)
    return updated


@router.post("/admin/expire-old", response_model=ExpireOldResponse)
async def expire_old_join_requests(
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Mark every overdue Pending join request as Expired

    Raises:
        - 403 Forbidden: FORBIDDEN
    """
    use_case = ExpireOldJoinRequestsUseCase(uow)
    result = await use_case.execute(current_user)

    if result.is_err():
        raise_for_error(result.error)

    response = result.value
    if response.expired_count:
        publish_change(bus, GLOBAL_TOPIC, KIND, "bulk", ChangeVerb.updated, response)
    return response


@router.delete("/admin/cleanup-expired/{days}", response_model=CleanupExpiredResponse)
async def cleanup_expired_join_requests(
    days: int,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Delete Expired join requests last updated at least `days` days ago

    Raises:
        - 400 Bad Request: VALIDATION_ERROR
        - 403 Forbidden: FORBIDDEN
    """
    use_case = CleanupExpiredJoinRequestsUseCase(uow)
    result = await use_case.execute(current_user, days)

    if result.is_err():
        raise_for_error(result.error)

    response = result.value
    if response.deleted_count:
        publish_change(bus, GLOBAL_TOPIC, KIND, "bulk", ChangeVerb.deleted, response)
    return response


# ============================================================================
# Single request
# ============================================================================


@router.get("/{request_id}", response_model=JoinSchoolRequest)
async def get_join_request(
    request_id: str,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Join Request

    Raises:
        - 400 Bad Request: INVALID_ID
        - 404 Not Found: NOT_FOUND
    """
    use_case = GetJoinRequestUseCase(uow)
    result = await use_case.execute(request_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{request_id}/with-relations")
async def get_join_request_with_relations(
    request_id: str,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Get Join Request with school, invited user and sender embedded"""
    use_case = GetJoinRequestUseCase(uow)
    result = await use_case.execute(request_id, with_relations=True)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete("/{request_id}", response_model=DeleteJoinRequestResponse)
async def delete_join_request(
    request_id: str,
    current_user: AuthUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Delete Join Request

    Raises:
        - 400 Bad Request: INVALID_ID
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: NOT_FOUND
    """
    use_case = DeleteJoinRequestUseCase(uow)
    result = await use_case.execute(current_user, request_id)

    if result.is_err():
        raise_for_error(result.error)

    publish_change(bus, GLOBAL_TOPIC, KIND, request_id, ChangeVerb.deleted)
    return result.value
