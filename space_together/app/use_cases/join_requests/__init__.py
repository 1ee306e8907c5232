"""
Join School Request Use Cases

The invitation lifecycle: create, respond, expire and query.
"""

from .bulk_respond_join_requests_use_case import BulkRespondJoinRequestsUseCase
from .create_join_request_use_case import (
    BulkCreateJoinRequestsUseCase,
    CreateJoinRequestUseCase,
)
from .delete_join_request_use_case import DeleteJoinRequestUseCase
from .dtos import (
    AcceptJoinRequestResponse,
    BulkCreateEntryResult,
    BulkCreateJoinRequestsResponse,
    BulkRespondResponse,
    CheckPendingResponse,
    CleanupExpiredResponse,
    CountResponse,
    DeleteJoinRequestResponse,
    ExpireOldResponse,
    JoinRequestInput,
    JoinRequestPage,
    JoinRequestStatsResponse,
)
from .expire_join_requests_use_case import (
    CleanupExpiredJoinRequestsUseCase,
    ExpireOldJoinRequestsUseCase,
)
from .query_join_requests_use_case import (
    CheckPendingJoinRequestUseCase,
    CountJoinRequestsUseCase,
    GetJoinRequestUseCase,
    JoinRequestStatsUseCase,
    MyJoinRequestsUseCase,
    QueryJoinRequestsUseCase,
)
from .respond_join_request_use_case import RespondToJoinRequestUseCase
from .update_expiration_use_case import UpdateJoinRequestExpirationUseCase

__all__ = [
    # Commands
    "CreateJoinRequestUseCase",
    "BulkCreateJoinRequestsUseCase",
    "RespondToJoinRequestUseCase",
    "BulkRespondJoinRequestsUseCase",
    "UpdateJoinRequestExpirationUseCase",
    "ExpireOldJoinRequestsUseCase",
    "CleanupExpiredJoinRequestsUseCase",
    "DeleteJoinRequestUseCase",
    # Queries
    "GetJoinRequestUseCase",
    "QueryJoinRequestsUseCase",
    "MyJoinRequestsUseCase",
    "CheckPendingJoinRequestUseCase",
    "JoinRequestStatsUseCase",
    "CountJoinRequestsUseCase",
    # DTOs
    "JoinRequestInput",
    "AcceptJoinRequestResponse",
    "BulkCreateEntryResult",
    "BulkCreateJoinRequestsResponse",
    "BulkRespondResponse",
    "CheckPendingResponse",
    "CleanupExpiredResponse",
    "CountResponse",
    "DeleteJoinRequestResponse",
    "ExpireOldResponse",
    "JoinRequestPage",
    "JoinRequestStatsResponse",
]
