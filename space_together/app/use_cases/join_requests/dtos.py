"""
Join Request Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the join request lifecycle.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from space_together.domain.base import UtcDatetime
from space_together.domain.entities import JoinRole, JoinSchoolRequest


# ============================================================================
# Command DTOs
# ============================================================================


class JoinRequestInput(BaseModel):
    """One invitation to create"""

    email: EmailStr
    school_id: str
    role: JoinRole
    class_id: Optional[str] = None
    type: str = ""
    message: Optional[str] = None
    expires_at: Optional[UtcDatetime] = None
    sent_by: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


# ============================================================================
# Response DTOs
# ============================================================================


class AcceptJoinRequestResponse(JoinSchoolRequest):
    """Accepted request plus a school token for the new member"""

    school_token: Optional[str] = None


class BulkCreateEntryResult(BaseModel):
    """Outcome of one entry of a bulk create"""

    index: int
    email: Optional[str] = None
    request: Optional[JoinSchoolRequest] = None
    error: Optional[Dict[str, Any]] = None


class BulkCreateJoinRequestsResponse(BaseModel):
    created: List[BulkCreateEntryResult] = Field(default_factory=list)
    failed: List[BulkCreateEntryResult] = Field(default_factory=list)


class BulkRespondResponse(BaseModel):
    modified_count: int
    requests: List[JoinSchoolRequest] = Field(default_factory=list)


class JoinRequestPage(BaseModel):
    items: List[Any] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    current_page: int = 1


class CheckPendingResponse(BaseModel):
    has_pending: bool
    request: Optional[JoinSchoolRequest] = None


class JoinRequestStatsResponse(BaseModel):
    total: int
    pending: int
    accepted: int
    rejected: int
    expired: int
    cancelled: int


class CountResponse(BaseModel):
    count: int


class ExpireOldResponse(BaseModel):
    expired_count: int


class CleanupExpiredResponse(BaseModel):
    deleted_count: int


class DeleteJoinRequestResponse(BaseModel):
    status: str
